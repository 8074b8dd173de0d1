from datetime import date
from unittest.mock import MagicMock, patch

import requests

from models import DEFAULT_AUTHORS, DEFAULT_TITLE, PaperSummary
from pubmed_client import (
    EFETCH_URL,
    ESEARCH_URL,
    ESUMMARY_URL,
    build_query,
    fetch_abstracts,
    normalize_summaries,
    search_literature,
)


def _mock_resp(payload: object) -> MagicMock:
    """Return a mock requests.Response for the given JSON payload."""
    mock = MagicMock()
    mock.json.return_value = payload
    return mock


def _search_payload(ids: list[str]) -> dict:
    return {"esearchresult": {"count": str(len(ids)), "idlist": ids}}


def _summary_payload(records: dict[str, dict]) -> dict:
    return {"result": {"uids": list(records), **records}}


def test_build_query_scopes_term_and_inclusive_year_range() -> None:
    query = build_query("Diabetes Mellitus", 5, today=date(2026, 10, 19))

    assert query == (
        '"Diabetes Mellitus"[MeSH Terms] AND '
        '("2021"[Date - Publication] : "2026"[Date - Publication])'
    )


def test_search_drops_id_without_summary_record() -> None:
    """ids 111 and 222 come back but only 111 has metadata."""
    search = _mock_resp(_search_payload(["111", "222"]))
    summary = _mock_resp(_summary_payload({
        "111": {"uid": "111", "title": "Metformin outcomes", "authors": [{"name": "Sato T"}]},
    }))

    with patch("pubmed_client.requests.get", side_effect=[search, summary]):
        papers = search_literature("Diabetes Mellitus", 5)

    assert papers == [PaperSummary(id="111", title="Metformin outcomes", authors="Sato T")]


def test_search_returns_empty_list_on_outage() -> None:
    with patch("pubmed_client.requests.get", side_effect=requests.ConnectionError("down")):
        papers = search_literature("Diabetes Mellitus", 5)

    assert papers == []


def test_search_returns_empty_list_when_summary_step_fails() -> None:
    search = _mock_resp(_search_payload(["111"]))
    failing = MagicMock()
    failing.raise_for_status.side_effect = requests.HTTPError("502 Bad Gateway")

    with patch("pubmed_client.requests.get", side_effect=[search, failing]):
        papers = search_literature("Hyperglycemia", 3)

    assert papers == []


def test_search_returns_empty_list_on_invalid_json() -> None:
    broken = MagicMock()
    broken.json.side_effect = ValueError("Expecting value")

    with patch("pubmed_client.requests.get", return_value=broken):
        assert search_literature("Insulin Resistance", 5) == []


def test_search_without_idlist_skips_summary_request() -> None:
    with patch("pubmed_client.requests.get", return_value=_mock_resp({"esearchresult": {}})) as mock_get:
        papers = search_literature("Blood Glucose", 5)

    assert papers == []
    assert mock_get.call_count == 1


def test_search_with_empty_idlist_is_not_an_error() -> None:
    with patch("pubmed_client.requests.get", return_value=_mock_resp(_search_payload([]))) as mock_get:
        assert search_literature("Blood Glucose", 5) == []

    assert mock_get.call_count == 1


def test_search_sends_capped_esearch_and_batched_esummary() -> None:
    search = _mock_resp(_search_payload(["1", "2", "3"]))
    summary = _mock_resp(_summary_payload({}))

    with patch("pubmed_client.requests.get", side_effect=[search, summary]) as mock_get:
        search_literature("Asthma", 2, api_key="ncbi-key", email="lab@example.org", tool="mesh-review")

    first_url = mock_get.call_args_list[0].args[0]
    first_params = mock_get.call_args_list[0].kwargs["params"]
    assert first_url == ESEARCH_URL
    assert first_params["retmax"] == "10"
    assert first_params["retmode"] == "json"
    assert first_params["api_key"] == "ncbi-key"
    assert first_params["email"] == "lab@example.org"
    assert '"Asthma"[MeSH Terms]' in first_params["term"]

    second_url = mock_get.call_args_list[1].args[0]
    second_params = mock_get.call_args_list[1].kwargs["params"]
    assert second_url == ESUMMARY_URL
    assert second_params["id"] == "1,2,3"


def test_normalize_summaries_defaults_missing_fields() -> None:
    payload = _summary_payload({
        "1": {"uid": "1"},
        "2": {"uid": "2", "title": "  ", "authors": []},
        "3": {"uid": "3", "title": "Trial", "authors": [{"name": "Kim J"}, {"name": ""}, {"name": "Lee H"}]},
    })

    papers = normalize_summaries(["1", "2", "3"], payload)

    assert [p.id for p in papers] == ["1", "2", "3"]
    assert papers[0].title == DEFAULT_TITLE
    assert papers[0].authors == DEFAULT_AUTHORS
    assert papers[1].title == DEFAULT_TITLE
    assert papers[1].authors == DEFAULT_AUTHORS
    assert papers[2].authors == "Kim J, Lee H"


def test_normalize_summaries_never_longer_than_ids_and_no_nulls() -> None:
    ids = ["10", "20", "30", "40"]
    payload = _summary_payload({
        "10": {"title": "A", "authors": None},
        "20": None,
        "30": {"uid": "30", "error": "cannot get document summary"},
        "40": "not-a-record",
    })

    papers = normalize_summaries(ids, payload)

    assert len(papers) <= len(ids)
    assert [p.id for p in papers] == ["10"]
    for paper in papers:
        assert paper.title is not None
        assert paper.authors is not None


def test_normalize_summaries_tolerates_missing_result_block() -> None:
    assert normalize_summaries(["1"], {}) == []
    assert normalize_summaries(["1"], None) == []


def test_fetch_abstracts_uses_single_batched_text_request() -> None:
    response = MagicMock()
    response.text = "1. Title one\n\nAbstract one."

    with patch("pubmed_client.requests.get", return_value=response) as mock_get:
        text = fetch_abstracts(["111", "222"], email="lab@example.org")

    assert text == "1. Title one\n\nAbstract one."
    mock_get.assert_called_once()
    assert mock_get.call_args.args[0] == EFETCH_URL
    params = mock_get.call_args.kwargs["params"]
    assert params["id"] == "111,222"
    assert params["rettype"] == "abstract"
    assert params["retmode"] == "text"
