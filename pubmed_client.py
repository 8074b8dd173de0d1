"""PubMed (NCBI E-utilities) search, summary and abstract fetch helpers."""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime
from typing import Any

import requests

from errors import UpstreamSearchError
from models import DEFAULT_AUTHORS, DEFAULT_TITLE, PaperSummary

EUTILS_BASE_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
ESEARCH_URL = f"{EUTILS_BASE_URL}/esearch.fcgi"
ESUMMARY_URL = f"{EUTILS_BASE_URL}/esummary.fcgi"
EFETCH_URL = f"{EUTILS_BASE_URL}/efetch.fcgi"
REQUEST_TIMEOUT_SECONDS = 20
MAX_SEARCH_RESULTS = 10

LOGGER = logging.getLogger(__name__)


def build_query(term: str, years: int, today: date | None = None) -> str:
    """Scope a MeSH term to an inclusive publication-year window."""
    current_year = (today or datetime.now(UTC).date()).year
    start_year = current_year - years
    return (
        f'"{term}"[MeSH Terms] AND '
        f'("{start_year}"[Date - Publication] : "{current_year}"[Date - Publication])'
    )


def search_literature(
    term: str,
    years: int,
    *,
    api_key: str | None = None,
    email: str | None = None,
    tool: str | None = None,
    timeout: float | None = None,
    today: date | None = None,
) -> list[PaperSummary]:
    """Return up to MAX_SEARCH_RESULTS summaries for papers indexed under ``term``.

    Literature availability is best-effort: any upstream failure is logged and
    turned into an empty list instead of being raised.
    """
    query = build_query(term, years, today=today)
    base_params = _etiquette_params(api_key=api_key, email=email, tool=tool)
    tout = timeout or REQUEST_TIMEOUT_SECONDS

    try:
        ids = _search_ids(query, base_params, tout)
        if not ids:
            LOGGER.info("PubMed search: no ids for query=%s", query)
            return []
        summary_payload = _fetch_summary_payload(ids, base_params, tout)
    except UpstreamSearchError as exc:
        LOGGER.warning("PubMed search degraded to empty result for term=%s: %s", term, exc)
        return []

    summaries = normalize_summaries(ids, summary_payload)
    LOGGER.info(
        "PubMed search: term=%s years=%s ids=%s summaries=%s",
        term,
        years,
        len(ids),
        len(summaries),
    )
    return summaries


def fetch_abstracts(
    paper_ids: list[str],
    *,
    api_key: str | None = None,
    email: str | None = None,
    tool: str | None = None,
    timeout: float | None = None,
) -> str:
    """Fetch plain-text abstracts for ``paper_ids`` in one batched efetch call.

    Raises requests.RequestException on transport or HTTP errors.
    """
    params = {
        **_etiquette_params(api_key=api_key, email=email, tool=tool),
        "db": "pubmed",
        "id": ",".join(paper_ids),
        "rettype": "abstract",
        "retmode": "text",
    }
    response = requests.get(EFETCH_URL, params=params, timeout=timeout or REQUEST_TIMEOUT_SECONDS)
    response.raise_for_status()
    return response.text


def normalize_summaries(ids: list[str], payload: Any) -> list[PaperSummary]:
    """Map a raw esummary payload onto strict PaperSummary records.

    Ids without a usable record are dropped; missing titles and author lists
    fall back to defaults. Output follows the order of ``ids``.
    """
    result = payload.get("result") if isinstance(payload, dict) else None
    if not isinstance(result, dict):
        return []

    summaries: list[PaperSummary] = []
    for pmid in ids:
        record = result.get(pmid)
        if not isinstance(record, dict) or "error" in record:
            LOGGER.debug("PubMed summary missing for id=%s, dropping", pmid)
            continue
        summaries.append(
            PaperSummary(
                id=pmid,
                title=_as_str(record.get("title")) or DEFAULT_TITLE,
                authors=_join_authors(record.get("authors")) or DEFAULT_AUTHORS,
            )
        )
    return summaries


def _search_ids(query: str, base_params: dict[str, str], timeout: float) -> list[str]:
    params = {
        **base_params,
        "db": "pubmed",
        "term": query,
        "retmode": "json",
        "retmax": str(MAX_SEARCH_RESULTS),
    }
    payload = _get_json(ESEARCH_URL, params, timeout)
    search_result = payload.get("esearchresult") if isinstance(payload, dict) else None
    id_list = search_result.get("idlist") if isinstance(search_result, dict) else None
    if not isinstance(id_list, list):
        return []
    return [pmid for pmid in (_as_str(item) for item in id_list) if pmid]


def _fetch_summary_payload(ids: list[str], base_params: dict[str, str], timeout: float) -> Any:
    params = {**base_params, "db": "pubmed", "id": ",".join(ids), "retmode": "json"}
    return _get_json(ESUMMARY_URL, params, timeout)


def _get_json(url: str, params: dict[str, str], timeout: float) -> Any:
    try:
        response = requests.get(url, params=params, timeout=timeout)
        response.raise_for_status()
        return response.json()
    except requests.RequestException as exc:
        raise UpstreamSearchError(f"E-utilities request failed: {exc}") from exc
    except ValueError as exc:
        raise UpstreamSearchError(f"E-utilities returned invalid JSON: {exc}") from exc


def _etiquette_params(*, api_key: str | None, email: str | None, tool: str | None) -> dict[str, str]:
    params: dict[str, str] = {}
    if api_key:
        params["api_key"] = api_key
    if email:
        params["email"] = email
    if tool:
        params["tool"] = tool
    return params


def _join_authors(value: Any) -> str:
    if not isinstance(value, list):
        return ""
    names = []
    for author in value:
        name = _as_str(author.get("name")) if isinstance(author, dict) else _as_str(author)
        if name:
            names.append(name)
    return ", ".join(names)


def _as_str(value: Any) -> str | None:
    return value.strip() if isinstance(value, str) and value.strip() else None
