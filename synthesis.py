"""Stage 3: fetch selected abstracts and synthesize a structured report."""

from __future__ import annotations

import logging

import requests

from config import Settings
from errors import UpstreamModelError, UpstreamSynthesisError
from model_client import ModelClient
from pubmed_client import fetch_abstracts

# Upper bound on papers fetched and summarized per request.
MAX_SYNTHESIS_PAPERS = 3

LOGGER = logging.getLogger(__name__)

_PROMPT_TEMPLATE = """You are a medical research assistant.
Below are PubMed abstracts for {count} paper(s). For EACH paper, write a section
in Markdown using exactly this outline:

## <Paper title>
- **Authors**: <author list>
- **Summary**: <concise summary of the abstract, written in {language}>
- **Relevance**: <why this work matters for the field and for clinical practice, in {language}>
- **Next research steps**: <concrete follow-up studies suggested by the findings, in {language}>

Do not add papers that are not listed below.

Abstracts:
{abstracts}
"""


def synthesize(paper_ids: list[str], model: ModelClient, settings: Settings) -> str:
    """Return the model's markdown report for at most MAX_SYNTHESIS_PAPERS papers."""
    ids = [pid.strip() for pid in paper_ids if isinstance(pid, str) and pid.strip()]
    if not ids:
        raise ValueError("paper_ids must contain at least one identifier")

    model.require_credential()

    selected = ids[:MAX_SYNTHESIS_PAPERS]
    if len(ids) > len(selected):
        LOGGER.info(
            "Synthesis: truncating %s requested papers to %s",
            len(ids),
            MAX_SYNTHESIS_PAPERS,
        )

    try:
        abstracts = fetch_abstracts(
            selected,
            api_key=settings.pubmed_api_key,
            email=settings.pubmed_email,
            tool=settings.pubmed_tool,
            timeout=settings.pubmed_timeout_seconds,
        )
    except requests.RequestException as exc:
        raise UpstreamSynthesisError(f"Failed to fetch abstracts: {exc}") from exc

    if not abstracts.strip():
        raise UpstreamSynthesisError("PubMed returned no abstract text for the selected papers")

    prompt = _PROMPT_TEMPLATE.format(
        count=len(selected),
        language=settings.report_language,
        abstracts=abstracts.strip(),
    )

    try:
        report = model.generate(prompt)
    except UpstreamModelError as exc:
        raise UpstreamSynthesisError(f"Report generation failed: {exc}") from exc

    LOGGER.info("Synthesis complete: papers=%s chars=%s", len(selected), len(report))
    return report
