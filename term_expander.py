"""Stage 1: expand a free-text keyword into candidate MeSH terms."""

from __future__ import annotations

import logging

from model_client import ModelClient

LOGGER = logging.getLogger(__name__)

TERM_COUNT = 5

_PROMPT_TEMPLATE = (
    'List exactly {count} MeSH (Medical Subject Headings) terms, in English, that are '
    'semantically related to the keyword "{keyword}".\n'
    "Reply with the terms only, separated by commas, on a single line. "
    "No numbering, no explanations."
)


def expand_terms(keyword: str, model: ModelClient) -> list[str]:
    """Ask the model for related MeSH terms and return them in model order.

    The reply is trusted as-is: no check that the terms exist in the MeSH
    vocabulary, no de-duplication, and no enforcement of the requested count.
    """
    keyword = keyword.strip() if isinstance(keyword, str) else ""
    if not keyword:
        raise ValueError("keyword must be a non-empty string")

    model.require_credential()
    LOGGER.info("Expanding keyword into MeSH terms: %s", keyword)

    raw = model.generate(_PROMPT_TEMPLATE.format(count=TERM_COUNT, keyword=keyword), max_tokens=256)
    terms = split_terms(raw)
    LOGGER.info("Model returned %s MeSH terms for keyword=%s", len(terms), keyword)
    return terms


def split_terms(raw: str) -> list[str]:
    """Split a comma-separated model reply into trimmed, non-empty terms."""
    flattened = raw.replace("\r", " ").replace("\n", " ")
    return [term.strip() for term in flattened.split(",") if term.strip()]
