"""Shared typed models for the pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

DEFAULT_TITLE = "no title"
DEFAULT_AUTHORS = "no authors"


@dataclass(frozen=True, slots=True)
class PaperSummary:
    """Normalized PubMed summary record returned by the search stage."""

    id: str
    title: str = DEFAULT_TITLE
    authors: str = DEFAULT_AUTHORS

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def error_envelope(message: str) -> dict[str, Any]:
    """Wrap a message in the shared error envelope."""
    return {"error": message}
