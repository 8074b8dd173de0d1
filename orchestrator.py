"""Action dispatcher that sits between the HTTP layer and the pipeline stages.

Each request carries ``{"action": ..., "payload": ...}``. The orchestrator keeps
no state between requests; the caller re-sends the selected term or paper ids
with every call. Every outcome is rendered as either a bare result payload or
``{"error": message}`` with the same JSON content type and CORS headers.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from config import Settings
from errors import InvalidPayload, LiteratureReviewError, UnrecognizedAction
from model_client import ModelClient
from models import error_envelope
from pubmed_client import search_literature
from synthesis import synthesize
from term_expander import expand_terms

ACTION_GENERATE_MESH = "generateMeSH"
ACTION_SEARCH_PUBMED = "searchPubMed"
ACTION_ANALYZE_PAPERS = "analyzePapers"
DEFAULT_RECENCY_YEARS = 5

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PipelineResponse:
    """Transport-neutral response: status, headers and a JSON-serializable body."""

    status_code: int
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)

    def render_body(self) -> str:
        return "" if self.body is None else json.dumps(self.body, ensure_ascii=False)


class Orchestrator:
    def __init__(self, settings: Settings, model: ModelClient) -> None:
        self.settings = settings
        self.model = model
        self._handlers: dict[str, Callable[[Any], Any]] = {
            ACTION_GENERATE_MESH: self._generate_mesh,
            ACTION_SEARCH_PUBMED: self._search_pubmed,
            ACTION_ANALYZE_PAPERS: self._analyze_papers,
        }

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Access-Control-Allow-Origin": self.settings.cors_allow_origin,
            "Access-Control-Allow-Headers": "Content-Type",
            "Access-Control-Allow-Methods": "POST, OPTIONS",
        }

    def handle(self, method: str, body: str | bytes | None) -> PipelineResponse:
        """Handle one raw HTTP request body."""
        method = (method or "").upper()
        if method == "OPTIONS":
            return PipelineResponse(200, None, self.headers)
        if method != "POST":
            return self._respond(405, error_envelope(f"Method {method or '<none>'} not allowed"))

        try:
            request = json.loads(body or "")
        except (TypeError, ValueError):
            return self._respond(400, error_envelope("Request body must be valid JSON"))
        if not isinstance(request, dict):
            return self._respond(400, error_envelope("Request body must be a JSON object"))

        return self.dispatch(request.get("action"), request.get("payload"))

    def dispatch(self, action: Any, payload: Any) -> PipelineResponse:
        """Route ``action`` to its stage and wrap the outcome in an envelope."""
        try:
            handler = self._handlers.get(action) if isinstance(action, str) else None
            if handler is None:
                raise UnrecognizedAction(f"Unknown action: {action}")
            result = handler(payload)
        except LiteratureReviewError as exc:
            LOGGER.warning("Action %s failed: %s", action, exc)
            return self._respond(exc.status_code, error_envelope(str(exc)))
        except Exception as exc:
            LOGGER.exception("Unexpected failure handling action=%s", action)
            return self._respond(500, error_envelope(f"Internal error: {exc}"))
        return self._respond(200, result)

    def _respond(self, status_code: int, body: Any) -> PipelineResponse:
        return PipelineResponse(status_code, body, self.headers)

    def _generate_mesh(self, payload: Any) -> dict[str, list[str]]:
        keyword = payload.strip() if isinstance(payload, str) else ""
        if not keyword:
            raise InvalidPayload("generateMeSH payload must be a non-empty keyword string")
        return {"meshTerms": expand_terms(keyword, self.model)}

    def _search_pubmed(self, payload: Any) -> list[dict[str, str]]:
        if not isinstance(payload, dict):
            raise InvalidPayload("searchPubMed payload must be an object with 'mesh' and 'years'")
        mesh = payload.get("mesh")
        if not isinstance(mesh, str) or not mesh.strip():
            raise InvalidPayload("searchPubMed payload requires a non-empty 'mesh' term")
        years = _parse_years(payload.get("years", DEFAULT_RECENCY_YEARS))

        papers = search_literature(
            mesh.strip(),
            years,
            api_key=self.settings.pubmed_api_key,
            email=self.settings.pubmed_email,
            tool=self.settings.pubmed_tool,
            timeout=self.settings.pubmed_timeout_seconds,
        )
        return [paper.to_dict() for paper in papers]

    def _analyze_papers(self, payload: Any) -> dict[str, str]:
        paper_ids = payload.get("paperIds") if isinstance(payload, dict) else None
        if not isinstance(paper_ids, list):
            raise InvalidPayload("analyzePapers payload requires a 'paperIds' list")
        cleaned = [str(pid).strip() for pid in paper_ids if isinstance(pid, (str, int)) and str(pid).strip()]
        if not cleaned:
            raise InvalidPayload("analyzePapers requires at least one paper id")
        return {"analysis": synthesize(cleaned, self.model, self.settings)}


def _parse_years(value: Any) -> int:
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool):
        raise InvalidPayload("'years' must be a non-negative integer")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or value < 0:
        raise InvalidPayload("'years' must be a non-negative integer")
    return value
