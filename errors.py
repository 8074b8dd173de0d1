"""Error taxonomy shared by the pipeline stages and the orchestrator."""

from __future__ import annotations


class LiteratureReviewError(RuntimeError):
    """Base class for every error the pipeline knows how to report."""

    status_code = 200


class ConfigurationError(LiteratureReviewError):
    """A required setting (usually a model credential) is missing or invalid."""


class UpstreamModelError(LiteratureReviewError):
    """The language-model service was unreachable or returned an error."""


class UpstreamSearchError(LiteratureReviewError):
    """PubMed search failed. Always downgraded to an empty result."""


class UpstreamSynthesisError(LiteratureReviewError):
    """Abstract fetch or report generation failed."""


class UnrecognizedAction(LiteratureReviewError):
    status_code = 400


class InvalidPayload(LiteratureReviewError):
    status_code = 400
