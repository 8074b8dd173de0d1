"""Operational probe: which models can the configured credential see?

Kept off the request path; only the ``models`` CLI subcommand calls it.
"""

from __future__ import annotations

import logging

from model_client import ModelClient

LOGGER = logging.getLogger(__name__)


def list_available_models(model: ModelClient) -> dict[str, object]:
    """Return the provider, the configured model and the ids the API reports."""
    available = model.list_models()
    LOGGER.info("%s reports %s available models", model.provider, len(available))
    return {
        "provider": model.provider,
        "configured_model": model.model,
        "configured_model_available": model.model in available,
        "models": available,
    }
