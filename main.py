"""CLI entrypoint for the MeSH literature review pipeline."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from dotenv import load_dotenv

from config import Settings, load_settings
from diagnostics import list_available_models
from errors import LiteratureReviewError
from model_client import build_model_client
from orchestrator import (
    ACTION_ANALYZE_PAPERS,
    ACTION_GENERATE_MESH,
    ACTION_SEARCH_PUBMED,
    DEFAULT_RECENCY_YEARS,
    Orchestrator,
    PipelineResponse,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Keyword -> MeSH -> PubMed -> AI literature review")
    sub = parser.add_subparsers(dest="command", required=True)

    expand = sub.add_parser("expand", help="Expand a keyword into MeSH terms")
    expand.add_argument("keyword")

    search = sub.add_parser("search", help="Search PubMed for a MeSH term")
    search.add_argument("mesh")
    search.add_argument(
        "--years",
        type=int,
        default=DEFAULT_RECENCY_YEARS,
        help="Recency window in years back from the current year",
    )

    analyze = sub.add_parser("analyze", help="Synthesize a report for PubMed ids (at most 3 are used)")
    analyze.add_argument("paper_ids", nargs="+")

    sub.add_parser("models", help="List models visible to the configured credential")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    return parser.parse_args(argv)


def build_orchestrator(settings: Settings) -> Orchestrator:
    return Orchestrator(settings, build_model_client(settings))


def run(args: argparse.Namespace, settings: Settings) -> int:
    """Execute one CLI command and return the process exit code."""
    orchestrator = build_orchestrator(settings)

    if args.command == "serve":
        import uvicorn  # noqa: PLC0415

        from app import create_app  # noqa: PLC0415

        uvicorn.run(create_app(orchestrator), host=args.host, port=args.port, log_level=settings.log_level.lower())
        return 0

    if args.command == "models":
        try:
            _print_json(list_available_models(orchestrator.model))
        except LiteratureReviewError as exc:
            _print_json({"error": str(exc)})
            return 1
        return 0

    if args.command == "expand":
        response = orchestrator.dispatch(ACTION_GENERATE_MESH, args.keyword)
    elif args.command == "search":
        response = orchestrator.dispatch(ACTION_SEARCH_PUBMED, {"mesh": args.mesh, "years": args.years})
    else:
        response = orchestrator.dispatch(ACTION_ANALYZE_PAPERS, {"paperIds": args.paper_ids})

    _print_json(response.body)
    return 0 if _succeeded(response) else 1


def _succeeded(response: PipelineResponse) -> bool:
    return response.status_code == 200 and not (isinstance(response.body, dict) and "error" in response.body)


def _print_json(value: object) -> None:
    print(json.dumps(value, indent=2, ensure_ascii=False))


def main(argv: list[str] | None = None) -> None:
    """Initialize config and execute the requested command."""
    load_dotenv()
    args = parse_args(argv)
    try:
        settings = load_settings()
    except LiteratureReviewError as exc:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
        logging.error("Configuration error: %s", exc)
        sys.exit(2)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )
    sys.exit(run(args, settings))


if __name__ == "__main__":
    main()
