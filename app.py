"""FastAPI adapter exposing the orchestrator at ``/api``."""

from __future__ import annotations

import asyncio

from fastapi import FastAPI, Request, Response

from orchestrator import Orchestrator


def create_app(orchestrator: Orchestrator) -> FastAPI:
    app = FastAPI(title="MeSH Literature Review", docs_url=None, redoc_url=None)

    @app.get("/healthz", include_in_schema=False)
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.api_route("/api", methods=["GET", "POST", "OPTIONS"])
    async def api(request: Request) -> Response:
        body = await request.body()
        # Stages make blocking HTTP calls; keep them off the event loop.
        result = await asyncio.to_thread(orchestrator.handle, request.method, body)
        return Response(
            content=result.render_body(),
            status_code=result.status_code,
            headers=result.headers,
        )

    return app
