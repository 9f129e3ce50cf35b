"""FastAPI front for the Gemini proxy.

Endpoints:
- GET /health
- POST /api/gemini-proxy  { "prompt": "...", "mode": "draft", "config": {...} }
  (OPTIONS answers CORS preflight; other methods get 405)
"""
from __future__ import annotations
import logging

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from gemini_proxy.common.logging_setup import setup_logging
from gemini_proxy.common.settings import ProxySettings, load_settings
from gemini_proxy.serve.handler import ProxyHandler, TextGenerator
from gemini_proxy.upstream.gemini_client import GeminiClient

LOGGER = logging.getLogger("gemini_proxy.app")
setup_logging()

PROXY_PATH = "/api/gemini-proxy"
ROUTE_METHODS = ["GET", "HEAD", "OPTIONS", "PATCH", "DELETE", "POST", "PUT"]

CORS_HEADERS = {
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS,PATCH,DELETE,POST,PUT",
    "Access-Control-Allow-Headers": (
        "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
        "Content-MD5, Content-Type, Date, X-Api-Version"
    ),
}


def create_app(
    settings: ProxySettings | None = None,
    upstream: TextGenerator | None = None,
) -> FastAPI:
    """
    Build the app around a single immutable settings object.

    Args:
        settings: Defaults to load_settings() (environment + optional YAML).
        upstream: Generation backend. Defaults to a GeminiClient holding the key.
    """
    settings = settings or load_settings()
    if upstream is None:
        upstream = GeminiClient(settings.api_key, base_url=settings.base_url, timeout=settings.timeout)
    handler = ProxyHandler(settings, upstream)

    app = FastAPI(title="Gemini Proxy")
    app.state.settings = settings
    app.state.handler = handler

    @app.on_event("startup")
    def _warn_on_missing_credential() -> None:
        """Log once at startup so a missing key shows up before the first request."""
        if not settings.has_credential:
            LOGGER.warning("GEMINI_API_KEY is not set; %s will answer 500", PROXY_PATH)
        LOGGER.info(
            "Models: draft=%s full=%s | echo_mode=%s require_config=%s",
            settings.draft_model,
            settings.full_model,
            settings.options.echo_mode,
            settings.options.require_config,
        )

    @app.get("/health")
    def health() -> dict[str, object]:
        return {
            "status": "ok",
            "draft_model": settings.draft_model,
            "full_model": settings.full_model,
            "configured": settings.has_credential,
        }

    @app.api_route(PROXY_PATH, methods=ROUTE_METHODS)
    async def gemini_proxy(request: Request) -> Response:
        body = await request.body()
        result = await handler.handle(request.method, body)
        if result.body is None:
            return Response(status_code=result.status_code, headers=CORS_HEADERS)
        return JSONResponse(result.body, status_code=result.status_code, headers=CORS_HEADERS)

    return app


app = create_app()
