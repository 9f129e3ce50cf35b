"""Request validation and forwarding, independent of the web framework.

Each step is a gate: a failure short-circuits with an error response and
no upstream call is made.
"""
from __future__ import annotations
import json
import logging
from typing import Any, Protocol

from pydantic import ValidationError

from gemini_proxy.common.errors import (
    ConfigurationError,
    InvalidRequestError,
    MethodNotAllowedError,
    ProxyError,
    UpstreamError,
)
from gemini_proxy.common.schema import GenerationRequest, GenerationResponse, ProxyResult
from gemini_proxy.common.settings import ProxySettings, select_model

LOGGER = logging.getLogger("gemini_proxy.handler")

REQUIRED_FIELDS = ("prompt", "mode")


class TextGenerator(Protocol):
    async def generate(
        self,
        model: str,
        prompt: str,
        system_instruction: Any = None,
        generation_config: Any = None,
    ) -> str: ...


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


class ProxyHandler:
    def __init__(self, settings: ProxySettings, upstream: TextGenerator) -> None:
        self.settings = settings
        self.upstream = upstream

    async def handle(self, method: str, body: bytes | None) -> ProxyResult:
        method = method.upper()
        if method == "OPTIONS":
            return ProxyResult(status_code=200)
        try:
            return await self._submit(method, body)
        except ProxyError as e:
            return ProxyResult(status_code=e.status_code, body=e.to_body())
        except Exception:
            LOGGER.exception("Unhandled error while proxying %s request", method)
            return ProxyResult(status_code=500, body={"error": "Internal Server Error"})

    async def _submit(self, method: str, body: bytes | None) -> ProxyResult:
        if method != "POST":
            raise MethodNotAllowedError(method)
        self._check_credential()
        req = self.parse_request(body)

        model = select_model(req.mode, self.settings)
        config = req.config
        system_instruction = config.system_instruction if config else None
        generation_config = (config.generation_config if config else None) or {}

        LOGGER.info("Forwarding prompt (%d chars) to %s", len(req.prompt), model)
        try:
            text = await self.upstream.generate(
                model,
                req.prompt,
                system_instruction=system_instruction,
                generation_config=generation_config,
            )
        except UpstreamError as e:
            LOGGER.error("Proxy error from %s: %s", model, e.message)
            raise
        except Exception as e:
            LOGGER.exception("Proxy error from %s", model)
            raise UpstreamError(str(e) or e.__class__.__name__) from e
        if not isinstance(text, str):
            LOGGER.error("Proxy error from %s: backend returned %s", model, type(text).__name__)
            raise UpstreamError(f"Upstream returned no text ({type(text).__name__})")

        mode = req.mode if self.settings.options.echo_mode else None
        out = GenerationResponse(text=text, mode=mode)
        return ProxyResult(status_code=200, body=out.model_dump(exclude_none=True))

    def _check_credential(self) -> None:
        if not self.settings.has_credential:
            LOGGER.error("GEMINI_API_KEY is not set; refusing to call upstream")
            raise ConfigurationError(
                "Server configuration error: GEMINI_API_KEY is missing.",
                hint="Set the GEMINI_API_KEY environment variable on the server.",
            )

    def parse_request(self, body: bytes | None) -> GenerationRequest:
        """
        Decode and validate the JSON payload.

        Only presence and basic types are checked; systemInstruction and
        generationConfig are opaque to the proxy.
        """
        try:
            payload = json.loads(body) if body else {}
        except ValueError as e:
            raise InvalidRequestError("Invalid JSON body.", message=str(e)) from e
        if not isinstance(payload, dict):
            raise InvalidRequestError(
                "Invalid JSON body.", message="Request body must be a JSON object."
            )

        required = REQUIRED_FIELDS
        if self.settings.options.require_config:
            required = required + ("config",)
        missing = [name for name in required if _is_blank(payload.get(name))]
        if missing:
            raise InvalidRequestError(
                f"Missing required parameters: {', '.join(missing)}.",
                details=missing,
            )

        try:
            return GenerationRequest.model_validate(payload)
        except ValidationError as e:
            problems = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            ]
            raise InvalidRequestError("Invalid request parameters.", details=problems) from e
