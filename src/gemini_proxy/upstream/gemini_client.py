"""Async client for the Gemini generateContent REST endpoint."""
from __future__ import annotations
import logging
from typing import Any

import httpx

from gemini_proxy.common.errors import UpstreamError

LOGGER = logging.getLogger("gemini_proxy.upstream")


def _system_instruction(value: Any) -> Any:
    """Wrap a bare string into Content; anything else is sent as given."""
    if isinstance(value, str):
        return {"parts": [{"text": value}]}
    return value


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
        message = data["error"]["message"]
        if message:
            return str(message)
    except Exception:
        pass
    return f"Gemini API returned HTTP {resp.status_code}"


def _extract_text(data: dict[str, Any]) -> str:
    feedback = data.get("promptFeedback") or {}
    if feedback.get("blockReason"):
        raise UpstreamError(f"Prompt blocked by Gemini: {feedback['blockReason']}")

    candidates = data.get("candidates") or []
    if not candidates:
        raise UpstreamError("Gemini returned no candidates")
    parts = (candidates[0].get("content") or {}).get("parts") or []
    texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
    if not texts:
        reason = candidates[0].get("finishReason", "unknown")
        raise UpstreamError(f"Gemini returned no text (finishReason={reason})")
    return "".join(texts)


class GeminiClient:
    """
    Thin wrapper over POST /v1beta/models/{model}:generateContent.

    Args:
        api_key: Server-held Gemini key, sent as the x-goog-api-key header.
        base_url: API root, without trailing slash.
        timeout: Per-call timeout in seconds.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://generativelanguage.googleapis.com",
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def build_payload(
        self,
        prompt: str,
        system_instruction: Any = None,
        generation_config: Any = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        if system_instruction:
            payload["systemInstruction"] = _system_instruction(system_instruction)
        if generation_config:
            payload["generationConfig"] = generation_config
        return payload

    async def generate(
        self,
        model: str,
        prompt: str,
        system_instruction: Any = None,
        generation_config: Any = None,
    ) -> str:
        url = f"{self.base_url}/v1beta/models/{model}:generateContent"
        headers = {"x-goog-api-key": self._api_key or ""}
        payload = self.build_payload(prompt, system_instruction, generation_config)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Gemini request failed: {e.__class__.__name__}: {e}") from e

        if r.status_code >= 400:
            raise UpstreamError(_error_message(r), upstream_status=r.status_code)

        try:
            data = r.json()
        except ValueError as e:
            raise UpstreamError("Malformed Gemini response") from e
        if not isinstance(data, dict):
            raise UpstreamError("Malformed Gemini response")
        return _extract_text(data)
