"""Error types raised by the proxy handler and the upstream client."""
from __future__ import annotations
from typing import Any


class ProxyError(Exception):
    """Base error that maps to a JSON error response."""

    status_code = 500

    def __init__(self, error: str, **extra: Any) -> None:
        super().__init__(error)
        self.error = error
        self.extra = {k: v for k, v in extra.items() if v is not None}

    def to_body(self) -> dict[str, Any]:
        return {"error": self.error, **self.extra}


class MethodNotAllowedError(ProxyError):
    status_code = 405

    def __init__(self, method: str) -> None:
        super().__init__("Method Not Allowed")
        self.method = method


class ConfigurationError(ProxyError):
    """Server-side setup problem, e.g. the API key is not set."""

    status_code = 500


class InvalidRequestError(ProxyError):
    """Client payload is missing fields or has the wrong shape."""

    status_code = 400


class UpstreamError(ProxyError):
    """The Gemini call failed or returned nothing usable.

    Args:
        message: Human-readable reason, usually the upstream's own message.
        upstream_status: HTTP status reported by the upstream, if any.
    """

    status_code = 500

    def __init__(self, message: str, upstream_status: int | None = None) -> None:
        details = {"upstream_status": upstream_status} if upstream_status is not None else None
        super().__init__(message, message=message, details=details)
        self.message = message
        self.upstream_status = upstream_status
