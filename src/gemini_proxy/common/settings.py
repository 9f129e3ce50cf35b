"""Process-wide proxy configuration, read once at startup."""
from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_DRAFT_MODEL = "gemini-2.5-flash"
DEFAULT_FULL_MODEL = "gemini-2.5-pro"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_TIMEOUT = 120.0

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class HandlerOptions:
    """Behavioural switches for the proxy handler.

    echo_mode: include the request's ``mode`` in success responses.
    require_config: reject requests that omit the ``config`` object.
    """
    echo_mode: bool = False
    require_config: bool = False


@dataclass(frozen=True)
class ProxySettings:
    api_key: str | None = field(default=None, repr=False)
    draft_model: str = DEFAULT_DRAFT_MODEL
    full_model: str = DEFAULT_FULL_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    options: HandlerOptions = field(default_factory=HandlerOptions)

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key)


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def load_cfg(path: str) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_settings(cfg_path: str | None = None) -> ProxySettings:
    """
    Build settings from an optional YAML file plus environment overrides.

    Args:
        cfg_path: YAML config path. Defaults to $PROXY_CONFIG when set.

    Returns:
        Immutable settings. The API key is only ever read from GEMINI_API_KEY.
    """
    cfg_path = cfg_path or os.getenv("PROXY_CONFIG")
    cfg: dict[str, Any] = {}
    if cfg_path:
        if not Path(cfg_path).exists():
            raise FileNotFoundError(f"Proxy config not found at {cfg_path}")
        cfg = load_cfg(cfg_path)

    def pick(env_name: str, key: str, default: Any) -> Any:
        value = os.getenv(env_name)
        if value is not None and value != "":
            return value
        return cfg.get(key, default)

    options = HandlerOptions(
        echo_mode=_as_bool(pick("PROXY_ECHO_MODE", "echo_mode", False)),
        require_config=_as_bool(pick("PROXY_REQUIRE_CONFIG", "require_config", False)),
    )
    return ProxySettings(
        api_key=os.getenv("GEMINI_API_KEY") or None,
        draft_model=str(pick("GEMINI_DRAFT_MODEL", "draft_model", DEFAULT_DRAFT_MODEL)),
        full_model=str(pick("GEMINI_FULL_MODEL", "full_model", DEFAULT_FULL_MODEL)),
        base_url=str(pick("GEMINI_BASE_URL", "base_url", DEFAULT_BASE_URL)).rstrip("/"),
        timeout=float(pick("GEMINI_TIMEOUT", "timeout", DEFAULT_TIMEOUT)),
        options=options,
    )


def select_model(mode: str, settings: ProxySettings) -> str:
    """Draft requests go to the fast model; everything else to the full one."""
    return settings.draft_model if mode == "draft" else settings.full_model
