from __future__ import annotations

from pathlib import Path

import pytest

from gemini_proxy.common.settings import (
    DEFAULT_DRAFT_MODEL,
    DEFAULT_FULL_MODEL,
    ProxySettings,
    load_settings,
    select_model,
)

ENV_VARS = [
    "GEMINI_API_KEY",
    "GEMINI_DRAFT_MODEL",
    "GEMINI_FULL_MODEL",
    "GEMINI_BASE_URL",
    "GEMINI_TIMEOUT",
    "PROXY_ECHO_MODE",
    "PROXY_REQUIRE_CONFIG",
    "PROXY_CONFIG",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_key() -> None:
    s = load_settings()
    assert s.api_key is None
    assert not s.has_credential
    assert s.draft_model == DEFAULT_DRAFT_MODEL
    assert s.full_model == DEFAULT_FULL_MODEL
    assert s.options.echo_mode is False
    assert s.options.require_config is False


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "abc")
    monkeypatch.setenv("GEMINI_FULL_MODEL", "gemini-exp")
    monkeypatch.setenv("GEMINI_BASE_URL", "http://localhost:9999/")
    monkeypatch.setenv("PROXY_ECHO_MODE", "true")
    s = load_settings()
    assert s.has_credential
    assert s.full_model == "gemini-exp"
    assert s.base_url == "http://localhost:9999"
    assert s.options.echo_mode is True


def test_yaml_config_is_read_but_never_supplies_the_key(tmp_path: Path) -> None:
    cfg = tmp_path / "proxy.yaml"
    cfg.write_text(
        "api_key: from-file\ndraft_model: gemini-lite\ntimeout: 5\nrequire_config: yes\n",
        encoding="utf-8",
    )
    s = load_settings(str(cfg))
    assert s.api_key is None
    assert s.draft_model == "gemini-lite"
    assert s.timeout == 5.0
    assert s.options.require_config is True


def test_env_wins_over_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg = tmp_path / "proxy.yaml"
    cfg.write_text("draft_model: gemini-lite\n", encoding="utf-8")
    monkeypatch.setenv("PROXY_CONFIG", str(cfg))
    monkeypatch.setenv("GEMINI_DRAFT_MODEL", "gemini-env")
    assert load_settings().draft_model == "gemini-env"


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(str(tmp_path / "nope.yaml"))


def test_key_is_hidden_from_repr() -> None:
    assert "hunter2" not in repr(ProxySettings(api_key="hunter2"))


def test_select_model() -> None:
    s = ProxySettings()
    assert select_model("draft", s) == DEFAULT_DRAFT_MODEL
    assert select_model("final", s) == DEFAULT_FULL_MODEL
    assert select_model("", s) == DEFAULT_FULL_MODEL
