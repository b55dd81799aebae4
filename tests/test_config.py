# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from agent_architect.config import Settings
from agent_architect.llm.client import OpenRouterLLMClient


def test_defaults_without_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "ARCHITECT_STEP_DELAY_SECONDS",
        "ARCHITECT_OFFLINE",
        "ARCHITECT_DATA_DIR",
        "ARCHITECT_ARTIFACTS_DB_PATH",
        "ARCHITECT_EXPORT_DIR",
        "ARCHITECT_LLM_MODELS",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()
    assert s.step_delay_seconds == 1.0
    assert s.offline is False
    assert s.data_dir == Path(".local/architect")
    assert s.artifacts_db_path == Path(".local/architect/artifacts.sqlite3")
    assert s.llm_models[0] == "google/gemini-2.5-flash"


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ARCHITECT_STEP_DELAY_SECONDS", "-3")
    monkeypatch.setenv("ARCHITECT_OFFLINE", "yes")
    monkeypatch.setenv("ARCHITECT_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("ARCHITECT_LLM_MODELS", "a/one, b/two c/three")
    monkeypatch.setenv("ARCHITECT_LLM_TEMPERATURE", "not-a-number")

    s = Settings.from_env()
    assert s.step_delay_seconds == 0.0
    assert s.offline is True
    assert s.export_dir == tmp_path / "exports"
    assert s.llm_models == ["a/one", "b/two", "c/three"]
    assert s.llm_temperature == 0.7


def test_llm_timeouts_flow_from_settings_into_client(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ARCHITECT_OPENROUTER_API_KEY", "sk-test")
    monkeypatch.setenv("ARCHITECT_LLM_CONNECT_TIMEOUT_SECONDS", "2")
    monkeypatch.setenv("ARCHITECT_LLM_READ_TIMEOUT_SECONDS", "10")
    monkeypatch.setenv("ARCHITECT_LLM_FIRST_TOKEN_TIMEOUT_SECONDS", "20")

    s = Settings.from_env()
    assert (s.llm_connect_timeout_seconds, s.llm_read_timeout_seconds, s.llm_first_token_timeout_seconds) == (
        2.0,
        10.0,
        20.0,
    )

    client = OpenRouterLLMClient(s)
    assert client._first_token_timeout == 20.0
    # Read timeout never drops below the first-token timeout.
    assert client._timeout.read == 20.0
    assert client._timeout.connect == 2.0
