"""Tests for runtime settings."""

from pathlib import Path

from repo_explainer.config import DEFAULT_HOME, DEFAULT_MODEL, Settings


def test_defaults(monkeypatch):
    for name in ("OPENAI_API_KEY", "EXPLAINER_MODEL", "EXPLAINER_LLM_BASE_URL", "GITHUB_TOKEN", "EXPLAINER_HOME"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings.from_env()
    assert settings.openai_api_key is None
    assert settings.github_token is None
    assert settings.model == DEFAULT_MODEL
    assert settings.home == DEFAULT_HOME


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("EXPLAINER_MODEL", "gpt-4o")
    monkeypatch.setenv("GITHUB_TOKEN", "")
    monkeypatch.setenv("EXPLAINER_HOME", str(tmp_path))
    settings = Settings.from_env()
    assert settings.openai_api_key == "sk-test"
    assert settings.model == "gpt-4o"
    assert settings.github_token is None
    assert settings.history_dir == tmp_path / "history"
    assert settings.upload_dir == Path(tmp_path) / "uploads"
