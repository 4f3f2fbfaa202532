from __future__ import annotations

from pathlib import Path

import pytest

from claude_tokenizer.common.config import ClientSettings, Settings, load_cfg
from claude_tokenizer.common.exceptions import StartupConfigurationError

_ENV = (
    "ANTHROPIC_API_KEY",
    "GEMINI_API_KEY",
    "TOKENIZER_DEFAULT_MODEL",
    "TOKENIZER_GEMINI_MODEL",
    "TOKENIZER_GPT_MODEL",
    "TOKENIZER_API_URL",
    "TOKENIZER_DEBOUNCE_MS",
    "TOKENIZER_MESSAGE_OVERHEAD",
    "LOG_LEVEL",
)


@pytest.fixture
def cfg_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)
    path = tmp_path / "tokenizer.yaml"
    path.write_text("{}\n", encoding="utf-8")
    monkeypatch.setenv("TOKENIZER_CONFIG", str(path))
    return path


def test_missing_anthropic_key_fails_validation(cfg_file: Path) -> None:
    settings = Settings.from_env()
    with pytest.raises(StartupConfigurationError, match="ANTHROPIC_API_KEY"):
        settings.validate()


def test_gemini_key_is_optional(cfg_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    settings = Settings.from_env()
    settings.validate()
    assert settings.gemini_enabled is False
    monkeypatch.setenv("GEMINI_API_KEY", "g-test")
    assert Settings.from_env().gemini_enabled is True


def test_defaults(cfg_file: Path) -> None:
    settings = Settings.from_env()
    assert settings.default_model == "claude-3-7-sonnet-20250219"
    assert settings.gemini_model == "gemini-1.5-flash"
    assert settings.gpt_model == "gpt-4o"
    assert "pdfs-2024-09-25" in settings.pdf_betas


def test_yaml_overrides_and_env_wins(cfg_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg_file.write_text(
        "gateway:\n"
        "  default_model: claude-3-haiku-20240307\n"
        "  gemini_model: gemini-2.0-flash\n"
        "client:\n"
        "  message_overhead_tokens: 4\n"
        "  models:\n"
        "    - id: claude-x\n"
        "      name: Claude X\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("TOKENIZER_GEMINI_MODEL", "gemini-from-env")
    settings = Settings.from_env()
    assert settings.default_model == "claude-3-haiku-20240307"
    assert settings.gemini_model == "gemini-from-env"

    client = ClientSettings.from_env()
    assert client.message_overhead_tokens == 4
    assert [m.id for m in client.models] == ["claude-x"]


def test_explicit_missing_config_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(StartupConfigurationError):
        load_cfg(str(tmp_path / "nope.yaml"))


def test_non_mapping_config_is_an_error(tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(StartupConfigurationError):
        load_cfg(str(path))


def test_client_defaults(cfg_file: Path) -> None:
    client = ClientSettings.from_env()
    assert client.api_url == "http://localhost:8000/api"
    assert client.debounce_ms == 300
    assert client.message_overhead_tokens == 7
    assert client.models[0].id == "claude-3-7-sonnet-20250219"


def test_client_rejects_bad_numbers(cfg_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TOKENIZER_DEBOUNCE_MS", "soon")
    with pytest.raises(StartupConfigurationError):
        ClientSettings.from_env()
    monkeypatch.setenv("TOKENIZER_DEBOUNCE_MS", "300")
    monkeypatch.setenv("TOKENIZER_MESSAGE_OVERHEAD", "-1")
    with pytest.raises(StartupConfigurationError):
        ClientSettings.from_env()
