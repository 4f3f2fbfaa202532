"""Startup configuration for the gateway and the client.

Settings are read once from the environment, optionally layered over a YAML
file, validated, and then passed explicitly to whatever needs them.
Environment variables win over the YAML file; credentials are only ever
read from the environment.
"""
from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from claude_tokenizer.common.catalog import CLAUDE_MODELS, ModelChoice
from claude_tokenizer.common.exceptions import StartupConfigurationError

DEFAULT_CONFIG_PATH = "configs/tokenizer.yaml"


def load_cfg(path: str | None = None) -> dict[str, Any]:
    """
    Load the optional YAML config.

    Args:
        path: Explicit path. Defaults to $TOKENIZER_CONFIG, then configs/tokenizer.yaml.

    Returns:
        Parsed mapping, or an empty dict when the default file does not exist.
    """
    explicit = path or os.getenv("TOKENIZER_CONFIG")
    cfg_path = Path(explicit or DEFAULT_CONFIG_PATH)
    if not cfg_path.exists():
        if explicit:
            raise StartupConfigurationError(f"Config file not found at {cfg_path}")
        return {}
    with open(cfg_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise StartupConfigurationError(f"Config file {cfg_path} must contain a mapping")
    return data


def _pick(env: str, section: dict[str, Any], key: str, default: Any) -> Any:
    value = os.getenv(env)
    if value is not None and value != "":
        return value
    return section.get(key, default)


def _as_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise StartupConfigurationError(f"{name} must be an integer, got {value!r}", e) from e


@dataclass
class Settings:
    """Gateway settings: vendor credentials, models and beta flags."""

    anthropic_api_key: str = ""
    gemini_api_key: str | None = None
    default_model: str = CLAUDE_MODELS[0].id
    gemini_model: str = "gemini-1.5-flash"
    gpt_model: str = "gpt-4o"
    token_counting_betas: tuple[str, ...] = ("token-counting-2024-11-01",)
    pdf_betas: tuple[str, ...] = ("token-counting-2024-11-01", "pdfs-2024-09-25")
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, cfg_path: str | None = None) -> "Settings":
        """Create Settings from environment variables over the YAML `gateway` section."""
        section = load_cfg(cfg_path).get("gateway") or {}
        defaults = cls()
        return cls(
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            default_model=_pick("TOKENIZER_DEFAULT_MODEL", section, "default_model", defaults.default_model),
            gemini_model=_pick("TOKENIZER_GEMINI_MODEL", section, "gemini_model", defaults.gemini_model),
            gpt_model=_pick("TOKENIZER_GPT_MODEL", section, "gpt_model", defaults.gpt_model),
            token_counting_betas=tuple(section.get("token_counting_betas", defaults.token_counting_betas)),
            pdf_betas=tuple(section.get("pdf_betas", defaults.pdf_betas)),
            log_level=str(_pick("LOG_LEVEL", section, "log_level", defaults.log_level)),
        )

    @property
    def gemini_enabled(self) -> bool:
        return bool(self.gemini_api_key)

    def validate(self) -> None:
        """Refuse to start without the primary vendor credential."""
        if not self.anthropic_api_key:
            raise StartupConfigurationError("missing ANTHROPIC_API_KEY")
        if not self.default_model:
            raise StartupConfigurationError("default model must not be empty")


@dataclass
class ClientSettings:
    """Client settings: gateway URL, debounce window and the overhead correction.

    `message_overhead_tokens` is subtracted from Anthropic's raw input_tokens
    before display. It approximates the fixed per-message scaffold the
    count_tokens endpoint includes and is not guaranteed stable across models.
    """

    api_url: str = "http://localhost:8000/api"
    debounce_ms: int = 300
    message_overhead_tokens: int = 7
    models: tuple[ModelChoice, ...] = field(default_factory=lambda: CLAUDE_MODELS)

    @classmethod
    def from_env(cls, cfg_path: str | None = None) -> "ClientSettings":
        """Create ClientSettings from environment variables over the YAML `client` section."""
        section = load_cfg(cfg_path).get("client") or {}
        defaults = cls()
        models = defaults.models
        if section.get("models"):
            models = tuple(ModelChoice(str(m["id"]), str(m.get("name", m["id"]))) for m in section["models"])
        settings = cls(
            api_url=str(_pick("TOKENIZER_API_URL", section, "api_url", defaults.api_url)),
            debounce_ms=_as_int(
                "TOKENIZER_DEBOUNCE_MS",
                _pick("TOKENIZER_DEBOUNCE_MS", section, "debounce_ms", defaults.debounce_ms),
            ),
            message_overhead_tokens=_as_int(
                "TOKENIZER_MESSAGE_OVERHEAD",
                _pick("TOKENIZER_MESSAGE_OVERHEAD", section, "message_overhead_tokens", defaults.message_overhead_tokens),
            ),
            models=models,
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if self.debounce_ms < 0:
            raise StartupConfigurationError("debounce_ms must be >= 0")
        if self.message_overhead_tokens < 0:
            raise StartupConfigurationError("message_overhead_tokens must be >= 0")
        if not self.models:
            raise StartupConfigurationError("model catalog must not be empty")
