"""Model catalog and accepted upload types shared by gateway and client."""
from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class ModelChoice:
    id: str
    name: str


CLAUDE_MODELS: tuple[ModelChoice, ...] = (
    ModelChoice("claude-3-7-sonnet-20250219", "Claude 3.7 Sonnet"),
    ModelChoice("claude-sonnet-4-5-20250929", "Claude Sonnet 4.5"),
    ModelChoice("claude-opus-4-1-20250805", "Claude Opus 4.1"),
    ModelChoice("claude-haiku-4-5-20251001", "Claude Haiku 4.5"),
    ModelChoice("claude-sonnet-4-20250514", "Claude Sonnet 4"),
    ModelChoice("claude-opus-4-20250514", "Claude Opus 4"),
    ModelChoice("claude-3-5-sonnet-20241022", "Claude 3.5 Sonnet"),
    ModelChoice("claude-3-5-haiku-20241022", "Claude 3.5 Haiku"),
    ModelChoice("claude-3-opus-20240229", "Claude 3 Opus"),
    ModelChoice("claude-3-haiku-20240307", "Claude 3 Haiku"),
)

DEFAULT_MODEL = CLAUDE_MODELS[0].id

ACCEPTED_FILE_TYPES: dict[str, tuple[str, ...]] = {
    "image": (".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp"),
    "pdf": (".pdf",),
    "text": (".txt", ".md", ".js", ".jsx", ".ts", ".tsx", ".json", ".html", ".css", ".csv"),
}

# Media types Anthropic accepts in an image content block; the first is the fallback.
SUPPORTED_IMAGE_MEDIA_TYPES: tuple[str, ...] = ("image/jpeg", "image/png", "image/gif", "image/webp")


def accepted_file_types() -> str:
    """Comma-joined list of accepted suffixes, as used by a file picker."""
    return ",".join(
        ACCEPTED_FILE_TYPES["image"] + ACCEPTED_FILE_TYPES["pdf"] + ACCEPTED_FILE_TYPES["text"]
    )


def find_model(model_id: str, models: tuple[ModelChoice, ...] = CLAUDE_MODELS) -> ModelChoice | None:
    for m in models:
        if m.id == model_id:
            return m
    return None
