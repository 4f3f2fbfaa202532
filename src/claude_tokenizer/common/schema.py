"""Pydantic models and dataclasses for request/response types."""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FileKind(str, Enum):
    """Declared category of an uploaded file."""

    IMAGE = "image"
    PDF = "pdf"
    TEXT = "text"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> "FileKind":
        """Map a form value to a kind; anything unrecognized is UNKNOWN."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.UNKNOWN


class TextCountRequest(BaseModel):
    """JSON body of POST /api."""

    text: str = ""
    model: str | None = None


@dataclass
class FileCountRequest:
    """Multipart body of POST /api."""

    data: bytes
    declared_kind: FileKind
    model: str
    filename: str | None = None
    media_type: str | None = None


class CountResponse(BaseModel):
    """Flat response of POST /api.

    Extra fields returned by Anthropic's count call are echoed through.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, protected_namespaces=())

    input_tokens: int
    file_chars: int = Field(0, alias="fileChars")
    model: str
    gpt4o_tokens: int | None = Field(None, alias="gpt4oTokens")
    gemini_tokens: int | None = Field(None, alias="geminiTokens")
    text_chars: int | None = Field(None, alias="textChars")


@dataclass
class TokenResult:
    """Counts as displayed by the client after the overhead correction."""

    primary_tokens: int | None = None
    secondary_tokens: int | None = None
    tertiary_tokens: int | None = None
    char_count: int = 0
    model_used: str | None = None
    source_file_name: str | None = None
