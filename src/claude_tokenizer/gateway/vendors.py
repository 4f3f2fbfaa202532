"""Async adapters around the vendor token counting SDKs.

- AnthropicCounter: the primary count; failures propagate.
- TiktokenEstimator / GeminiCounter: best-effort estimates for plain text;
  any failure is logged and reported as None.
"""
from __future__ import annotations
import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Any, Sequence

import anthropic
import tiktoken
from google import genai

from claude_tokenizer.common.config import Settings
from claude_tokenizer.common.exceptions import VendorUnavailable

LOGGER = logging.getLogger("tokenizer.gateway.vendors")


def document_block(data: bytes) -> dict[str, Any]:
    """Anthropic content block for a PDF."""
    return {
        "type": "document",
        "source": {
            "type": "base64",
            "media_type": "application/pdf",
            "data": base64.b64encode(data).decode("ascii"),
        },
    }


def image_block(data: bytes, media_type: str) -> dict[str, Any]:
    """Anthropic content block for an image; media_type must already be supported."""
    return {
        "type": "image",
        "source": {
            "type": "base64",
            "media_type": media_type,
            "data": base64.b64encode(data).decode("ascii"),
        },
    }


class AnthropicCounter:
    """Counts input tokens with Anthropic's count_tokens endpoint."""

    def __init__(self, api_key: str, client: Any | None = None) -> None:
        self._client = client if client is not None else anthropic.AsyncAnthropic(api_key=api_key)

    async def count(
        self,
        model: str,
        content: str | list[dict[str, Any]],
        betas: Sequence[str] = (),
    ) -> dict[str, Any]:
        """
        Count tokens for a single user message.

        Args:
            model: Claude model id.
            content: Plain text or a list of content blocks.
            betas: Beta capability flags to send with the request.

        Returns:
            The vendor payload as a dict; always contains `input_tokens`.
        """
        result = await self._client.beta.messages.count_tokens(
            betas=list(betas),
            model=model,
            messages=[{"role": "user", "content": content}],
        )
        return result.model_dump(exclude_none=True)


class _Estimator:
    """Base for estimators whose failures must not fail the request."""

    vendor = "estimator"

    async def _count(self, text: str) -> int:
        raise NotImplementedError

    async def count(self, text: str) -> int | None:
        try:
            return await self._count(text)
        except VendorUnavailable as e:
            LOGGER.debug("%s estimate skipped: %s", e.vendor, e.message)
        except Exception as e:
            LOGGER.warning("%s tokenization error: %s", self.vendor, e)
        return None


class TiktokenEstimator(_Estimator):
    """GPT-4o estimate from the local tiktoken encoder."""

    vendor = "GPT-4o"

    def __init__(self, model: str = "gpt-4o") -> None:
        self._model = model
        self._encoding: tiktoken.Encoding | None = None

    def _encode_len(self, text: str) -> int:
        if self._encoding is None:
            self._encoding = tiktoken.encoding_for_model(self._model)
        # special-token markers in user text are counted as plain text
        return len(self._encoding.encode(text, disallowed_special=()))

    async def _count(self, text: str) -> int:
        return await asyncio.to_thread(self._encode_len, text)


class GeminiCounter(_Estimator):
    """Gemini estimate from Google's hosted count_tokens; disabled without a key."""

    vendor = "Gemini"

    def __init__(self, api_key: str | None, model: str = "gemini-1.5-flash", client: Any | None = None) -> None:
        self._model = model
        self._client = client
        if self._client is None and api_key:
            self._client = genai.Client(api_key=api_key)

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def _count(self, text: str) -> int:
        if self._client is None:
            raise VendorUnavailable("Gemini", "GEMINI_API_KEY not configured")
        resp = await self._client.aio.models.count_tokens(
            model=self._model,
            contents=[{"role": "user", "parts": [{"text": text}]}],
        )
        if resp.total_tokens is None:
            raise VendorUnavailable("Gemini", "response carried no total_tokens")
        return int(resp.total_tokens)


@dataclass
class Vendors:
    """The three counters used by one gateway."""

    anthropic: AnthropicCounter
    gpt4o: _Estimator
    gemini: _Estimator


def build_vendors(settings: Settings) -> Vendors:
    """Construct real SDK-backed counters from validated settings."""
    return Vendors(
        anthropic=AnthropicCounter(settings.anthropic_api_key),
        gpt4o=TiktokenEstimator(settings.gpt_model),
        gemini=GeminiCounter(settings.gemini_api_key, settings.gemini_model),
    )
