"""Request dispatch and response normalization for POST /api."""
from __future__ import annotations
import asyncio
import logging
from typing import Any

from claude_tokenizer.common.catalog import SUPPORTED_IMAGE_MEDIA_TYPES
from claude_tokenizer.common.config import Settings
from claude_tokenizer.common.exceptions import ClientRequestError, PrimaryCountingFailure
from claude_tokenizer.common.schema import CountResponse, FileCountRequest, FileKind, TextCountRequest
from claude_tokenizer.gateway.vendors import Vendors, document_block, image_block

LOGGER = logging.getLogger("tokenizer.gateway.dispatch")


def resolve_image_media_type(media_type: str | None) -> str:
    """Map an upload's media type onto one Anthropic accepts, defaulting to JPEG."""
    mt = (media_type or "").split(";", 1)[0].strip().lower()
    if mt in SUPPORTED_IMAGE_MEDIA_TYPES:
        return mt
    return SUPPORTED_IMAGE_MEDIA_TYPES[0]


class Gateway:
    """Chooses vendor calls for a request and merges their results."""

    def __init__(self, settings: Settings, vendors: Vendors) -> None:
        self.settings = settings
        self.vendors = vendors

    def resolve_model(self, model: str | None) -> str:
        return (model or "").strip() or self.settings.default_model

    def empty_result(self, model: str | None = None, file_chars: int = 0) -> CountResponse:
        """Result for empty or malformed input; no vendor is called."""
        return CountResponse(
            input_tokens=0,
            file_chars=file_chars,
            model=self.resolve_model(model),
            gpt4o_tokens=None,
            gemini_tokens=None,
        )

    async def count_text(self, req: TextCountRequest) -> CountResponse:
        return await self._count_plain_text(req.text, self.resolve_model(req.model), file_chars=0)

    async def count_file(self, req: FileCountRequest) -> CountResponse:
        if not req.data:
            raise ClientRequestError("uploaded file is empty")
        model = self.resolve_model(req.model)
        file_chars = len(req.data)

        if req.declared_kind is FileKind.PDF:
            usage = await self._primary(model, [document_block(req.data)], self.settings.pdf_betas)
            return self._shape(usage, model, file_chars)

        if req.declared_kind is FileKind.IMAGE:
            media_type = resolve_image_media_type(req.media_type)
            usage = await self._primary(
                model, [image_block(req.data, media_type)], self.settings.token_counting_betas
            )
            return self._shape(usage, model, file_chars)

        # text and unknown uploads are treated as UTF-8 text; a leading BOM is dropped
        text = req.data.decode("utf-8-sig", errors="replace")
        if not text.strip():
            LOGGER.info("Uploaded text file %s is blank", req.filename)
            return self.empty_result(model, file_chars=file_chars)
        return await self._count_plain_text(text, model, file_chars=file_chars)

    async def _count_plain_text(self, text: str, model: str, file_chars: int) -> CountResponse:
        if not text.strip():
            raise ClientRequestError("text is empty")

        primary, gpt4o, gemini = await asyncio.gather(
            self._primary(model, text, self.settings.token_counting_betas),
            self.vendors.gpt4o.count(text),
            self.vendors.gemini.count(text),
            return_exceptions=True,
        )
        if isinstance(primary, BaseException):
            raise primary
        return self._shape(
            primary,
            model,
            file_chars,
            gpt4o_tokens=gpt4o if isinstance(gpt4o, int) else None,
            gemini_tokens=gemini if isinstance(gemini, int) else None,
            text_chars=len(text),
        )

    async def _primary(self, model: str, content: Any, betas: tuple[str, ...]) -> dict[str, Any]:
        try:
            usage = await self.vendors.anthropic.count(model, content, betas)
        except Exception as e:
            LOGGER.error("Anthropic token counting failed (model=%s): %s", model, e)
            raise PrimaryCountingFailure("Anthropic count_tokens failed", e) from e
        if not isinstance(usage.get("input_tokens"), int):
            LOGGER.error("Anthropic response without input_tokens (model=%s): %s", model, usage)
            raise PrimaryCountingFailure("Anthropic count_tokens returned no input_tokens")
        return usage

    @staticmethod
    def _shape(
        usage: dict[str, Any],
        model: str,
        file_chars: int,
        gpt4o_tokens: int | None = None,
        gemini_tokens: int | None = None,
        text_chars: int | None = None,
    ) -> CountResponse:
        echo = {k: v for k, v in usage.items() if k not in {"model", "fileChars", "gpt4oTokens", "geminiTokens", "textChars"}}
        return CountResponse(
            **echo,
            file_chars=file_chars,
            model=model,
            gpt4o_tokens=gpt4o_tokens,
            gemini_tokens=gemini_tokens,
            text_chars=text_chars,
        )
