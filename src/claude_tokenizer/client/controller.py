"""Client input controller: text/file state, requests to the gateway, displayed counts.

Typed text and an uploaded file are mutually exclusive. Text is counted after
a debounce window; a file is counted only on an explicit submit. Each request
takes a sequence number and a response is applied only if no newer request
has been issued since, so a slow response for old input never overwrites the
counts for the current one.
"""
from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass

import httpx

from claude_tokenizer.client.debounce import Debouncer
from claude_tokenizer.client.files import classify_file, guess_media_type, make_preview
from claude_tokenizer.client.metrics import MetricRow, metric_rows
from claude_tokenizer.common.catalog import find_model
from claude_tokenizer.common.config import ClientSettings
from claude_tokenizer.common.schema import CountResponse, FileKind, TokenResult

LOGGER = logging.getLogger("tokenizer.client.controller")

TEXT_ERROR = "Failed to analyze text. Please try again."
FILE_ERROR = "Failed to analyze file. Please try again."


@dataclass
class SelectedFile:
    name: str
    data: bytes
    media_type: str | None = None


class TokenizerInput:
    """State and actions behind the tokenizer input panel."""

    def __init__(self, settings: ClientSettings | None = None, http: httpx.AsyncClient | None = None) -> None:
        self.settings = settings or ClientSettings()
        self._http = http if http is not None else httpx.AsyncClient(timeout=120.0)
        self._owns_http = http is None

        self.text = ""
        self.file: SelectedFile | None = None
        self.file_kind = FileKind.UNKNOWN
        self.preview: str | None = None
        self.selected_model = self.settings.models[0].id
        self.stats = TokenResult()
        self.error: str | None = None
        self.is_processing = False
        self.show_model_dropdown = False

        self._seq = 0
        self._preview_task: asyncio.Task[None] | None = None
        self._debounced = Debouncer(self.analyze_text, self.settings.debounce_ms / 1000)

    # -- model selection -------------------------------------------------

    @property
    def selected_model_name(self) -> str:
        choice = find_model(self.selected_model, self.settings.models)
        return choice.name if choice else self.selected_model

    def toggle_model_dropdown(self) -> None:
        self.show_model_dropdown = not self.show_model_dropdown

    def select_model(self, model_id: str) -> None:
        """Pick a model for the next request; a pending file is not resubmitted."""
        if find_model(model_id, self.settings.models) is None:
            raise ValueError(f"Unknown model: {model_id}")
        self.selected_model = model_id
        self.show_model_dropdown = False

    # -- text ------------------------------------------------------------

    def set_text(self, text: str) -> None:
        """Replace the typed text and schedule a debounced count. Ignored while a file is selected."""
        if self.file is not None:
            return
        self.text = text
        self._debounced(text)

    async def analyze_text(self, text: str) -> None:
        seq = self._next_seq()
        if not text.strip():
            self.stats = TokenResult()
            self.error = None
            self.is_processing = False
            return

        self.is_processing = True
        try:
            resp = await self._http.post(
                self.settings.api_url,
                json={"text": text, "model": self.selected_model},
            )
            resp.raise_for_status()
            data = CountResponse.model_validate(resp.json())
        except (httpx.HTTPError, ValueError) as e:
            if self._is_current(seq):
                LOGGER.error("Token counting error: %s", e)
                self.error = TEXT_ERROR
                self.stats = TokenResult(char_count=len(text))
        else:
            if self._is_current(seq):
                self.stats = TokenResult(
                    primary_tokens=self._without_overhead(data.input_tokens),
                    secondary_tokens=data.gpt4o_tokens,
                    tertiary_tokens=data.gemini_tokens,
                    char_count=len(text),
                    model_used=data.model,
                )
                self.error = None
            else:
                LOGGER.debug("Discarding stale response for request %s", seq)
        finally:
            if self._is_current(seq):
                self.is_processing = False

    # -- files -----------------------------------------------------------

    def select_file(self, name: str, data: bytes, media_type: str | None = None) -> FileKind:
        """
        Select a file, replacing any typed text.

        Images get a preview built in the background; a failed preview does
        not affect counting.

        Returns:
            The file's kind.
        """
        media_type = media_type or guess_media_type(name)
        kind = classify_file(name, media_type)
        self._debounced.cancel()
        self._cancel_preview()
        self._next_seq()

        selected = SelectedFile(name, data, media_type)
        self.file = selected
        self.file_kind = kind
        self.text = ""
        self.preview = None
        self.error = None
        self.is_processing = False
        self.stats = TokenResult(source_file_name=name)
        if kind is FileKind.IMAGE:
            self._preview_task = asyncio.get_running_loop().create_task(self._load_preview(selected))
        return kind

    async def _load_preview(self, selected: SelectedFile) -> None:
        try:
            preview = await make_preview(selected.data, selected.media_type)
        except ValueError as e:
            LOGGER.warning("Could not build preview for %s: %s", selected.name, e)
            return
        if self.file is selected:
            self.preview = preview

    async def submit_file(self) -> None:
        """Count the selected file now. No-op without a file."""
        selected = self.file
        if selected is None:
            return
        seq = self._next_seq()
        self.is_processing = True
        try:
            resp = await self._http.post(
                self.settings.api_url,
                data={"model": self.selected_model, "fileType": self.file_kind.value},
                files={"file": (selected.name, selected.data, selected.media_type or "application/octet-stream")},
            )
            resp.raise_for_status()
            data = CountResponse.model_validate(resp.json())
        except (httpx.HTTPError, ValueError) as e:
            if self._is_current(seq):
                LOGGER.error("Token counting error: %s", e)
                self.error = FILE_ERROR
                self.stats = TokenResult()
        else:
            if self._is_current(seq):
                self.stats = TokenResult(
                    primary_tokens=self._without_overhead(data.input_tokens),
                    secondary_tokens=data.gpt4o_tokens,
                    tertiary_tokens=data.gemini_tokens,
                    char_count=data.text_chars if data.text_chars is not None else data.file_chars,
                    model_used=data.model,
                    source_file_name=selected.name,
                )
                self.error = None
        finally:
            if self._is_current(seq):
                self.is_processing = False

    def clear_file(self) -> None:
        self._cancel_preview()
        self._next_seq()
        self.file = None
        self.file_kind = FileKind.UNKNOWN
        self.preview = None
        self.is_processing = False
        self.stats = TokenResult()

    # -- display ---------------------------------------------------------

    def metrics(self) -> list[MetricRow]:
        return metric_rows(
            self.stats,
            is_processing=self.is_processing,
            file_kind=self.file_kind if self.file is not None else FileKind.TEXT,
            model_name=self.selected_model_name,
        )

    # -- lifecycle -------------------------------------------------------

    async def settle(self) -> None:
        """Wait for a pending debounced count and any preview to finish."""
        await self._debounced.flush()
        if self._preview_task is not None:
            await self._preview_task

    async def aclose(self) -> None:
        await self._debounced.aclose()
        self._cancel_preview()
        if self._owns_http:
            await self._http.aclose()

    # -- helpers ---------------------------------------------------------

    def _next_seq(self) -> int:
        self._seq += 1
        return self._seq

    def _is_current(self, seq: int) -> bool:
        return seq == self._seq

    def _without_overhead(self, input_tokens: int) -> int:
        return max(input_tokens - self.settings.message_overhead_tokens, 0)

    def _cancel_preview(self) -> None:
        if self._preview_task is not None and not self._preview_task.done():
            self._preview_task.cancel()
        self._preview_task = None
