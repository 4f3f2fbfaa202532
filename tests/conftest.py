"""Shared fakes and fixtures; no test talks to a real vendor."""
from __future__ import annotations

import asyncio
import time
from typing import Any, Sequence

import pytest
from fastapi import FastAPI

from claude_tokenizer.common.config import Settings
from claude_tokenizer.gateway.fastapi_app import create_app
from claude_tokenizer.gateway.vendors import GeminiCounter, Vendors, _Estimator


class FakeAnthropic:
    """Stands in for AnthropicCounter: len(text)//4 + 7 for text, fixed counts for blocks."""

    def __init__(self, fail: bool = False, extra: dict[str, Any] | None = None) -> None:
        self.fail = fail
        self.extra = extra or {}
        self.calls: list[dict[str, Any]] = []

    async def count(self, model: str, content: Any, betas: Sequence[str] = ()) -> dict[str, Any]:
        self.calls.append({"model": model, "content": content, "betas": tuple(betas)})
        if self.fail:
            raise RuntimeError("anthropic is down")
        if isinstance(content, str):
            n = len(content) // 4 + 7
        elif content[0]["type"] == "document":
            n = 1500
        else:
            n = 800
        return {"input_tokens": n, **self.extra}


class FakeEstimator(_Estimator):
    vendor = "fake"

    def __init__(self, value: int | None = None, fail: bool = False, delay: float = 0.0) -> None:
        self.value = value
        self.fail = fail
        self.delay = delay
        self.calls: list[str] = []
        self.started: list[float] = []
        self.finished: list[float] = []

    async def _count(self, text: str) -> int:
        self.calls.append(text)
        self.started.append(time.perf_counter())
        if self.delay:
            await asyncio.sleep(self.delay)
        self.finished.append(time.perf_counter())
        if self.fail:
            raise RuntimeError("estimator is down")
        return self.value if self.value is not None else len(text.split())


@pytest.fixture
def settings() -> Settings:
    return Settings(anthropic_api_key="test-key")


@pytest.fixture
def vendors() -> Vendors:
    return Vendors(
        anthropic=FakeAnthropic(),
        gpt4o=FakeEstimator(),
        gemini=GeminiCounter(api_key=None),
    )


@pytest.fixture
def app(settings: Settings, vendors: Vendors) -> FastAPI:
    return create_app(settings, vendors)
