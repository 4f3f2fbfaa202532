from __future__ import annotations

import asyncio

from claude_tokenizer.client.debounce import Debouncer


def test_only_last_call_fires() -> None:
    fired: list[str] = []

    async def record(value: str) -> None:
        fired.append(value)

    async def scenario() -> None:
        deb = Debouncer(record, 0.02)
        deb("a")
        deb("b")
        deb("c")
        assert deb.pending
        await deb.flush()
        assert fired == ["c"]
        assert not deb.pending

    asyncio.run(scenario())


def test_cancel_invalidates_pending_call() -> None:
    fired: list[str] = []

    async def record(value: str) -> None:
        fired.append(value)

    async def scenario() -> None:
        deb = Debouncer(record, 0.01)
        deb("a")
        before = deb.version
        deb.cancel()
        assert deb.version == before + 1
        await asyncio.sleep(0.03)
        assert fired == []

    asyncio.run(scenario())


def test_calls_after_quiet_window_each_fire() -> None:
    fired: list[int] = []

    async def record(value: int) -> None:
        fired.append(value)

    async def scenario() -> None:
        deb = Debouncer(record, 0.01)
        deb(1)
        await deb.flush()
        deb(2)
        await deb.flush()
        assert fired == [1, 2]

    asyncio.run(scenario())


def test_aclose_cancels_running_callback() -> None:
    started = []

    async def slow(_: object) -> None:
        started.append(True)
        await asyncio.sleep(10)

    async def scenario() -> None:
        deb = Debouncer(slow, 0)
        deb(None)
        await asyncio.sleep(0.01)
        assert started == [True]
        await deb.aclose()

    asyncio.run(scenario())


def test_aclose_cancels_every_callback_still_running() -> None:
    finished: list[int] = []
    cancelled: list[int] = []

    async def slow(value: int) -> None:
        try:
            await asyncio.sleep(10)
            finished.append(value)
        except asyncio.CancelledError:
            cancelled.append(value)
            raise

    async def scenario() -> None:
        deb = Debouncer(slow, 0)
        deb(1)
        await asyncio.sleep(0.01)
        deb(2)
        await asyncio.sleep(0.01)
        await deb.aclose()
        assert sorted(cancelled) == [1, 2]
        assert finished == []

    asyncio.run(scenario())


def test_flush_waits_for_earlier_callbacks_too() -> None:
    finished: list[int] = []

    async def slow(value: int) -> None:
        await asyncio.sleep(0.05 if value == 1 else 0.01)
        finished.append(value)

    async def scenario() -> None:
        deb = Debouncer(slow, 0)
        deb(1)
        await asyncio.sleep(0.01)
        deb(2)
        await deb.flush()
        assert sorted(finished) == [1, 2]

    asyncio.run(scenario())
