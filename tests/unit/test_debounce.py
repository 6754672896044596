"""Unit tests for libcurator.debounce."""

from __future__ import annotations

import asyncio

import pytest

from libcurator.debounce import SearchDebouncer

DELAY = 0.05


class TestSearchDebouncer:
    async def test_commits_after_quiet_period(self) -> None:
        commits: list[str] = []
        debouncer = SearchDebouncer(commits.append, delay=DELAY)

        debouncer.push("lef")
        assert commits == []
        assert debouncer.pending is True

        await asyncio.sleep(DELAY * 3)
        assert commits == ["lef"]
        assert debouncer.pending is False

    async def test_burst_produces_single_commit(self) -> None:
        commits: list[str] = []
        debouncer = SearchDebouncer(commits.append, delay=DELAY)

        for text in ("l", "le", "lef", "left"):
            debouncer.push(text)
            await asyncio.sleep(DELAY / 5)

        await asyncio.sleep(DELAY * 3)
        assert commits == ["left"]

    async def test_each_quiet_period_commits_once(self) -> None:
        commits: list[str] = []
        debouncer = SearchDebouncer(commits.append, delay=DELAY)

        debouncer.push("react")
        await asyncio.sleep(DELAY * 3)
        debouncer.push("react-dom")
        await asyncio.sleep(DELAY * 3)

        assert commits == ["react", "react-dom"]

    async def test_empty_text_commits_immediately(self) -> None:
        commits: list[str] = []
        debouncer = SearchDebouncer(commits.append, delay=DELAY)

        debouncer.push("left")
        debouncer.push("")

        assert commits == [""]
        assert debouncer.pending is False
        await asyncio.sleep(DELAY * 3)
        assert commits == [""]  # the armed "left" commit was cancelled

    async def test_cancel_drops_pending_commit(self) -> None:
        commits: list[str] = []
        debouncer = SearchDebouncer(commits.append, delay=DELAY)

        debouncer.push("left")
        debouncer.cancel()
        await asyncio.sleep(DELAY * 3)

        assert commits == []

    async def test_flush_commits_now(self) -> None:
        commits: list[str] = []
        debouncer = SearchDebouncer(commits.append, delay=10)

        debouncer.push("left")
        debouncer.flush()

        assert commits == ["left"]
        assert debouncer.pending is False

    async def test_flush_without_pending_is_noop(self) -> None:
        commits: list[str] = []
        SearchDebouncer(commits.append, delay=DELAY).flush()
        assert commits == []

    async def test_text_tracks_live_value(self) -> None:
        debouncer = SearchDebouncer(lambda _: None, delay=DELAY)
        debouncer.push("le")
        debouncer.push("lef")
        assert debouncer.text == "lef"
        debouncer.cancel()

    async def test_coroutine_callback_is_awaited(self) -> None:
        commits: list[str] = []

        async def on_commit(text: str) -> None:
            await asyncio.sleep(0)
            commits.append(text)

        debouncer = SearchDebouncer(on_commit, delay=DELAY)
        debouncer.push("left")
        await asyncio.sleep(DELAY * 2)
        await debouncer.aclose()

        assert commits == ["left"]

    async def test_failing_callback_does_not_break_debouncer(self) -> None:
        calls: list[str] = []

        async def on_commit(text: str) -> None:
            calls.append(text)
            raise RuntimeError("boom")

        debouncer = SearchDebouncer(on_commit, delay=0)
        debouncer.push("a")
        await asyncio.sleep(0.01)
        debouncer.push("b")
        await asyncio.sleep(0.01)
        await debouncer.aclose()

        assert calls == ["a", "b"]

    def test_negative_delay_rejected(self) -> None:
        with pytest.raises(ValueError):
            SearchDebouncer(lambda _: None, delay=-1)
