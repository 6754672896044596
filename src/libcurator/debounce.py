"""Keystroke debouncing for the search box.

A commit fires ``delay`` seconds after the last ``push``. Each new ``push``
cancels the armed timer before arming a fresh one, so a quiet period produces
exactly one commit. Empty text is committed immediately: clearing the search
box clears results without waiting out the delay.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

log = structlog.get_logger()

CommitCallback = Callable[[str], Awaitable[Any] | Any]


class SearchDebouncer:
    def __init__(self, on_commit: CommitCallback, delay: float = 0.5) -> None:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self._on_commit = on_commit
        self._delay = delay
        self._handle: asyncio.TimerHandle | None = None
        self._pending_text: str | None = None
        self._tasks: set[asyncio.Task[Any]] = set()
        self.text = ""

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        """True while a commit is armed and has not fired yet."""
        return self._handle is not None

    def push(self, text: str) -> None:
        """Record the live input value. Must be called from the event loop thread."""
        self.text = text
        self.cancel()
        if not text:
            self._commit(text)
            return
        self._pending_text = text
        self._handle = asyncio.get_running_loop().call_later(self._delay, self._fire)

    def cancel(self) -> None:
        """Drop the armed commit, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._pending_text = None

    def flush(self) -> None:
        """Commit the armed value now instead of waiting for the timer."""
        if self._handle is None or self._pending_text is None:
            return
        text = self._pending_text
        self.cancel()
        self._commit(text)

    async def aclose(self) -> None:
        """Cancel the armed commit and wait for commit callbacks still running."""
        self.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _fire(self) -> None:
        text = self._pending_text
        self._handle = None
        self._pending_text = None
        if text is not None:
            self._commit(text)

    def _commit(self, text: str) -> None:
        log.debug("search_query_committed", query=text)
        result = self._on_commit(text)
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            log.error("search_commit_failed", exc_info=task.exception())
