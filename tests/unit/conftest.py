"""Unit-specific fixtures (no I/O beyond in-memory SQLite)."""

from __future__ import annotations

import aiosqlite
import pytest

from libcurator.cache import ResponseCache


@pytest.fixture()
async def cache():
    """In-memory SQLite response cache for unit tests."""
    async with aiosqlite.connect(":memory:") as db:
        c = ResponseCache(db, ttl_minutes=60)
        await c.init_db()
        yield c
