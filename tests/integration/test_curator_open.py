"""Curator.open: HTTP client and response cache lifecycle."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

import httpx
import pytest
import respx
import structlog

from libcurator.config import LoggingSettings, Settings
from libcurator.curator import Curator
from libcurator.models import PackageRecord

if TYPE_CHECKING:
    from pathlib import Path

REGISTRY = "https://registry.npmjs.org"


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


class TestLogging:
    async def test_open_applies_logging_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        applied: list[LoggingSettings] = []
        monkeypatch.setattr("libcurator.curator.configure_logging", applied.append)
        settings = Settings(cache={"enabled": False}, logging={"level": "DEBUG", "format": "text"})

        async with Curator.open(settings):
            pass

        assert applied == [settings.logging]


class TestCacheDbPath:
    async def test_missing_parent_dirs_are_auto_created(self, tmp_path: Path) -> None:
        deep_path = tmp_path / "a" / "b" / "c" / "registry.db"
        assert not deep_path.parent.exists()

        async with Curator.open(Settings(cache={"db_path": str(deep_path)})):
            pass

        assert deep_path.exists()

    @pytest.mark.skipif(
        os.name == "nt" or (hasattr(os, "getuid") and os.getuid() == 0),
        reason="Permission checks don't apply on Windows or when running as root.",
    )
    async def test_unwriteable_db_path_fails(self, tmp_path: Path) -> None:
        readonly = tmp_path / "readonly"
        readonly.mkdir()
        readonly.chmod(0o555)
        try:
            with pytest.raises(Exception):  # noqa: B017
                async with Curator.open(
                    Settings(cache={"db_path": str(readonly / "registry.db")})
                ):
                    pass
        finally:
            readonly.chmod(0o755)


class TestCachedFetches:
    async def test_repeat_fetch_hits_cache(
        self, tmp_path: Path, left_pad_packument: dict[str, Any]
    ) -> None:
        settings = Settings(cache={"db_path": str(tmp_path / "registry.db")})
        with respx.mock(base_url=REGISTRY) as router:
            route = router.get("/left-pad").mock(
                return_value=httpx.Response(200, json=left_pad_packument)
            )
            async with Curator.open(settings) as curator:
                first = await curator.fetcher.fetch("left-pad")
                second = await curator.fetcher.fetch("left-pad", "1.2.0")

        assert isinstance(first, PackageRecord)
        assert isinstance(second, PackageRecord)
        assert second.version == "1.2.0"
        assert route.call_count == 1

    async def test_cache_disabled_creates_no_db(self, tmp_path: Path) -> None:
        db_path = tmp_path / "registry.db"
        settings = Settings(cache={"enabled": False, "db_path": str(db_path)})
        async with Curator.open(settings) as curator:
            assert curator.rows == ()
        assert not db_path.exists()
