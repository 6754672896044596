"""Entry point for the rendering shell.

``Curator`` wires the working set, search pipeline and manifest importer
together and exposes the actions a UI needs: typing into the search box,
picking a candidate, adding it (optionally at an edited version), importing a
manifest and accepting or rejecting rows.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite
import structlog

from libcurator.cache import ResponseCache
from libcurator.config import CacheSettings, Settings
from libcurator.debounce import SearchDebouncer
from libcurator.errors import ErrorCode, LibCuratorError
from libcurator.fetcher import MetadataFetcher
from libcurator.logging_config import configure_logging
from libcurator.manifest import ManifestImporter
from libcurator.models.manifest import ImportReport
from libcurator.models.package import FetchFailure, PackageRecord
from libcurator.models.search import SearchSession
from libcurator.registry import RegistryClient, build_http_client
from libcurator.search import SearchOrchestrator
from libcurator.working_set import WorkingSet

log = structlog.get_logger()


@asynccontextmanager
async def _open_cache(settings: CacheSettings) -> AsyncIterator[ResponseCache | None]:
    if not settings.enabled:
        yield None
        return

    db_path = Path(settings.db_path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    async with aiosqlite.connect(db_path) as db:
        cache = ResponseCache(db, ttl_minutes=settings.ttl_minutes)
        await cache.init_db()
        await cache.cleanup_expired()
        log.info("response_cache_opened", db_path=str(db_path))
        yield cache


class Curator:
    def __init__(
        self,
        registry: RegistryClient,
        settings: Settings | None = None,
        *,
        fetcher: MetadataFetcher | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.working_set = WorkingSet()
        self.fetcher = fetcher or MetadataFetcher(
            registry, use_version_endpoint=self.settings.registry.use_version_endpoint
        )
        self.search = SearchOrchestrator(
            registry, self.fetcher, size=self.settings.registry.search_size
        )
        self.debouncer = SearchDebouncer(
            self.commit_query, delay=self.settings.search.debounce_ms / 1000
        )
        self.importer = ManifestImporter(
            self.fetcher,
            self.working_set,
            max_concurrency=self.settings.manifest.max_concurrency,
            accepted_media_types=self.settings.manifest.accepted_media_types,
            include_dev_dependencies=self.settings.manifest.include_dev_dependencies,
        )
        self._selected: PackageRecord | None = None

    @classmethod
    @asynccontextmanager
    async def open(cls, settings: Settings | None = None) -> AsyncIterator[Curator]:
        """Build a Curator with its HTTP client and response cache, closing both on exit.

        Also applies the ``logging`` section of ``settings`` to structlog.
        """
        settings = settings or Settings()
        configure_logging(settings.logging)
        async with (
            build_http_client(settings.registry) as client,
            _open_cache(settings.cache) as cache,
        ):
            curator = cls(RegistryClient(client, settings.registry.url, cache), settings)
            try:
                yield curator
            finally:
                await curator.debouncer.aclose()

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def type_query(self, text: str) -> None:
        """Feed one keystroke's worth of input through the debouncer."""
        self.debouncer.push(text)
        self._selected = next((r for r in self.search.current.records if r.name == text), None)

    async def commit_query(self, query: str) -> SearchSession:
        """Run ``query`` now, bypassing the debounce delay."""
        return await self.search.commit(query)

    @property
    def search_session(self) -> SearchSession:
        return self.search.current

    @property
    def loading(self) -> bool:
        return self.search.loading

    @property
    def options(self) -> list[str]:
        """Names offered in the dropdown: the candidates whose metadata was fetched.

        Unlike ``search_session.candidates``, names whose fetch failed are left out.
        """
        return [r.name for r in self.search.current.records]

    # ------------------------------------------------------------------
    # Selection and adding
    # ------------------------------------------------------------------

    def select(self, name: str) -> PackageRecord | None:
        self._selected = self.search.current.find(name)
        return self._selected

    def clear_selection(self) -> None:
        self._selected = None

    @property
    def selected(self) -> PackageRecord | None:
        return self._selected

    @property
    def selected_version(self) -> str:
        """Version pre-filled in the editable version field."""
        return self._selected.version if self._selected is not None else ""

    async def add_selected(self, version: str | None = None) -> PackageRecord | None:
        """Re-fetch the selected package at ``version`` and add it to the table.

        Returns the record now in the table for that name, or None if the
        fetch failed. Raises ``NO_SELECTION`` when nothing is selected.
        """
        if self._selected is None:
            raise LibCuratorError(ErrorCode.NO_SELECTION, "No search result is selected")

        name = self._selected.name
        outcome = await self.fetcher.fetch(name, version or None)
        if isinstance(outcome, FetchFailure):
            return None

        self.working_set.insert_batch([outcome])
        self._selected = None
        return self.working_set.get(outcome.name)

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    async def import_manifest(self, document: bytes, media_type: str | None) -> ImportReport:
        return await self.importer.import_document(document, media_type)

    # ------------------------------------------------------------------
    # Table
    # ------------------------------------------------------------------

    def accept(self, name: str) -> bool:
        return self.working_set.accept(name)

    def reject(self, name: str) -> bool:
        return self.working_set.reject(name)

    @property
    def rows(self) -> tuple[PackageRecord, ...]:
        return self.working_set.rows()
