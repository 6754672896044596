"""Search orchestration: committed query → candidate names → fetched records.

Each ``commit`` is tagged with a generation number. Only the newest
generation may publish its results; a slow older search that finishes after
a newer one is dropped on completion. Nothing is cancelled in flight.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from libcurator.errors import LibCuratorError
from libcurator.fetcher import failures, successes
from libcurator.models.search import EMPTY_SESSION, SearchResult, SearchSession

if TYPE_CHECKING:
    from collections.abc import Callable

    from libcurator.fetcher import MetadataFetcher
    from libcurator.registry import RegistryClient

log = structlog.get_logger()


class SearchOrchestrator:
    def __init__(
        self,
        registry: RegistryClient,
        fetcher: MetadataFetcher,
        *,
        size: int = 10,
        on_publish: Callable[[SearchSession], None] | None = None,
    ) -> None:
        self._registry = registry
        self._fetcher = fetcher
        self._size = size
        self._on_publish = on_publish
        self._generation = 0
        self._current = EMPTY_SESSION

    @property
    def current(self) -> SearchSession:
        """The most recently published session."""
        return self._current

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def loading(self) -> bool:
        return self._current.loading

    async def search(self, query: str) -> SearchResult:
        """Resolve ``query`` to candidates and their records. Never raises."""
        query = query.strip()
        if not query:
            return SearchResult()

        try:
            candidates = await self._registry.search_names(query, self._size)
        except LibCuratorError as exc:
            log.warning("search_failed", query=query, code=exc.code.value, reason=exc.message)
            return SearchResult()

        if not candidates:
            log.info("search_no_candidates", query=query)
            return SearchResult()

        outcomes = await self._fetcher.fetch_many([(name, None) for name in candidates])
        records = successes(outcomes)
        log.info(
            "search_complete",
            query=query,
            candidates=len(candidates),
            fetched=len(records),
            failed=len(failures(outcomes)),
        )
        return SearchResult(candidates=candidates, records=records)

    async def commit(self, query: str) -> SearchSession:
        """Run a committed query and publish it unless a newer one superseded it.

        Returns this call's finished session either way.
        """
        self._generation += 1
        generation = self._generation

        if not query.strip():
            session = SearchSession(generation=generation, query=query)
            self._publish(session)
            return session

        self._publish(SearchSession(generation=generation, query=query, loading=True))
        session = SearchSession(generation=generation, query=query)
        try:
            result = await self.search(query)
            session = SearchSession(
                generation=generation,
                query=query,
                candidates=result.candidates,
                records=result.records,
            )
        finally:
            # An interrupted search still ends the loading state it started.
            if generation == self._generation:
                self._publish(session)
            else:
                log.debug(
                    "search_result_discarded",
                    query=query,
                    generation=generation,
                    current=self._generation,
                )
        return session

    def _publish(self, session: SearchSession) -> None:
        self._current = session
        if self._on_publish is not None:
            self._on_publish(session)
