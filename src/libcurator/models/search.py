from __future__ import annotations

from dataclasses import dataclass, field

from libcurator.models.package import PackageRecord


@dataclass(frozen=True)
class SearchResult:
    candidates: list[str] = field(default_factory=list)
    records: list[PackageRecord] = field(default_factory=list)


@dataclass(frozen=True)
class SearchSession:
    """State of one committed query.

    Replaced wholesale on each commit; never mutated after publication.
    """

    generation: int
    query: str
    candidates: list[str] = field(default_factory=list)
    records: list[PackageRecord] = field(default_factory=list)
    loading: bool = False

    def find(self, name: str) -> PackageRecord | None:
        return next((r for r in self.records if r.name == name), None)


EMPTY_SESSION = SearchSession(generation=0, query="")
