"""The curated table of packages.

Keyed by package name alone: the first record inserted for a name wins and
later records with the same name are dropped, whatever their version.
Insertion order is display order.

Status workflow::

    pending --accept--> accepted
    pending --reject--> rejected

``accepted`` and ``rejected`` are terminal. A transition out of them is
refused and leaves the entry untouched.

Both mutators are plain synchronous methods, so under asyncio no other
event can interleave with one of them halfway through.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

import structlog

from libcurator.models.package import PackageRecord, PackageStatus

log = structlog.get_logger()

_TRANSITIONS: dict[PackageStatus, frozenset[PackageStatus]] = {
    PackageStatus.PENDING: frozenset({PackageStatus.ACCEPTED, PackageStatus.REJECTED}),
    PackageStatus.ACCEPTED: frozenset(),
    PackageStatus.REJECTED: frozenset(),
}


class WorkingSet:
    def __init__(self) -> None:
        self._records: dict[str, PackageRecord] = {}

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def insert_batch(self, records: Iterable[PackageRecord]) -> list[PackageRecord]:
        """Append records whose name is not present yet; return those appended."""
        added: list[PackageRecord] = []
        for record in records:
            if record.name in self._records:
                log.debug(
                    "working_set_duplicate_dropped", name=record.name, version=record.version
                )
                continue
            stored = record.model_copy()
            self._records[record.name] = stored
            added.append(stored)
        if added:
            log.info("working_set_inserted", names=[r.name for r in added], size=len(self))
        return added

    def set_status(self, name: str, status: PackageStatus) -> bool:
        """Move ``name`` to ``status``. Returns True if the entry changed."""
        status = PackageStatus(status)
        current = self._records.get(name)
        if current is None:
            return False
        if status not in _TRANSITIONS[current.status]:
            log.warning(
                "status_transition_refused",
                name=name,
                current=current.status.value,
                requested=status.value,
            )
            return False
        # Reassigning an existing key keeps its position in the dict.
        self._records[name] = current.with_status(status)
        log.info("status_changed", name=name, status=status.value)
        return True

    def accept(self, name: str) -> bool:
        return self.set_status(name, PackageStatus.ACCEPTED)

    def reject(self, name: str) -> bool:
        return self.set_status(name, PackageStatus.REJECTED)

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    def rows(self) -> tuple[PackageRecord, ...]:
        return tuple(self._records.values())

    def names(self) -> list[str]:
        return list(self._records)

    def get(self, name: str) -> PackageRecord | None:
        return self._records.get(name)

    def can_respond(self, name: str) -> bool:
        """Whether accept/reject should still be offered for ``name``."""
        record = self._records.get(name)
        return record is not None and bool(_TRANSITIONS[record.status])

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __iter__(self) -> Iterator[PackageRecord]:
        return iter(self.rows())
