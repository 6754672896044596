"""Bulk import from a ``package.json``-style dependency manifest.

Manifest-level problems are fail-closed: an unsupported file type, bytes that
are not a JSON object, or a document without a ``dependencies`` map abort the
whole import and leave the working set untouched. Individual package fetch
failures inside a valid manifest are absorbed; the rest of the batch is kept.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import structlog

from libcurator.errors import ErrorCode, LibCuratorError
from libcurator.fetcher import failures, successes
from libcurator.models.manifest import ImportReport, ManifestEntry

if TYPE_CHECKING:
    from collections.abc import Iterable

    from libcurator.fetcher import MetadataFetcher
    from libcurator.working_set import WorkingSet

log = structlog.get_logger()

JSON_MEDIA_TYPE = "application/json"


def _base_media_type(media_type: str | None) -> str:
    return (media_type or "").split(";", 1)[0].strip().lower()


def _is_absent(value: Any) -> bool:
    """Falsy values other than an empty map count as a missing key."""
    return not value and not isinstance(value, dict)


def _parse_dependency_map(value: Any, field: str) -> list[ManifestEntry]:
    if not isinstance(value, dict):
        raise LibCuratorError(
            ErrorCode.MALFORMED_MANIFEST, f"'{field}' must map package names to versions"
        )
    entries = []
    for name, spec in value.items():
        if not isinstance(spec, str):
            raise LibCuratorError(
                ErrorCode.MALFORMED_MANIFEST,
                f"Version for {name!r} in '{field}' must be a string",
            )
        entries.append(ManifestEntry(name=name, version_spec=spec))
    return entries


def parse_manifest(
    document: bytes,
    media_type: str | None,
    *,
    accepted_media_types: Iterable[str] = (JSON_MEDIA_TYPE,),
    include_dev_dependencies: bool = False,
) -> list[ManifestEntry]:
    """Validate and parse a manifest into entries, in map order.

    Raises ``LibCuratorError`` with ``UNSUPPORTED_FILE_TYPE``,
    ``MALFORMED_MANIFEST`` or ``NO_DEPENDENCIES``.
    """
    if _base_media_type(media_type) not in {_base_media_type(t) for t in accepted_media_types}:
        raise LibCuratorError(
            ErrorCode.UNSUPPORTED_FILE_TYPE,
            f"Please upload a valid JSON file (got {media_type or 'unknown type'})",
        )

    try:
        data = json.loads(document.decode("utf-8-sig"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise LibCuratorError(
            ErrorCode.MALFORMED_MANIFEST,
            "There was an error processing the JSON file. Please make sure it is valid.",
        ) from exc

    if not isinstance(data, dict):
        raise LibCuratorError(
            ErrorCode.MALFORMED_MANIFEST, "The manifest must be a JSON object"
        )

    dependencies = data.get("dependencies")
    dev_dependencies = data.get("devDependencies") if include_dev_dependencies else None
    if _is_absent(dependencies) and _is_absent(dev_dependencies):
        raise LibCuratorError(
            ErrorCode.NO_DEPENDENCIES, "The JSON file does not contain any dependencies."
        )

    entries = []
    if not _is_absent(dependencies):
        entries.extend(_parse_dependency_map(dependencies, "dependencies"))
    if not _is_absent(dev_dependencies):
        seen = {e.name for e in entries}
        entries.extend(
            e
            for e in _parse_dependency_map(dev_dependencies, "devDependencies")
            if e.name not in seen
        )
    return entries


class ManifestImporter:
    def __init__(
        self,
        fetcher: MetadataFetcher,
        working_set: WorkingSet,
        *,
        max_concurrency: int | None = 8,
        accepted_media_types: Iterable[str] = (JSON_MEDIA_TYPE,),
        include_dev_dependencies: bool = False,
    ) -> None:
        self._fetcher = fetcher
        self._working_set = working_set
        self._max_concurrency = max_concurrency
        self._accepted_media_types = tuple(accepted_media_types)
        self._include_dev_dependencies = include_dev_dependencies

    def parse(self, document: bytes, media_type: str | None) -> list[ManifestEntry]:
        return parse_manifest(
            document,
            media_type,
            accepted_media_types=self._accepted_media_types,
            include_dev_dependencies=self._include_dev_dependencies,
        )

    async def import_document(self, document: bytes, media_type: str | None) -> ImportReport:
        """Parse, fetch every entry, and merge the successes into the working set."""
        try:
            entries = self.parse(document, media_type)
        except LibCuratorError as exc:
            log.warning("manifest_rejected", code=exc.code.value, reason=exc.message)
            raise

        outcomes = await self._fetcher.fetch_many(
            [(entry.name, entry.version_hint) for entry in entries],
            max_concurrency=self._max_concurrency,
        )
        records = successes(outcomes)
        failed = [f.name for f in failures(outcomes)]
        added = self._working_set.insert_batch(records)

        log.info(
            "manifest_imported",
            entries=len(entries),
            fetched=len(records),
            failed=len(failed),
            added=len(added),
        )
        return ImportReport(
            entries=entries,
            records=records,
            failed=failed,
            added=[r.name for r in added],
        )
