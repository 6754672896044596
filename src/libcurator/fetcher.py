"""Package metadata fetching and normalization.

``MetadataFetcher.fetch`` never raises: every failure (network, HTTP status,
bad JSON, unknown package or version) comes back as a ``FetchFailure`` so one
bad package cannot sink the batch it belongs to. There are no retries.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from libcurator.errors import ErrorCode, LibCuratorError
from libcurator.models.package import (
    NO_DESCRIPTION,
    NOT_AVAILABLE,
    UNKNOWN_AUTHOR,
    FetchFailure,
    PackageRecord,
)

if TYPE_CHECKING:
    from libcurator.registry import RegistryClient

log = structlog.get_logger()

FetchOutcome = PackageRecord | FetchFailure


# ---------------------------------------------------------------------------
# Field extraction
# ---------------------------------------------------------------------------


def _non_empty_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def extract_repository_url(value: Any) -> str | None:
    """``repository`` may be a bare string or ``{"type": ..., "url": ...}``."""
    if isinstance(value, dict):
        value = value.get("url")
    url = _non_empty_str(value)
    if url is None:
        return None
    return re.sub(r"^git\+", "", url)


def extract_licence(value: Any) -> str | None:
    """``license`` is normally an SPDX string; legacy packages use ``{"type": ...}``."""
    if isinstance(value, dict):
        value = value.get("type")
    return _non_empty_str(value)


def extract_author(value: Any) -> str | None:
    """``author`` may be ``{"name": ...}`` or a ``"Name <email> (url)"`` string."""
    if isinstance(value, dict):
        value = value.get("name")
    return _non_empty_str(value)


def _build_record(
    name: str,
    version: str,
    *,
    repository: Any,
    tarball: Any,
    licence: Any,
    author: Any,
    description: Any,
) -> PackageRecord:
    return PackageRecord(
        name=name,
        version=version,
        repository_url=extract_repository_url(repository) or NOT_AVAILABLE,
        tarball_url=_non_empty_str(tarball) or NOT_AVAILABLE,
        licence=extract_licence(licence) or NOT_AVAILABLE,
        author=extract_author(author) or UNKNOWN_AUTHOR,
        description=_non_empty_str(description) or NO_DESCRIPTION,
    )


def _dist_tarball(doc: dict[str, Any]) -> Any:
    dist = doc.get("dist")
    return dist.get("tarball") if isinstance(dist, dict) else None


def normalize_packument(
    data: dict[str, Any], requested_name: str, version: str | None = None
) -> PackageRecord:
    """Build a record from a full packument (``GET <registry>/<name>``).

    ``version`` defaults to the ``latest`` dist-tag. Description and repository
    come from the top level; tarball, licence and author from the version entry.
    """
    if not version:
        dist_tags = data.get("dist-tags")
        version = dist_tags.get("latest") if isinstance(dist_tags, dict) else None
        if not isinstance(version, str) or not version:
            raise LibCuratorError(
                ErrorCode.INVALID_RESPONSE, f"{requested_name!r} has no 'latest' dist-tag"
            )

    versions = data.get("versions")
    version_data = versions.get(version) if isinstance(versions, dict) else None
    if not isinstance(version_data, dict):
        raise LibCuratorError(
            ErrorCode.VERSION_NOT_FOUND, f"{requested_name!r} has no version {version!r}"
        )

    return _build_record(
        _non_empty_str(data.get("name")) or requested_name,
        version,
        repository=data.get("repository") or version_data.get("repository"),
        tarball=_dist_tarball(version_data),
        licence=version_data.get("license"),
        author=version_data.get("author"),
        description=data.get("description") or version_data.get("description"),
    )


def normalize_version_document(data: dict[str, Any], requested_name: str) -> PackageRecord:
    """Build a record from a version document (``GET <registry>/<name>/<version>``)."""
    version = _non_empty_str(data.get("version"))
    if version is None:
        raise LibCuratorError(
            ErrorCode.INVALID_RESPONSE, f"Version document for {requested_name!r} has no version"
        )
    return _build_record(
        _non_empty_str(data.get("name")) or requested_name,
        version,
        repository=data.get("repository"),
        tarball=_dist_tarball(data),
        licence=data.get("license"),
        author=data.get("author"),
        description=data.get("description"),
    )


# ---------------------------------------------------------------------------
# Fetcher
# ---------------------------------------------------------------------------


class MetadataFetcher:
    """Fetches one package's metadata and normalizes it to a ``PackageRecord``.

    By default the full packument is read for both the latest and the pinned
    version path. With ``use_version_endpoint=True`` a pinned version is read
    from the smaller version-scoped document instead.
    """

    def __init__(self, registry: RegistryClient, *, use_version_endpoint: bool = False) -> None:
        self._registry = registry
        self._use_version_endpoint = use_version_endpoint

    async def fetch(self, name: str, version: str | None = None) -> FetchOutcome:
        version = version.strip() if version else None
        try:
            if version and self._use_version_endpoint:
                data = await self._registry.get_version(name, version)
                return normalize_version_document(data, name)
            data = await self._registry.get_packument(name)
            return normalize_packument(data, name, version)
        except LibCuratorError as exc:
            log.warning(
                "package_fetch_failed",
                name=name,
                version=version,
                code=exc.code.value,
                reason=exc.message,
            )
            return FetchFailure(
                name=name, version=version, code=exc.code.value, message=exc.message
            )
        except ValidationError as exc:
            log.warning("package_fetch_invalid", name=name, version=version, reason=str(exc))
            return FetchFailure(
                name=name,
                version=version,
                code=ErrorCode.INVALID_RESPONSE.value,
                message=f"Metadata for {name!r} failed validation",
            )

    async def fetch_many(
        self,
        requests: Sequence[tuple[str, str | None]],
        max_concurrency: int | None = None,
    ) -> list[FetchOutcome]:
        """Fetch every ``(name, version)`` pair concurrently.

        Outcomes are returned in issue order regardless of completion order.
        ``max_concurrency`` caps how many requests are in flight at once.
        """
        if not requests:
            return []

        semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

        async def _one(name: str, version: str | None) -> FetchOutcome:
            if semaphore is None:
                return await self.fetch(name, version)
            async with semaphore:
                return await self.fetch(name, version)

        return list(await asyncio.gather(*(_one(n, v) for n, v in requests)))


def successes(outcomes: Sequence[FetchOutcome]) -> list[PackageRecord]:
    """Drop failures, keeping the order of the successful records."""
    return [o for o in outcomes if isinstance(o, PackageRecord)]


def failures(outcomes: Sequence[FetchOutcome]) -> list[FetchFailure]:
    return [o for o in outcomes if isinstance(o, FetchFailure)]
