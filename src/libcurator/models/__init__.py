from __future__ import annotations

from libcurator.models.manifest import ImportReport, ManifestEntry
from libcurator.models.package import (
    NO_DESCRIPTION,
    NOT_AVAILABLE,
    UNKNOWN_AUTHOR,
    FetchFailure,
    PackageRecord,
    PackageStatus,
)
from libcurator.models.search import EMPTY_SESSION, SearchResult, SearchSession

__all__ = [
    # package
    "PackageRecord",
    "PackageStatus",
    "FetchFailure",
    "NOT_AVAILABLE",
    "UNKNOWN_AUTHOR",
    "NO_DESCRIPTION",
    # search
    "SearchResult",
    "SearchSession",
    "EMPTY_SESSION",
    # manifest
    "ManifestEntry",
    "ImportReport",
]
