"""Search npm, inspect package metadata and curate an approval list."""

from __future__ import annotations

from libcurator.curator import Curator
from libcurator.errors import ErrorCode, LibCuratorError
from libcurator.models import PackageRecord, PackageStatus

__version__ = "0.1.0"

__all__ = [
    "Curator",
    "ErrorCode",
    "LibCuratorError",
    "PackageRecord",
    "PackageStatus",
]
