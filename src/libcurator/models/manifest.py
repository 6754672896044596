from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from libcurator.models.package import PackageRecord


class ManifestEntry(BaseModel):
    """One dependency line from a manifest: name and raw version specifier."""

    model_config = ConfigDict(frozen=True)

    name: str
    version_spec: str

    @property
    def version_hint(self) -> str:
        # Only a single leading caret is stripped. "~1.2.3", ">=1", "*" and
        # similar range expressions are passed to the registry unchanged.
        return self.version_spec.removeprefix("^")


class ImportReport(BaseModel):
    entries: list[ManifestEntry]
    records: list[PackageRecord]  # Successful fetches, manifest order
    failed: list[str]  # Names whose fetch failed
    added: list[str]  # Names appended to the working set (duplicates excluded)
