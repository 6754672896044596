from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator

NOT_AVAILABLE = "N/A"
UNKNOWN_AUTHOR = "Unknown"
NO_DESCRIPTION = "No description"


class PackageStatus(StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class PackageRecord(BaseModel):
    """Snapshot of one package as published at fetch time.

    Frozen: a status change yields a new snapshot via ``with_status`` and the
    working set swaps it in at the same position.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    repository_url: str = NOT_AVAILABLE
    tarball_url: str = NOT_AVAILABLE
    licence: str = NOT_AVAILABLE
    author: str = UNKNOWN_AUTHOR
    description: str = NO_DESCRIPTION
    status: PackageStatus = PackageStatus.PENDING

    @field_validator("name", "version")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    def with_status(self, status: PackageStatus) -> PackageRecord:
        return self.model_copy(update={"status": status})


class FetchFailure(BaseModel):
    """Failure marker for one package fetch. Never raised."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str | None
    code: str  # ErrorCode value
    message: str
