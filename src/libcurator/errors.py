"""Error types for libcurator.

``LibCuratorError`` is the only exception that crosses a component boundary.
It carries a machine-readable ``ErrorCode`` so the rendering shell can decide
how to present it, and a ``recoverable`` flag telling the caller whether a
retry could succeed.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    # Per-package fetch failures (absorbed at batch level)
    FETCH_FAILED = "FETCH_FAILED"
    PACKAGE_NOT_FOUND = "PACKAGE_NOT_FOUND"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
    INVALID_RESPONSE = "INVALID_RESPONSE"

    # Search endpoint failure (absorbed by the orchestrator)
    SEARCH_FAILED = "SEARCH_FAILED"

    # Manifest import failures (fail-closed, surfaced to the user)
    MALFORMED_MANIFEST = "MALFORMED_MANIFEST"
    NO_DEPENDENCIES = "NO_DEPENDENCIES"
    UNSUPPORTED_FILE_TYPE = "UNSUPPORTED_FILE_TYPE"

    NO_SELECTION = "NO_SELECTION"


class LibCuratorError(Exception):
    def __init__(self, code: ErrorCode, message: str, *, recoverable: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "recoverable": self.recoverable,
            }
        }

    def __repr__(self) -> str:
        return f"LibCuratorError(code={self.code.value!r}, message={self.message!r})"
