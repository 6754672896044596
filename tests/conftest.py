"""Shared fixtures: registry URL and packument builders."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

REGISTRY = "https://registry.npmjs.org"

PackumentFactory = Callable[..., dict[str, Any]]


def _packument(
    name: str,
    versions: dict[str, dict[str, Any]] | None = None,
    *,
    latest: str | None = None,
    description: str | None = None,
    repository: Any = None,
) -> dict[str, Any]:
    versions = versions if versions is not None else {"1.0.0": {}}
    data: dict[str, Any] = {
        "name": name,
        "dist-tags": {"latest": latest or list(versions)[-1]},
        "versions": {
            v: {
                "name": name,
                "version": v,
                "dist": {"tarball": f"{REGISTRY}/{name}/-/{name}-{v}.tgz"},
                **fields,
            }
            for v, fields in versions.items()
        },
    }
    if description is not None:
        data["description"] = description
    if repository is not None:
        data["repository"] = repository
    return data


@pytest.fixture()
def make_packument() -> PackumentFactory:
    return _packument


@pytest.fixture()
def left_pad_packument() -> dict[str, Any]:
    return _packument(
        "left-pad",
        {
            "1.2.0": {"license": "WTFPL", "author": {"name": "azer"}},
            "1.3.0": {"license": "WTFPL", "author": {"name": "azer"}},
        },
        description="String left pad",
        repository={"type": "git", "url": "git+https://github.com/stevemao/left-pad.git"},
    )


@pytest.fixture()
def react_packument() -> dict[str, Any]:
    return _packument(
        "react",
        {
            "18.2.0": {"license": "MIT"},
            "18.3.1": {"license": "MIT"},
        },
        description="React is a JavaScript library for building user interfaces.",
        repository={"type": "git", "url": "https://github.com/facebook/react.git"},
    )


def search_response(*names: str) -> dict[str, Any]:
    return {"objects": [{"package": {"name": n, "version": "1.0.0"}} for n in names]}


@pytest.fixture()
def make_search_response() -> Callable[..., dict[str, Any]]:
    return search_response
