"""Integration test fixtures.

Provides a fully wired Curator over a real httpx client whose transport is
intercepted by respx. The response cache is disabled so every test sees the
mocked registry directly.
"""

from __future__ import annotations

import httpx
import pytest
import respx

from libcurator.config import Settings
from libcurator.curator import Curator
from libcurator.registry import RegistryClient

REGISTRY = "https://registry.npmjs.org"


@pytest.fixture()
def settings() -> Settings:
    return Settings(cache={"enabled": False}, search={"debounce_ms": 50})


@pytest.fixture()
def registry_mock():
    with respx.mock(base_url=REGISTRY, assert_all_called=False) as router:
        yield router


@pytest.fixture()
async def curator(settings: Settings, registry_mock: respx.MockRouter):
    async with httpx.AsyncClient() as client:
        c = Curator(RegistryClient(client, settings.registry.url), settings)
        yield c
        await c.debouncer.aclose()
