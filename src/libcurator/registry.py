"""npm registry client.

Wraps the three registry endpoints the core consumes:

- ``GET <registry>/-/v1/search?text=<query>&size=<n>``  ranked candidate names
- ``GET <registry>/<name>``                            full packument
- ``GET <registry>/<name>/<version>``                  one version document

Every failure is raised as ``LibCuratorError``; callers decide whether it is
absorbed (per-package fetches) or surfaced.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx
import structlog

from libcurator.errors import ErrorCode, LibCuratorError

if TYPE_CHECKING:
    from libcurator.cache import ResponseCache
    from libcurator.config import RegistrySettings

log = structlog.get_logger()


def build_http_client(settings: RegistrySettings) -> httpx.AsyncClient:
    """Create the shared httpx client used for all registry calls."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"User-Agent": settings.user_agent, "Accept": "application/json"},
        follow_redirects=True,
    )


def package_path(name: str) -> str:
    """URL path segment for a package name. ``@scope/pkg`` becomes ``@scope%2Fpkg``."""
    return quote(name, safe="@")


class RegistryClient:
    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = "https://registry.npmjs.org",
        cache: ResponseCache | None = None,
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._cache = cache

    @property
    def base_url(self) -> str:
        return self._base_url

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def search_names(self, query: str, size: int = 10) -> list[str]:
        """Return up to ``size`` package names for ``query``, in response order."""
        url = f"{self._base_url}/-/v1/search"
        try:
            data = await self._get_json(url, params={"text": query, "size": size})
        except LibCuratorError as exc:
            raise LibCuratorError(
                ErrorCode.SEARCH_FAILED,
                f"Search for {query!r} failed: {exc.message}",
                recoverable=exc.recoverable,
            ) from exc

        objects = data.get("objects") if isinstance(data, dict) else None
        if not isinstance(objects, list):
            raise LibCuratorError(
                ErrorCode.SEARCH_FAILED,
                f"Search response for {query!r} has no 'objects' array",
            )

        names: list[str] = []
        for item in objects:
            package = item.get("package") if isinstance(item, dict) else None
            name = package.get("name") if isinstance(package, dict) else None
            if isinstance(name, str) and name:
                names.append(name)
        return names[:size]

    async def get_packument(self, name: str) -> dict[str, Any]:
        """Return the full metadata document for ``name``."""
        data = await self._get_json(
            f"{self._base_url}/{package_path(name)}", not_found=ErrorCode.PACKAGE_NOT_FOUND
        )
        if not isinstance(data, dict):
            raise LibCuratorError(
                ErrorCode.INVALID_RESPONSE, f"Metadata for {name!r} is not a JSON object"
            )
        return data

    async def get_version(self, name: str, version: str) -> dict[str, Any]:
        """Return the version-scoped document for ``name@version``."""
        data = await self._get_json(
            f"{self._base_url}/{package_path(name)}/{quote(version, safe='')}",
            not_found=ErrorCode.VERSION_NOT_FOUND,
        )
        if not isinstance(data, dict):
            raise LibCuratorError(
                ErrorCode.INVALID_RESPONSE,
                f"Metadata for {name!r}@{version!r} is not a JSON object",
            )
        return data

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        not_found: ErrorCode = ErrorCode.FETCH_FAILED,
    ) -> Any:
        cache_key = str(httpx.URL(url, params=params))

        if self._cache is not None:
            cached = await self._cache.get(cache_key)
            if cached is not None:
                log.debug("registry_cache_hit", url=cache_key)
                return json.loads(cached)

        try:
            response = await self._client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise LibCuratorError(
                ErrorCode.FETCH_FAILED, f"Request to {url} timed out", recoverable=True
            ) from exc
        except httpx.HTTPError as exc:
            raise LibCuratorError(
                ErrorCode.FETCH_FAILED, f"Request to {url} failed: {exc}", recoverable=True
            ) from exc

        if response.status_code == 404:
            raise LibCuratorError(not_found, f"Not found: {url}")
        if not response.is_success:
            raise LibCuratorError(
                ErrorCode.FETCH_FAILED,
                f"HTTP {response.status_code} from {url}",
                recoverable=response.status_code >= 500 or response.status_code == 429,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise LibCuratorError(
                ErrorCode.INVALID_RESPONSE, f"Response from {url} is not valid JSON"
            ) from exc

        if self._cache is not None:
            await self._cache.set(cache_key, response.text)
        return data
