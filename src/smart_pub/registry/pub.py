"""Client for the pub.dev package registry.

Fetches search results and package details from the pub.dev JSON API,
going through the TTL cache to avoid repeated calls. Failures are logged
and degrade to empty results; nothing is retried.
"""

import asyncio
import logging
import math
from typing import Any, Optional

import aiohttp

from smart_pub.cache import TTLCache
from smart_pub.config import Settings
from smart_pub.models import Package, PackageDetails
from smart_pub.notifications import Notifier
from smart_pub.registry.http import HttpClient
from smart_pub.versions import is_outdated

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://pub.dev/api"

FLUTTER_TAGS = ("flutter", "flutter-package")
DART_TAGS = ("dart", "dart-package")


def describe_error(error: BaseException) -> str:
    """Turn a request failure into a short message for the user."""
    if isinstance(error, aiohttp.ClientResponseError):
        return f"HTTP {error.status}: {error.message}"
    if isinstance(error, (aiohttp.ClientConnectionError, asyncio.TimeoutError)):
        return "Network error - check your internet connection"
    return str(error) or "Unknown error occurred"


class PubClient(HttpClient):
    """Registry client for pub.dev.

    Search results are cached for 30 minutes and package details for one
    hour, independently of the configured default TTL. Use as an async
    context manager or call close() when done.

    Attributes:
        cache: TTL cache consulted before every request.
        settings: Settings providing the search page size.
        notifier: Receives user-visible errors.
        base_url: Registry API root.
    """

    SEARCH_TTL_SECONDS = 1800
    DETAILS_TTL_SECONDS = 3600
    MAX_PAGE_SIZE = 50

    def __init__(
        self,
        cache: TTLCache,
        settings: Optional[Settings] = None,
        notifier: Optional[Notifier] = None,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        super().__init__()
        self.cache = cache
        self.settings = settings or Settings()
        self.notifier = notifier or Notifier()
        self.base_url = base_url.rstrip("/")

    async def search_packages(self, query: str, page: int = 1) -> list[Package]:
        """Search the registry and expand each hit into a full Package.

        Every hit costs one additional details request; hits whose details
        cannot be fetched are dropped.

        Args:
            query: Free-text search query.
            page: 1-based result page.

        Returns:
            Matching packages, or an empty list if the search failed.
        """
        cache_key = f"search:{query}:{page}"
        if self.cache.enabled and self.cache.has(cache_key):
            return [Package.from_dict(item) for item in self.cache.get(cache_key) or []]

        size = min(self.settings.max_search_results, self.MAX_PAGE_SIZE)
        url = f"{self.base_url}/search"
        logger.debug("Searching %s for %r (page %d, size %d)", url, query, page, size)

        try:
            session = await self._get_session()
            async with session.get(
                url, params={"q": query, "page": page, "size": size}
            ) as response:
                response.raise_for_status()
                data = await response.json()

            hits = (data.get("packages") if isinstance(data, dict) else None) or []
            packages = await self._expand_hits(hits)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error("Error searching packages for %r: %s", query, e)
            self.notifier.error(f"Failed to search packages: {describe_error(e)}")
            return []

        if self.cache.enabled:
            self.cache.set(
                cache_key,
                [package.to_dict() for package in packages],
                self.SEARCH_TTL_SECONDS,
            )

        return packages

    async def get_package_details(self, name: str) -> Optional[PackageDetails]:
        """Fetch the detail record for a package.

        Args:
            name: Package name.

        Returns:
            PackageDetails, or None on any failure (not found, server
            error, network error or malformed payload).
        """
        cache_key = f"package:{name}"
        if self.cache.enabled and self.cache.has(cache_key):
            return self._parse_details(self.cache.get(cache_key), name)

        url = f"{self.base_url}/packages/{name}"
        logger.debug("Fetching package details from %s", url)

        try:
            session = await self._get_session()
            async with session.get(url) as response:
                if response.status == 404:
                    logger.warning("Package %s not found on the registry", name)
                    return None

                if response.status != 200:
                    logger.error(
                        "Registry returned status %d for %s", response.status, name
                    )
                    return None

                data = await response.json()

        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error("Error getting package details for %s: %s", name, e)
            return None

        details = self._parse_details(data, name)
        if details is not None and self.cache.enabled:
            self.cache.set(cache_key, data, self.DETAILS_TTL_SECONDS)

        return details

    async def get_latest_version(self, name: str) -> Optional[str]:
        details = await self.get_package_details(name)
        return details.latest_version if details else None

    async def check_for_updates(self, declared: dict[str, str]) -> dict[str, str]:
        """Find the declared dependencies that have a newer release.

        Looks up every package concurrently, with no limit on the number of
        requests in flight.

        Args:
            declared: Mapping of package name to declared constraint.

        Returns:
            Mapping of package name to latest version, for outdated
            packages only.
        """
        names = list(declared)
        results = await asyncio.gather(
            *(self.get_latest_version(name) for name in names),
            return_exceptions=True,
        )

        updates: dict[str, str] = {}
        for name, latest in zip(names, results):
            if isinstance(latest, Exception):
                logger.error("Exception checking %s for updates: %s", name, latest)
                continue
            if latest and is_outdated(declared[name], latest):
                updates[name] = latest

        logger.info("%d of %d dependencies have updates", len(updates), len(names))
        return updates

    async def _expand_hits(self, hits: list[dict[str, Any]]) -> list[Package]:
        packages = []
        for hit in hits:
            if not isinstance(hit, dict):
                logger.debug("Skipping malformed search hit: %r", hit)
                continue

            name = hit.get("package")
            if not name:
                continue

            details = await self.get_package_details(name)
            if details is None:
                continue

            tags = hit.get("tags") or []
            score = hit.get("score") or {}
            packages.append(
                Package(
                    name=name,
                    version=details.latest_version,
                    description=hit.get("description") or details.description or "",
                    homepage=details.homepage,
                    repository=details.repository,
                    popularity=math.floor((score.get("popularityScore") or 0) * 100 + 0.5),
                    likes=score.get("likeCount") or 0,
                    points=score.get("grantedPoints") or 0,
                    tags=list(tags),
                    is_flutter_package=self._is_flutter_package(tags, details),
                    is_dart_package=self._is_dart_package(tags, details),
                )
            )
        return packages

    @staticmethod
    def _parse_details(data: Any, name: str) -> Optional[PackageDetails]:
        try:
            return PackageDetails.from_dict(data)
        except (KeyError, TypeError, AttributeError) as e:
            logger.error("Malformed package details for %s: %s", name, e)
            return None

    @staticmethod
    def _is_flutter_package(tags: list[str], details: PackageDetails) -> bool:
        return any(tag in tags for tag in FLUTTER_TAGS) or bool(
            details.environment.get("flutter")
        )

    @staticmethod
    def _is_dart_package(tags: list[str], details: PackageDetails) -> bool:
        return any(tag in tags for tag in DART_TAGS) or bool(
            details.environment.get("sdk")
        )
