"""Searching, filtering and sorting dependency lists for display."""

from typing import Iterable, Optional

from smart_pub.models import DependencyInfo

# Matched as substrings of the lower-cased package name
PACKAGE_CATEGORIES = {
    "ui": ["flutter", "material", "cupertino", "flutter_staggered_grid_view", "card_swiper", "carousel_slider"],
    "state": ["provider", "bloc", "riverpod", "get", "mobx", "redux"],
    "network": ["http", "dio", "chopper", "retrofit", "graphql"],
    "storage": ["shared_preferences", "sqflite", "hive", "isar", "drift"],
    "navigation": ["go_router", "auto_route", "fluro", "page_transition"],
    "firebase": ["firebase_core", "firebase_auth", "cloud_firestore", "firebase_storage"],
    "media": ["image_picker", "video_player", "camera", "permission_handler"],
    "utils": ["intl", "uuid", "crypto", "path", "collection", "meta"],
    "testing": ["test", "flutter_test", "mockito", "integration_test"],
}

OTHER_CATEGORY = "other"
STATUS_FILTERS = ("all", "outdated", "production", "dev")
SORT_KEYS = ("name", "status", "category")


def package_category(name: str) -> str:
    """Return the first category whose patterns occur in the package name."""
    lower = name.lower()
    for category, patterns in PACKAGE_CATEGORIES.items():
        if any(pattern in lower for pattern in patterns):
            return category
    return OTHER_CATEGORY


def filter_dependencies(
    dependencies: Iterable[DependencyInfo],
    query: Optional[str] = None,
    filters: Optional[Iterable[str]] = None,
) -> list[DependencyInfo]:
    """Filter dependencies by a search query and a set of filters.

    Args:
        dependencies: Dependencies to filter.
        query: Case-insensitive substring of the name or description.
        filters: Any of "all", "outdated", "production", "dev" or a
            category name. A dependency passes if it matches any filter.
            None, an empty set, or a set containing "all" keeps everything.

    Returns:
        Matching dependencies in their original order.
    """
    result = list(dependencies)

    if query:
        needle = query.lower()
        result = [
            dep
            for dep in result
            if needle in dep.name.lower()
            or (dep.description and needle in dep.description.lower())
        ]

    active = set(filters or ())
    if not active or "all" in active:
        return result

    def matches(dep: DependencyInfo) -> bool:
        if "outdated" in active and dep.is_outdated:
            return True
        if "production" in active and not dep.is_dev:
            return True
        if "dev" in active and dep.is_dev:
            return True
        return package_category(dep.name) in active

    return [dep for dep in result if matches(dep)]


def sort_dependencies(
    dependencies: Iterable[DependencyInfo], sort_by: str = "name"
) -> list[DependencyInfo]:
    """Sort by name, by status (outdated first) or by category.

    Raises:
        ValueError: If ``sort_by`` is not a known sort key.
    """
    keys = {
        "name": lambda dep: dep.name.lower(),
        "status": lambda dep: (not dep.is_outdated, dep.name.lower()),
        "category": lambda dep: (package_category(dep.name), dep.name.lower()),
    }
    if sort_by not in keys:
        raise ValueError(
            f"Unknown sort key {sort_by!r}, expected one of {', '.join(SORT_KEYS)}"
        )

    return sorted(dependencies, key=keys[sort_by])
