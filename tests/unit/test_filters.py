"""Unit tests for dependency filtering and sorting."""

import pytest

from smart_pub.filters import (
    OTHER_CATEGORY,
    filter_dependencies,
    package_category,
    sort_dependencies,
)
from smart_pub.models import DependencyInfo


@pytest.fixture
def dependencies() -> list[DependencyInfo]:
    return [
        DependencyInfo("provider", "^6.0.5", description="State management"),
        DependencyInfo("http", "^1.1.0", is_outdated=True, latest_version="1.2.0"),
        DependencyInfo("mockito", "^5.4.0", is_dev=True, is_outdated=True),
        DependencyInfo("Lottie", "^3.0.0", description="Render After Effects animations"),
    ]


def _names(deps):
    return [dep.name for dep in deps]


class TestPackageCategory:
    @pytest.mark.parametrize(
        "name,category",
        [
            ("flutter_lints", "ui"),
            ("provider", "state"),
            ("dio", "network"),
            ("hive", "storage"),
            ("go_router", "navigation"),
            ("firebase_auth", "firebase"),
            ("image_picker", "media"),
            ("uuid", "utils"),
            ("mockito", "testing"),
            ("lottie", OTHER_CATEGORY),
        ],
    )
    def test_category(self, name, category):
        assert package_category(name) == category

    def test_case_insensitive(self):
        assert package_category("HTTP_Parser") == "network"


class TestFilterDependencies:
    """Test search and filter combinations."""

    def test_no_filters_keeps_all(self, dependencies):
        assert filter_dependencies(dependencies) == dependencies
        assert filter_dependencies(dependencies, filters=["all", "dev"]) == dependencies

    def test_query_matches_name_or_description(self, dependencies):
        assert _names(filter_dependencies(dependencies, query="HTT")) == ["http"]
        assert _names(filter_dependencies(dependencies, query="animations")) == ["Lottie"]

    def test_outdated(self, dependencies):
        assert _names(filter_dependencies(dependencies, filters=["outdated"])) == ["http", "mockito"]

    def test_production_and_dev(self, dependencies):
        assert _names(filter_dependencies(dependencies, filters=["dev"])) == ["mockito"]
        assert _names(filter_dependencies(dependencies, filters=["production"])) == [
            "provider",
            "http",
            "Lottie",
        ]

    def test_filters_are_alternatives(self, dependencies):
        assert _names(filter_dependencies(dependencies, filters=["dev", "state"])) == [
            "provider",
            "mockito",
        ]

    def test_query_and_filters_combine(self, dependencies):
        assert filter_dependencies(dependencies, query="provider", filters=["outdated"]) == []


class TestSortDependencies:
    def test_by_name(self, dependencies):
        assert _names(sort_dependencies(dependencies)) == ["http", "Lottie", "mockito", "provider"]

    def test_outdated_first(self, dependencies):
        assert _names(sort_dependencies(dependencies, "status")) == [
            "http",
            "mockito",
            "Lottie",
            "provider",
        ]

    def test_by_category(self, dependencies):
        assert _names(sort_dependencies(dependencies, "category")) == [
            "http",
            "Lottie",
            "provider",
            "mockito",
        ]

    def test_unknown_key(self, dependencies):
        with pytest.raises(ValueError, match="Unknown sort key"):
            sort_dependencies(dependencies, "size")
