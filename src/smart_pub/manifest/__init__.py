"""Manifest access for pubspec.yaml files.

This module provides parsing, editing and text-range lookup for the
``dependencies`` and ``dev_dependencies`` sections of a manifest.
"""

from smart_pub.manifest.accessor import ManifestAccessor
from smart_pub.manifest.pubspec import (
    DEV_SECTION,
    MANIFEST_NAME,
    REGULAR_SECTION,
    ManifestError,
    ManifestNotFoundError,
    Pubspec,
    section_name,
)
from smart_pub.manifest.ranges import find_package_range

__all__ = [
    "DEV_SECTION",
    "MANIFEST_NAME",
    "REGULAR_SECTION",
    "ManifestAccessor",
    "ManifestError",
    "ManifestNotFoundError",
    "Pubspec",
    "find_package_range",
    "section_name",
]
