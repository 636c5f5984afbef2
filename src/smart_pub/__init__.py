"""Smart Pub - pub.dev package assistant for pubspec.yaml manifests.

This package provides tools for searching the pub.dev registry, editing the
dependency sections of a Flutter/Dart manifest, and detecting outdated
dependencies.
"""

__version__ = "0.1.0"

from smart_pub.models import (
    CacheEntry,
    DependencyConflict,
    DependencyInfo,
    Package,
    PackageAnalysis,
    PackageDetails,
    TextRange,
    WorkspaceProject,
)
from smart_pub.versions import extract_version, is_outdated, normalize_version

__all__ = [
    "__version__",
    "CacheEntry",
    "DependencyConflict",
    "DependencyInfo",
    "Package",
    "PackageAnalysis",
    "PackageDetails",
    "TextRange",
    "WorkspaceProject",
    "extract_version",
    "is_outdated",
    "normalize_version",
]
