"""Core data models for smart_pub.

This module defines the data structures shared by the registry client,
the manifest accessor and the version-state engine: registry records,
manifest dependency records, workspace projects and cache entries.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Optional


@dataclass
class Package:
    """A registry search result expanded with its package details.

    Attributes:
        name: Package name (e.g., "http").
        version: Latest published version.
        description: Short package description.
        homepage: Optional homepage URL.
        repository: Optional source repository URL.
        popularity: Popularity score scaled to 0-100.
        likes: Number of likes on the registry.
        points: Granted pub points.
        tags: Registry tags (e.g., "sdk:flutter", "is:null-safe").
        is_flutter_package: True if the package targets Flutter.
        is_dart_package: True if the package targets plain Dart.
    """

    name: str
    version: str
    description: str = ""
    homepage: Optional[str] = None
    repository: Optional[str] = None
    popularity: int = 0
    likes: int = 0
    points: int = 0
    tags: list[str] = field(default_factory=list)
    is_flutter_package: bool = False
    is_dart_package: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Package":
        return cls(**data)


@dataclass
class PackageDetails:
    """Detail record for one package, taken from the registry's latest release.

    Attributes:
        name: Package name.
        latest_version: Version string of the latest release.
        description: Description from the latest pubspec.
        homepage: Homepage from the latest pubspec.
        repository: Repository from the latest pubspec.
        environment: SDK/framework constraints (keys "sdk", "flutter").
        dependencies: Regular dependencies declared by the latest release.
        dev_dependencies: Dev dependencies declared by the latest release.
        granted_points: Pub points, if the registry reported a score.
        max_points: Maximum attainable pub points.
        like_count: Number of likes.
        popularity_score: Raw popularity in the 0-1 range.
    """

    name: str
    latest_version: str
    description: Optional[str] = None
    homepage: Optional[str] = None
    repository: Optional[str] = None
    environment: dict[str, str] = field(default_factory=dict)
    dependencies: dict[str, Any] = field(default_factory=dict)
    dev_dependencies: dict[str, Any] = field(default_factory=dict)
    granted_points: Optional[int] = None
    max_points: Optional[int] = None
    like_count: Optional[int] = None
    popularity_score: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PackageDetails":
        """Build details from the raw ``/api/packages/{name}`` payload.

        Args:
            data: Decoded JSON returned by the registry.

        Returns:
            Parsed PackageDetails.

        Raises:
            KeyError: If the payload has no ``latest.version``.
        """
        latest = data.get("latest") or {}
        pubspec = latest.get("pubspec") or {}
        score = (data.get("metrics") or {}).get("score") or {}

        return cls(
            name=data.get("name") or pubspec.get("name", ""),
            latest_version=latest["version"],
            description=pubspec.get("description"),
            homepage=pubspec.get("homepage"),
            repository=pubspec.get("repository"),
            environment=dict(pubspec.get("environment") or {}),
            dependencies=dict(pubspec.get("dependencies") or {}),
            dev_dependencies=dict(pubspec.get("dev_dependencies") or {}),
            granted_points=score.get("grantedPoints"),
            max_points=score.get("maxPoints"),
            like_count=score.get("likeCount"),
            popularity_score=score.get("popularityScore"),
        )


@dataclass
class DependencyInfo:
    """A dependency entry declared in a project manifest.

    Attributes:
        name: Package name, unique within its section.
        version: Raw declared constraint (e.g., "^1.2.3").
        is_dev: True for entries under ``dev_dependencies``.
        is_outdated: True if the registry has a newer version.
        latest_version: Latest registry version, when known.
        description: Optional package description.
    """

    name: str
    version: str
    is_dev: bool = False
    is_outdated: bool = False
    latest_version: Optional[str] = None
    description: Optional[str] = None

    @property
    def section(self) -> str:
        return "dev_dependencies" if self.is_dev else "dependencies"


@dataclass
class WorkspaceProject:
    """A Flutter/Dart project discovered under a workspace root."""

    name: str
    path: str
    pubspec_path: str
    dependencies: list[DependencyInfo] = field(default_factory=list)

    @property
    def outdated(self) -> list[DependencyInfo]:
        """Return the dependencies flagged as outdated."""
        return [dep for dep in self.dependencies if dep.is_outdated]

    def find(self, name: str) -> Optional[DependencyInfo]:
        """Return the first dependency with the given name, if any."""
        for dep in self.dependencies:
            if dep.name == name:
                return dep
        return None


@dataclass
class CacheEntry:
    """A cached payload with its creation and expiry times.

    Attributes:
        data: JSON-serializable payload.
        timestamp: Creation time in epoch seconds.
        expires_at: Absolute expiry time in epoch seconds.
    """

    data: Any
    timestamp: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


@dataclass(frozen=True)
class TextRange:
    """A zero-based range of text within a manifest file."""

    start_line: int
    start_column: int
    end_line: int
    end_column: int

    def contains(self, line: int, column: int) -> bool:
        if line < self.start_line or line > self.end_line:
            return False
        if line == self.start_line and column < self.start_column:
            return False
        if line == self.end_line and column > self.end_column:
            return False
        return True


@dataclass
class DependencyConflict:
    """A version conflict between constraints on the same package.

    Attributes:
        package_name: Package whose constraints disagree.
        conflicting_versions: The constraints that cannot be satisfied together.
        suggested_resolution: Constraint to write into the manifest.
        reason: Human-readable explanation.
    """

    package_name: str
    conflicting_versions: list[str]
    suggested_resolution: str
    reason: str


@dataclass
class PackageAnalysis:
    """Outdated-state of one manifest entry together with its location."""

    name: str
    current_version: str
    latest_version: str
    is_outdated: bool
    is_dev: bool
    range: TextRange
    description: Optional[str] = None
