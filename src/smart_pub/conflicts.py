"""Dependency conflict advice.

Conflict detection does not analyse the manifest: ``detect_conflicts``
reports a fixed list of known conflict patterns. Replacing it with real
constraint solving across the dependency graph is the extension point of
this module. Applying a resolution and classifying ``flutter pub get``
failures are fully implemented; remediation is always left to the user.
"""

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from smart_pub.manifest.accessor import ManifestAccessor
from smart_pub.models import DependencyConflict
from smart_pub.notifications import Notifier
from smart_pub.workspace import WorkspaceService

logger = logging.getLogger(__name__)

KNOWN_CONFLICTS = [
    DependencyConflict(
        package_name="flutter_lints",
        conflicting_versions=["^6.0.0", "^5.0.0"],
        suggested_resolution="^5.0.0",
        reason="Incompatible version ranges between direct and transitive dependencies",
    ),
]

MANUAL_FIX_STEPS = [
    "Check version constraints: look for conflicting version ranges in pubspec.yaml",
    "Use dependency_overrides: add an overrides section to force specific versions",
    "Update packages: run 'flutter pub upgrade' to get compatible versions",
    "Check transitive dependencies: run 'flutter pub deps' to see the dependency tree",
]


class FailureKind(str, Enum):
    VERSION_SOLVING = "version_solving"
    SDK_CONSTRAINT = "sdk_constraint"
    OTHER = "other"


REMEDIATIONS = {
    FailureKind.VERSION_SOLVING: ["Auto-Resolve", "Manual Fix", "View Details"],
    FailureKind.SDK_CONSTRAINT: [
        "Update SDK Constraints",
        "View Flutter Version",
        "Get Help",
    ],
    FailureKind.OTHER: [],
}


@dataclass
class PubGetFailure:
    """A classified ``flutter pub get`` failure.

    Attributes:
        kind: Failure category.
        output: Raw tool output.
        remediations: Actions the user may choose from; none is taken
            automatically.
        manual_steps: Steps for fixing a version conflict by hand. Empty
            for other failure kinds.
    """

    kind: FailureKind
    output: str
    remediations: list[str] = field(default_factory=list)
    manual_steps: list[str] = field(default_factory=list)


def classify_failure(output: str) -> FailureKind:
    if "version solving failed" in output:
        return FailureKind.VERSION_SOLVING
    if "sdk constraint" in output:
        return FailureKind.SDK_CONSTRAINT
    return FailureKind.OTHER


class ConflictAdvisor:
    """Detects version conflicts and applies suggested resolutions.

    Attributes:
        workspace: Used to tell regular from dev dependencies.
        accessor: Writes resolutions into the manifest.
        notifier: Receives user-visible messages.
    """

    def __init__(
        self,
        workspace: WorkspaceService,
        accessor: ManifestAccessor,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.workspace = workspace
        self.accessor = accessor
        self.notifier = notifier or Notifier()

    async def detect_conflicts(self, project_dir: Path) -> list[DependencyConflict]:
        """Return the conflicts for a project.

        Currently the known conflict patterns, independent of the project.
        """
        logger.debug("Detecting conflicts for %s", project_dir)
        return copy.deepcopy(KNOWN_CONFLICTS)

    async def apply_resolution(
        self, project_dir: Path, conflict: DependencyConflict
    ) -> bool:
        """Write a conflict's suggested version into the manifest."""
        is_dev = self.workspace.is_dev_dependency(project_dir, conflict.package_name)
        applied = await self.accessor.update_dependency(
            project_dir,
            conflict.package_name,
            conflict.suggested_resolution,
            is_dev,
        )

        if applied:
            logger.info(
                "Applied resolution: %s -> %s",
                conflict.package_name,
                conflict.suggested_resolution,
            )
        else:
            self.notifier.error(f"Failed to resolve {conflict.package_name}")
        return applied

    async def resolve_conflicts(
        self, project_dir: Path, names: Optional[Iterable[str]] = None
    ) -> int:
        """Detect conflicts and apply their suggested resolutions.

        Args:
            project_dir: Project to resolve.
            names: Only resolve conflicts for these packages. None means all.

        Returns:
            Number of resolutions applied.
        """
        conflicts = await self.detect_conflicts(project_dir)
        if names is not None:
            wanted = set(names)
            conflicts = [c for c in conflicts if c.package_name in wanted]

        if not conflicts:
            self.notifier.info("No dependency conflicts detected!")
            return 0

        applied = 0
        for conflict in conflicts:
            if await self.apply_resolution(project_dir, conflict):
                applied += 1

        if applied:
            self.notifier.info(f"Resolved {applied} dependency conflict(s)!")
        return applied

    async def handle_pub_get_error(self, project_dir: Path, output: str) -> PubGetFailure:
        """Classify a ``flutter pub get`` failure and offer remediations."""
        kind = classify_failure(output)
        logger.warning("pub get failed in %s (%s)", project_dir, kind.value)

        manual_steps: list[str] = []
        if kind is FailureKind.VERSION_SOLVING:
            self.notifier.error("Dependency version conflict detected!")
            manual_steps = list(MANUAL_FIX_STEPS)
            self.notifier.info(
                "Manual dependency resolution steps:\n"
                + "\n".join(f"  {i}. {step}" for i, step in enumerate(manual_steps, 1))
            )
        elif kind is FailureKind.SDK_CONSTRAINT:
            self.notifier.error("SDK constraint error detected!")
        else:
            self.notifier.error(f"Pub get failed: {output}")

        return PubGetFailure(
            kind=kind,
            output=output,
            remediations=list(REMEDIATIONS[kind]),
            manual_steps=manual_steps,
        )
