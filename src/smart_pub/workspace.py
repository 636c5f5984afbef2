"""Workspace project tracking.

Discovers Flutter/Dart projects under workspace roots, keeps each project's
dependency list annotated with outdated information, and reacts to
manifest change events.
"""

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

from smart_pub.config import Settings
from smart_pub.events import EventKind, ManifestEvent
from smart_pub.manifest.pubspec import MANIFEST_NAME, ManifestError, Pubspec
from smart_pub.models import DependencyInfo, WorkspaceProject
from smart_pub.registry.pub import PubClient
from smart_pub.versions import is_outdated

if TYPE_CHECKING:
    from smart_pub.manifest.accessor import ManifestAccessor

logger = logging.getLogger(__name__)

SKIPPED_DIRECTORIES = {"node_modules"}


def _key(path: Path) -> str:
    return str(Path(path).resolve())


class WorkspaceService:
    """Tracks the projects of a workspace.

    A project's dependency list is rebuilt wholesale whenever the project
    is refreshed; records are never diffed.

    Attributes:
        client: Registry client used for latest-version lookups.
        settings: Settings providing ``auto_run_pub_get``.
        accessor: Manifest accessor used to run ``flutter pub get`` on
            change events. Optional.
        projects: Currently tracked projects.
    """

    def __init__(
        self,
        client: PubClient,
        settings: Optional[Settings] = None,
        accessor: Optional["ManifestAccessor"] = None,
    ) -> None:
        self.client = client
        self.settings = settings or Settings()
        self.accessor = accessor
        self.projects: list[WorkspaceProject] = []

    async def scan(self, roots: Iterable[Path]) -> list[WorkspaceProject]:
        """Discover projects under the given roots, replacing the current set.

        A directory holding a manifest is a project and is not searched
        further. Hidden directories and node_modules are skipped.
        """
        self.projects = []
        for root in roots:
            await self._scan_directory(Path(root))

        logger.info("Found %d project(s)", len(self.projects))
        return self.projects

    async def _scan_directory(self, directory: Path) -> None:
        if (directory / MANIFEST_NAME).exists():
            project = await self.create_project(directory)
            if project:
                self.projects.append(project)
            return

        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            logger.error("Error scanning directory %s: %s", directory, e)
            return

        for entry in entries:
            if (
                entry.is_dir()
                and not entry.name.startswith(".")
                and entry.name not in SKIPPED_DIRECTORIES
            ):
                await self._scan_directory(entry)

    async def create_project(self, project_dir: Path) -> Optional[WorkspaceProject]:
        """Build a project record from a directory's manifest.

        Returns:
            The project, or None if the manifest is unreadable or has no name.
        """
        project_dir = Path(project_dir).resolve()
        try:
            pubspec = Pubspec.for_project(project_dir)
        except ManifestError as e:
            logger.error("Error creating project from %s: %s", project_dir, e)
            return None

        if not pubspec.name:
            logger.debug("Manifest in %s has no name, ignoring", project_dir)
            return None

        dependencies = pubspec.dependencies()
        await self._annotate(dependencies)

        return WorkspaceProject(
            name=pubspec.name,
            path=str(project_dir),
            pubspec_path=str(project_dir / MANIFEST_NAME),
            dependencies=dependencies,
        )

    async def _annotate(self, dependencies: list[DependencyInfo]) -> None:
        results = await asyncio.gather(
            *(self.client.get_package_details(dep.name) for dep in dependencies),
            return_exceptions=True,
        )
        for dep, details in zip(dependencies, results):
            if isinstance(details, Exception):
                logger.warning("Failed to process dependency %s: %s", dep.name, details)
                continue
            if details is None:
                continue
            dep.latest_version = details.latest_version
            dep.is_outdated = is_outdated(dep.version, details.latest_version)
            dep.description = details.description

    def get_project(self, project_dir: Path) -> Optional[WorkspaceProject]:
        key = _key(project_dir)
        for project in self.projects:
            if project.path == key:
                return project
        return None

    async def refresh_project(self, project_dir: Path) -> Optional[WorkspaceProject]:
        """Rebuild a tracked project from its manifest.

        Untracked directories are ignored. If the manifest can no longer be
        read the previous record is kept.
        """
        key = _key(project_dir)
        for index, project in enumerate(self.projects):
            if project.path != key:
                continue
            refreshed = await self.create_project(Path(key))
            if refreshed is None:
                logger.warning("Could not refresh %s, keeping previous state", key)
                return project
            self.projects[index] = refreshed
            return refreshed
        return None

    def is_dev_dependency(self, project_dir: Path, name: str) -> bool:
        project = self.get_project(project_dir)
        if project is None:
            return False
        dep = project.find(name)
        return dep.is_dev if dep else False

    async def check_for_updates(self, project_dir: Path) -> dict[str, str]:
        """Return latest versions for the outdated dependencies of a project."""
        project = self.get_project(project_dir)
        if project is None:
            return {}

        declared = {dep.name: dep.version for dep in project.dependencies}
        return await self.client.check_for_updates(declared)

    async def handle_event(self, event: ManifestEvent) -> None:
        """Apply a manifest change event to the tracked projects."""
        project_dir = event.project_dir
        logger.debug("Manifest %s: %s", event.kind.value, event.path)

        if event.kind is EventKind.CHANGED:
            await self.refresh_project(project_dir)
            if self.settings.auto_run_pub_get and self.accessor is not None:
                await self.accessor.fetch_packages(project_dir)

        elif event.kind is EventKind.CREATED:
            if self.get_project(project_dir) is None:
                project = await self.create_project(project_dir)
                if project:
                    self.projects.append(project)

        elif event.kind is EventKind.DELETED:
            key = _key(project_dir)
            self.projects = [p for p in self.projects if p.path != key]
