"""Adding, updating and removing manifest dependencies.

Each operation loads the project's manifest, edits it in memory, overwrites
the file and then runs the post-write side effects: ``flutter pub get``
followed by a refresh of the tracked project. Writes are neither locked
nor transactional; concurrent edits of the same manifest race and the
last writer wins.
"""

import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from smart_pub.manifest.pubspec import (
    ManifestError,
    ManifestNotFoundError,
    Pubspec,
    section_name,
)
from smart_pub.notifications import Notifier
from smart_pub.tooling import PubGetRunner
from smart_pub.versions import normalize_version

logger = logging.getLogger(__name__)

ProjectHook = Callable[[Path], Awaitable[Any]]
FailureHandler = Callable[[Path, str], Awaitable[Any]]


class ManifestAccessor:
    """Edits dependency entries in a project's pubspec.yaml.

    Attributes:
        runner: Runs ``flutter pub get`` after a write.
        notifier: Receives success, warning and error messages.
        on_written: Awaited with the project directory after every write,
            typically to refresh the tracked project.
        on_pub_get_failure: Awaited with the project directory and the tool
            output when ``flutter pub get`` fails.
        run_pub_get: Whether writes trigger ``flutter pub get`` at all.
    """

    def __init__(
        self,
        runner: Optional[PubGetRunner] = None,
        notifier: Optional[Notifier] = None,
        on_written: Optional[ProjectHook] = None,
        on_pub_get_failure: Optional[FailureHandler] = None,
        run_pub_get: bool = True,
    ) -> None:
        self.runner = runner or PubGetRunner()
        self.notifier = notifier or Notifier()
        self.on_written = on_written
        self.on_pub_get_failure = on_pub_get_failure
        self.run_pub_get = run_pub_get

    async def add_dependency(
        self,
        project_dir: Path,
        name: str,
        version: str,
        is_dev: bool = False,
    ) -> bool:
        """Add or overwrite a dependency entry.

        The version is always written in caret form, see
        :func:`smart_pub.versions.normalize_version`.

        Args:
            project_dir: Directory containing pubspec.yaml.
            name: Package name.
            version: Requested version or constraint.
            is_dev: Write to ``dev_dependencies`` instead of ``dependencies``.

        Returns:
            True if the manifest was written.
        """
        project_dir = Path(project_dir)
        section = section_name(is_dev)
        constraint = normalize_version(version)

        try:
            pubspec = Pubspec.for_project(project_dir)
            pubspec.set_dependency(name, constraint, is_dev)
            pubspec.save()
        except ManifestNotFoundError as e:
            self.notifier.error(str(e))
            return False
        except ManifestError as e:
            logger.error("Error adding dependency %s to %s: %s", name, project_dir, e)
            self.notifier.error(f"Failed to add dependency: {e}")
            return False

        logger.debug("Wrote %s: %s to %s in %s", name, constraint, section, project_dir)
        await self._after_write(project_dir)
        self.notifier.info(f"Added {name}:{constraint} to {section}")
        return True

    async def update_dependency(
        self,
        project_dir: Path,
        name: str,
        new_version: str,
        is_dev: bool = False,
    ) -> bool:
        """Overwrite a dependency's constraint; same semantics as add."""
        return await self.add_dependency(project_dir, name, new_version, is_dev)

    async def remove_dependency(
        self,
        project_dir: Path,
        name: str,
        is_dev: bool = False,
    ) -> bool:
        """Remove a dependency entry.

        Returns:
            True if the entry existed and the manifest was written. A missing
            entry produces a warning and returns False.
        """
        project_dir = Path(project_dir)
        section = section_name(is_dev)

        try:
            pubspec = Pubspec.for_project(project_dir)
            if not pubspec.remove_dependency(name, is_dev):
                self.notifier.warning(f"{name} not found in {section}")
                return False
            pubspec.save()
        except ManifestNotFoundError as e:
            self.notifier.error(str(e))
            return False
        except ManifestError as e:
            logger.error("Error removing dependency %s from %s: %s", name, project_dir, e)
            self.notifier.error(f"Failed to remove dependency: {e}")
            return False

        await self._after_write(project_dir)
        self.notifier.info(f"Removed {name} from {section}")
        return True

    async def _after_write(self, project_dir: Path) -> None:
        if self.run_pub_get:
            await self.fetch_packages(project_dir)
        if self.on_written is not None:
            await self.on_written(project_dir)

    async def fetch_packages(self, project_dir: Path) -> bool:
        """Run ``flutter pub get`` and hand failures to the failure handler."""
        result = await self.runner.run(project_dir)
        if result.success:
            self.notifier.info("Dependencies updated successfully!")
            return True

        if self.on_pub_get_failure is not None:
            await self.on_pub_get_failure(project_dir, result.output)
        else:
            self.notifier.error(f"Pub get failed: {result.output}")
        return False
