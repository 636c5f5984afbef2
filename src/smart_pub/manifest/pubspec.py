"""Reading and writing pubspec.yaml manifests.

The manifest is parsed with PyYAML into plain Python mappings, edited in
memory and written back as a whole. Comments and formatting of the
original file are not preserved by a write.
"""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from smart_pub.models import DependencyInfo

logger = logging.getLogger(__name__)

MANIFEST_NAME = "pubspec.yaml"

REGULAR_SECTION = "dependencies"
DEV_SECTION = "dev_dependencies"

# SDK-provided entries that are not registry packages
SDK_ENTRIES = {REGULAR_SECTION: "flutter", DEV_SECTION: "flutter_test"}


class ManifestError(Exception):
    """Raised when a manifest cannot be read, parsed or edited."""


class ManifestNotFoundError(ManifestError):
    """Raised when a project directory has no manifest."""


def section_name(is_dev: bool) -> str:
    return DEV_SECTION if is_dev else REGULAR_SECTION


class Pubspec:
    """An in-memory pubspec.yaml document.

    Example manifest::

        name: my_app
        dependencies:
          flutter:
            sdk: flutter
          http: ^1.1.0
        dev_dependencies:
          flutter_test:
            sdk: flutter
          mockito: ^5.4.0

    Attributes:
        path: File the document was loaded from, if any.
        data: Parsed top-level mapping.
    """

    def __init__(self, data: dict[str, Any], path: Optional[Path] = None) -> None:
        self.data = data
        self.path = path

    @classmethod
    def parse(cls, text: str, path: Optional[Path] = None) -> "Pubspec":
        """Parse manifest text.

        Raises:
            ManifestError: If the text is not valid YAML or is not a mapping.
        """
        where = path or "manifest"
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ManifestError(f"Invalid YAML in {where}: {e}") from e

        if not isinstance(data, dict):
            raise ManifestError(f"{where} does not contain a YAML mapping")

        return cls(data, path)

    @classmethod
    def load(cls, path: Path) -> "Pubspec":
        """Load a manifest file.

        Raises:
            ManifestNotFoundError: If the file does not exist.
            ManifestError: If the file cannot be parsed.
        """
        if not path.exists():
            raise ManifestNotFoundError(f"{MANIFEST_NAME} not found in {path.parent}")

        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ManifestError(f"Cannot read {path}: {e}") from e

        return cls.parse(text, path)

    @classmethod
    def for_project(cls, project_dir: Path) -> "Pubspec":
        return cls.load(Path(project_dir) / MANIFEST_NAME)

    @property
    def name(self) -> Optional[str]:
        name = self.data.get("name")
        return name if isinstance(name, str) and name else None

    def section(self, is_dev: bool, create: bool = False) -> Optional[dict[str, Any]]:
        """Return the dependency map for a section.

        Args:
            is_dev: Select ``dev_dependencies`` instead of ``dependencies``.
            create: Create an empty section if it is missing or empty.

        Raises:
            ManifestError: If the section exists but is not a mapping.
        """
        key = section_name(is_dev)
        value = self.data.get(key)

        if value is None:
            if not create:
                return None
            value = self.data[key] = {}

        if not isinstance(value, dict):
            raise ManifestError(f"'{key}' in {self.path or 'manifest'} is not a mapping")

        return value

    def dependencies(self) -> list[DependencyInfo]:
        """Return the registry dependencies declared in both sections.

        SDK entries and entries whose value is not a version string
        (path, git or sdk sources) are skipped.
        """
        result = []
        for is_dev in (False, True):
            key = section_name(is_dev)
            entries = self.data.get(key)
            if not isinstance(entries, dict):
                continue

            for name, constraint in entries.items():
                if not isinstance(name, str) or name == SDK_ENTRIES[key]:
                    continue
                if not isinstance(constraint, str) or not constraint:
                    logger.debug("Skipping non-registry dependency %s in %s", name, key)
                    continue
                result.append(DependencyInfo(name=name, version=constraint, is_dev=is_dev))

        return result

    def declared(self) -> dict[str, str]:
        """Return a mapping of dependency name to declared constraint."""
        return {dep.name: dep.version for dep in self.dependencies()}

    def set_dependency(self, name: str, constraint: str, is_dev: bool = False) -> None:
        self.section(is_dev, create=True)[name] = constraint

    def remove_dependency(self, name: str, is_dev: bool = False) -> bool:
        """Remove a dependency.

        Returns:
            True if the entry existed and was removed.
        """
        entries = self.section(is_dev)
        if not entries or name not in entries:
            return False
        del entries[name]
        return True

    def dump(self) -> str:
        return yaml.safe_dump(
            self.data,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
            indent=2,
        )

    def save(self, path: Optional[Path] = None) -> None:
        """Overwrite the manifest file with the current document.

        Raises:
            ManifestError: If there is no target path or the write fails.
        """
        target = path or self.path
        if target is None:
            raise ManifestError("No path to save the manifest to")

        try:
            target.write_text(self.dump(), encoding="utf-8")
        except OSError as e:
            raise ManifestError(f"Cannot write {target}: {e}") from e
