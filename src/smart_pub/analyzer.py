"""Per-entry analysis of manifest text.

Produces, for every registry dependency in a manifest, its declared and
latest versions, whether it is outdated, and where it sits in the text.
Editors use the result for update hints and hovers.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from smart_pub.manifest.pubspec import (
    SDK_ENTRIES,
    ManifestError,
    Pubspec,
    section_name,
)
from smart_pub.manifest.ranges import find_package_range
from smart_pub.models import PackageAnalysis, TextRange
from smart_pub.registry.pub import PubClient
from smart_pub.versions import extract_version, is_outdated

logger = logging.getLogger(__name__)

UPDATE_AVAILABLE = "package-update-available"


@dataclass(frozen=True)
class Diagnostic:
    range: TextRange
    message: str
    code: str = UPDATE_AVAILABLE


class PubspecAnalyzer:
    """Analyzes manifest text against the registry.

    Results are memoized per (path, text), so re-analyzing an unchanged
    document costs no requests.
    """

    def __init__(self, client: PubClient) -> None:
        self.client = client
        self._results: dict[tuple[str, str], list[PackageAnalysis]] = {}
        self._latest_by_path: dict[str, list[PackageAnalysis]] = {}

    async def analyze(self, text: str, path: Optional[Path] = None) -> list[PackageAnalysis]:
        """Analyze both dependency sections of a manifest.

        Entries are skipped when they are SDK entries, are not version
        strings, have no known latest version, or cannot be located in
        the text. A manifest that fails to parse gives an empty list.
        """
        key = (str(path or ""), text)
        if key in self._results:
            return self._results[key]

        try:
            pubspec = Pubspec.parse(text, path)
        except ManifestError as e:
            logger.error("Error analyzing manifest: %s", e)
            return []

        analyses: list[PackageAnalysis] = []
        for is_dev in (False, True):
            analyses.extend(await self._analyze_section(text, pubspec, is_dev))

        self._results[key] = analyses
        self._latest_by_path[key[0]] = analyses
        return analyses

    async def analyze_file(self, path: Path) -> list[PackageAnalysis]:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error("Cannot read %s: %s", path, e)
            return []
        return await self.analyze(text, path)

    async def _analyze_section(
        self, text: str, pubspec: Pubspec, is_dev: bool
    ) -> list[PackageAnalysis]:
        section = section_name(is_dev)
        entries = pubspec.data.get(section)
        if not isinstance(entries, dict):
            return []

        analyses = []
        for name, constraint in entries.items():
            if name in SDK_ENTRIES.values() or not isinstance(constraint, str):
                continue

            details = await self.client.get_package_details(name)
            if details is None:
                continue

            text_range = find_package_range(text, name, section)
            if text_range is None:
                continue

            current = extract_version(constraint)
            analyses.append(
                PackageAnalysis(
                    name=name,
                    current_version=current,
                    latest_version=details.latest_version,
                    is_outdated=is_outdated(current, details.latest_version),
                    is_dev=is_dev,
                    range=text_range,
                    description=details.description,
                )
            )
        return analyses

    def diagnostics(self, analyses: list[PackageAnalysis]) -> list[Diagnostic]:
        return [
            Diagnostic(
                range=a.range,
                message=(
                    f"Package '{a.name}' has an update available: "
                    f"{a.current_version} → {a.latest_version}"
                ),
            )
            for a in analyses
            if a.is_outdated
        ]

    def analysis_at(
        self, path: Path, line: int, column: int
    ) -> Optional[PackageAnalysis]:
        """Return the analysis whose range contains a position.

        Only the most recent analysis of ``path`` is searched.
        """
        for analysis in self._latest_by_path.get(str(path), []):
            if analysis.range.contains(line, column):
                return analysis
        return None

    def clear(self) -> None:
        self._results.clear()
        self._latest_by_path.clear()
