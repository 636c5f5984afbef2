"""Base interface for output reporters.

Reporters generate formatted output (Markdown, HTML, JSON, etc.) from a
project's dependency state.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from smart_pub.models import WorkspaceProject


class BaseReporter(ABC):
    """Abstract base class for output reporters."""

    @abstractmethod
    def render(self, projects: list[WorkspaceProject]) -> str:
        """Render project dependency state to formatted output.

        Args:
            projects: Projects whose dependencies should be reported.

        Returns:
            Rendered output as a string.
        """
        ...

    def write(self, projects: list[WorkspaceProject], output_path: Path) -> None:
        """Render and write output to a file.

        Args:
            projects: Projects whose dependencies should be reported.
            output_path: Path to write the output file.
        """
        content = self.render(projects)
        output_path.write_text(content, encoding="utf-8")

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Return the output format name, e.g. "markdown"."""
        ...

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Return the default file extension, e.g. ".md"."""
        ...
