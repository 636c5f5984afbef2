"""Markdown reporter for dependency status documents.

This module renders each project's dependencies, their declared
constraints and latest registry versions into a Markdown document using
Jinja2 templates.
"""

from datetime import datetime
from importlib.resources import files
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, Template

from smart_pub.filters import package_category
from smart_pub.models import WorkspaceProject
from smart_pub.reporters.base import BaseReporter


class MarkdownReporter(BaseReporter):
    """Reporter that generates a Markdown dependency status file.

    Attributes:
        template: The Jinja2 template to use for rendering.
    """

    def __init__(self, template_path: Optional[Path] = None) -> None:
        """Initialize the Markdown reporter.

        Args:
            template_path: Optional path to a custom Jinja2 template.
                If not provided, uses the bundled template.
        """
        if template_path:
            env = Environment(
                loader=FileSystemLoader(template_path.parent),
                autoescape=True,
                trim_blocks=True,
                lstrip_blocks=True,
            )
            self.template = env.get_template(template_path.name)
        else:
            self.template = self._load_default_template()

    def _load_default_template(self) -> Template:
        template_content = (
            files("smart_pub.templates")
            .joinpath("dependencies.md.j2")
            .read_text(encoding="utf-8")
        )
        env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)
        return env.from_string(template_content)

    def render(self, projects: list[WorkspaceProject]) -> str:
        """Render projects to Markdown.

        Args:
            projects: Projects whose dependencies should be reported.

        Returns:
            Rendered Markdown document as a string.
        """
        return self.template.render(
            projects=projects,
            category=package_category,
            generated_at=datetime.now(),
        )

    @property
    def format_name(self) -> str:
        return "markdown"

    @property
    def default_extension(self) -> str:
        return ".md"
