"""Output reporters for dependency status documents."""

from smart_pub.reporters.base import BaseReporter
from smart_pub.reporters.markdown import MarkdownReporter

__all__ = ["BaseReporter", "MarkdownReporter"]
