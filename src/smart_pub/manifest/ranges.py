"""Locating dependency entries in manifest text.

The lookup is line based rather than tree based: it is reliable for the
usual single level ``name: constraint`` layout and can be fooled by
nested maps or multi-line values.
"""

from typing import Optional

from smart_pub.models import TextRange


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def find_package_range(
    text: str, package_name: str, section_name: str
) -> Optional[TextRange]:
    """Find the line declaring ``package_name`` inside ``section_name``.

    The section header must be a line reading exactly ``section_name:``.
    Within the section, the first line that starts with ``package_name:``
    and is indented deeper than the header is returned. The scan stops at
    the next line at the header's indentation or shallower that ends with
    a colon.

    Args:
        text: Full manifest text.
        package_name: Dependency to look for.
        section_name: "dependencies" or "dev_dependencies".

    Returns:
        Range from the entry's first non-blank column to the end of its
        line, or None if the entry is not in that section.
    """
    in_section = False
    section_indent = 0

    for number, raw_line in enumerate(text.split("\n")):
        line = raw_line.rstrip("\r")
        trimmed = line.strip()
        indent = _indent(line)

        if trimmed == f"{section_name}:":
            in_section = True
            section_indent = indent
            continue

        if not in_section or not trimmed:
            continue

        if indent <= section_indent and trimmed.endswith(":"):
            break

        if indent > section_indent and trimmed.startswith(f"{package_name}:"):
            return TextRange(number, indent, number, len(line))

    return None
