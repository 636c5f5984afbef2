"""Version helpers for the outdated check.

The comparison here is deliberately simple: version strings are reduced to
their digits and dots and compared component by component. Range syntax,
pre-release tags and build metadata are not interpreted.
"""

import re

_EMBEDDED_VERSION = re.compile(r"\d+\.\d+\.\d+")
_NON_NUMERIC = re.compile(r"[^0-9.]")

FALLBACK_VERSION = "1.0.0"


def _components(version: str) -> list[int]:
    cleaned = _NON_NUMERIC.sub("", version)
    return [int(part) if part else 0 for part in cleaned.split(".")]


def _reduce(constraint: str) -> str:
    """Return the first ``X.Y.Z`` in a constraint, or the constraint itself."""
    match = _EMBEDDED_VERSION.search(constraint)
    return match.group(0) if match else constraint


def is_outdated(declared: str | None, latest: str | None) -> bool:
    """Check whether ``latest`` is numerically newer than ``declared``.

    Missing components count as 0, so "1.0" and "1.0.0" compare equal.
    A constraint such as ">=1.0.0 <2.0.0" is compared through its first
    embedded version ("1.0.0").

    Args:
        declared: Declared version constraint (e.g., "^1.2.3").
        latest: Latest version reported by the registry.

    Returns:
        True on the first component where latest is greater, False on the
        first where declared is greater, and False when all are equal or
        either side is empty.
    """
    if not declared or not latest:
        return False

    declared = _reduce(declared)
    latest = _reduce(latest)
    if not _NON_NUMERIC.sub("", declared) or not _NON_NUMERIC.sub("", latest):
        return False

    current_parts = _components(declared)
    latest_parts = _components(latest)

    for i in range(max(len(current_parts), len(latest_parts))):
        current = current_parts[i] if i < len(current_parts) else 0
        newest = latest_parts[i] if i < len(latest_parts) else 0
        if newest > current:
            return True
        if current > newest:
            return False

    return False


def extract_version(constraint: str | None) -> str:
    """Extract a display version from a constraint.

    Examples:
        "^1.2.3" -> "1.2.3"
        ">=1.0.0 <2.0.0" -> "1.0.0"
        "any" -> "any"
        "" -> "1.0.0"
    """
    if not constraint or not isinstance(constraint, str):
        return FALLBACK_VERSION
    match = _EMBEDDED_VERSION.search(constraint)
    return match.group(0) if match else (constraint.strip() or FALLBACK_VERSION)


def normalize_version(version: str | None) -> str:
    """Coerce a requested version into caret-constraint form.

    One leading "^" or "~" is dropped and "^" is prepended, so "1.2.0",
    "~1.2.0" and "^1.2.0" all become "^1.2.0". An empty request becomes
    "^1.0.0".
    """
    if not version:
        return f"^{FALLBACK_VERSION}"
    if version[0] in "^~":
        version = version[1:]
    return f"^{version}"
