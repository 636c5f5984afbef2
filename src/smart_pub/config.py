"""User settings for smart_pub.

Settings are read from a TOML file, either at the top level or under a
``[smart-pub]`` table::

    [smart-pub]
    auto_run_pub_get = true
    enable_cache = true
    cache_expiration = 3600
    max_search_results = 20
    default_search_mode = "visual"
"""

import logging
import tomllib
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "smart_pub" / "config.toml"


class SearchMode(str, Enum):
    """How package search results are presented when adding dependencies."""

    VISUAL = "visual"
    TEXT = "text"


@dataclass
class Settings:
    """Configuration consumed by the cache, registry client and workspace.

    Attributes:
        auto_run_pub_get: Run ``flutter pub get`` when a manifest changes on disk.
        enable_cache: Use the persistent TTL cache for registry responses.
        cache_expiration: Default cache TTL in seconds.
        max_search_results: Requested search page size (capped at 50).
        default_search_mode: Preferred search presentation.
    """

    auto_run_pub_get: bool = True
    enable_cache: bool = True
    cache_expiration: int = 3600
    max_search_results: int = 20
    default_search_mode: SearchMode = SearchMode.VISUAL

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "Settings":
        """Build settings from a decoded TOML mapping.

        Args:
            data: Mapping of setting names to values.

        Returns:
            Settings with defaults for any key not present.

        Raises:
            ValueError: If a value has the wrong type or is out of range.
        """
        known = {f.name: f for f in fields(cls)}
        values: dict[str, Any] = {}

        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown setting: %s", key)
                continue

            if key == "default_search_mode":
                try:
                    values[key] = SearchMode(value)
                except ValueError as e:
                    raise ValueError(
                        f"default_search_mode must be one of "
                        f"{', '.join(m.value for m in SearchMode)}, got {value!r}"
                    ) from e
            elif key in ("auto_run_pub_get", "enable_cache"):
                if not isinstance(value, bool):
                    raise ValueError(f"{key} must be a boolean, got {value!r}")
                values[key] = value
            else:
                # bool is an int subclass; reject it explicitly
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ValueError(f"{key} must be an integer, got {value!r}")
                if value <= 0:
                    raise ValueError(f"{key} must be positive, got {value}")
                values[key] = value

        return cls(**values)


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from a TOML file.

    Args:
        path: Config file to read. Defaults to
            ~/.config/smart_pub/config.toml.

    Returns:
        Parsed settings, or defaults if the file does not exist.

    Raises:
        ValueError: If the file is not valid TOML or holds invalid values.
    """
    path = path or DEFAULT_CONFIG_PATH
    if not path.exists():
        logger.debug("No config file at %s, using defaults", path)
        return Settings()

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e

    section = data.get("smart-pub", data)
    return Settings.from_mapping(section)
