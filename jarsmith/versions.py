"""Version parsing utilities.

Project versions are validated as semver, with special handling for
incomplete version strings (e.g., "3.0" → "3.0.0"). Dependency versions are
left untouched since Maven versions are free-form.
"""

from __future__ import annotations

import semver

from .errors import ConfigurationError

SNAPSHOT_SUFFIX = "-SNAPSHOT"


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Handles incomplete versions by padding with zeros:
    - "3" → "3.0.0"
    - "3.0" → "3.0.0"
    - "3.0.0-SNAPSHOT" → "3.0.0-SNAPSHOT"

    Raises:
        ConfigurationError: If the string is not a valid version.
    """
    core, sep, rest = version_str.partition("-")
    parts = core.split(".")
    # Pad with zeros to ensure we have at least 3 parts
    while len(parts) < 3:
        parts.append("0")
    normalized = ".".join(parts[:3]) + (sep + rest if sep else "")
    try:
        return semver.Version.parse(normalized)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid project version {version_str!r}") from exc


def is_snapshot(version_str: str) -> bool:
    """True for Maven snapshot versions such as "1.19.4-R0.1-SNAPSHOT"."""
    return version_str.endswith(SNAPSHOT_SUFFIX)
