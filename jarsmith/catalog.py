"""Version catalog support.

Module descriptors refer to libraries as ``libs.<alias>``; the aliases are
defined in ``gradle/libs.versions.toml``:

    [versions]
    xseries = "9.3.1"

    [libraries]
    xseries = { module = "com.github.cryptomorin:XSeries", version.ref = "xseries" }
    paperlib = "io.papermc:paperlib:1.0.7"
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from .coordinates import parse_coordinate
from .errors import ConfigurationError
from .models import Coordinate
from .toml import load_toml

CATALOG_PREFIX = "libs."


def normalize_alias(alias: str) -> str:
    """Normalize alias separators so "bstats-bukkit" and "bstats.bukkit" match."""
    return re.sub(r"[-_.]", ".", alias).lower()


class VersionCatalog:
    """Alias → coordinate lookup built from a libs.versions.toml file."""

    def __init__(self, libraries: dict[str, Coordinate] | None = None) -> None:
        self.libraries: dict[str, Coordinate] = {
            normalize_alias(k): v for k, v in (libraries or {}).items()
        }

    @classmethod
    def load(cls, path: Path) -> VersionCatalog:
        """Parse a catalog file. A missing file yields an empty catalog."""
        if not path.exists():
            return cls()
        doc = load_toml(path)
        versions = {str(k): str(v) for k, v in doc.get("versions", {}).items()}
        libraries: dict[str, Coordinate] = {}
        for alias, entry in doc.get("libraries", {}).items():
            libraries[str(alias)] = _library_coordinate(str(alias), entry, versions)
        return cls(libraries)

    def resolve(self, reference: str) -> Coordinate:
        """Look up a ``libs.<alias>`` reference.

        Raises:
            ConfigurationError: If the alias is not defined.
        """
        alias = normalize_alias(reference.removeprefix(CATALOG_PREFIX))
        try:
            return self.libraries[alias]
        except KeyError:
            raise ConfigurationError(f"Unknown version catalog entry {reference!r}") from None


def _library_coordinate(alias: str, entry: Any, versions: dict[str, str]) -> Coordinate:
    if isinstance(entry, str):
        return parse_coordinate(entry)

    if "module" in entry:
        group, _, name = str(entry["module"]).partition(":")
    else:
        group, name = str(entry.get("group", "")), str(entry.get("name", ""))
    if not group or not name:
        raise ConfigurationError(f"Catalog library {alias!r} has no module or group/name")

    version = entry.get("version")
    if isinstance(version, dict):
        ref = str(version.get("ref", ""))
        if ref not in versions:
            raise ConfigurationError(f"Catalog library {alias!r} refers to unknown version {ref!r}")
        version = versions[ref]
    if not version:
        raise ConfigurationError(f"Catalog library {alias!r} has no version")
    return Coordinate(group=group, artifact=name, version=str(version))
