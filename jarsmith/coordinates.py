"""Maven coordinate utilities.

Provides parsing of "group:artifact:version" strings and the Maven
repository layout used to locate artifacts in local and remote repositories.
"""

from __future__ import annotations

from .errors import ConfigurationError
from .models import Coordinate


def parse_coordinate(notation: str) -> Coordinate:
    """Parse a dependency notation into a Coordinate.

    Examples:
        "io.papermc:paperlib:1.0.7" → Coordinate(group="io.papermc", ...)
        "org.spigotmc:spigot-api:1.19.4-R0.1-SNAPSHOT:shaded" → with classifier

    Raises:
        ConfigurationError: If the notation has fewer than three parts or
            an empty component.
    """
    parts = notation.strip().split(":")
    if len(parts) not in (3, 4) or not all(parts):
        raise ConfigurationError(
            f"Invalid dependency notation {notation!r}; "
            "expected group:artifact:version[:classifier]"
        )
    group, artifact, version, *rest = parts
    return Coordinate(
        group=group,
        artifact=artifact,
        version=version,
        classifier=rest[0] if rest else None,
    )


def version_dir(coord: Coordinate) -> str:
    """Relative directory of a coordinate's version in a Maven repository.

    Example:
        io.papermc:paperlib:1.0.7 → "io/papermc/paperlib/1.0.7/"
    """
    return f"{coord.group.replace('.', '/')}/{coord.artifact}/{coord.version}/"


def artifact_file_name(coord: Coordinate, version: str | None = None) -> str:
    """File name of the jar for a coordinate.

    ``version`` overrides the file version, used for timestamped snapshots
    (e.g. "1.0-20230101.120000-3") while the directory keeps "1.0-SNAPSHOT".
    """
    classifier = f"-{coord.classifier}" if coord.classifier else ""
    return f"{coord.artifact}-{version or coord.version}{classifier}.jar"


def artifact_path(coord: Coordinate, version: str | None = None) -> str:
    """Relative path of a coordinate's jar in a Maven repository."""
    return version_dir(coord) + artifact_file_name(coord, version)


def metadata_path(coord: Coordinate) -> str:
    """Relative path of the version-level maven-metadata.xml."""
    return version_dir(coord) + "maven-metadata.xml"
