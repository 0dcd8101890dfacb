"""Shared build conventions.

A convention is a function taking the mutable project handle and the
workspace root. Module descriptors list the conventions they apply by name;
each is applied at most once per project.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .errors import ConfigurationError
from .models import JavaSettings, Project, RelocationRule, Repository, ShadowSettings

logger = logging.getLogger(__name__)

MAVEN_LOCAL = Repository(name="MavenLocal", url="file://~/.m2/repository/")
MAVEN_CENTRAL = Repository(name="MavenCentral", url="https://repo.maven.apache.org/maven2/")

COMMON_REPOSITORIES = [
    MAVEN_LOCAL,
    MAVEN_CENTRAL,
    Repository(name="Spigot", url="https://hub.spigotmc.org/nexus/content/repositories/snapshots/"),
    Repository(name="PaperMC", url="https://papermc.io/repo/repository/maven-public/"),
    Repository(
        name="OSS Sonatype Snapshots",
        url="https://oss.sonatype.org/content/repositories/snapshots/",
    ),
]

CORE_REPOSITORIES = [
    Repository(name="AuthLib", url="https://libraries.minecraft.net/"),
    Repository(name="PaperMC", url="https://papermc.io/repo/repository/maven-public/"),
    Repository(name="EngineHub", url="https://maven.enginehub.org/repo/"),
    Repository(
        name="PlaceholderAPI",
        url="https://repo.extendedclip.com/content/repositories/placeholderapi/",
    ),
]

JAVA_COMPATIBILITY = "1.8"
SOURCE_ENCODING = "UTF-8"

SHADE_PATH = "com.eintosti.buildsystem.util.external"
CORE_RELOCATIONS = [
    RelocationRule(pattern="io.papermc.lib", destination=f"{SHADE_PATH}.paperlib"),
    RelocationRule(pattern="com.cryptomorin.xseries", destination=f"{SHADE_PATH}.xseries"),
    RelocationRule(pattern="fr.mrmicky.fastboard", destination=f"{SHADE_PATH}.fastboard"),
    RelocationRule(pattern="org.bstats", destination=f"{SHADE_PATH}.bstats"),
]

DEFAULT_AGGREGATION_ROOT = ":buildsystem-abstraction"
EXPANDED_RESOURCE = "plugin.yml"

Convention = Callable[[Project, Project], None]


def apply_common_configuration(project: Project, root: Project) -> None:
    """Give a unit the root identity, the shared repositories and Java 8 settings.

    Raises:
        ConfigurationError: If the root project's group or version is unset.
    """
    if "common" in project.applied_conventions:
        logger.debug("%s: common configuration already applied", project.path)
        return
    if not root.group or not root.version:
        raise ConfigurationError(
            "Root project group and version must be set before applying the common configuration"
        )

    project.group = root.group
    project.version = root.version

    for repo in COMMON_REPOSITORIES:
        project.add_repository(repo)

    if project.is_java:
        project.java = JavaSettings(
            source_compatibility=JAVA_COMPATIBILITY,
            target_compatibility=JAVA_COMPATIBILITY,
            encoding=SOURCE_ENCODING,
        )

    project.applied_conventions.append("common")


def apply_core_configuration(project: Project, root: Project) -> None:
    """Configure the plugin module: extra repositories, shading and templating.

    The aggregated subprojects are filled in later by the workspace, which
    knows the full set of discovered modules.
    """
    apply_common_configuration(project, root)
    if "core" in project.applied_conventions:
        return

    for repo in CORE_REPOSITORIES:
        if not project.add_repository(repo):
            logger.debug("%s: repository %s already registered", project.path, repo.name)

    project.apply_plugin("shadow")
    project.shadow = ShadowSettings(
        archive_file_name=f"{root.name}-{project.version}.jar",
        relocations=list(CORE_RELOCATIONS),
    )

    project.resources.encoding = SOURCE_ENCODING
    if EXPANDED_RESOURCE not in project.resources.expand:
        project.resources.expand.append(EXPANDED_RESOURCE)
    project.resources.properties["version"] = str(project.version)

    project.applied_conventions.append("core")


CONVENTIONS: dict[str, Convention] = {
    "common": apply_common_configuration,
    "core": apply_core_configuration,
}


def apply_convention(name: str, project: Project, root: Project) -> None:
    """Apply a convention by name.

    Raises:
        ConfigurationError: If no convention has that name.
    """
    try:
        convention = CONVENTIONS[name]
    except KeyError:
        raise ConfigurationError(
            f"{project.path}: unknown convention {name!r} (known: {', '.join(sorted(CONVENTIONS))})"
        ) from None
    convention(project, root)
