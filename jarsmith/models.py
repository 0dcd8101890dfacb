"""Data models for jarsmith.

These Pydantic models represent the build description: repositories,
dependency declarations, relocation rules and the mutable project handle
that conventions configure in place.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class Repository(BaseModel):
    """A named artifact repository.

    Attributes:
        name: Display name (e.g. "Spigot").
        url: Base URL of the Maven-layout repository, with trailing slash.
             Local repositories use a ``file://`` URL.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    url: str


class Coordinate(BaseModel):
    """Maven coordinate of an external artifact."""

    model_config = ConfigDict(frozen=True)

    group: str
    artifact: str
    version: str
    classifier: str | None = None

    def __str__(self) -> str:
        base = f"{self.group}:{self.artifact}:{self.version}"
        return f"{base}:{self.classifier}" if self.classifier else base


class Scope(str, Enum):
    """Resolution scope of a dependency.

    COMPILE_ONLY entries are needed to compile but are provided by the
    server at runtime. BUNDLED entries are embedded in the merged artifact.
    """

    COMPILE_ONLY = "compile-only"
    BUNDLED = "bundled"


class Dependency(BaseModel):
    """A dependency declaration.

    Exactly one of ``coordinate`` (external artifact) or ``project``
    (path of another workspace module, e.g. ":buildsystem-api") is set.
    """

    model_config = ConfigDict(frozen=True)

    scope: Scope
    coordinate: Coordinate | None = None
    project: str | None = None

    def __str__(self) -> str:
        target = self.project if self.project else str(self.coordinate)
        return f"{self.scope.value} {target}"


class RelocationRule(BaseModel):
    """Rewrite classes under ``pattern`` to live under ``destination``.

    Both fields are dotted package prefixes, e.g.
    ``io.papermc.lib`` → ``com.eintosti.buildsystem.util.external.paperlib``.
    """

    model_config = ConfigDict(frozen=True)

    pattern: str
    destination: str


class JavaSettings(BaseModel):
    """Compiler settings for units that produce compiled output."""

    source_compatibility: str = "1.8"
    target_compatibility: str = "1.8"
    encoding: str = "UTF-8"


class ResourceSettings(BaseModel):
    """How resource directories are processed.

    Attributes:
        dirs: Resource directories relative to the module, copied in order.
            When two of them provide the same path the later one is kept.
        expand: Paths, relative to a resource directory, whose ``${...}``
            placeholders are substituted.
        properties: Values available to the expansion.
        encoding: Charset used to read and write expanded files.
    """

    dirs: list[str] = Field(default_factory=lambda: ["src/main/resources"])
    expand: list[str] = Field(default_factory=list)
    properties: dict[str, str] = Field(default_factory=dict)
    encoding: str = "UTF-8"


class ShadowSettings(BaseModel):
    """Merged-artifact settings for units applying the shadow plugin."""

    archive_file_name: str
    relocations: list[RelocationRule] = Field(default_factory=list)
    aggregates: list[str] = Field(default_factory=list)


class Project(BaseModel):
    """A build unit: the workspace root or one module.

    Conventions mutate this handle in place while the workspace is being
    evaluated. Nothing here outlives a single build invocation.

    Attributes:
        name: Short name, the last segment of ``path``.
        path: Gradle-style path (":" for the root, ":a:b" for nested modules).
        directory: Absolute directory of the unit.
        group: Maven group, inherited from the root by the common convention.
        version: Version string, inherited from the root.
        plugins: Applied plugin ids ("java", "java-library", "shadow").
    """

    name: str
    path: str
    directory: Path
    group: str | None = None
    version: str | None = None
    description: str | None = None
    plugins: list[str] = Field(default_factory=list)
    repositories: list[Repository] = Field(default_factory=list)
    dependencies: list[Dependency] = Field(default_factory=list)
    java: JavaSettings | None = None
    resources: ResourceSettings = Field(default_factory=ResourceSettings)
    shadow: ShadowSettings | None = None
    applied_conventions: list[str] = Field(default_factory=list)

    @property
    def is_java(self) -> bool:
        return "java" in self.plugins or "java-library" in self.plugins

    @property
    def build_dir(self) -> Path:
        return self.directory / "build"

    @property
    def jar_file_name(self) -> str:
        return f"{self.name}-{self.version}.jar"

    def add_repository(self, repo: Repository) -> bool:
        """Register a repository unless one with the same URL exists.

        Returns:
            True if the repository was added.
        """
        if any(r.url == repo.url for r in self.repositories):
            return False
        self.repositories.append(repo)
        return True

    def add_dependency(self, dep: Dependency) -> None:
        if dep not in self.dependencies:
            self.dependencies.append(dep)

    def apply_plugin(self, plugin_id: str) -> None:
        if plugin_id not in self.plugins:
            self.plugins.append(plugin_id)

    def dependencies_in(self, scope: Scope) -> list[Dependency]:
        return [d for d in self.dependencies if d.scope == scope]


class Workspace(BaseModel):
    """The evaluated build: root project plus every module by path."""

    root: Project
    projects: dict[str, Project] = Field(default_factory=dict)

    def project(self, path: str) -> Project:
        if path == ":":
            return self.root
        return self.projects[path]

    def children_of(self, path: str) -> list[Project]:
        """Direct child modules of ``path``, sorted by path."""
        prefix = ":" if path == ":" else path + ":"
        children = [
            p
            for p_path, p in self.projects.items()
            if p_path.startswith(prefix) and ":" not in p_path[len(prefix) :]
        ]
        return sorted(children, key=lambda p: p.path)


class Task(BaseModel):
    """A node in the task graph.

    Attributes:
        project: Path of the owning project.
        name: Task name (e.g. "compileJava").
        depends_on: Ids of tasks that must complete first.
    """

    project: str
    name: str
    depends_on: list[str] = Field(default_factory=list)

    @property
    def id(self) -> str:
        return f"{self.project.rstrip(':')}:{self.name}"
