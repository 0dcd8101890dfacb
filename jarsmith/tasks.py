"""Task actions.

Each action takes the owning project and the build context and returns an
outcome label for the task header ("" when work was done, "NO-SOURCE" when
there was nothing to do). Lifecycle tasks (classes, assemble) have no action.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable
from pathlib import Path

from .errors import ConfigurationError, TaskExecutionError
from .models import JavaSettings, Project, Scope, Workspace
from .relocation import Relocator
from .resolver import ArtifactResolver
from .resources import process_resources, resources_output_dir
from .shade import directory_entries, merge_jars, write_jar
from .shell import jdk_tool, run

logger = logging.getLogger(__name__)

JAVA_SOURCE_DIR = Path("src") / "main" / "java"


class BuildContext:
    """State shared by the tasks of one build invocation."""

    def __init__(self, workspace: Workspace, resolver: ArtifactResolver) -> None:
        self.workspace = workspace
        self.resolver = resolver

    def project_jar(self, path: str) -> Path:
        project = self.workspace.project(path)
        return libs_dir(project) / project.jar_file_name

    def resolve_external(self, project: Project, scope: Scope | None = None) -> list[Path]:
        """Resolve the project's external coordinates, optionally in one scope."""
        return [
            self.resolver.resolve(dep.coordinate, project.repositories)
            for dep in project.dependencies
            if dep.coordinate is not None and (scope is None or dep.scope == scope)
        ]

    def compile_classpath(self, project: Project) -> list[Path]:
        """Both scopes are visible to the compiler."""
        project_jars = [self.project_jar(d.project) for d in project.dependencies if d.project]
        return list(dict.fromkeys([*project_jars, *self.resolve_external(project)]))

    def bundled_inputs(self, project: Project) -> list[Path]:
        """Jars merged into the shaded artifact, the project's own jar first."""
        project_jars = [
            self.project_jar(d.project) for d in project.dependencies_in(Scope.BUNDLED) if d.project
        ]
        external = self.resolve_external(project, Scope.BUNDLED)
        return list(dict.fromkeys([self.project_jar(project.path), *project_jars, *external]))


def classes_dir(project: Project) -> Path:
    return project.build_dir / "classes" / "java" / "main"


def libs_dir(project: Project) -> Path:
    return project.build_dir / "libs"


def java_sources(project: Project) -> list[Path]:
    src = project.directory / JAVA_SOURCE_DIR
    return sorted(src.rglob("*.java")) if src.is_dir() else []


def _java_settings(project: Project) -> JavaSettings:
    if project.java is None:
        raise ConfigurationError(
            f"{project.path}: no java settings, is the common convention applied?"
        )
    return project.java


def _reset_dir(path: Path) -> Path:
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)
    return path


def _run_jdk_tool(project: Project, task_name: str, args: list[str], sources: list[Path]) -> None:
    """Run a JDK tool with the source list passed through an @argfile."""
    argfile = _reset_dir(project.build_dir / "tmp" / task_name) / "sources.txt"
    argfile.write_text("\n".join(f'"{s.as_posix()}"' for s in sources) + "\n", encoding="utf-8")
    result = run(*args, f"@{argfile}", cwd=project.directory, check=False)
    if result.returncode != 0:
        raise TaskExecutionError(f"{project.path}:{task_name} failed (exit {result.returncode})")


def compile_java(project: Project, ctx: BuildContext) -> str:
    out = _reset_dir(classes_dir(project))
    sources = java_sources(project)
    if not sources:
        return "NO-SOURCE"

    java = _java_settings(project)
    args = [
        jdk_tool("javac"),
        "-source",
        java.source_compatibility,
        "-target",
        java.target_compatibility,
        "-encoding",
        java.encoding,
        "-d",
        str(out),
    ]
    classpath = ctx.compile_classpath(project)
    if classpath:
        args += ["-classpath", os.pathsep.join(str(p) for p in classpath)]
    logger.debug("%s: compiling %d sources", project.path, len(sources))
    _run_jdk_tool(project, "compileJava", args, sources)
    return ""


def javadoc(project: Project, ctx: BuildContext) -> str:
    sources = java_sources(project)
    if not sources:
        return "NO-SOURCE"

    java = _java_settings(project)
    out = _reset_dir(project.build_dir / "docs" / "javadoc")
    args = [
        jdk_tool("javadoc"),
        "-encoding",
        java.encoding,
        "-docencoding",
        java.encoding,
        "-charset",
        java.encoding,
        "-quiet",
        "-d",
        str(out),
    ]
    classpath = ctx.compile_classpath(project)
    if classpath:
        args += ["-classpath", os.pathsep.join(str(p) for p in classpath)]
    _run_jdk_tool(project, "javadoc", args, sources)
    return ""


def process_resources_task(project: Project, ctx: BuildContext) -> str:
    process_resources(project)
    return ""


def jar(project: Project, ctx: BuildContext) -> str:
    dest = libs_dir(project) / project.jar_file_name
    entries = directory_entries(classes_dir(project), resources_output_dir(project))
    write_jar(dest, entries)
    return ""


def shadow_jar(project: Project, ctx: BuildContext) -> str:
    shadow = project.shadow
    if shadow is None:
        raise ConfigurationError(f"{project.path}: shadowJar requires the shadow plugin")
    dest = libs_dir(project) / shadow.archive_file_name
    merge_jars(dest, ctx.bundled_inputs(project), Relocator(shadow.relocations))
    print(f"  {dest.relative_to(ctx.workspace.root.directory)}")
    return ""


def clean(project: Project, ctx: BuildContext) -> str:
    if not project.build_dir.exists():
        return "UP-TO-DATE"
    shutil.rmtree(project.build_dir)
    return ""


TaskAction = Callable[[Project, BuildContext], str]

TASK_ACTIONS: dict[str, TaskAction] = {
    "clean": clean,
    "compileJava": compile_java,
    "processResources": process_resources_task,
    "jar": jar,
    "javadoc": javadoc,
    "shadowJar": shadow_jar,
}
