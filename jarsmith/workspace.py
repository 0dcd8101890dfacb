"""Workspace discovery and evaluation.

Reads the root ``jarsmith.toml`` to find module directories, then evaluates
each ``module.toml`` into a Project: plugins first, then conventions, then
the module's own repositories, dependencies and packaging tweaks.
"""

from __future__ import annotations

import glob
import logging
from pathlib import Path

import tomlkit

from .catalog import CATALOG_PREFIX, VersionCatalog
from .conventions import DEFAULT_AGGREGATION_ROOT, apply_convention
from .coordinates import parse_coordinate
from .errors import ConfigurationError
from .models import Dependency, Project, RelocationRule, Repository, Scope, Workspace
from .toml import (
    CATALOG_FILE,
    MODULE_FILE,
    ROOT_FILE,
    get_aggregation_root,
    get_dependency_notations,
    get_module_section,
    get_project_identity,
    get_relocations,
    get_repositories,
    get_resource_dirs,
    get_resource_expansions,
    get_workspace_member_globs,
    load_toml,
)
from .versions import parse_version

logger = logging.getLogger(__name__)


def project_path_for(root_dir: Path, module_dir: Path) -> str:
    """Gradle-style path of a module directory.

    Example:
        <root>/buildsystem-abstraction/common → ":buildsystem-abstraction:common"
    """
    return ":" + ":".join(module_dir.relative_to(root_dir).parts)


def discover_module_dirs(root_dir: Path, member_globs: list[str]) -> list[Path]:
    """Expand member globs to directories containing a module.toml.

    Raises:
        ConfigurationError: If no module directory matches.
    """
    found: list[Path] = []
    for pattern in member_globs:
        for match in sorted(glob.glob(str(root_dir / pattern))):
            p = Path(match)
            if (p / MODULE_FILE).exists() and p not in found:
                found.append(p)
    if not found:
        raise ConfigurationError("No modules found matching workspace members")
    return found


def load_workspace(root_dir: Path) -> Workspace:
    """Discover and evaluate every module of the workspace rooted at root_dir.

    Evaluation happens once, at graph-construction time; the returned
    Workspace is fully configured and statically inspectable.
    """
    root_dir = root_dir.resolve()
    root_doc = load_toml(root_dir / ROOT_FILE)
    identity = get_project_identity(root_doc, root_dir.name)
    if identity["version"]:
        parse_version(identity["version"])

    root = Project(
        name=str(identity["name"]),
        path=":",
        directory=root_dir,
        group=identity["group"],
        version=identity["version"],
    )
    workspace = Workspace(root=root)

    docs: dict[str, tomlkit.TOMLDocument] = {}
    for module_dir in discover_module_dirs(root_dir, get_workspace_member_globs(root_doc)):
        path = project_path_for(root_dir, module_dir)
        workspace.projects[path] = Project(name=module_dir.name, path=path, directory=module_dir)
        docs[path] = load_toml(module_dir / MODULE_FILE)

    catalog = VersionCatalog.load(root_dir / CATALOG_FILE)
    for path in sorted(docs):
        evaluate_module(workspace.projects[path], docs[path], root, catalog)

    aggregation_root = get_aggregation_root(root_doc, DEFAULT_AGGREGATION_ROOT)
    for project in workspace.projects.values():
        if project.shadow is not None:
            aggregate_children(workspace, project, aggregation_root)

    validate_project_dependencies(workspace)
    logger.debug("Evaluated %d modules under %s", len(workspace.projects), root_dir)
    return workspace


def evaluate_module(
    project: Project,
    doc: tomlkit.TOMLDocument,
    root: Project,
    catalog: VersionCatalog,
) -> None:
    """Apply a module descriptor to its project handle."""
    section = get_module_section(doc)
    project.description = section["description"]
    # Plugins go first so conventions can react to them
    for plugin_id in section["plugins"]:
        project.apply_plugin(plugin_id)

    for name in section["conventions"]:
        apply_convention(name, project, root)
    if not project.applied_conventions:
        raise ConfigurationError(f"{project.path}: at least one convention must be applied")

    for repo in get_repositories(doc):
        project.add_repository(Repository(**repo))

    for scope_name, notations in get_dependency_notations(doc).items():
        scope = Scope(scope_name)
        for notation in notations:
            project.add_dependency(parse_dependency(notation, scope, catalog))

    extra_relocations = get_relocations(doc)
    if extra_relocations:
        if project.shadow is None:
            raise ConfigurationError(f"{project.path}: [shadow] requires the core convention")
        for pattern, destination in extra_relocations.items():
            rule = RelocationRule(pattern=pattern, destination=destination)
            if rule not in project.shadow.relocations:
                project.shadow.relocations.append(rule)

    for resource_dir in get_resource_dirs(doc):
        if resource_dir not in project.resources.dirs:
            project.resources.dirs.append(resource_dir)
    for file_name in get_resource_expansions(doc):
        if file_name not in project.resources.expand:
            project.resources.expand.append(file_name)
    if project.resources.expand:
        project.resources.properties.setdefault("version", str(project.version))


def parse_dependency(notation: str, scope: Scope, catalog: VersionCatalog) -> Dependency:
    """Turn a descriptor entry into a Dependency.

    Entries starting with ":" are project paths, ``libs.<alias>`` entries are
    catalog references and anything else is a literal coordinate.
    """
    notation = notation.strip()
    if notation.startswith(":"):
        return Dependency(scope=scope, project=notation)
    if notation.startswith(CATALOG_PREFIX):
        return Dependency(scope=scope, coordinate=catalog.resolve(notation))
    return Dependency(scope=scope, coordinate=parse_coordinate(notation))


def aggregate_children(workspace: Workspace, project: Project, aggregation_root: str) -> None:
    """Bundle every direct child of aggregation_root into project.

    Raises:
        ConfigurationError: If project has no shadow settings or the
            aggregation root has no child modules.
    """
    shadow = project.shadow
    if shadow is None:
        raise ConfigurationError(f"{project.path}: aggregation requires the core convention")
    children = [c for c in workspace.children_of(aggregation_root) if c.path != project.path]
    if not children:
        raise ConfigurationError(f"Aggregation root {aggregation_root!r} has no child modules")

    for child in children:
        project.add_dependency(Dependency(scope=Scope.BUNDLED, project=child.path))
        if child.path not in shadow.aggregates:
            shadow.aggregates.append(child.path)
    logger.debug("%s aggregates %s", project.path, [c.path for c in children])


def validate_project_dependencies(workspace: Workspace) -> None:
    """Ensure project dependencies point at known java modules.

    Raises:
        ConfigurationError: On unknown paths, self-dependencies or targets
            that produce no jar.
    """
    for project in workspace.projects.values():
        for dep in project.dependencies:
            if dep.project is None:
                continue
            if dep.project == project.path:
                raise ConfigurationError(f"{project.path} depends on itself")
            target = workspace.projects.get(dep.project)
            if target is None:
                raise ConfigurationError(f"{project.path}: unknown project {dep.project!r}")
            if not target.is_java:
                raise ConfigurationError(
                    f"{project.path}: {dep.project} does not apply a java plugin"
                )
