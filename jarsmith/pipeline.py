"""Build pipeline: evaluate → plan → execute.

This module orchestrates a jarsmith build:
1. Discover and evaluate every module of the workspace
2. Build the task graph and select the requested tasks
3. Order them topologically
4. Run each task's action, aborting the build on the first failure

The ordering guarantees that every aggregated subproject is assembled
before the shaded plugin jar is merged.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import httpx

from .conventions import COMMON_REPOSITORIES, JAVA_COMPATIBILITY
from .graph import build_task_graph, select_tasks, topo_sort
from .models import Task, Workspace
from .resolver import CACHE_DIR, ArtifactResolver
from .shell import announce, step
from .tasks import TASK_ACTIONS, BuildContext
from .workspace import load_workspace


def evaluate(root_dir: Path) -> Workspace:
    """Load the workspace and print the discovered modules."""
    step("Evaluating workspace")
    workspace = load_workspace(root_dir)
    root = workspace.root
    print(f"  {root.name} {root.version} ({root.group})")
    for path in sorted(workspace.projects):
        project = workspace.projects[path]
        plugins = f" [{', '.join(project.plugins)}]" if project.plugins else ""
        print(f"  {path}{plugins}")
    return workspace


def plan(workspace: Workspace, requested: Iterable[str]) -> tuple[dict[str, Task], list[str]]:
    """Select the requested tasks and their dependencies, in execution order.

    Clean tasks always run before anything else in the same invocation.

    Returns:
        (task graph, ordered task ids)
    """
    graph = build_task_graph(workspace)
    selected = select_tasks(graph, requested)
    order = topo_sort(selected)
    cleans = [tid for tid in order if graph[tid].name == "clean"]
    return graph, cleans + [tid for tid in order if tid not in cleans]


def execute(
    workspace: Workspace,
    graph: dict[str, Task],
    order: list[str],
    client: httpx.Client | None = None,
) -> None:
    """Run tasks in the given order."""
    step(f"Running {len(order)} tasks")
    cache_dir = workspace.root.directory / CACHE_DIR
    with ArtifactResolver(cache_dir, client) as resolver:
        ctx = BuildContext(workspace, resolver)
        for tid in order:
            task = graph[tid]
            action = TASK_ACTIONS.get(task.name)
            outcome = action(workspace.project(task.project), ctx) if action else ""
            announce(tid, outcome)


def run_build(
    root_dir: Path,
    requested: Iterable[str] = ("assemble",),
    *,
    client: httpx.Client | None = None,
) -> list[str]:
    """Execute a full build.

    Args:
        root_dir: Workspace root containing jarsmith.toml.
        requested: Task names or ids to run.
        client: Optional httpx client for remote repositories.

    Returns:
        The executed task ids, in order.
    """
    workspace = evaluate(root_dir)
    graph, order = plan(workspace, requested)
    execute(workspace, graph, order, client)
    print(f"\n{'=' * 60}\nBUILD SUCCESSFUL\n{'=' * 60}")
    return order


def check_workspace(workspace: Workspace) -> list[str]:
    """Structural checks on an evaluated workspace.

    Every module must carry the shared repositories exactly once, java
    modules must compile for the fixed language level, and shadow modules
    must only be packed after all of their aggregated subprojects.

    Returns:
        Human readable problems; empty when the workspace is sound.
    """
    problems: list[str] = []
    for path in sorted(workspace.projects):
        project = workspace.projects[path]
        urls = [r.url for r in project.repositories]
        if len(urls) != len(set(urls)):
            problems.append(f"{path}: duplicate repositories")
        missing = [r.name for r in COMMON_REPOSITORIES if r.url not in urls]
        if missing:
            problems.append(f"{path}: missing shared repositories {', '.join(missing)}")
        if project.is_java and (
            project.java is None
            or project.java.source_compatibility != JAVA_COMPATIBILITY
            or project.java.target_compatibility != JAVA_COMPATIBILITY
        ):
            problems.append(f"{path}: java compatibility is not {JAVA_COMPATIBILITY}")

    graph = build_task_graph(workspace)
    for project in workspace.projects.values():
        if project.shadow is None:
            continue
        shadow_id = Task(project=project.path, name="shadowJar").id
        order = topo_sort(select_tasks(graph, [shadow_id]))
        for child in project.shadow.aggregates:
            assemble_id = Task(project=child, name="assemble").id
            if assemble_id not in order or order.index(assemble_id) > order.index(shadow_id):
                problems.append(f"{shadow_id} does not run after {assemble_id}")
    return problems
