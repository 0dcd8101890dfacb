"""Task graph utilities.

Builds the task graph for an evaluated workspace and orders it
topologically. Tasks must run in dependency order so that, for instance,
every aggregated subproject is assembled before the merged jar is packed.
"""

from __future__ import annotations

from collections.abc import Iterable

from .errors import ConfigurationError, CycleError
from .models import Project, Scope, Task, Workspace


def project_tasks(project: Project) -> list[Task]:
    """Create the tasks a single project contributes.

    Every project gets ``clean``; java projects also get
    compileJava → classes → jar → assemble, processResources and javadoc;
    shadow projects add shadowJar between jar and assemble.
    """
    path = project.path
    tasks = [Task(project=path, name="clean")]
    if not project.is_java:
        return tasks

    def tid(name: str) -> str:
        return Task(project=path, name=name).id

    # Compiling against another module needs that module's jar
    upstream_jars = list(
        dict.fromkeys(
            Task(project=dep.project, name="jar").id
            for dep in project.dependencies
            if dep.project is not None
        )
    )
    tasks += [
        Task(project=path, name="compileJava", depends_on=upstream_jars),
        Task(project=path, name="processResources"),
        Task(project=path, name="classes", depends_on=[tid("compileJava"), tid("processResources")]),
        Task(project=path, name="jar", depends_on=[tid("classes")]),
        Task(project=path, name="javadoc", depends_on=[tid("compileJava")]),
    ]

    assemble_deps = [tid("jar")]
    if project.shadow is not None:
        bundled_jars = [
            Task(project=dep.project, name="jar").id
            for dep in project.dependencies_in(Scope.BUNDLED)
            if dep.project is not None
        ]
        aggregate_assembles = [
            Task(project=child, name="assemble").id for child in project.shadow.aggregates
        ]
        tasks.append(
            Task(
                project=path,
                name="shadowJar",
                depends_on=list(dict.fromkeys([tid("jar"), *bundled_jars, *aggregate_assembles])),
            )
        )
        assemble_deps.append(tid("shadowJar"))
    tasks.append(Task(project=path, name="assemble", depends_on=assemble_deps))
    return tasks


def build_task_graph(workspace: Workspace) -> dict[str, Task]:
    """Build the full task graph keyed by task id.

    Raises:
        ConfigurationError: If a task depends on a task that does not exist.
    """
    graph: dict[str, Task] = {}
    for path in sorted(workspace.projects):
        for task in project_tasks(workspace.projects[path]):
            graph[task.id] = task

    for task in graph.values():
        missing = [d for d in task.depends_on if d not in graph]
        if missing:
            raise ConfigurationError(f"{task.id} depends on unknown task(s): {', '.join(missing)}")
    return graph


def select_tasks(graph: dict[str, Task], requested: Iterable[str]) -> dict[str, Task]:
    """Return the requested tasks plus everything they transitively depend on.

    A request is either a full id (":buildsystem-core:shadowJar") or a bare
    name ("assemble"), which selects that task in every project that has it.

    Raises:
        ConfigurationError: If a request matches no task.
    """
    queue: list[str] = []
    for request in requested:
        if request.startswith(":"):
            matches = [request] if request in graph else []
        else:
            matches = [tid for tid, t in graph.items() if t.name == request]
        if not matches:
            raise ConfigurationError(f"Task {request!r} not found")
        queue.extend(matches)

    selected: dict[str, Task] = {}
    while queue:
        tid = queue.pop(0)
        if tid in selected:
            continue
        selected[tid] = graph[tid]
        queue.extend(graph[tid].depends_on)
    return selected


def topo_sort(tasks: dict[str, Task]) -> list[str]:
    """Topologically sort tasks by their dependencies.

    Uses Kahn's algorithm to produce an execution order where dependencies
    come before dependents. Ready tasks are taken alphabetically for
    deterministic output.

    Args:
        tasks: Map of task id → Task with depends_on list.

    Returns:
        List of task ids in execution order (dependencies first).

    Raises:
        CycleError: If a dependency cycle is detected.
    """
    # Count incoming edges (dependencies) for each task
    in_degree = {n: 0 for n in tasks}
    # Track reverse dependencies (who depends on each task)
    reverse_deps: dict[str, list[str]] = {n: [] for n in tasks}

    for name, task in tasks.items():
        for dep in task.depends_on:
            # Only count dependencies within the selection
            if dep in tasks:
                in_degree[name] += 1
                reverse_deps[dep].append(name)

    queue = sorted(n for n, d in in_degree.items() if d == 0)
    order: list[str] = []

    while queue:
        node = queue.pop(0)
        order.append(node)
        for dependent in sorted(reverse_deps[node]):
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)
        queue.sort()

    if len(order) != len(tasks):
        remaining = sorted(set(tasks) - set(order))
        raise CycleError(f"Dependency cycle detected involving: {remaining}")

    return order
