"""CLI entry point for jarsmith."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from jarsmith.errors import JarsmithError
from jarsmith.models import Scope
from jarsmith.pipeline import check_workspace, plan, run_build
from jarsmith.workspace import load_workspace


def _fail_on_build_error(func: Callable[..., Any]) -> Callable[..., Any]:
    """Report build failures as a click error (exit code 1)."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except JarsmithError as exc:
            raise click.ClickException(f"BUILD FAILED: {exc}") from exc

    return wrapper


@click.group()
@click.version_option(package_name="jarsmith")
@click.option(
    "-p",
    "--project-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Workspace root containing jarsmith.toml.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output.")
@click.pass_context
def cli(ctx: click.Context, project_dir: Path, verbose: bool) -> None:
    """Build multi-module plugin workspaces into one shaded jar."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = project_dir


@cli.command()
@click.argument("tasks", nargs=-1)
@click.pass_obj
@_fail_on_build_error
def build(project_dir: Path, tasks: tuple[str, ...]) -> None:
    """Run TASKS (default: assemble) and everything they depend on."""
    run_build(project_dir, tasks or ("assemble",))


@cli.command()
@click.pass_obj
@_fail_on_build_error
def clean(project_dir: Path) -> None:
    """Delete every module's build directory."""
    run_build(project_dir, ("clean",))


@cli.command("tasks")
@click.argument("requested", nargs=-1)
@click.pass_obj
@_fail_on_build_error
def list_tasks(project_dir: Path, requested: tuple[str, ...]) -> None:
    """Print the execution order for REQUESTED (default: assemble) without running it."""
    workspace = load_workspace(project_dir)
    graph, order = plan(workspace, requested or ("assemble",))
    for tid in order:
        deps = graph[tid].depends_on
        suffix = f" ← {', '.join(deps)}" if deps else ""
        click.echo(f"{tid}{suffix}")


@cli.command()
@click.pass_obj
@_fail_on_build_error
def projects(project_dir: Path) -> None:
    """List the modules of the workspace."""
    workspace = load_workspace(project_dir)
    root = workspace.root
    click.echo(f"Root project '{root.name}' {root.version}")
    for path in sorted(workspace.projects):
        project = workspace.projects[path]
        description = f" - {project.description}" if project.description else ""
        click.echo(f"  {path}{description}")


@cli.command()
@click.pass_obj
@_fail_on_build_error
def dependencies(project_dir: Path) -> None:
    """Show each module's repositories and declared dependencies."""
    workspace = load_workspace(project_dir)
    for path in sorted(workspace.projects):
        project = workspace.projects[path]
        click.echo(path)
        for repo in project.repositories:
            click.echo(f"  repository {repo.name}: {repo.url}")
        for scope in Scope:
            for dep in project.dependencies_in(scope):
                click.echo(f"  {dep}")
        if project.shadow:
            for rule in project.shadow.relocations:
                click.echo(f"  relocate {rule.pattern} → {rule.destination}")


@cli.command()
@click.pass_obj
@_fail_on_build_error
def check(project_dir: Path) -> None:
    """Verify repositories, compiler level and task ordering."""
    problems = check_workspace(load_workspace(project_dir))
    if problems:
        raise click.ClickException("\n".join(problems))
    click.echo("✓ Workspace is consistent")
