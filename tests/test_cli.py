"""Tests for the jarsmith command line."""

from __future__ import annotations

from pathlib import Path

from click.testing import CliRunner

from jarsmith.cli import cli


def invoke(workspace: Path, *args: str):
    return CliRunner().invoke(cli, ["-p", str(workspace), *args])


def test_projects(example_workspace: Path) -> None:
    result = invoke(example_workspace, "projects")
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0] == "Root project 'buildsystem' 3.0.0"
    assert "  :buildsystem-core - Core" in lines
    assert "  :buildsystem-abstraction:adapter-1_13 - Adapter for 1.13" in lines


def test_tasks_lists_execution_order(example_workspace: Path) -> None:
    result = invoke(example_workspace, "tasks", ":buildsystem-core:shadowJar")
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[-1].startswith(":buildsystem-core:shadowJar ← :buildsystem-core:jar")
    assert ":buildsystem-abstraction:common:assemble ← :buildsystem-abstraction:common:jar" in lines


def test_tasks_unknown(example_workspace: Path) -> None:
    result = invoke(example_workspace, "tasks", "publish")
    assert result.exit_code == 1
    assert "BUILD FAILED: Task 'publish' not found" in result.output


def test_dependencies(example_workspace: Path) -> None:
    result = invoke(example_workspace, "dependencies")
    assert result.exit_code == 0, result.output
    assert "  repository MavenCentral: https://repo.maven.apache.org/maven2/" in result.output
    assert "io.papermc:paperlib:1.0.7" in result.output
    assert (
        "  relocate io.papermc.lib → com.eintosti.buildsystem.util.external.paperlib"
        in result.output
    )


def test_check(example_workspace: Path) -> None:
    result = invoke(example_workspace, "check")
    assert result.exit_code == 0, result.output
    assert "Workspace is consistent" in result.output


def test_clean(example_workspace: Path) -> None:
    build_dir = example_workspace / "buildsystem-core" / "build"
    build_dir.mkdir()
    result = invoke(example_workspace, "clean")
    assert result.exit_code == 0, result.output
    assert not build_dir.exists()
    assert "> Task :buildsystem-api:clean UP-TO-DATE" in result.output


def test_missing_root_file(tmp_path: Path) -> None:
    result = invoke(tmp_path, "projects")
    assert result.exit_code == 1
    assert "BUILD FAILED" in result.output
    assert "jarsmith.toml" in result.output
