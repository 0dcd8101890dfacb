"""Shell utilities.

Provides thin wrappers around subprocess calls for the JDK tools the build
invokes, plus output formatting helpers.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from .errors import TaskExecutionError


def run(*args: str, cwd: Path | None = None, check: bool = True) -> subprocess.CompletedProcess[bytes]:
    """Run an external command.

    Output is not captured; it streams directly to the terminal so compiler
    diagnostics are visible.

    Args:
        *args: Command and arguments (e.g., "javac", "-d", "out").
        cwd: Working directory for the command.
        check: If True (default), raise on non-zero exit.

    Returns:
        CompletedProcess with returncode for checking success.
    """
    return subprocess.run(args, cwd=cwd, check=check)


def jdk_tool(name: str) -> str:
    """Locate a JDK executable (javac, javadoc) on PATH.

    Raises:
        TaskExecutionError: If the tool is not installed.
    """
    found = shutil.which(name)
    if not found:
        raise TaskExecutionError(f"'{name}' not found on PATH; is a JDK installed?")
    return found


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the phases of a build in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def announce(task_id: str, outcome: str = "") -> None:
    """Print the one-line header for a task, with an optional outcome."""
    suffix = f" {outcome}" if outcome else ""
    print(f"> Task {task_id}{suffix}")
