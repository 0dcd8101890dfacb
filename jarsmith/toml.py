"""TOML reading utilities.

Uses tomlkit to read the workspace description: the root ``jarsmith.toml``,
one ``module.toml`` per module and the version catalog. Helpers return plain
Python values so the rest of the build never handles tomlkit containers.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import ParseError

from .errors import ConfigurationError

ROOT_FILE = "jarsmith.toml"
MODULE_FILE = "module.toml"
CATALOG_FILE = Path("gradle") / "libs.versions.toml"


def load_toml(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a TOML file.

    Raises:
        ConfigurationError: If the file is missing or not valid TOML.
    """
    if not path.exists():
        raise ConfigurationError(f"{path} not found")
    try:
        return tomlkit.parse(path.read_text(encoding="utf-8"))
    except ParseError as exc:
        raise ConfigurationError(f"{path}: {exc}") from exc


def get_project_identity(doc: tomlkit.TOMLDocument, fallback_name: str) -> dict[str, str | None]:
    """Extract name, group and version from [project].

    Group and version may be absent; the common convention refuses to run
    until both are set.
    """
    project = doc.get("project", {})
    return {
        "name": str(project.get("name", fallback_name)),
        "group": _opt_str(project.get("group")),
        "version": _opt_str(project.get("version")),
    }


def get_workspace_member_globs(doc: tomlkit.TOMLDocument) -> list[str]:
    """Extract workspace member glob patterns from [workspace].members.

    Raises:
        ConfigurationError: If no workspace members are defined.
    """
    members = doc.get("workspace", {}).get("members")
    if not members:
        raise ConfigurationError(f"No [workspace] members defined in {ROOT_FILE}")
    return [str(m) for m in members]


def get_aggregation_root(doc: tomlkit.TOMLDocument, default: str) -> str:
    """Path of the unit whose children are merged into the core artifact."""
    return str(doc.get("workspace", {}).get("aggregation-root", default))


def get_module_section(doc: tomlkit.TOMLDocument) -> dict[str, Any]:
    """Return [module] as a plain dict with defaults filled in."""
    module = doc.get("module", {})
    return {
        "description": _opt_str(module.get("description")),
        "plugins": [str(p) for p in module.get("plugins", [])],
        "conventions": [str(c) for c in module.get("conventions", ["common"])],
    }


def get_repositories(doc: tomlkit.TOMLDocument) -> list[dict[str, str]]:
    """Return the [[repositories]] array of tables.

    Raises:
        ConfigurationError: If an entry lacks a name or url.
    """
    repos: list[dict[str, str]] = []
    for entry in doc.get("repositories", []):
        if "name" not in entry or "url" not in entry:
            raise ConfigurationError("Each [[repositories]] entry needs a name and url")
        repos.append({"name": str(entry["name"]), "url": str(entry["url"])})
    return repos


def get_dependency_notations(doc: tomlkit.TOMLDocument) -> dict[str, list[str]]:
    """Return the raw notations under [dependencies] keyed by scope name."""
    deps = doc.get("dependencies", {})
    return {
        "compile-only": [str(d) for d in deps.get("compile-only", [])],
        "bundled": [str(d) for d in deps.get("bundled", [])],
    }


def get_relocations(doc: tomlkit.TOMLDocument) -> dict[str, str]:
    """Return [shadow.relocate] as a pattern → destination mapping."""
    return {str(k): str(v) for k, v in doc.get("shadow", {}).get("relocate", {}).items()}


def get_resource_expansions(doc: tomlkit.TOMLDocument) -> list[str]:
    """Return the file names listed in [resources].expand."""
    return [str(f) for f in doc.get("resources", {}).get("expand", [])]


def get_resource_dirs(doc: tomlkit.TOMLDocument) -> list[str]:
    """Return the extra resource directories listed in [resources].dirs."""
    return [str(d) for d in doc.get("resources", {}).get("dirs", [])]


def _opt_str(value: Any) -> str | None:
    return None if value is None else str(value)
