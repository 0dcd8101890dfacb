"""Resource processing.

Copies the resource directories into the build directory, expanding
``${name}`` placeholders in the files listed in the project's resource
settings (the plugin descriptor gets the project version this way).
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from string import Template

from .errors import ConfigurationError, MissingResourceError
from .models import Project

logger = logging.getLogger(__name__)


def resources_output_dir(project: Project) -> Path:
    return project.build_dir / "resources" / "main"


def expand_template(text: str, properties: dict[str, str], source: str = "<template>") -> str:
    """Substitute ``${name}`` placeholders.

    Raises:
        ConfigurationError: If the text references an unknown property or
            contains a malformed placeholder.
    """
    try:
        return Template(text).substitute(properties)
    except KeyError as exc:
        raise ConfigurationError(f"{source}: no value for placeholder ${{{exc.args[0]}}}") from exc
    except ValueError as exc:
        raise ConfigurationError(f"{source}: {exc}") from exc


def process_resources(project: Project) -> Path:
    """Copy and filter resources for a project.

    The project's resource directories are copied in order; when two of them
    contain the same relative path the later one wins. Expansion targets are
    matched on their path relative to the resource directory, so a nested
    ``sub/plugin.yml`` is neither expanded nor accepted for ``plugin.yml``.

    Returns:
        The output directory.

    Raises:
        MissingResourceError: If a file listed for expansion is absent.
    """
    settings = project.resources
    out_dir = resources_output_dir(project)
    if out_dir.exists():
        shutil.rmtree(out_dir)
    out_dir.mkdir(parents=True)

    copied: dict[str, Path] = {}
    for src_dir in (project.directory / d for d in settings.dirs):
        if not src_dir.is_dir():
            continue
        for src in sorted(p for p in src_dir.rglob("*") if p.is_file()):
            rel = src.relative_to(src_dir).as_posix()
            if rel in copied:
                logger.debug("%s: %s overrides %s", project.path, src, copied[rel])
            copied[rel] = src

    missing = [name for name in settings.expand if name not in copied]
    if missing:
        raise MissingResourceError(
            f"{project.path}: resource(s) to expand not found: {', '.join(missing)}"
        )

    for rel, src in copied.items():
        dest = out_dir / rel
        dest.parent.mkdir(parents=True, exist_ok=True)
        if rel in settings.expand:
            text = src.read_text(encoding=settings.encoding)
            expanded = expand_template(text, settings.properties, source=rel)
            dest.write_text(expanded, encoding=settings.encoding)
        else:
            shutil.copyfile(src, dest)

    return out_dir
