"""Jar packaging and merging.

``write_jar`` packs plain module jars; ``merge_jars`` builds the shaded
plugin jar from the module's own jar plus every bundled jar, relocating
third-party packages on the way.
"""

from __future__ import annotations

import fnmatch
import logging
import zipfile
from collections.abc import Iterable
from pathlib import Path

from .relocation import Relocator

logger = logging.getLogger(__name__)

MANIFEST_NAME = "META-INF/MANIFEST.MF"
# Fixed timestamp so identical inputs give identical jars
ENTRY_DATE = (1980, 2, 1, 0, 0, 0)

EXCLUDED_ENTRIES = [
    MANIFEST_NAME,
    "META-INF/INDEX.LIST",
    "META-INF/*.SF",
    "META-INF/*.DSA",
    "META-INF/*.RSA",
    "module-info.class",
    "META-INF/versions/*/module-info.class",
]


def manifest(attributes: dict[str, str] | None = None) -> bytes:
    lines = ["Manifest-Version: 1.0", "Created-By: jarsmith"]
    lines += [f"{k}: {v}" for k, v in (attributes or {}).items()]
    return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")


def is_excluded(entry_name: str) -> bool:
    return any(fnmatch.fnmatchcase(entry_name, pattern) for pattern in EXCLUDED_ENTRIES)


def write_jar(dest: Path, entries: Iterable[tuple[str, bytes]], attributes: dict[str, str] | None = None) -> Path:
    """Write entries to a jar, manifest first."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(dest, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(_entry_info(MANIFEST_NAME), manifest(attributes))
        for name, data in entries:
            zf.writestr(_entry_info(name), data)
    return dest


def directory_entries(*roots: Path) -> list[tuple[str, bytes]]:
    """Collect files under each root as (entry name, content), later roots win."""
    entries: dict[str, bytes] = {}
    for root in roots:
        if not root.is_dir():
            continue
        for path in sorted(p for p in root.rglob("*") if p.is_file()):
            entries[path.relative_to(root).as_posix()] = path.read_bytes()
    return list(entries.items())


def merge_jars(dest: Path, inputs: list[Path], relocator: Relocator) -> Path:
    """Merge jars into one, relocating entries.

    Inputs are read in order; when two inputs contain the same entry (after
    relocation) the later one is kept. Signature files, module descriptors
    and input manifests are dropped.

    Returns:
        The path of the merged jar.
    """
    entries: dict[str, bytes] = {}
    origin: dict[str, Path] = {}
    for jar in inputs:
        with zipfile.ZipFile(jar) as zf:
            for info in zf.infolist():
                if info.is_dir() or is_excluded(info.filename):
                    continue
                name, data = relocator.relocate_entry(info.filename, zf.read(info))
                if name in entries:
                    logger.debug("%s from %s replaces the copy from %s", name, jar.name, origin[name].name)
                entries[name] = data
                origin[name] = jar

    write_jar(dest, entries.items())
    logger.info("Merged %d jars into %s (%d entries)", len(inputs), dest.name, len(entries))
    return dest


def _entry_info(name: str) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(name, ENTRY_DATE)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = 0o644 << 16
    return info
