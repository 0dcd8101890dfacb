"""Shared test fixtures."""

from __future__ import annotations

import io
import shutil
import struct
import zipfile
from pathlib import Path

import httpx
import pytest

EXAMPLE_DIR = Path(__file__).resolve().parent.parent / "example"

ROOT_TOML = """\
[project]
name = "buildsystem"
group = "de.eintosti"
version = "3.0.0"

[workspace]
members = ["buildsystem-api", "buildsystem-abstraction/*", "buildsystem-core"]
"""


def make_class_file(this_class: str, constants: list[str] | None = None) -> bytes:
    """Build a minimal, valid class file.

    The constant pool holds the class and super class, the given UTF-8
    constants (each also referenced by a String constant) and one Long, so
    two-slot entries are exercised.
    """
    pool: list[bytes] = []
    slots = 0

    def add(entry: bytes, width: int = 1) -> int:
        nonlocal slots
        pool.append(entry)
        index = slots + 1
        slots += width
        return index

    def utf8(value: str) -> int:
        raw = value.encode("utf-8")
        return add(b"\x01" + struct.pack(">H", len(raw)) + raw)

    this_index = add(b"\x07" + struct.pack(">H", utf8(this_class)))
    super_index = add(b"\x07" + struct.pack(">H", utf8("java/lang/Object")))
    add(b"\x05" + struct.pack(">q", 42), width=2)
    for value in constants or []:
        add(b"\x08" + struct.pack(">H", utf8(value)))

    header = struct.pack(">IHHH", 0xCAFEBABE, 0, 52, slots + 1)
    body = struct.pack(">HHHHHHH", 0x21, this_index, super_index, 0, 0, 0, 0)
    return header + b"".join(pool) + body


def make_jar(entries: dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buf.getvalue()


def write_jar_file(path: Path, entries: dict[str, bytes]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(make_jar(entries))
    return path


def read_jar(path: Path) -> dict[str, bytes]:
    with zipfile.ZipFile(path) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


# Bundled third-party jars served by the fake repository, keyed by file name
THIRD_PARTY_JARS = {
    "paperlib-1.0.7.jar": {
        "io/papermc/lib/PaperLib.class": make_class_file("io/papermc/lib/PaperLib"),
    },
    "XSeries-9.3.1.jar": {
        "com/cryptomorin/xseries/XMaterial.class": make_class_file(
            "com/cryptomorin/xseries/XMaterial"
        ),
    },
    "fastboard-1.2.1.jar": {
        "fr/mrmicky/fastboard/FastBoard.class": make_class_file("fr/mrmicky/fastboard/FastBoard"),
    },
    "bstats-bukkit-3.0.2.jar": {
        "org/bstats/bukkit/Metrics.class": make_class_file(
            "org/bstats/bukkit/Metrics", ["org.bstats.charts.SimplePie"]
        ),
        "META-INF/BSTATS.SF": b"signature",
    },
}


def repository_handler(request: httpx.Request) -> httpx.Response:
    """Serve every .jar: known third-party jars by name, an empty jar otherwise."""
    path = request.url.path
    if not path.endswith(".jar"):
        return httpx.Response(404)
    name = path.rsplit("/", 1)[-1]
    entries = THIRD_PARTY_JARS.get(name, {"placeholder.txt": name.encode()})
    return httpx.Response(200, content=make_jar(entries))


@pytest.fixture
def repo_client() -> httpx.Client:
    """httpx client backed by an in-memory Maven repository."""
    client = httpx.Client(transport=httpx.MockTransport(repository_handler))
    yield client
    client.close()


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ~ (and so the local Maven repository) at an empty directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def example_workspace(tmp_path: Path) -> Path:
    """A copy of the example buildsystem workspace."""
    dest = tmp_path / "workspace"
    shutil.copytree(EXAMPLE_DIR, dest)
    return dest


@pytest.fixture
def write_workspace(tmp_path: Path):
    """Factory writing a workspace from {relative dir: module.toml} pairs."""

    def _write(modules: dict[str, str], root_toml: str = ROOT_TOML) -> Path:
        root = tmp_path / "ws"
        root.mkdir(exist_ok=True)
        (root / "jarsmith.toml").write_text(root_toml)
        for rel, content in modules.items():
            module_dir = root / rel
            module_dir.mkdir(parents=True, exist_ok=True)
            (module_dir / "module.toml").write_text(content)
        return root

    return _write
