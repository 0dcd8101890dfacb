"""Artifact resolution.

Looks up each declared coordinate in the project's repositories, in
declaration order. Local (``file://``) repositories are read in place;
remote ones are downloaded once into the workspace cache using the Maven
layout, so later builds resolve offline.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

import httpx

from .coordinates import artifact_path, metadata_path
from .errors import DependencyResolutionError
from .models import Coordinate, Repository
from .versions import is_snapshot

logger = logging.getLogger(__name__)

CACHE_DIR = Path(".jarsmith") / "cache"


def local_repository_root(repo: Repository) -> Path:
    """Filesystem root of a ``file://`` repository, with ``~`` expanded."""
    return Path(repo.url.removeprefix("file://")).expanduser()


def snapshot_file_version(metadata_xml: bytes, extension: str = "jar") -> str | None:
    """Extract the timestamped file version from snapshot maven-metadata.xml.

    Prefers ``<snapshotVersions>`` (Maven 3 metadata) and falls back to
    ``<snapshot><timestamp/><buildNumber/>``.

    Returns:
        e.g. "1.19.4-R0.1-20230601.123456-42", or None if absent.
    """
    try:
        root = ET.fromstring(metadata_xml)
    except ET.ParseError:
        return None

    for sv in root.iterfind("versioning/snapshotVersions/snapshotVersion"):
        if sv.findtext("extension") == extension and not sv.findtext("classifier"):
            value = sv.findtext("value")
            if value:
                return value

    timestamp = root.findtext("versioning/snapshot/timestamp")
    build_number = root.findtext("versioning/snapshot/buildNumber")
    version = root.findtext("version")
    if timestamp and build_number and version and is_snapshot(version):
        return f"{version.removesuffix('-SNAPSHOT')}-{timestamp}-{build_number}"
    return None


class ArtifactResolver:
    """Resolve coordinates to jar files on disk.

    Args:
        cache_dir: Where downloaded artifacts are stored.
        client: httpx client used for remote repositories. One is created
            (and closed by ``close``) when not given.
    """

    def __init__(self, cache_dir: Path, client: httpx.Client | None = None) -> None:
        self.cache_dir = cache_dir
        self._owns_client = client is None
        self.client = client or httpx.Client(follow_redirects=True, timeout=30.0)
        self._resolved: dict[Coordinate, Path] = {}

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> ArtifactResolver:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def resolve(self, coord: Coordinate, repositories: list[Repository]) -> Path:
        """Find the jar for coord in the first repository that has it.

        Raises:
            DependencyResolutionError: If no repository provides the artifact.
        """
        if coord in self._resolved:
            return self._resolved[coord]

        cached = self.cache_dir / artifact_path(coord)
        if cached.exists():
            logger.debug("%s: cache hit %s", coord, cached)
            self._resolved[coord] = cached
            return cached

        for repo in repositories:
            if repo.url.startswith("file://"):
                found = self._from_local(coord, repo)
            else:
                found = self._from_remote(coord, repo, cached)
            if found is not None:
                logger.info("Resolved %s from %s", coord, repo.name)
                self._resolved[coord] = found
                return found

        tried = "\n".join(f"  - {r.name} ({r.url})" for r in repositories)
        raise DependencyResolutionError(
            f"Could not resolve {coord}. Searched in:\n{tried or '  <no repositories>'}"
        )

    def _from_local(self, coord: Coordinate, repo: Repository) -> Path | None:
        candidate = local_repository_root(repo) / artifact_path(coord)
        return candidate if candidate.is_file() else None

    def _from_remote(self, coord: Coordinate, repo: Repository, dest: Path) -> Path | None:
        base = repo.url if repo.url.endswith("/") else repo.url + "/"
        content = self._fetch(base + artifact_path(coord))

        if content is None and is_snapshot(coord.version):
            metadata = self._fetch(base + metadata_path(coord))
            file_version = snapshot_file_version(metadata) if metadata else None
            if file_version:
                content = self._fetch(base + artifact_path(coord, file_version))

        if content is None:
            return None
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(content)
        return dest

    def _fetch(self, url: str) -> bytes | None:
        """GET a URL; None when missing or the repository misbehaves."""
        try:
            response = self.client.get(url)
        except httpx.HTTPError as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            return None
        if response.status_code == 404:
            return None
        if response.is_error:
            logger.warning("%s returned HTTP %d", url, response.status_code)
            return None
        return response.content
