"""Repository specs, credentials and cloning."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote, urlsplit, urlunsplit

from .git import run_git
from .utils.errors import CloneError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepositorySpec:
    """A repository to clone into the workspace root."""

    name: str
    url: str
    path: Path

    @classmethod
    def from_url(cls, url: str, root: Path) -> RepositorySpec:
        """Derive the spec from a clone URL.

        The name is the last path segment with any extension removed, so
        ``https://host/org/Shared.Lib.git`` becomes ``Shared.Lib``.
        """
        name = repo_name_from_url(url)
        return cls(name=name, url=url, path=Path(root) / name)


def repo_name_from_url(url: str) -> str:
    """Return the directory name a clone of ``url`` would get."""
    # Local Windows paths are valid clone sources too
    segment = url.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]
    # scp-like syntax without a slash: git@host:repo.git
    segment = segment.rsplit(":", 1)[-1]
    if "." in segment:
        stem, _, _ = segment.rpartition(".")
        if stem:
            segment = stem
    if not segment:
        raise ValueError(f"Cannot derive a repository name from {url!r}")
    return segment


@dataclass(frozen=True)
class Credentials:
    """Username and secret for HTTP(S) clone URLs. Never persisted."""

    username: str
    secret: str

    def apply(self, url: str) -> str:
        """Splice the credentials into ``url`` as userinfo.

        Only http and https URLs are rewritten; anything else is returned
        as-is. Existing userinfo is replaced.
        """
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https"):
            return url

        host = parts.hostname or ""
        if parts.port:
            host = f"{host}:{parts.port}"
        userinfo = quote(self.username, safe="")
        if self.secret:
            userinfo += ":" + quote(self.secret, safe="")
        return urlunsplit((parts.scheme, f"{userinfo}@{host}", parts.path, parts.query, parts.fragment))

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, secret='***')"


def clone_repository(
    spec: RepositorySpec,
    credentials: Credentials | None = None,
    git: str = "git",
) -> bool:
    """Clone ``spec`` unless its destination already exists.

    Returns:
        True if a clone ran, False if the folder was already present.

    Raises:
        CloneError: If git exits non-zero.
    """
    if spec.path.exists():
        logger.info(f"{spec.name} already present at {spec.path}, skipping clone")
        return False

    url = credentials.apply(spec.url) if credentials else spec.url
    spec.path.parent.mkdir(parents=True, exist_ok=True)

    logger.info(f"Cloning {spec.name} from {spec.url}")
    result = run_git(["clone", url, str(spec.path)], cwd=spec.path.parent, git=git)
    if not result.success:
        output = result.output
        if credentials and credentials.secret:
            output = output.replace(credentials.secret, "***")
            output = output.replace(quote(credentials.secret, safe=""), "***")
        raise CloneError(spec.name, spec.url, output)
    return True
