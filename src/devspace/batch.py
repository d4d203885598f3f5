"""Batch git operations across every repository in a folder."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .git import CommandResult, run_git

logger = logging.getLogger(__name__)


@dataclass
class RepoStatus:
    """Short status of one repository."""

    path: Path
    output: str = ""
    error: str = ""

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def has_changes(self) -> bool:
        return not self.error and bool(self.output.strip())


def is_repository(path: Path) -> bool:
    """A folder is a repository if it holds git metadata.

    ``.git`` may be a file for worktrees and submodule checkouts.
    """
    return path.is_dir() and (path / ".git").exists()


def discover_repositories(root: Path) -> list[Path]:
    """List the immediate subfolders of ``root`` that are repositories, by name."""
    root = Path(root)
    if not root.is_dir():
        logger.debug(f"{root} is not a directory")
        return []
    return sorted((child for child in root.iterdir() if is_repository(child)), key=lambda p: p.name.lower())


def run_in_all(repos: list[Path], args: list[str], git: str = "git") -> list[CommandResult]:
    """Run ``git <args>`` in every repository.

    Each repository is attempted exactly once; a failure does not stop the
    remaining ones.
    """
    results = []
    for repo in repos:
        result = run_git(args, cwd=repo, git=git)
        if result.success:
            logger.debug(f"{repo.name}: git {' '.join(args)} succeeded")
        else:
            logger.warning(f"{repo.name}: git {' '.join(args)} failed ({result.returncode})")
        results.append(result)
    return results


def status_all(repos: list[Path], git: str = "git") -> list[RepoStatus]:
    """Collect ``git status --short`` for every repository."""
    statuses = []
    for repo in repos:
        result = run_git(["status", "--short"], cwd=repo, git=git)
        if result.success:
            statuses.append(RepoStatus(path=repo, output=result.output))
        else:
            statuses.append(RepoStatus(path=repo, error=result.output or f"exit code {result.returncode}"))
    return statuses


def create_branch(repos: list[Path], name: str, git: str = "git") -> list[CommandResult]:
    return run_in_all(repos, ["checkout", "-b", name], git=git)


def switch_branch(repos: list[Path], name: str, git: str = "git") -> list[CommandResult]:
    return run_in_all(repos, ["checkout", name], git=git)


def pull_all(repos: list[Path], git: str = "git") -> list[CommandResult]:
    return run_in_all(repos, ["pull"], git=git)
