"""Tests for batch git operations."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from devspace.batch import (
    RepoStatus,
    create_branch,
    discover_repositories,
    is_repository,
    pull_all,
    run_in_all,
    status_all,
    switch_branch,
)
from devspace.git import CommandResult


def _make_repos(root: Path, *names: str) -> list[Path]:
    paths = []
    for name in names:
        path = root / name
        (path / ".git").mkdir(parents=True)
        paths.append(path)
    return paths


def _fake_git(failing: set[str], output: str = ""):
    def run(args, cwd=None, git="git"):
        code = 1 if cwd.name in failing else 0
        return CommandResult(args=[git, *args], returncode=code, output=output, cwd=cwd)

    return run


class TestDiscovery:
    """Tests for discover_repositories."""

    def test_sorted_by_name(self, tmp_path: Path) -> None:
        _make_repos(tmp_path, "zeta", "alpha", "Mid")
        assert [p.name for p in discover_repositories(tmp_path)] == ["alpha", "Mid", "zeta"]

    def test_ignores_plain_folders_and_files(self, tmp_path: Path) -> None:
        _make_repos(tmp_path, "repo")
        (tmp_path / "notes").mkdir()
        (tmp_path / "README.md").write_text("hi")

        assert [p.name for p in discover_repositories(tmp_path)] == ["repo"]

    def test_only_immediate_children(self, tmp_path: Path) -> None:
        _make_repos(tmp_path / "group", "nested")
        assert discover_repositories(tmp_path) == []

    def test_git_file_counts(self, tmp_path: Path) -> None:
        """Worktrees have a .git file instead of a folder."""
        worktree = tmp_path / "wt"
        worktree.mkdir()
        (worktree / ".git").write_text("gitdir: /elsewhere/.git/worktrees/wt\n")
        assert is_repository(worktree)
        assert discover_repositories(tmp_path) == [worktree]

    def test_missing_root(self, tmp_path: Path) -> None:
        assert discover_repositories(tmp_path / "missing") == []


class TestRunInAll:
    """Tests for the generic command runner."""

    def test_failure_does_not_stop_iteration(self, tmp_path: Path) -> None:
        repos = _make_repos(tmp_path, "alpha", "beta", "gamma")

        with patch("devspace.batch.run_git", side_effect=_fake_git({"beta"})) as mock_git:
            results = run_in_all(repos, ["pull"])

        assert mock_git.call_count == 3
        assert [r.success for r in results] == [True, False, True]
        assert [r.cwd for r in results] == repos

    def test_passes_explicit_cwd(self, tmp_path: Path) -> None:
        repos = _make_repos(tmp_path, "alpha")

        with patch("devspace.batch.run_git", side_effect=_fake_git(set())) as mock_git:
            run_in_all(repos, ["status"], git="/usr/bin/git")

        mock_git.assert_called_once_with(["status"], cwd=repos[0], git="/usr/bin/git")

    @pytest.mark.parametrize(
        "func,extra,expected",
        [
            (create_branch, ("feature/x",), ["checkout", "-b", "feature/x"]),
            (switch_branch, ("main",), ["checkout", "main"]),
            (pull_all, (), ["pull"]),
        ],
    )
    def test_menu_commands(self, tmp_path: Path, func, extra, expected) -> None:
        repos = _make_repos(tmp_path, "alpha")

        with patch("devspace.batch.run_git", side_effect=_fake_git(set())) as mock_git:
            func(repos, *extra)

        assert mock_git.call_args[0][0] == expected


class TestStatusAll:
    """Tests for status_all."""

    def test_changes_and_clean(self, tmp_path: Path) -> None:
        repos = _make_repos(tmp_path, "alpha", "beta")

        def run(args, cwd=None, git="git"):
            output = " M README.md" if cwd.name == "alpha" else ""
            return CommandResult(args=[git, *args], returncode=0, output=output, cwd=cwd)

        with patch("devspace.batch.run_git", side_effect=run) as mock_git:
            statuses = status_all(repos)

        assert mock_git.call_args[0][0] == ["status", "--short"]
        assert statuses[0].has_changes is True
        assert statuses[0].output == " M README.md"
        assert statuses[1].has_changes is False

    def test_failure_is_not_clean(self, tmp_path: Path) -> None:
        repos = _make_repos(tmp_path, "broken")

        with patch("devspace.batch.run_git", side_effect=_fake_git({"broken"}, "fatal: not a git repository")):
            statuses = status_all(repos)

        assert statuses[0].error == "fatal: not a git repository"
        assert statuses[0].has_changes is False

    def test_repo_status_name(self) -> None:
        assert RepoStatus(path=Path("/ws/alpha")).name == "alpha"
