"""Aggregate solution file maintenance.

Two modes:

- ``cli``: a ``.sln`` created once with ``dotnet new sln --format sln`` and
  extended with ``dotnet sln add``. The format is pinned to ``sln``; newer SDKs
  default to ``.slnx``. Re-adding a project is left to dotnet, which reports
  it and leaves the file intact.
- ``direct``: a ``.slnx`` listing written from scratch on every run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from xml.sax.saxutils import quoteattr

from .git import CommandResult, run_command

logger = logging.getLogger(__name__)


@dataclass
class SolutionResult:
    """What happened to the solution file."""

    path: Path
    mode: str
    created: bool = False
    failures: list[CommandResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failures


def solution_path(root: Path, name: str, mode: str) -> Path:
    """Location of the solution file for ``mode``."""
    suffix = ".slnx" if mode == "direct" else ".sln"
    return Path(root) / f"{name}{suffix}"


def render_slnx(projects: list[Path]) -> str:
    """Render a minimal .slnx document listing ``projects``."""
    lines = ["<Solution>"]
    for project in projects:
        lines.append(f"  <Project Path={quoteattr(str(project))} />")
    lines.append("</Solution>")
    return "\n".join(lines) + "\n"


def write_direct_solution(root: Path, name: str, projects: list[Path]) -> SolutionResult:
    """Regenerate ``<name>.slnx`` with absolute project paths."""
    path = solution_path(root, name, "direct")
    created = not path.exists()
    path.write_text(render_slnx([p.resolve() for p in projects]), encoding="utf-8")
    logger.info(f"Wrote {path} with {len(projects)} project(s)")
    return SolutionResult(path=path, mode="direct", created=created)


def update_cli_solution(
    root: Path,
    name: str,
    projects: list[Path],
    dotnet: str = "dotnet",
) -> SolutionResult:
    """Create ``<name>.sln`` if needed and add every project through dotnet.

    Non-zero exits from dotnet are collected, not raised.
    """
    path = solution_path(root, name, "cli")
    result = SolutionResult(path=path, mode="cli")

    if not path.exists():
        created = run_command(
            [dotnet, "new", "sln", "--name", name, "--output", str(root), "--format", "sln"],
            cwd=root,
        )
        if not created.success:
            result.failures.append(created)
            return result
        result.created = True
        logger.info(f"Created {path}")

    for project in projects:
        added = run_command([dotnet, "sln", str(path), "add", str(project.resolve())], cwd=root)
        if not added.success:
            result.failures.append(added)

    return result


def update_solution(
    root: Path,
    name: str,
    projects: list[Path],
    mode: str = "cli",
    dotnet: str = "dotnet",
) -> SolutionResult:
    """Bring the solution file in line with ``projects`` using ``mode``."""
    if mode == "direct":
        return write_direct_solution(root, name, projects)
    return update_cli_solution(root, name, projects, dotnet=dotnet)
