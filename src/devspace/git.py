"""Subprocess helpers for git and dotnet.

Every call takes an explicit working directory; nothing here changes the
process-wide current directory.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from .utils.errors import ToolNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of one external command."""

    args: list[str]
    returncode: int
    output: str = ""
    cwd: Path | None = field(default=None)

    @property
    def success(self) -> bool:
        """Zero exit status is the only success signal."""
        return self.returncode == 0


def _combine(stdout: str | None, stderr: str | None) -> str:
    parts = [p.rstrip("\n") for p in (stdout, stderr) if p and p.strip()]
    return "\n".join(parts)


def run_command(args: list[str], cwd: Path | None = None) -> CommandResult:
    """Run an external command and capture its output.

    Never raises on a non-zero exit; the caller decides what failure means.
    No timeout is applied.

    Raises:
        ToolNotFoundError: If the executable is not on PATH.
    """
    logger.debug(f"Running {' '.join(args)} (cwd={cwd})")
    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        # A missing cwd also surfaces as FileNotFoundError
        if cwd is not None and not Path(cwd).is_dir():
            raise
        raise ToolNotFoundError(args[0]) from e

    output = _combine(result.stdout, result.stderr)
    if result.returncode != 0:
        logger.debug(f"{args[0]} exited with {result.returncode}: {output}")
    return CommandResult(args=list(args), returncode=result.returncode, output=output, cwd=cwd)


def run_git(args: list[str], cwd: Path | None = None, git: str = "git") -> CommandResult:
    """Run a git subcommand in the given repository."""
    return run_command([git, *args], cwd=cwd)
