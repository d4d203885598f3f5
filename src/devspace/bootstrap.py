"""Workspace bootstrapper.

Clones the library and its applications, points each application at the
library's source instead of the published package, and lists every project
in an aggregate solution file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from .config import DevspaceConfig
from .descriptor import (
    BuildDescriptor,
    ensure_ignored,
    ensure_override_import,
    find_build_descriptor,
    require_build_descriptor,
    write_override_file,
)
from .repos import Credentials, RepositorySpec, clone_repository
from .solution import SolutionResult, update_solution

logger = logging.getLogger(__name__)


@dataclass
class ApplicationResult:
    """Outcome of wiring one application."""

    spec: RepositorySpec
    descriptor: Path | None = None
    override_path: Path | None = None
    import_added: bool = False
    ignore_updated: bool = False
    skipped_reason: str = ""

    @property
    def wired(self) -> bool:
        return self.descriptor is not None


@dataclass
class BootstrapReport:
    """Everything a bootstrap run did."""

    library: BuildDescriptor
    applications: list[ApplicationResult] = field(default_factory=list)
    cloned: list[str] = field(default_factory=list)
    solution: SolutionResult | None = None

    @property
    def projects(self) -> list[Path]:
        """Descriptors that belong in the solution, library first."""
        return [self.library.path] + [a.descriptor for a in self.applications if a.descriptor]


def build_specs(config: DevspaceConfig) -> tuple[RepositorySpec, list[RepositorySpec]]:
    """Turn the configured URLs into repository specs under the root."""
    root = config.workspace.root_path
    library = RepositorySpec.from_url(config.workspace.library_url, root)
    applications = [RepositorySpec.from_url(url, root) for url in config.workspace.application_urls]
    return library, applications


def wire_application(
    spec: RepositorySpec,
    library: BuildDescriptor,
    config: DevspaceConfig,
) -> ApplicationResult:
    """Redirect one application's package reference to the library source.

    A missing descriptor skips the application instead of failing the run.
    """
    wiring = config.wiring
    result = ApplicationResult(spec=spec)

    descriptor = find_build_descriptor(spec.path, wiring.descriptor_pattern, wiring.test_pattern)
    if descriptor is None:
        result.skipped_reason = f"no build descriptor found in {spec.path}"
        logger.warning(f"Skipping {spec.name}: {result.skipped_reason}")
        return result

    result.descriptor = descriptor.resolve()
    result.override_path = write_override_file(descriptor, library, wiring.override_filename)
    result.ignore_updated = ensure_ignored(spec.path, wiring.override_filename, wiring.ignore_filename)
    result.import_added = ensure_override_import(descriptor, wiring.override_filename)
    return result


def _noop(message: str) -> None:
    pass


def run_bootstrap(
    config: DevspaceConfig,
    credentials: Credentials | None = None,
    progress: Callable[[str], None] = _noop,
) -> BootstrapReport:
    """Run the whole bootstrap sequence.

    Args:
        config: Settings, with URLs already filled in.
        credentials: Spliced into http(s) clone URLs when given.
        progress: Receives one line per step for console reporting.

    Raises:
        CloneError: If a clone fails. Earlier clones stay on disk.
        DescriptorNotFoundError: If the library has no build descriptor.
        ToolNotFoundError: If git or dotnet is not installed.
    """
    config.validate()
    wiring = config.wiring
    root = config.workspace.root_path
    root.mkdir(parents=True, exist_ok=True)

    library_spec, app_specs = build_specs(config)

    cloned = []
    for spec in [library_spec, *app_specs]:
        if spec.path.exists():
            progress(f"{spec.name} already present, skipping clone")
        else:
            progress(f"Cloning {spec.name} from {spec.url}")
        if clone_repository(spec, credentials, git=config.tools.git):
            cloned.append(spec.name)

    library_path = require_build_descriptor(library_spec.path, wiring.descriptor_pattern, wiring.test_pattern)
    library = BuildDescriptor.load(library_path)
    logger.info(f"Library {library_spec.name} publishes as {library.package_id}")
    progress(f"Library descriptor: {library.path} (package {library.package_id})")

    report = BootstrapReport(library=library, cloned=cloned)
    for spec in app_specs:
        progress(f"Wiring {spec.name}")
        report.applications.append(wire_application(spec, library, config))

    progress(f"Updating solution ({config.workspace.solution_mode} mode)")
    report.solution = update_solution(
        root,
        config.workspace.solution_name,
        report.projects,
        mode=config.workspace.solution_mode,
        dotnet=config.tools.dotnet,
    )
    return report
