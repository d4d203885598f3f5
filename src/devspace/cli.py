"""devspace CLI.

Entry points:
    devspace         - command group (setup, batch, config)
    devspace-setup   - workspace bootstrapper
    devspace-batch   - batch git operator
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__
from .batch import create_branch, discover_repositories, pull_all, status_all, switch_branch
from .bootstrap import BootstrapReport, run_bootstrap
from .config import SOLUTION_MODES, DevspaceConfig, format_config_for_display, load_config
from .git import CommandResult
from .repos import Credentials
from .utils.errors import DevspaceError, handle_exception, is_debug_mode, set_debug_mode

console = Console()

MENU = (
    ("1", "Create branch"),
    ("2", "Switch branch"),
    ("3", "Pull"),
    ("4", "Status"),
    ("Q", "Quit"),
)


def _setup_logging(debug: bool) -> None:
    """Route logging through rich; DEBUG in debug mode, WARNING otherwise."""
    if debug:
        set_debug_mode(True)
    logging.basicConfig(
        level=logging.DEBUG if is_debug_mode() else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load(root: Path | None) -> DevspaceConfig:
    config = load_config()
    if root is not None:
        config.workspace.root_folder = str(root)
    return config


# =============================================================================
# Workspace bootstrapper
# =============================================================================


def _prompt_urls(config: DevspaceConfig) -> None:
    """Ask for any repository URL that flags, env and config left empty."""
    if not config.workspace.library_url:
        config.workspace.library_url = click.prompt("Library repository URL").strip()

    if not config.workspace.application_urls:
        urls = []
        while True:
            url = click.prompt(
                f"Application repository URL #{len(urls) + 1} (blank to finish)",
                default="",
                show_default=False,
            ).strip()
            if not url:
                break
            urls.append(url)
        config.workspace.application_urls = urls


def _prompt_credentials() -> Credentials | None:
    username = click.prompt("Username (blank for none)", default="", show_default=False).strip()
    if not username:
        return None
    secret = click.prompt("Password or token", hide_input=True, default="", show_default=False)
    return Credentials(username=username, secret=secret)


def _print_report(report: BootstrapReport) -> None:
    console.print()
    console.print("[bold cyan]Workspace summary[/bold cyan]")
    console.print(f"  Library: [bold]{report.library.path}[/bold] ({report.library.package_id})")

    for app in report.applications:
        if not app.wired:
            console.print(f"  [yellow]⚠[/yellow] {app.spec.name}: skipped, {app.skipped_reason}")
            continue
        notes = []
        if app.import_added:
            notes.append("import added")
        if app.ignore_updated:
            notes.append("ignore list updated")
        suffix = f" [dim]({', '.join(notes)})[/dim]" if notes else ""
        console.print(f"  [green]✓[/green] {app.spec.name}: {app.descriptor}{suffix}")

    solution = report.solution
    if solution is None:
        return
    for failure in solution.failures:
        console.print(f"[yellow]⚠ dotnet exited with {failure.returncode}:[/yellow]")
        if failure.output:
            console.print(failure.output, markup=False, highlight=False)
    console.print(f"  Solution: [bold]{solution.path}[/bold]")


@click.command("setup")
@click.argument("root", required=False, type=click.Path(file_okay=False, path_type=Path))
@click.option("--library-url", help="Clone URL of the shared library")
@click.option("--app-url", "app_urls", multiple=True, help="Clone URL of an application (repeatable)")
@click.option("--solution-mode", type=click.Choice(SOLUTION_MODES), help="How the solution file is maintained")
@click.option("--anonymous", is_flag=True, help="Do not prompt for credentials")
@click.option("--debug", "-d", is_flag=True, help="Enable debug mode with verbose output")
def setup(
    root: Path | None,
    library_url: str | None,
    app_urls: tuple[str, ...],
    solution_mode: str | None,
    anonymous: bool,
    debug: bool,
) -> None:
    """Clone the library and applications and wire them together.

    Each application gets a LocalLibrary.props override that swaps its
    package reference for a project reference to the library source, and
    every project is added to an aggregate solution in ROOT.

    \b
    Examples:
        devspace-setup ~/src/workspace
        devspace-setup --library-url https://host/org/Core.git \\
            --app-url https://host/org/Web.git --app-url https://host/org/Api.git
    """
    _setup_logging(debug)
    config = _load(root)
    if library_url:
        config.workspace.library_url = library_url
    if app_urls:
        config.workspace.application_urls = list(app_urls)
    if solution_mode:
        config.workspace.solution_mode = solution_mode

    _prompt_urls(config)
    credentials = None if anonymous else _prompt_credentials()

    console.print(f"[bold cyan]Bootstrapping workspace in {config.workspace.root_path}[/bold cyan]")

    try:
        report = run_bootstrap(
            config,
            credentials,
            progress=lambda message: console.print(f"[dim]{escape(message)}[/dim]"),
        )
    except (DevspaceError, ET.ParseError, OSError, ValueError) as e:
        handle_exception(console, e, "workspace bootstrap")
        return

    _print_report(report)
    console.print()
    console.print("[green]✓[/green] Workspace ready")


# =============================================================================
# Batch repository operator
# =============================================================================


def _print_results(results: list[CommandResult]) -> None:
    succeeded = 0
    for result in results:
        name = result.cwd.name if result.cwd else "?"
        if result.success:
            succeeded += 1
            console.print(f"[green]✓[/green] {name}")
        else:
            console.print(f"[red]✗[/red] {name} [dim](exit {result.returncode})[/dim]")
        if result.output:
            console.print(result.output, markup=False, highlight=False, style="dim")

    failed = len(results) - succeeded
    console.print()
    console.print(f"{succeeded} succeeded, {failed} failed")


def _prompt_branch(label: str) -> str:
    return click.prompt(label, default="", show_default=False).strip()


@click.command("batch")
@click.argument("root", required=False, type=click.Path(file_okay=False, path_type=Path))
@click.option("--debug", "-d", is_flag=True, help="Enable debug mode with verbose output")
def batch(root: Path | None, debug: bool) -> None:
    """Run one git operation across every repository in ROOT.

    ROOT defaults to the configured workspace root, or the current
    directory.
    """
    _setup_logging(debug)
    config = _load(root)
    folder = config.workspace.root_path
    git = config.tools.git

    repos = discover_repositories(folder)
    if not repos:
        console.print(f"[yellow]No git repositories found in {folder}[/yellow]")
        return

    console.print(f"[bold cyan]Found {len(repos)} repositories in {folder}:[/bold cyan]")
    for repo in repos:
        console.print(f"  {repo.name}")
    console.print()
    for key, label in MENU:
        console.print(f"  [bold]{key}[/bold]. {label}")
    console.print()

    choice = click.prompt("Choose an option", default="", show_default=False).strip().upper()

    try:
        if choice == "1":
            name = _prompt_branch("New branch name")
            if not name:
                console.print("[yellow]No branch name given, nothing to do[/yellow]")
                return
            _print_results(create_branch(repos, name, git=git))
        elif choice == "2":
            name = _prompt_branch("Branch to switch to")
            if not name:
                console.print("[yellow]No branch name given, nothing to do[/yellow]")
                return
            _print_results(switch_branch(repos, name, git=git))
        elif choice == "3":
            _print_results(pull_all(repos, git=git))
        elif choice == "4":
            for status in status_all(repos, git=git):
                if status.error:
                    console.print(f"[red]✗[/red] {status.name}: status failed")
                    console.print(status.error, markup=False, highlight=False, style="dim")
                elif status.has_changes:
                    console.print(f"[yellow]●[/yellow] {status.name}: has changes")
                    console.print(status.output, markup=False, highlight=False)
                else:
                    console.print(f"[green]✓[/green] {status.name}: clean")
        elif choice == "Q":
            return
        else:
            console.print(f"[red]Invalid option: {escape(choice) or '(empty)'}[/red]")
    except DevspaceError as e:
        handle_exception(console, e, "batch git operation")


# =============================================================================
# Command group
# =============================================================================


@click.group()
@click.version_option(__version__, "--version", "-v", prog_name="devspace")
def main() -> None:
    """devspace - local multi-repository workspace tooling."""


main.add_command(setup)
main.add_command(batch)


@main.group()
def config() -> None:
    """Inspect devspace configuration."""


@config.command("show")
def config_show() -> None:
    """Show the effective configuration (file + environment)."""
    console.print(format_config_for_display(load_config()), markup=False, highlight=False)


if __name__ == "__main__":
    main()
