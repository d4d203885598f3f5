"""Unified configuration for devspace.

Configuration is stored at ~/.devspace/config.toml and organized into sections.

Configuration loading priority:
1. Command-line flags and prompts (highest, applied by the CLI)
2. Environment variables
3. Config file (~/.devspace/config.toml, or $DEVSPACE_CONFIG)
4. Defaults (lowest)

Sections:
    [workspace]  - Root folder, repository URLs, solution file settings
    [wiring]     - Override fragment and descriptor discovery settings
    [tools]      - External executables (git, dotnet)

Example:
    from devspace.config import load_config

    config = load_config()
    print(config.workspace.library_url)
    print(config.get("wiring.override_filename"))
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field, fields
from datetime import datetime
from pathlib import Path
from typing import Any

from .utils.errors import ConfigError

logger = logging.getLogger(__name__)

# Default config location
DEFAULT_CONFIG_DIR = Path.home() / ".devspace"
DEFAULT_CONFIG_FILE = "config.toml"

SOLUTION_MODES = ("cli", "direct")


# =============================================================================
# Configuration Sections
# =============================================================================


@dataclass
class WorkspaceSettings:
    """Workspace layout.

    Attributes:
        root_folder: Folder that holds every repository. Empty means the
            current directory.
        library_url: Clone URL of the shared library.
        application_urls: Clone URLs of the applications depending on it.
        solution_name: Base name of the aggregate solution file.
        solution_mode: "cli" to maintain a .sln through dotnet, "direct" to
            regenerate a .slnx listing on every run.
    """

    root_folder: str = ""
    library_url: str = ""
    application_urls: list[str] = field(default_factory=list)
    solution_name: str = "Workspace"
    solution_mode: str = "cli"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkspaceSettings:
        """Create from dictionary."""
        urls = data.get("application_urls", [])
        if isinstance(urls, str):
            urls = _split_list(urls)
        return cls(
            root_folder=data.get("root_folder", ""),
            library_url=data.get("library_url", ""),
            application_urls=list(urls),
            solution_name=data.get("solution_name", "Workspace"),
            solution_mode=data.get("solution_mode", "cli"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "root_folder": self.root_folder,
            "library_url": self.library_url,
            "application_urls": list(self.application_urls),
            "solution_name": self.solution_name,
            "solution_mode": self.solution_mode,
        }

    @property
    def root_path(self) -> Path:
        """Resolved root folder."""
        if self.root_folder:
            return Path(self.root_folder).expanduser().resolve()
        return Path.cwd()


@dataclass
class WiringSettings:
    """How applications are rewired onto the library source.

    Attributes:
        override_filename: Name of the generated fragment next to each
            application descriptor.
        ignore_filename: Ignore list that gets the fragment appended.
        descriptor_pattern: Glob for build descriptors.
        test_pattern: Case-insensitive regex; matching descriptor names are
            treated as test projects and skipped.
    """

    override_filename: str = "LocalLibrary.props"
    ignore_filename: str = ".gitignore"
    descriptor_pattern: str = "*.csproj"
    test_pattern: str = "test"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WiringSettings:
        """Create from dictionary."""
        return cls(
            override_filename=data.get("override_filename", "LocalLibrary.props"),
            ignore_filename=data.get("ignore_filename", ".gitignore"),
            descriptor_pattern=data.get("descriptor_pattern", "*.csproj"),
            test_pattern=data.get("test_pattern", "test"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "override_filename": self.override_filename,
            "ignore_filename": self.ignore_filename,
            "descriptor_pattern": self.descriptor_pattern,
            "test_pattern": self.test_pattern,
        }


@dataclass
class ToolSettings:
    """External executables."""

    git: str = "git"
    dotnet: str = "dotnet"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ToolSettings:
        """Create from dictionary."""
        return cls(
            git=data.get("git", "git"),
            dotnet=data.get("dotnet", "dotnet"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"git": self.git, "dotnet": self.dotnet}


@dataclass
class DevspaceConfig:
    """Main configuration container.

    Built once at startup and passed explicitly to the bootstrapper and
    batch operator.
    """

    workspace: WorkspaceSettings = field(default_factory=WorkspaceSettings)
    wiring: WiringSettings = field(default_factory=WiringSettings)
    tools: ToolSettings = field(default_factory=ToolSettings)

    # Metadata
    config_path: Path | None = None
    last_modified: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DevspaceConfig:
        """Create configuration from dictionary."""
        return cls(
            workspace=WorkspaceSettings.from_dict(data.get("workspace", {})),
            wiring=WiringSettings.from_dict(data.get("wiring", {})),
            tools=ToolSettings.from_dict(data.get("tools", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "workspace": self.workspace.to_dict(),
            "wiring": self.wiring.to_dict(),
            "tools": self.tools.to_dict(),
        }

    def apply_env_overrides(self) -> None:
        """Apply environment variable overrides to configuration."""
        if root := os.environ.get("DEVSPACE_ROOT"):
            self.workspace.root_folder = root
        if library_url := os.environ.get("DEVSPACE_LIBRARY_URL"):
            self.workspace.library_url = library_url
        if app_urls := os.environ.get("DEVSPACE_APP_URLS"):
            self.workspace.application_urls = _split_list(app_urls)
        if mode := os.environ.get("DEVSPACE_SOLUTION_MODE"):
            self.workspace.solution_mode = mode
        if git := os.environ.get("DEVSPACE_GIT"):
            self.tools.git = git
        if dotnet := os.environ.get("DEVSPACE_DOTNET"):
            self.tools.dotnet = dotnet

    def validate(self) -> None:
        """Raise ConfigError for values the tools cannot work with."""
        if self.workspace.solution_mode not in SOLUTION_MODES:
            raise ConfigError(
                "workspace.solution_mode",
                self.workspace.solution_mode,
                " or ".join(SOLUTION_MODES),
            )
        if not self.wiring.override_filename:
            raise ConfigError("wiring.override_filename", "", "a file name")

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dotted key path.

        Example:
            config.get('wiring.override_filename')  # Returns 'LocalLibrary.props'
        """
        obj: Any = self
        for part in key.split("."):
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                return default
        return obj


# =============================================================================
# Configuration Loading
# =============================================================================


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def get_config_path() -> Path:
    """Get the path to the configuration file."""
    if custom_path := os.environ.get("DEVSPACE_CONFIG"):
        return Path(custom_path)
    return DEFAULT_CONFIG_DIR / DEFAULT_CONFIG_FILE


def load_config(config_path: Path | None = None) -> DevspaceConfig:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. Uses default if not specified.

    Returns:
        DevspaceConfig with settings from file and environment.
    """
    path = config_path or get_config_path()

    config = DevspaceConfig()
    config.config_path = path

    if path.exists():
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)

            config = DevspaceConfig.from_dict(data)
            config.config_path = path
            config.last_modified = datetime.fromtimestamp(path.stat().st_mtime)

        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.error(f"Failed to load config from {path}: {e}")
            config = DevspaceConfig()
            config.config_path = path
    else:
        logger.debug(f"Config not found at {path}, using defaults")

    config.apply_env_overrides()

    return config


# =============================================================================
# CLI Helpers
# =============================================================================


def list_config_keys() -> list[str]:
    """List every dotted configuration key."""
    keys = []
    config = DevspaceConfig()
    for section_name in ("workspace", "wiring", "tools"):
        section = getattr(config, section_name)
        keys.extend(f"{section_name}.{f.name}" for f in fields(section))
    return keys


def format_config_for_display(config: DevspaceConfig) -> str:
    """Format configuration for display in CLI."""
    lines = []
    lines.append(f"Config file: {config.config_path or get_config_path()}")
    if config.last_modified:
        lines.append(f"Last modified: {config.last_modified.strftime('%Y-%m-%d %H:%M:%S')}")
    lines.append("")

    for section, values in config.to_dict().items():
        lines.append(f"[{section}]")
        for key, value in values.items():
            if isinstance(value, list):
                value = ", ".join(value) if value else "(none)"
            elif value == "":
                value = "(not set)"
            lines.append(f"  {key} = {value}")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"
