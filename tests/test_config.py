"""Tests for the configuration system."""

from __future__ import annotations

from pathlib import Path

import pytest

from devspace.config import (
    DevspaceConfig,
    ToolSettings,
    WiringSettings,
    WorkspaceSettings,
    format_config_for_display,
    get_config_path,
    list_config_keys,
    load_config,
)
from devspace.utils.errors import ConfigError

CONFIG_TOML = """
[workspace]
root_folder = "/srv/ws"
library_url = "https://github.com/acme/Core.git"
application_urls = ["https://github.com/acme/Web.git", "https://github.com/acme/Api.git"]
solution_mode = "direct"

[wiring]
override_filename = "Dev.props"

[tools]
dotnet = "/opt/dotnet/dotnet"
"""


class TestSections:
    """Tests for the section dataclasses."""

    def test_defaults(self) -> None:
        config = DevspaceConfig()
        assert config.workspace.solution_name == "Workspace"
        assert config.workspace.solution_mode == "cli"
        assert config.workspace.application_urls == []
        assert config.wiring.override_filename == "LocalLibrary.props"
        assert config.wiring.ignore_filename == ".gitignore"
        assert config.wiring.descriptor_pattern == "*.csproj"
        assert config.tools.git == "git"

    def test_workspace_from_dict_accepts_comma_string(self) -> None:
        settings = WorkspaceSettings.from_dict({"application_urls": "a.git, b.git,"})
        assert settings.application_urls == ["a.git", "b.git"]

    def test_round_trip_dict(self) -> None:
        config = DevspaceConfig(
            workspace=WorkspaceSettings(library_url="x.git", application_urls=["y.git"]),
            wiring=WiringSettings(test_pattern="spec"),
            tools=ToolSettings(git="/usr/bin/git"),
        )
        assert DevspaceConfig.from_dict(config.to_dict()).to_dict() == config.to_dict()

    def test_root_path_defaults_to_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert WorkspaceSettings().root_path == tmp_path

    def test_get_dotted_key(self) -> None:
        config = DevspaceConfig()
        assert config.get("wiring.override_filename") == "LocalLibrary.props"
        assert config.get("wiring.nope", "fallback") == "fallback"

    def test_validate(self) -> None:
        config = DevspaceConfig()
        config.validate()

        config.workspace.solution_mode = "zip"
        with pytest.raises(ConfigError) as exc_info:
            config.validate()
        assert exc_info.value.key == "workspace.solution_mode"


class TestLoadConfig:
    """Tests for loading from file and environment."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "none.toml")
        assert config.workspace.library_url == ""
        assert config.config_path == tmp_path / "none.toml"

    def test_load_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text(CONFIG_TOML)

        config = load_config(path)

        assert config.workspace.root_folder == "/srv/ws"
        assert len(config.workspace.application_urls) == 2
        assert config.workspace.solution_mode == "direct"
        assert config.wiring.override_filename == "Dev.props"
        assert config.tools.dotnet == "/opt/dotnet/dotnet"
        assert config.last_modified is not None

    def test_malformed_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[workspace\nbroken")

        config = load_config(path)
        assert config.workspace.solution_mode == "cli"

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "config.toml"
        path.write_text(CONFIG_TOML)
        monkeypatch.setenv("DEVSPACE_ROOT", "/env/root")
        monkeypatch.setenv("DEVSPACE_APP_URLS", "https://h/One.git,https://h/Two.git")
        monkeypatch.setenv("DEVSPACE_SOLUTION_MODE", "cli")
        monkeypatch.setenv("DEVSPACE_GIT", "/opt/git")

        config = load_config(path)

        assert config.workspace.root_folder == "/env/root"
        assert config.workspace.application_urls == ["https://h/One.git", "https://h/Two.git"]
        assert config.workspace.solution_mode == "cli"
        assert config.tools.git == "/opt/git"
        assert config.workspace.library_url == "https://github.com/acme/Core.git"

    def test_config_path_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEVSPACE_CONFIG", str(tmp_path / "custom.toml"))
        assert get_config_path() == tmp_path / "custom.toml"

    def test_each_load_is_independent(self) -> None:
        first = load_config()
        first.workspace.library_url = "https://h/Changed.git"
        assert load_config() is not first
        assert load_config().workspace.library_url == ""


class TestDisplay:
    """Tests for CLI display helpers."""

    def test_list_config_keys(self) -> None:
        keys = list_config_keys()
        assert "workspace.library_url" in keys
        assert "wiring.test_pattern" in keys
        assert "tools.dotnet" in keys

    def test_format(self) -> None:
        config = DevspaceConfig()
        config.workspace.application_urls = ["a.git", "b.git"]
        text = format_config_for_display(config)
        assert "[workspace]" in text
        assert "application_urls = a.git, b.git" in text
        assert "library_url = (not set)" in text
