"""Shared fixtures for devspace tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from devspace.utils.errors import set_debug_mode

SDK_PROJECT = """<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <TargetFramework>net8.0</TargetFramework>
{properties}  </PropertyGroup>
</Project>
"""


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep tests away from the user's config file and DEVSPACE_* variables."""
    for name in (
        "DEVSPACE_ROOT",
        "DEVSPACE_LIBRARY_URL",
        "DEVSPACE_APP_URLS",
        "DEVSPACE_SOLUTION_MODE",
        "DEVSPACE_GIT",
        "DEVSPACE_DOTNET",
        "DEVSPACE_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DEVSPACE_CONFIG", str(tmp_path / "no-such-config.toml"))
    set_debug_mode(False)
    yield
    set_debug_mode(False)


def _write_project(path: Path, package_id: str | None = None, assembly_name: str | None = None) -> Path:
    """Write a minimal SDK-style project file."""
    properties = ""
    if package_id is not None:
        properties += f"    <PackageId>{package_id}</PackageId>\n"
    if assembly_name is not None:
        properties += f"    <AssemblyName>{assembly_name}</AssemblyName>\n"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(SDK_PROJECT.format(properties=properties), encoding="utf-8")
    return path


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A root folder with an already-cloned library and two applications."""
    root = tmp_path / "ws"
    _write_project(root / "Core" / "src" / "Core" / "Core.csproj", package_id="Acme.Core")
    _write_project(root / "Core" / "tests" / "Core.Tests" / "Core.Tests.csproj")
    _write_project(root / "Web" / "Web.csproj")
    (root / "Web" / ".gitignore").write_text("bin/\nobj/\n", encoding="utf-8")
    _write_project(root / "Api" / "src" / "Api.csproj")
    return root


@pytest.fixture
def make_project():
    """Factory for minimal SDK-style project files."""
    return _write_project
