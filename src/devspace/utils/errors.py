"""Error handling utilities for devspace.

Provides consistent error formatting with:
- Human-friendly messages
- Suggested fixes
- Hidden stack traces (unless debug mode)
"""

from __future__ import annotations

import os
import sys
import traceback
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from rich.markup import escape

if TYPE_CHECKING:
    from rich.console import Console

# Debug mode enabled by DEVSPACE_DEBUG=1 or --debug flag
_debug_mode = os.environ.get("DEVSPACE_DEBUG", "0") == "1"


class DevspaceError(Exception):
    """Base class for fatal devspace errors."""


class CloneError(DevspaceError):
    """A repository could not be cloned."""

    def __init__(self, name: str, url: str, output: str = "") -> None:
        self.name = name
        self.url = url
        self.output = output
        super().__init__(f"Cloning {name} from {url} failed")


class DescriptorNotFoundError(DevspaceError):
    """No build descriptor was found in a repository."""

    def __init__(self, folder: str) -> None:
        self.folder = folder
        super().__init__(f"No build descriptor found in {folder}")


class ToolNotFoundError(DevspaceError):
    """An external executable is not on PATH."""

    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(f"Executable not found: {tool}")


class ConfigError(DevspaceError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: str | None = None, expected: str | None = None) -> None:
        self.key = key
        self.value = value
        self.expected = expected
        super().__init__(f"Invalid configuration: {key}")


class ErrorCategory(str, Enum):
    """Categories of errors for consistent formatting."""

    CONFIG = "config"  # Configuration errors
    FILE = "file"  # File not found, permission errors
    DEPENDENCY = "dependency"  # Missing executables
    GIT = "git"  # Git operation errors
    BUILD = "build"  # Build descriptor / dotnet errors
    INTERNAL = "internal"  # Internal/unexpected errors


@dataclass
class ErrorInfo:
    """Structured error information for consistent display."""

    message: str
    category: ErrorCategory
    suggestion: str | None = None
    details: str | None = None
    original_error: Exception | None = None


def set_debug_mode(enabled: bool) -> None:
    """Enable or disable debug mode for verbose error output."""
    global _debug_mode
    _debug_mode = enabled


def is_debug_mode() -> bool:
    """Check if debug mode is enabled."""
    return _debug_mode


def format_error(error: ErrorInfo, console: Console) -> None:
    """Format and display an error with consistent styling.

    Args:
        error: Structured error information
        console: Rich console for output
    """
    console.print(f"[bold red]Error:[/bold red] {escape(error.message)}")

    # Long tool output only in debug mode
    if error.details:
        if _debug_mode or len(error.details) < 500:
            console.print(f"[dim]{escape(error.details)}[/dim]")

    if error.suggestion:
        console.print()
        console.print(f"[yellow]Suggestion:[/yellow] {error.suggestion}")

    if _debug_mode and error.original_error:
        console.print()
        console.print("[dim]Stack trace (debug mode):[/dim]")
        tb_lines = traceback.format_exception(
            type(error.original_error),
            error.original_error,
            error.original_error.__traceback__,
        )
        for line in tb_lines:
            console.print(f"[dim]{escape(line.rstrip())}[/dim]")

    if not _debug_mode and error.original_error:
        console.print()
        console.print("[dim]Set DEVSPACE_DEBUG=1 or use --debug for more details[/dim]")


def error_file_not_found(
    path: str,
    context: str = "file",
    suggestion: str | None = None,
    original: Exception | None = None,
) -> ErrorInfo:
    """Create error info for file not found errors.

    Args:
        path: Path that was not found
        context: What kind of file (e.g., "build descriptor", "config file")
        suggestion: Custom suggestion, or auto-generate one
        original: Original exception if available
    """
    if suggestion is None:
        if "descriptor" in context.lower():
            suggestion = "Check that the repository contains a non-test *.csproj file"
        elif "config" in context.lower():
            suggestion = "Run 'devspace config show' to see where configuration is read from"
        else:
            suggestion = "Check the path and ensure the file exists"

    return ErrorInfo(
        message=f"{context.capitalize()} not found: {path}",
        category=ErrorCategory.FILE,
        suggestion=suggestion,
        original_error=original,
    )


def error_dependency_missing(dependency: str, install_cmd: str | None = None) -> ErrorInfo:
    """Create error info for missing executables.

    Args:
        dependency: Name of the missing executable
        install_cmd: Command to install it
    """
    suggestion = f"Install {dependency} and make sure it is on PATH"
    if install_cmd:
        suggestion = f"Run: {install_cmd}"
    elif dependency == "git":
        suggestion = "Install git from https://git-scm.com/"
    elif dependency == "dotnet":
        suggestion = "Install the .NET SDK from https://dot.net/"

    return ErrorInfo(
        message=f"Required dependency not found: {dependency}",
        category=ErrorCategory.DEPENDENCY,
        suggestion=suggestion,
    )


def error_config_invalid(key: str, value: str | None = None, expected: str | None = None) -> ErrorInfo:
    """Create error info for invalid configuration errors.

    Args:
        key: Configuration key that is invalid
        value: The invalid value (if known)
        expected: What was expected
    """
    details = None
    if value is not None and expected is not None:
        details = f"Got '{value}', expected {expected}"

    return ErrorInfo(
        message=f"Invalid configuration: {key}",
        category=ErrorCategory.CONFIG,
        suggestion="Run 'devspace config show' to view current configuration",
        details=details,
    )


def error_git_operation(
    operation: str,
    message: str,
    details: str | None = None,
    original: Exception | None = None,
) -> ErrorInfo:
    """Create error info for git operation errors.

    Args:
        operation: The git operation that failed
        message: Error message
        details: Output captured from git
        original: Original exception if available
    """
    suggestion = "Check the git output above"
    if "clone" in operation.lower():
        suggestion = "Check the repository URL and your credentials"
    elif "branch" in operation.lower() or "checkout" in operation.lower():
        suggestion = "Check if the branch exists: git branch -a"

    return ErrorInfo(
        message=f"Git {operation} failed: {message}",
        category=ErrorCategory.GIT,
        suggestion=suggestion,
        details=details,
        original_error=original,
    )


def error_internal(message: str, original: Exception | None = None) -> ErrorInfo:
    """Create error info for internal/unexpected errors."""
    return ErrorInfo(
        message=f"Internal error: {message}",
        category=ErrorCategory.INTERNAL,
        suggestion="This may be a bug. Re-run with --debug and report the stack trace",
        original_error=original,
    )


def classify_exception(exception: Exception, context: str = "operation") -> ErrorInfo:
    """Classify an exception into an ErrorInfo.

    Args:
        exception: The exception to classify
        context: Description of what was being done

    Returns:
        ErrorInfo with appropriate categorization
    """
    if isinstance(exception, CloneError):
        return error_git_operation(
            "clone",
            f"{exception.name} ({exception.url})",
            details=exception.output.strip() or None,
            original=exception,
        )

    if isinstance(exception, DescriptorNotFoundError):
        return error_file_not_found(exception.folder, "build descriptor", original=exception)

    if isinstance(exception, ToolNotFoundError):
        return error_dependency_missing(exception.tool)

    if isinstance(exception, ConfigError):
        return error_config_invalid(exception.key, exception.value, exception.expected)

    if isinstance(exception, ET.ParseError):
        return ErrorInfo(
            message=f"Malformed build descriptor: {exception}",
            category=ErrorCategory.BUILD,
            suggestion="Fix the project file so it is well-formed XML and run again",
            original_error=exception,
        )

    if isinstance(exception, FileNotFoundError):
        path = exception.filename or str(exception)
        return error_file_not_found(str(path), context, original=exception)

    if isinstance(exception, PermissionError):
        return ErrorInfo(
            message=f"Permission denied: {exception}",
            category=ErrorCategory.FILE,
            suggestion="Check file permissions or run with appropriate access",
            original_error=exception,
        )

    return error_internal(f"{context}: {exception}", exception)


def handle_exception(
    console: Console,
    exception: Exception,
    context: str = "operation",
    exit_code: int = 1,
    exit_on_error: bool = True,
) -> ErrorInfo:
    """Handle an exception and display a formatted error.

    Args:
        console: Rich console for output
        exception: The exception to handle
        context: Description of what was being done
        exit_code: Exit code to use if exit_on_error is True
        exit_on_error: Whether to exit after displaying the error

    Returns:
        ErrorInfo for the error (useful if not exiting)
    """
    error = classify_exception(exception, context)
    format_error(error, console)

    if exit_on_error:
        sys.exit(exit_code)

    return error
