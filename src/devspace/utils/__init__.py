"""devspace utility modules."""

from .errors import (
    CloneError,
    ConfigError,
    DescriptorNotFoundError,
    DevspaceError,
    ErrorCategory,
    ErrorInfo,
    ToolNotFoundError,
    classify_exception,
    error_config_invalid,
    error_dependency_missing,
    error_file_not_found,
    error_git_operation,
    error_internal,
    format_error,
    handle_exception,
    is_debug_mode,
    set_debug_mode,
)

__all__ = [
    # Exceptions
    "DevspaceError",
    "CloneError",
    "DescriptorNotFoundError",
    "ToolNotFoundError",
    "ConfigError",
    # Error handling
    "ErrorCategory",
    "ErrorInfo",
    "format_error",
    "handle_exception",
    "classify_exception",
    "error_file_not_found",
    "error_dependency_missing",
    "error_config_invalid",
    "error_git_operation",
    "error_internal",
    "set_debug_mode",
    "is_debug_mode",
]
