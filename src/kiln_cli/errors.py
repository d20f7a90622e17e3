"""CLI error handling for kiln-cli.

This module provides CLI-specific error handling that wraps kiln-core
exceptions and provides user-friendly messages with appropriate exit codes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click
import yaml
from pydantic import ValidationError as PydanticValidationError

from kiln_cli.output import error
from kiln_core.errors import KilnError

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails


# Exit codes
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # Build-fatal error or invalid configuration
EXIT_SYSTEM_ERROR = 2  # Missing file, permissions


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting.

        Args:
            file: Output file (unused, for Click compatibility).
        """
        error(self.format_message())


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Format Pydantic validation error into user-friendly message.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - target.build-external-contracts.0: String should match pattern..."
    """
    errors: list[ErrorDetails] = err.errors()
    lines = ["Validation failed:"]

    for e in errors:
        loc = ".".join(str(x) for x in e["loc"])
        msg = e["msg"]
        lines.append(f"  - {loc}: {msg}")

    return "\n".join(lines)


def handle_yaml_error(err: yaml.YAMLError, file_path: str) -> NoReturn:
    """Handle YAML parsing errors with line number information.

    Raises:
        CLIError: Always raises with formatted error message.
    """
    error_msg = str(err)
    mark = getattr(err, "problem_mark", None)
    if mark is not None:
        line = mark.line + 1
        col = mark.column + 1
        error_msg = f"YAML syntax error at line {line}, column {col}: {getattr(err, 'problem', '')}"

    raise CLIError(f"Invalid YAML in {file_path}: {error_msg}")


def handle_validation_error(err: PydanticValidationError, file_path: str) -> NoReturn:
    """Handle Pydantic validation errors of kiln.yaml.

    Raises:
        CLIError: Always raises with formatted error message.
    """
    formatted = format_pydantic_error(err)
    raise CLIError(f"Invalid {err.title} in {file_path}:\n{formatted}")


def handle_file_not_found(detail: str) -> NoReturn:
    """Handle missing kiln.yaml or snapshot with a hint.

    Raises:
        CLIError: Always raises with exit code 2.
    """
    raise CLIError(
        f"{detail}\n\n"
        "Use --file to specify kiln.yaml, or --snapshot to point at the "
        "compilation snapshot exported by the front end.",
        exit_code=EXIT_SYSTEM_ERROR,
    )


def handle_permission_error(path: str, operation: str = "access") -> NoReturn:
    """Handle permission errors.

    Raises:
        CLIError: Always raises with exit code 2.
    """
    raise CLIError(
        f"Permission denied: Cannot {operation} {path}",
        exit_code=EXIT_SYSTEM_ERROR,
    )


def handle_build_error(err: Exception, file_path: str) -> NoReturn:
    """Map an exception raised while loading or building to a CLIError.

    Args:
        err: The exception.
        file_path: kiln.yaml path shown in messages.

    Raises:
        CLIError: For every known failure.
        Exception: The original exception when it is not a known failure.
    """
    if isinstance(err, PermissionError):
        handle_permission_error(err.filename or file_path, "write")
    if isinstance(err, FileNotFoundError):
        handle_file_not_found(str(err))
    if isinstance(err, OSError):
        raise CLIError(
            f"Cannot access {err.filename or file_path}: {err.strerror or err}",
            exit_code=EXIT_SYSTEM_ERROR,
        )
    if isinstance(err, yaml.YAMLError):
        handle_yaml_error(err, file_path)
    if isinstance(err, PydanticValidationError):
        handle_validation_error(err, file_path)
    if isinstance(err, KilnError):
        raise CLIError(f"Build failed: {err.user_message}")
    raise err
