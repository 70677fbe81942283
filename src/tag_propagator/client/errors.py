"""Typed exceptions and error handling decorator."""

from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar

from rich.console import Console
from rich.markup import escape

F = TypeVar("F", bound=Callable[..., Any])

err_console = Console(stderr=True)

# Exit code for a run whose commit could not be pushed
PUBLISH_FAILED_EXIT = 8


class TagPropagatorError(Exception):
    """Base exception for tag-propagator."""

    exit_code: int = 1


class GitCommandError(TagPropagatorError):
    """A git subprocess exited non-zero."""

    exit_code = 2

    def __init__(self, args: list[str], returncode: int, stderr: str = "") -> None:
        self.command = args
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(
            f"'{' '.join(args)}' failed with exit code {returncode}{detail}"
        )


class CloneError(TagPropagatorError):
    """The configuration repository could not be cloned."""

    exit_code = 3


class ManifestError(TagPropagatorError):
    """A manifest exists but cannot be read or updated."""

    exit_code = 4


class ConfigurationError(TagPropagatorError):
    """Required settings are missing or inconsistent."""

    exit_code = 6


class ValidationError(TagPropagatorError, ValueError):
    """Invalid user input (service list, tag, tier)."""

    exit_code = 7

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail or "Validation error")


class NotificationError(TagPropagatorError):
    """The report webhook could not be reached or rejected the report."""

    exit_code = 9

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(detail)


def error_handler(func: F) -> F:
    """Decorator that catches TagPropagatorError and prints user-friendly messages."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except TagPropagatorError as exc:
            err_console.print(f"[bold red]Error:[/] {escape(str(exc))}")
            raise SystemExit(exc.exit_code)
        except ValueError as exc:
            err_console.print(f"[bold red]Error:[/] {escape(str(exc))}")
            raise SystemExit(1)

    return wrapper  # type: ignore[return-value]
