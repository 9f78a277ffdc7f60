"""Exceptions for fritzlog."""

from __future__ import annotations

from collections.abc import Iterator


class FritzLogError(Exception):
    """Base class for all fritzlog errors."""


class ConfigError(FritzLogError):
    """Raised when configuration files are missing or invalid."""


class UnknownBackendError(ConfigError):
    """Raised when an enabled backend name matches no known backend."""

    def __init__(self, backend: str, known: list[str]) -> None:
        super().__init__(
            f'Backend "{backend}" does not exist. These we do know: {known}'
        )
        self.backend = backend
        self.known = known


class AuthenticationError(FritzLogError):
    """Exception raised for authentication errors."""


class InvalidCredentialsError(AuthenticationError):
    """Raised when login fails."""


class InsufficientPermissionError(AuthenticationError):
    """Raised when the session lacks the home automation permission."""


class ApiError(FritzLogError):
    """Raised when the gateway returns an unexpected result."""


class BackendError(FritzLogError):
    """Raised when a recording backend fails."""


def iter_error_chain(error: BaseException) -> Iterator[BaseException]:
    """Yield an error followed by every error it was raised from."""
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__


def format_error_chain(error: BaseException) -> str:
    """Render an error and its causes as 'Error: ...' / 'Caused by: ...' lines."""
    lines = []
    for index, link in enumerate(iter_error_chain(error)):
        prefix = "Error" if index == 0 else "Caused by"
        lines.append(f"{prefix}: {link or type(link).__name__}")
    return "\n".join(lines)
