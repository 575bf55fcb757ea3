"""Exception hierarchy for puzzle input acquisition.

Setup errors (``ConfigError``) are fatal and user-fixable. Fetch errors carry
the puzzle key they relate to so callers can report them without extra state.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.puzzle_input.models import PuzzleKey


class AocError(Exception):
    """Base exception for this package."""


class ConfigError(AocError):
    """Configuration could not be resolved."""


class MissingCredential(ConfigError):
    """No session token is configured."""


class UnreadableConfig(ConfigError):
    """A configuration location exists but cannot be read or parsed."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class FetchError(AocError):
    """Obtaining the input for a puzzle failed."""

    def __init__(self, message: str, key: PuzzleKey | None = None) -> None:
        super().__init__(message)
        self.key = key


class ThrottledError(FetchError):
    """The minimum request interval has not elapsed and waiting is disabled."""

    def __init__(
        self,
        message: str,
        retry_after: timedelta,
        key: PuzzleKey | None = None,
    ) -> None:
        super().__init__(message, key)
        self.retry_after = retry_after


class AuthError(FetchError):
    """The session token was rejected by the remote service."""


class NotFoundError(FetchError):
    """The puzzle does not exist yet (requested before unlock)."""


class NetworkError(FetchError):
    """Transport failure or unexpected response. Safe for the caller to retry later."""

    def __init__(
        self,
        message: str,
        key: PuzzleKey | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, key)
        self.status_code = status_code


class CacheIOError(FetchError):
    """Reading or writing local state failed."""

    def __init__(
        self,
        message: str,
        path: Path,
        key: PuzzleKey | None = None,
    ) -> None:
        super().__init__(message, key)
        self.path = path
