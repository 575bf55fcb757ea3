"""
Shared components for the puzzle input tools:
- Project configuration and session credential
- Exception hierarchy
- Logging configuration
"""

from .config import (
    MIN_REQUEST_INTERVAL,
    PROJECT_ROOT,
    Config,
    Settings,
    ThrottlePolicy,
    load_config,
)
from .exceptions import (
    AocError,
    AuthError,
    CacheIOError,
    ConfigError,
    FetchError,
    MissingCredential,
    NetworkError,
    NotFoundError,
    ThrottledError,
    UnreadableConfig,
)
from .logging import setup_logging

__all__ = [
    "MIN_REQUEST_INTERVAL",
    "PROJECT_ROOT",
    "Config",
    "Settings",
    "ThrottlePolicy",
    "load_config",
    "AocError",
    "AuthError",
    "CacheIOError",
    "ConfigError",
    "FetchError",
    "MissingCredential",
    "NetworkError",
    "NotFoundError",
    "ThrottledError",
    "UnreadableConfig",
    "setup_logging",
]
