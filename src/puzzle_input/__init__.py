"""
Puzzle input acquisition: cache, throttle, and authenticated fetch.

Solutions depend only on ``get_input(year, day)`` (or the readers built on it).
"""

from .cache import InputCache
from .fetcher import InputFetcher, default_fetcher, get_input
from .http_client import AocClient
from .models import PuzzleKey, ThrottleState
from .reader import parse_lines, read_all, read_lines
from .throttle import RequestSlot, ThrottleGate

__all__ = [
    "AocClient",
    "InputCache",
    "InputFetcher",
    "PuzzleKey",
    "RequestSlot",
    "ThrottleGate",
    "ThrottleState",
    "default_fetcher",
    "get_input",
    "parse_lines",
    "read_all",
    "read_lines",
]
