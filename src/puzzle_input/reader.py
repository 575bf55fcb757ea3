"""Helpers for turning puzzle input into values.

A source is a PuzzleKey, a ``(year, day)`` tuple, or a path to a local file
(handy for the worked examples in a puzzle description).
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TypeVar, Union

from src.common.exceptions import CacheIOError

from .fetcher import InputFetcher, default_fetcher
from .models import PuzzleKey

T = TypeVar("T")

InputSource = Union[PuzzleKey, tuple[int, int], str, Path]


def read_all(source: InputSource, fetcher: InputFetcher | None = None) -> str:
    """Return the full text of an input source."""
    if isinstance(source, tuple):
        source = PuzzleKey(*source)
    if isinstance(source, PuzzleKey):
        return (fetcher or default_fetcher()).get_input(source)

    path = Path(source)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise CacheIOError(f"Cannot read input file {path}: {exc}", path) from exc


def parse_lines(text: str, parse: Callable[[str], T] = str) -> list[T]:
    """Convert every non-blank line (stripped) with ``parse``.

    Raises:
        ValueError: A line could not be converted; the message names it.
    """
    values: list[T] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            values.append(parse(line))
        except (ValueError, TypeError) as exc:
            raise ValueError(f"Parse error on line {lineno} ({line!r}): {exc}") from exc
    return values


def read_lines(
    source: InputSource,
    parse: Callable[[str], T] = str,
    fetcher: InputFetcher | None = None,
) -> list[T]:
    """Read a source and parse its non-blank lines."""
    return parse_lines(read_all(source, fetcher), parse)
