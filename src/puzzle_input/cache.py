"""On-disk cache of puzzle inputs, one file per (year, day)."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from src.common.exceptions import CacheIOError

from .models import PuzzleKey

logger = logging.getLogger(__name__)


def atomic_write_text(path: Path, text: str) -> None:
    """Write text to a sibling temp file, then rename it over ``path``.

    Readers see either the old file, no file, or the complete new file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class InputCache:
    """Raw puzzle inputs stored at ``<root>/<year>/<day:02>.txt``.

    Entries are immutable once written: inputs never change for a given user
    and puzzle, so an existing non-empty entry is always served as-is.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def path_for(self, key: PuzzleKey) -> Path:
        return self.root / str(key.year) / f"{key.day:02d}.txt"

    def read(self, key: PuzzleKey) -> str | None:
        """Return cached text, or None when the entry is missing or empty."""
        path = self.path_for(key)
        try:
            with open(path, encoding="utf-8", newline="") as f:
                text = f.read()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise CacheIOError(f"Cannot read cached input {path}: {exc}", path, key) from exc

        if not text:
            logger.debug("Ignoring empty cache entry for %s", key)
            return None
        return text

    def write(self, key: PuzzleKey, text: str) -> Path:
        """Store the input text verbatim."""
        path = self.path_for(key)
        try:
            atomic_write_text(path, text)
        except OSError as exc:
            raise CacheIOError(f"Cannot write cached input {path}: {exc}", path, key) from exc
        logger.debug("Cached input for %s at %s", key, path)
        return path

    def __contains__(self, key: PuzzleKey) -> bool:
        path = self.path_for(key)
        return path.is_file() and path.stat().st_size > 0
