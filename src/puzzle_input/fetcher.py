"""Single entry point through which puzzle inputs are obtained.

Cache hit: served from disk with no throttle or network involvement.
Cache miss: take the throttle lock, re-check the cache (another process may
have fetched it while we waited), wait out the interval, issue exactly one
request, write the cache only on success, and record the request timestamp
before the lock is released.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from src.common.config import Config, load_config

from .cache import InputCache
from .http_client import AocClient
from .models import PuzzleKey
from .throttle import ThrottleGate

logger = logging.getLogger(__name__)


class InputFetcher:
    """Returns raw puzzle input text for a PuzzleKey."""

    def __init__(
        self,
        config: Config,
        cache: InputCache | None = None,
        gate: ThrottleGate | None = None,
        client: AocClient | None = None,
    ) -> None:
        self.config = config
        settings = config.settings
        self.cache = cache or InputCache(settings.input_dir)
        self.gate = gate or ThrottleGate(settings.throttle_file, settings.throttle_policy)
        self._client = client or AocClient(config)

    def get_input(self, key: PuzzleKey) -> str:
        text = self.cache.read(key)
        if text is not None:
            logger.debug("Cache hit for %s", key)
            return text

        logger.debug("Cache miss for %s", key)
        with self.gate.acquire(key) as slot:
            text = self.cache.read(key)
            if text is not None:
                logger.debug("Input for %s was fetched by another process", key)
                return text
            text = self._client.fetch_input(key, slot)
            self.cache.write(key, text)

        logger.info("Fetched and cached input for %s (%d bytes)", key, len(text))
        return text

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> InputFetcher:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


@lru_cache(maxsize=None)
def default_fetcher() -> InputFetcher:
    """Process-wide fetcher; the credential is loaded on first use only."""
    return InputFetcher(load_config())


def get_input(year: int, day: int) -> str:
    """Return the raw input text for one puzzle.

    Raises:
        ConfigError: No usable session credential (checked before any I/O).
        FetchError: The input could not be obtained; see its subclasses.
    """
    key = PuzzleKey(year, day)
    return default_fetcher().get_input(key)
