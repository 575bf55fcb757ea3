"""HTTP client for the Advent of Code input endpoint."""

from __future__ import annotations

import logging

import requests

from src.common.config import Config
from src.common.exceptions import AuthError, NetworkError, NotFoundError

from .models import PuzzleKey
from .throttle import RequestSlot

logger = logging.getLogger(__name__)

AUTH_STATUS_CODES = {400, 401, 403}


class AocClient:
    """Authenticated client wrapping a requests session.

    Every request carries the session cookie and a fixed, contact-identifying
    User-Agent. Nothing is retried: one call means at most one request, so the
    throttle bookkeeping stays exact.
    """

    def __init__(self, config: Config) -> None:
        self.config = config
        self._session = requests.Session()
        self._session.headers["User-Agent"] = config.settings.user_agent

    def input_url(self, key: PuzzleKey) -> str:
        return f"{self.config.settings.base_url}{key.input_path}"

    def fetch_input(self, key: PuzzleKey, slot: RequestSlot) -> str:
        """Issue one GET for the puzzle input.

        ``slot.issue()`` runs right before the request goes out, so the
        throttle records the moment of issue.

        Raises:
            ThrottledError: Interval still running under the FAIL policy.
            AuthError: Session token rejected (400/401/403).
            NotFoundError: Puzzle not unlocked yet (404).
            NetworkError: Transport failure, other HTTP errors, empty body.
        """
        url = self.input_url(key)
        slot.issue()
        logger.info("Requesting input for %s", key)

        try:
            resp = self._session.get(
                url,
                cookies=self.config.cookies,
                timeout=self.config.settings.request_timeout,
            )
            resp.raise_for_status()
        except requests.HTTPError as exc:
            raise self._map_http_error(key, exc) from exc
        except requests.RequestException as exc:
            logger.warning("Request for %s failed: %s", key, type(exc).__name__)
            raise NetworkError(f"Request for {key} failed: {exc}", key) from exc

        text = resp.text
        if not text:
            raise NetworkError(f"Empty response body for {key}", key, resp.status_code)
        return text

    @staticmethod
    def _map_http_error(key: PuzzleKey, exc: requests.HTTPError) -> Exception:
        status = exc.response.status_code if exc.response is not None else None
        logger.warning("Request for %s failed with HTTP %s", key, status)

        if status in AUTH_STATUS_CODES:
            return AuthError(
                f"Session token rejected for {key} (HTTP {status}). "
                "Log in again and store a fresh token with `aoc login <token>`",
                key,
            )
        if status == 404:
            return NotFoundError(f"Puzzle input for {key} is not available yet", key)
        return NetworkError(f"Unexpected HTTP {status} for {key}", key, status)

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()

    def __enter__(self) -> AocClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
