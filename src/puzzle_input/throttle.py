"""File-backed request throttle shared by every process on the machine.

The timestamp of the last outbound request lives in a small text file next
to an advisory lock file. The lock is held from reading the timestamp until
the new timestamp is written after the request, so two requests are never
issued less than ``MIN_REQUEST_INTERVAL`` apart, even across processes.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path

from filelock import FileLock, Timeout

from src.common.config import MIN_REQUEST_INTERVAL, ThrottlePolicy
from src.common.exceptions import CacheIOError, ThrottledError

from .cache import atomic_write_text
from .models import PuzzleKey, ThrottleState

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RequestSlot:
    """Permission to issue one request while the gate's lock is held."""

    def __init__(
        self,
        gate: ThrottleGate,
        state: ThrottleState,
        key: PuzzleKey | None = None,
    ) -> None:
        self._gate = gate
        self.state = state
        self.key = key
        self.issued_at: datetime | None = None

    @property
    def sent(self) -> bool:
        return self.issued_at is not None

    def issue(self) -> datetime:
        """Wait out (or refuse) the remaining interval, then mark the request issued.

        Call immediately before the request goes on the wire.

        Raises:
            ThrottledError: The interval is still running and the policy is FAIL.
        """
        if self.issued_at is not None:
            raise RuntimeError("a request slot covers exactly one request")
        self._gate._enforce_interval(self.state, self.key)
        self.issued_at = self._gate._clock()
        return self.issued_at


class ThrottleGate:
    """Enforces the minimum interval between requests to the remote service.

    Args:
        state_file: File holding the last-request timestamp.
        policy: BLOCK sleeps until the interval has elapsed; FAIL raises
            ThrottledError instead.
        clock: Returns the current time as an aware UTC datetime.
        sleep: Blocks for the given number of seconds.
    """

    def __init__(
        self,
        state_file: Path,
        policy: ThrottlePolicy = ThrottlePolicy.BLOCK,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.state_file = state_file
        self.policy = ThrottlePolicy(policy)
        self.interval = MIN_REQUEST_INTERVAL
        self._clock = clock or _utcnow
        self._sleep = sleep
        self._lock = FileLock(str(state_file) + ".lock")

    @contextmanager
    def acquire(self, key: PuzzleKey | None = None) -> Iterator[RequestSlot]:
        """Hold the throttle lock for one read-check-request-write cycle.

        The new timestamp is persisted on exit whenever the slot was issued,
        whether or not the request itself succeeded.
        """
        self._ensure_dir()
        self._take_lock(key)
        try:
            slot = RequestSlot(self, self.read_state(), key)
            try:
                yield slot
            finally:
                if slot.issued_at is not None:
                    self.write_state(ThrottleState(slot.issued_at))
        finally:
            self._lock.release()

    def wait_time(self, state: ThrottleState | None = None) -> timedelta:
        """Remaining wait before the next request is allowed.

        Reads the state file without the lock, so it never blocks behind a
        caller that is waiting out the interval.
        """
        if state is None:
            state = self.read_state()
        return state.wait_time(self._clock(), self.interval)

    def read_state(self) -> ThrottleState:
        try:
            text = self.state_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ThrottleState()
        except (OSError, UnicodeDecodeError) as exc:
            raise CacheIOError(
                f"Cannot read throttle state {self.state_file}: {exc}", self.state_file
            ) from exc

        try:
            return ThrottleState.from_text(text)
        except ValueError:
            # Unparseable content still proves a request happened around
            # the time the file was last written.
            mtime = datetime.fromtimestamp(self.state_file.stat().st_mtime, tz=timezone.utc)
            logger.warning(
                "Malformed throttle state in %s, using its modification time %s",
                self.state_file,
                mtime.isoformat(),
            )
            return ThrottleState(last_request=mtime)

    def write_state(self, state: ThrottleState) -> None:
        try:
            atomic_write_text(self.state_file, state.to_text())
        except OSError as exc:
            raise CacheIOError(
                f"Cannot write throttle state {self.state_file}: {exc}", self.state_file
            ) from exc
        logger.debug("Recorded request at %s", state.last_request)

    def _ensure_dir(self) -> None:
        try:
            self.state_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CacheIOError(
                f"Cannot create throttle directory {self.state_file.parent}: {exc}",
                self.state_file,
            ) from exc

    def _take_lock(self, key: PuzzleKey | None) -> None:
        if self.policy is not ThrottlePolicy.FAIL:
            self._lock.acquire()
            return

        try:
            self._lock.acquire(timeout=0)
        except Timeout as exc:
            # The holder is about to issue a request, which restarts the interval.
            raise ThrottledError(
                "Rate limited: another process is requesting input, "
                f"retry in {math.ceil(self.interval.total_seconds())}s",
                retry_after=self.interval,
                key=key,
            ) from exc

    def _enforce_interval(self, state: ThrottleState, key: PuzzleKey | None) -> None:
        now = self._clock()
        if state.last_request is not None and state.last_request > now:
            logger.warning(
                "Last request %s is in the future, capping wait at %ds",
                state.last_request.isoformat(),
                self.interval.total_seconds(),
            )

        wait = state.wait_time(now, self.interval)
        if wait > timedelta(0) and self.policy is ThrottlePolicy.FAIL:
            raise ThrottledError(
                f"Rate limited: next request allowed in {math.ceil(wait.total_seconds())}s",
                retry_after=wait,
                key=key,
            )

        deadline = now + wait
        while wait > timedelta(0):
            logger.info(
                "Waiting for %d seconds (rate limiting)", math.ceil(wait.total_seconds())
            )
            self._sleep(wait.total_seconds())
            wait = deadline - self._clock()
