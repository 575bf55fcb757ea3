"""Project configuration and paths.

Loads settings from config/settings.yaml and environment variables, and
resolves the Advent of Code session token used for authenticated requests.
"""

from __future__ import annotations

import logging
import os
from datetime import timedelta
from enum import Enum
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

from .exceptions import ConfigError, MissingCredential, UnreadableConfig

logger = logging.getLogger(__name__)

# === Paths ===
PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_DIR = PROJECT_ROOT / "config"
DATA_DIR = PROJECT_ROOT / "data"

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")

# The event asks automated tools to throttle to "a few minutes" between
# requests. Policy, not configuration.
MIN_REQUEST_INTERVAL = timedelta(minutes=5)

DEFAULT_USER_AGENT = "https://github.com/sseemayer/aoc by mail@semicolonsoftware.de"


class ThrottlePolicy(str, Enum):
    """What to do on a cache miss while the request interval is still running."""
    BLOCK = "block"
    FAIL = "fail"


def _default_session_file() -> Path:
    base = os.getenv("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "aoc" / "session"


class Settings(BaseModel):
    """Non-secret settings for input acquisition."""
    data_dir: Path = DATA_DIR
    session_file: Path = Field(default_factory=_default_session_file)
    throttle_policy: ThrottlePolicy = ThrottlePolicy.BLOCK
    base_url: str = "https://adventofcode.com"
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: float = 30.0

    @field_validator("data_dir")
    @classmethod
    def _resolve_data_dir(cls, value: Path) -> Path:
        """Resolve data dir relative to project root."""
        value = value.expanduser()
        if value.is_absolute():
            return value
        return PROJECT_ROOT / value

    @field_validator("session_file")
    @classmethod
    def _expand_session_file(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("user_agent")
    @classmethod
    def _user_agent_identifies_requester(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("user_agent must identify the requester")
        return value

    @property
    def input_dir(self) -> Path:
        """Root of the per-(year, day) input cache."""
        return self.data_dir / "inputs"

    @property
    def throttle_file(self) -> Path:
        """File holding the timestamp of the last outbound request."""
        return self.data_dir / "throttle" / "last_request"

    @classmethod
    def load(cls, path: Path | None = None) -> Settings:
        """Load settings from a YAML file, then apply environment overrides.

        The file is optional; when it is absent the defaults apply.

        Raises:
            UnreadableConfig: The file exists but cannot be read, is not
                valid YAML, or holds invalid values.
        """
        if path is None:
            path = Path(os.getenv("AOC_SETTINGS") or CONFIG_DIR / "settings.yaml")

        data: dict = {}
        if path.exists():
            try:
                with open(path, encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
                raise UnreadableConfig(
                    f"Cannot read settings file {path}: {exc}", path
                ) from exc
            if not isinstance(data, dict):
                raise UnreadableConfig(
                    f"Settings file {path} must contain a mapping", path
                )

        data.update(_env_overrides())

        try:
            return cls(**data)
        except ValidationError as exc:
            raise UnreadableConfig(f"Invalid settings ({path}): {exc}", path) from exc


def _env_overrides() -> dict[str, str]:
    overrides: dict[str, str] = {}
    if data_dir := os.getenv("AOC_DATA_DIR"):
        overrides["data_dir"] = data_dir
    if session_file := os.getenv("AOC_SESSION_FILE"):
        overrides["session_file"] = session_file
    if policy := os.getenv("AOC_THROTTLE_POLICY"):
        overrides["throttle_policy"] = policy.strip().lower()
    if timeout := os.getenv("AOC_REQUEST_TIMEOUT"):
        overrides["request_timeout"] = timeout
    if url := os.getenv("AOC_BASE_URL"):
        overrides["base_url"] = url
    return overrides


class Config(BaseModel):
    """Settings plus the session credential. Built once per process."""
    settings: Settings
    session_token: SecretStr

    @property
    def cookies(self) -> dict[str, str]:
        return {"session": self.session_token.get_secret_value()}


def read_session_token(settings: Settings) -> str:
    """Return the session token from AOC_SESSION or the session file.

    Raises:
        MissingCredential: Neither source holds a token.
        UnreadableConfig: The session file exists but cannot be read.
    """
    if token := os.getenv("AOC_SESSION", "").strip():
        return token

    path = settings.session_file
    if not path.exists():
        raise MissingCredential(
            f"No session token found. Set AOC_SESSION or run `aoc login <token>` "
            f"to store one in {path}"
        )

    try:
        token = path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as exc:
        raise UnreadableConfig(f"Cannot read session file {path}: {exc}", path) from exc

    if not token:
        raise MissingCredential(
            f"Session file {path} is empty. Run `aoc login <token>` to store a token"
        )
    return token


def load_config(settings: Settings | None = None) -> Config:
    """Resolve settings and the session credential.

    No network access and no retries: a missing credential is a setup
    error for the user to fix.
    """
    settings = settings or Settings.load()
    token = read_session_token(settings)
    logger.debug("Loaded session credential (data dir: %s)", settings.data_dir)
    return Config(settings=settings, session_token=SecretStr(token))


def save_session_token(token: str, settings: Settings) -> Path:
    """Store a session token in the session file, readable only by the owner."""
    token = token.strip()
    if not token:
        raise ValueError("session token must not be empty")

    path = settings.session_file
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(token + "\n")
    except OSError as exc:
        raise ConfigError(f"Cannot write session file {path}: {exc}") from exc

    logger.info("Session token stored in %s", path)
    return path
