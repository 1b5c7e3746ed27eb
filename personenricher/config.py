"""
Settings for the person enricher, read from environment variables.

Call load_env() first to pick up a .env file; load_settings() then reads
os.environ once and returns an immutable snapshot.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_DATABASE_URL = "sqlite:///data/persons.db"
DEFAULT_AGIFY_URL = "https://api.agify.io"
DEFAULT_GENDERIZE_URL = "https://api.genderize.io"
DEFAULT_NATIONALIZE_URL = "https://api.nationalize.io"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Application settings."""

    database_url: str = DEFAULT_DATABASE_URL
    server_host: str = "0.0.0.0"
    server_port: int = 8080
    log_level: str = "INFO"
    log_dir: Path = Path("logs")
    log_to_file: bool = True
    agify_url: str = DEFAULT_AGIFY_URL
    genderize_url: str = DEFAULT_GENDERIZE_URL
    nationalize_url: str = DEFAULT_NATIONALIZE_URL
    # None keeps the transport default
    lookup_timeout: Optional[float] = None


def _parse_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Environment variable {key} must be an integer, got {raw!r}")


def _parse_float(env: Mapping[str, str], key: str) -> Optional[float]:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"Environment variable {key} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"Environment variable {key} must be positive, got {raw!r}")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        env: Mapping to read from (default: os.environ)

    Returns:
        Settings instance

    Raises:
        ValueError: If a numeric variable cannot be parsed
    """
    env = os.environ if env is None else env
    return Settings(
        database_url=env.get("DATABASE_URL") or DEFAULT_DATABASE_URL,
        server_host=env.get("SERVER_HOST") or "0.0.0.0",
        server_port=_parse_int(env, "SERVER_PORT", 8080),
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        log_dir=Path(env.get("LOG_DIR") or "logs"),
        log_to_file=(env.get("LOG_TO_FILE") or "true").strip().lower() in _TRUE_VALUES,
        agify_url=env.get("AGIFY_URL") or DEFAULT_AGIFY_URL,
        genderize_url=env.get("GENDERIZE_URL") or DEFAULT_GENDERIZE_URL,
        nationalize_url=env.get("NATIONALIZE_URL") or DEFAULT_NATIONALIZE_URL,
        lookup_timeout=_parse_float(env, "LOOKUP_TIMEOUT"),
    )
