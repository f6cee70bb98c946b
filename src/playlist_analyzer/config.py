from __future__ import annotations

import locale
import logging
import os
from pathlib import Path

CLIENT_ID_ENV = "SPOTIFY_CLIENT_ID"
CLIENT_SECRET_ENV = "SPOTIFY_CLIENT_SECRET"
HTTP_TIMEOUT_ENV = "SPOTIFY_HTTP_TIMEOUT"

logger = logging.getLogger(__name__)


def load_local_env_file(env_path: str = ".env") -> list[str]:
    """Copy ``KEY=VALUE`` lines (optionally prefixed with ``export``) into os.environ.

    Variables already set in the environment win. Returns the keys that were
    taken from the file, so callers can log where the credentials came from.
    """
    path = Path(env_path)
    if not path.exists():
        return []

    loaded: list[str] = []
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip()
        if key and key not in os.environ:
            os.environ[key] = value.strip().strip('"').strip("'")
            loaded.append(key)
    return loaded


def apply_collation_locale() -> str | None:
    """Adopt the user's LC_COLLATE so name tie-breaks follow their language."""
    try:
        return locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        logger.warning("Could not apply the environment's collation locale; using %s", locale.setlocale(locale.LC_COLLATE))
        return None


def read_spotify_credentials() -> tuple[str | None, str | None]:
    # Empty strings count as missing.
    client_id = os.getenv(CLIENT_ID_ENV) or None
    client_secret = os.getenv(CLIENT_SECRET_ENV) or None
    return client_id, client_secret


def env_float(name: str, fallback: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return fallback
    try:
        return float(raw)
    except ValueError:
        return fallback


def env_int(name: str, fallback: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return fallback
    try:
        return int(raw)
    except ValueError:
        return fallback
