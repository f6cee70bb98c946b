from __future__ import annotations

import base64
import logging
import time
from typing import Any, Callable

from playlist_analyzer.config import CLIENT_ID_ENV, CLIENT_SECRET_ENV, read_spotify_credentials
from playlist_analyzer.errors import ApiError
from playlist_analyzer.http import DEFAULT_TIMEOUT, fetch_json

logger = logging.getLogger(__name__)

TOKEN_URL = "https://accounts.spotify.com/api/token"

# A cached token is treated as expired this many seconds early.
_EXPIRY_BUFFER_SECONDS = 10


class TokenProvider:
    """Client-credentials access token with an in-memory cache.

    One instance holds one cached credential. Concurrent callers may both
    refresh an expired token; the last response simply replaces the cache.
    """

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        fetch: Callable[..., Any] = fetch_json,
        clock: Callable[[], float] = time.time,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._fetch = fetch
        self._clock = clock
        self._timeout = timeout
        self._access_token: str | None = None
        self._expires_at: float = 0.0

    @classmethod
    def from_env(cls, **kwargs: Any) -> TokenProvider:
        client_id, client_secret = read_spotify_credentials()
        return cls(client_id, client_secret, **kwargs)

    @property
    def has_credentials(self) -> bool:
        return bool(self._client_id and self._client_secret)

    def reset(self) -> None:
        self._access_token = None
        self._expires_at = 0.0

    def get_token(self) -> str:
        if self._access_token and self._clock() < self._expires_at - _EXPIRY_BUFFER_SECONDS:
            return self._access_token

        if not self.has_credentials:
            raise ApiError.missing_config(
                f"{CLIENT_ID_ENV} and {CLIENT_SECRET_ENV} environment variables are required"
            )

        logger.debug("Requesting a new Spotify access token")
        payload = self._fetch(
            TOKEN_URL,
            method="POST",
            headers={
                "Authorization": f"Basic {self._basic_credentials()}",
                "Content-Type": "application/x-www-form-urlencoded",
            },
            data="grant_type=client_credentials",
            timeout=self._timeout,
        )

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        expires_in = payload.get("expires_in") if isinstance(payload, dict) else None
        if not isinstance(access_token, str) or not access_token:
            raise ApiError.malformed("Token response did not include an access_token")
        if isinstance(expires_in, bool) or not isinstance(expires_in, (int, float)):
            raise ApiError.malformed("Token response did not include a numeric expires_in")

        self._access_token = access_token
        self._expires_at = self._clock() + expires_in
        logger.debug("Cached Spotify access token for %ss", expires_in)
        return access_token

    def _basic_credentials(self) -> str:
        raw = f"{self._client_id}:{self._client_secret}".encode("utf-8")
        return base64.b64encode(raw).decode("ascii")
