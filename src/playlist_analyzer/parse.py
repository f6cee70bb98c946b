from __future__ import annotations

import re
from urllib.parse import urlsplit

_PLAYLIST_URI_PREFIX = "spotify:playlist:"
_PLAYLIST_HOST = "open.spotify.com"
_SPOTIFY_ID_RE = re.compile(r"[a-zA-Z0-9]{20,25}")


def is_valid_spotify_id(value: str) -> bool:
    return isinstance(value, str) and bool(_SPOTIFY_ID_RE.fullmatch(value))


def extract_playlist_id(raw: object) -> str | None:
    """Return the playlist id from a share URL, a ``spotify:playlist:`` URI or a bare id.

    Anything else (albums, tracks, other hosts, extra path segments) yields None.
    """
    if not raw or not isinstance(raw, str):
        return None

    trimmed = raw.strip()
    if trimmed.startswith(_PLAYLIST_URI_PREFIX):
        uri_id = trimmed[len(_PLAYLIST_URI_PREFIX):]
        return uri_id if is_valid_spotify_id(uri_id) else None

    if is_valid_spotify_id(trimmed):
        return trimmed

    try:
        url = urlsplit(trimmed)
    except ValueError:
        return None

    if url.scheme not in ("http", "https") or url.hostname != _PLAYLIST_HOST:
        return None

    path_parts = [part for part in url.path.split("/") if part]
    if len(path_parts) != 2 or path_parts[0] != "playlist":
        return None

    return path_parts[1] if is_valid_spotify_id(path_parts[1]) else None
