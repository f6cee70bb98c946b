from __future__ import annotations

import logging
from typing import Any, Callable, Sequence
from urllib.parse import quote

from playlist_analyzer.auth import TokenProvider
from playlist_analyzer.errors import ApiError
from playlist_analyzer.http import DEFAULT_TIMEOUT, fetch_json
from playlist_analyzer.models import FeatureSet, TrackSummary

logger = logging.getLogger(__name__)

API_BASE = "https://api.spotify.com/v1"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _number_or_zero(value: Any, field: str) -> float:
    if value is None:
        return 0.0
    if not _is_number(value):
        raise ApiError.malformed(f"Audio feature {field!r} is not a number: {value!r}")
    return float(value)


def _track_summary(track: dict) -> TrackSummary:
    artists = track.get("artists") or []
    external_urls = track.get("external_urls") or {}
    if not isinstance(artists, list) or not isinstance(external_urls, dict):
        raise ApiError.malformed(f"Track {track['id']!r} has unexpected artists or external_urls")

    artist_names: list[str] = []
    for artist in artists:
        if not artist:
            continue
        if not isinstance(artist, dict):
            raise ApiError.malformed(f"Track {track['id']!r} has an artist entry that is not an object")
        if artist.get("name"):
            artist_names.append(str(artist["name"]))

    return TrackSummary(
        id=str(track["id"]),
        name=str(track.get("name") or "Unknown Track"),
        artists=", ".join(artist_names) or "Unknown Artist",
        url=str(external_urls.get("spotify") or "#"),
    )


class SpotifyService:
    # Upstream maximums for one playlist page and one audio-features request.
    PAGE_LIMIT = 100
    FEATURES_BATCH_LIMIT = 100

    def __init__(
        self,
        token_provider: TokenProvider,
        fetch: Callable[..., Any] = fetch_json,
        api_base: str = API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.token_provider = token_provider
        self._fetch = fetch
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout

    def _auth_fetch(self, path: str) -> Any:
        token = self.token_provider.get_token()
        return self._fetch(
            f"{self._api_base}{path}",
            headers={"Authorization": f"Bearer {token}"},
            timeout=self._timeout,
        )

    def get_playlist(self, playlist_id: str) -> dict:
        playlist = self._auth_fetch(f"/playlists/{quote(playlist_id, safe='')}")
        if not isinstance(playlist, dict):
            raise ApiError.malformed("Playlist response is not a JSON object")
        return playlist

    def get_playlist_name(self, playlist_id: str) -> str | None:
        name = self.get_playlist(playlist_id).get("name")
        return str(name) if name else None

    def get_all_playlist_tracks(self, playlist_id: str) -> list[TrackSummary]:
        tracks: list[TrackSummary] = []
        skipped = 0
        offset = 0
        path = f"/playlists/{quote(playlist_id, safe='')}/tracks"

        while True:
            page = self._auth_fetch(f"{path}?limit={self.PAGE_LIMIT}&offset={offset}")
            if not isinstance(page, dict) or not isinstance(page.get("items"), list):
                raise ApiError.malformed("Playlist tracks response has no items list")

            items = page["items"]
            total = page.get("total")
            if total is None:
                total = 0
            elif not _is_number(total):
                raise ApiError.malformed(f"Playlist tracks total is not a number: {total!r}")

            for item in items:
                if item is not None and not isinstance(item, dict):
                    raise ApiError.malformed("Playlist item is not an object")
                track = item.get("track") if item else None
                # Removed or unavailable tracks come back as null entries.
                if not track:
                    skipped += 1
                    continue
                if not isinstance(track, dict):
                    raise ApiError.malformed("Playlist item track is not an object")
                if not track.get("id"):
                    skipped += 1
                    continue
                tracks.append(_track_summary(track))

            logger.debug(
                "Playlist %s page offset=%s: %s items, %s/%s collected",
                playlist_id, offset, len(items), len(tracks), total,
            )

            has_more = len(tracks) < total
            page_was_full = len(items) == self.PAGE_LIMIT
            if not (has_more and page_was_full):
                break
            offset += self.PAGE_LIMIT

        if skipped:
            logger.debug("Playlist %s: skipped %s unavailable items", playlist_id, skipped)
        return tracks

    def get_audio_features(self, track_ids: Sequence[str]) -> dict[str, FeatureSet]:
        ids = list(track_ids)
        features: dict[str, FeatureSet] = {}

        for start in range(0, len(ids), self.FEATURES_BATCH_LIMIT):
            batch = ids[start:start + self.FEATURES_BATCH_LIMIT]
            response = self._auth_fetch(f"/audio-features?ids={','.join(batch)}")
            entries = response.get("audio_features") if isinstance(response, dict) else None
            if not isinstance(entries, list):
                raise ApiError.malformed("Audio features response has no audio_features list")

            for entry in entries:
                if not entry:
                    continue
                if not isinstance(entry, dict):
                    raise ApiError.malformed("Audio features entry is not an object")
                if not entry.get("id"):
                    continue
                track_id = str(entry["id"])
                features[track_id] = FeatureSet(
                    id=track_id,
                    energy=_number_or_zero(entry.get("energy"), "energy"),
                    tempo=_number_or_zero(entry.get("tempo"), "tempo"),
                    valence=_number_or_zero(entry.get("valence"), "valence"),
                )
            logger.debug("Audio features batch of %s ids returned %s entries", len(batch), len(entries))

        return features
