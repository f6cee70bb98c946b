from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import Sequence

from playlist_analyzer.analysis import analyze_playlist
from playlist_analyzer.auth import TokenProvider
from playlist_analyzer.config import (
    HTTP_TIMEOUT_ENV,
    apply_collation_locale,
    env_float,
    env_int,
    load_local_env_file,
)
from playlist_analyzer.errors import ApiError, user_message_from_error
from playlist_analyzer.http import DEFAULT_TIMEOUT
from playlist_analyzer.models import AnalysisResult, AnalyzedTrack
from playlist_analyzer.parse import extract_playlist_id
from playlist_analyzer.spotify_service import SpotifyService

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rank a Spotify playlist by energy, tempo and valence")
    parser.add_argument("playlist", help="Playlist share URL, spotify:playlist: URI or playlist id")
    parser.add_argument(
        "--limit",
        type=int,
        default=env_int("RANKING_LIMIT", 10),
        help="Tracks shown per ranking (defaults to RANKING_LIMIT env or 10)",
    )
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log requests at debug level")
    return parser.parse_args(argv)


def _format_track(position: int, track: AnalyzedTrack, field: str) -> str:
    value = getattr(track, field)
    shown = f"{value:.1f}" if field == "tempo" else f"{value:.3f}"
    return f"{position:>3}. {shown:>7}  {track.name} - {track.artists}"


def format_rankings(result: AnalysisResult, limit: int) -> str:
    lines: list[str] = []
    sections = (
        ("Energy", "energy", result.energy_sorted),
        ("Tempo (BPM)", "tempo", result.tempo_sorted),
        ("Valence", "valence", result.valence_sorted),
    )
    for title, field, tracks in sections:
        if lines:
            lines.append("")
        lines.append(f"{title} ({len(tracks)} tracks)")
        for position, track in enumerate(tracks[:max(limit, 0)], start=1):
            lines.append(_format_track(position, track, field))
    return "\n".join(lines)


def result_as_dict(result: AnalysisResult) -> dict:
    return {
        "energySorted": [asdict(t) for t in result.energy_sorted],
        "tempoSorted": [asdict(t) for t in result.tempo_sorted],
        "valenceSorted": [asdict(t) for t in result.valence_sorted],
    }


def build_service() -> SpotifyService:
    timeout = env_float(HTTP_TIMEOUT_ENV, DEFAULT_TIMEOUT)
    return SpotifyService(TokenProvider.from_env(timeout=timeout), timeout=timeout)


def main(argv: Sequence[str] | None = None) -> int:
    loaded_keys = load_local_env_file()
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if loaded_keys:
        logger.debug("Loaded %s from .env", ", ".join(loaded_keys))
    apply_collation_locale()

    playlist_id = extract_playlist_id(args.playlist)
    if not playlist_id:
        print(f"Error: could not find a playlist id in {args.playlist!r}", file=sys.stderr)
        return 2

    service = build_service()
    try:
        result = analyze_playlist(playlist_id, service)
        playlist_name = service.get_playlist_name(playlist_id)
    except ApiError as exc:
        print(f"Error: {user_message_from_error(exc)}", file=sys.stderr)
        return 1

    if args.json:
        payload = {"playlistId": playlist_id, "playlistName": playlist_name, **result_as_dict(result)}
        print(json.dumps(payload, indent=2))
    else:
        print(f"Playlist: {playlist_name or playlist_id}")
        print()
        print(format_rankings(result, args.limit))
    return 0


if __name__ == "__main__":
    sys.exit(main())
