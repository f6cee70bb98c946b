from __future__ import annotations

import locale
import unicodedata
from typing import Mapping, Sequence

from playlist_analyzer.models import AnalysisResult, AnalyzedTrack, FeatureSet, TrackSummary

RANKING_FIELDS = ("energy", "tempo", "valence")


def merge_tracks(
    tracks: Sequence[TrackSummary],
    features: Mapping[str, FeatureSet],
) -> list[AnalyzedTrack]:
    merged: list[AnalyzedTrack] = []
    for track in tracks:
        feature = features.get(track.id)
        merged.append(
            AnalyzedTrack(
                id=track.id,
                name=track.name,
                artists=track.artists,
                url=track.url,
                energy=feature.energy if feature else 0.0,
                tempo=feature.tempo if feature else 0.0,
                valence=feature.valence if feature else 0.0,
            )
        )
    return merged


def _collation_key(name: str) -> str:
    # Accented letters sort with their base letter ("Éclair" next to "Eclair").
    decomposed = unicodedata.normalize("NFKD", name)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def _ranking_key(field: str):
    def key(track: AnalyzedTrack) -> tuple:
        # Descending on the metric, then collated name, then raw name and id
        # so that no two distinct tracks ever compare equal.
        return (
            -getattr(track, field),
            _collation_key(track.name),
            locale.strxfrm(track.name.casefold()),
            track.name,
            track.id,
        )

    return key


def sort_tracks(tracks: Sequence[AnalyzedTrack], field: str) -> list[AnalyzedTrack]:
    if field not in RANKING_FIELDS:
        raise ValueError(f"Cannot rank by {field!r}; expected one of {', '.join(RANKING_FIELDS)}")
    return sorted(tracks, key=_ranking_key(field))


def analyze(
    tracks: Sequence[TrackSummary],
    features: Mapping[str, FeatureSet],
) -> AnalysisResult:
    merged = merge_tracks(tracks, features)
    return AnalysisResult(
        energy_sorted=tuple(sort_tracks(merged, "energy")),
        tempo_sorted=tuple(sort_tracks(merged, "tempo")),
        valence_sorted=tuple(sort_tracks(merged, "valence")),
    )


def analyze_playlist(playlist_id: str, service: object) -> AnalysisResult:
    """Fetch a playlist's tracks and audio features and rank them three ways.

    Missing audio features count as 0 for every metric. Any upstream failure
    propagates as an ``ApiError`` and no partial result is returned.
    """
    tracks = service.get_all_playlist_tracks(playlist_id)
    features = service.get_audio_features([t.id for t in tracks])
    return analyze(tracks, features)
