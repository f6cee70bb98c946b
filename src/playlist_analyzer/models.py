from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TrackSummary:
    id: str
    name: str
    artists: str
    url: str


@dataclass(frozen=True, slots=True)
class FeatureSet:
    id: str
    energy: float = 0.0
    tempo: float = 0.0
    valence: float = 0.0


@dataclass(frozen=True, slots=True)
class AnalyzedTrack:
    id: str
    name: str
    artists: str
    url: str
    energy: float = 0.0
    tempo: float = 0.0
    valence: float = 0.0


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    energy_sorted: tuple[AnalyzedTrack, ...]
    tempo_sorted: tuple[AnalyzedTrack, ...]
    valence_sorted: tuple[AnalyzedTrack, ...]
