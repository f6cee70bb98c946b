"""FastAPI web server for the playlist analyzer."""
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from playlist_analyzer.analysis import analyze_playlist
from playlist_analyzer.auth import TokenProvider
from playlist_analyzer.config import HTTP_TIMEOUT_ENV, env_float
from playlist_analyzer.errors import ApiError, ErrorKind, user_message_from_error
from playlist_analyzer.http import DEFAULT_TIMEOUT
from playlist_analyzer.models import AnalysisResult
from playlist_analyzer.parse import extract_playlist_id
from playlist_analyzer.spotify_service import SpotifyService

app = FastAPI(title="Playlist Analyzer")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class AnalyzeRequest(BaseModel):
    """Playlist share URL, spotify:playlist: URI or bare id."""
    playlist: str


class AnalyzedTrackInfo(BaseModel):
    id: str
    name: str
    artists: str
    url: str
    energy: float = 0.0
    tempo: float = 0.0
    valence: float = 0.0


class AnalysisResponse(BaseModel):
    playlist_id: str
    playlist_name: str | None = None
    track_count: int
    energy_sorted: list[AnalyzedTrackInfo]
    tempo_sorted: list[AnalyzedTrackInfo]
    valence_sorted: list[AnalyzedTrackInfo]


_shared_service: SpotifyService | None = None


def get_spotify_service() -> SpotifyService:
    """Shared service, so the cached access token survives between requests.

    A service built while credentials are missing is not kept, so setting
    them later takes effect without a restart.
    """
    global _shared_service
    if _shared_service is not None:
        return _shared_service

    timeout = env_float(HTTP_TIMEOUT_ENV, DEFAULT_TIMEOUT)
    service = SpotifyService(TokenProvider.from_env(timeout=timeout), timeout=timeout)
    if service.token_provider.has_credentials:
        _shared_service = service
    return service


def _status_for(error: ApiError) -> int:
    if error.kind is ErrorKind.MISSING_CONFIG:
        return 500
    if error.kind is ErrorKind.HTTP and error.status in (404, 429):
        return error.status
    return 502


def _to_response(playlist_id: str, playlist_name: str | None, result: AnalysisResult) -> AnalysisResponse:
    def _tracks(tracks):
        return [
            AnalyzedTrackInfo(
                id=t.id, name=t.name, artists=t.artists, url=t.url,
                energy=t.energy, tempo=t.tempo, valence=t.valence,
            )
            for t in tracks
        ]

    return AnalysisResponse(
        playlist_id=playlist_id,
        playlist_name=playlist_name,
        track_count=len(result.energy_sorted),
        energy_sorted=_tracks(result.energy_sorted),
        tempo_sorted=_tracks(result.tempo_sorted),
        valence_sorted=_tracks(result.valence_sorted),
    )


def _analyze(playlist_ref: str) -> AnalysisResponse:
    playlist_id = extract_playlist_id(playlist_ref)
    if not playlist_id:
        raise HTTPException(status_code=400, detail="Enter a valid Spotify playlist URL, URI or id.")
    try:
        service = get_spotify_service()
        result = analyze_playlist(playlist_id, service)
        playlist_name = service.get_playlist_name(playlist_id)
    except ApiError as e:
        raise HTTPException(status_code=_status_for(e), detail=user_message_from_error(e))
    return _to_response(playlist_id, playlist_name, result)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/api/playlists/{playlist_ref}/analysis", response_model=AnalysisResponse)
def get_playlist_analysis(playlist_ref: str):
    """Rank a playlist's tracks by energy, tempo and valence."""
    return _analyze(playlist_ref)


@app.post("/api/analyze", response_model=AnalysisResponse)
def analyze_playlist_reference(request: AnalyzeRequest):
    """Same as the GET route, for share URLs that are awkward to put in a path."""
    return _analyze(request.playlist)
