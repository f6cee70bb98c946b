import unittest
from unittest.mock import MagicMock

from playlist_analyzer.analysis import analyze, analyze_playlist, merge_tracks, sort_tracks
from playlist_analyzer.auth import TOKEN_URL, TokenProvider
from playlist_analyzer.models import AnalyzedTrack, FeatureSet, TrackSummary
from playlist_analyzer.spotify_service import SpotifyService


def _summary(track_id: str, name: str) -> TrackSummary:
    return TrackSummary(id=track_id, name=name, artists="Artist", url="#")


def _three_tracks() -> tuple[list[TrackSummary], dict[str, FeatureSet]]:
    tracks = [_summary("a", "Alpha"), _summary("b", "Beta"), _summary("c", "Gamma")]
    features = {
        "a": FeatureSet("a", energy=0.7, tempo=120, valence=0.2),
        "b": FeatureSet("b", energy=0.9, tempo=110, valence=0.8),
        "c": FeatureSet("c", energy=0.4, tempo=140, valence=0.5),
    }
    return tracks, features


class AnalyzeTests(unittest.TestCase):
    def test_sorts_each_view_descending(self) -> None:
        tracks, features = _three_tracks()

        result = analyze(tracks, features)

        self.assertEqual([t.id for t in result.energy_sorted], ["b", "a", "c"])
        self.assertEqual([t.id for t in result.tempo_sorted], ["c", "a", "b"])
        self.assertEqual([t.id for t in result.valence_sorted], ["b", "c", "a"])

    def test_missing_features_default_to_zero_and_ties_break_by_name(self) -> None:
        tracks = [_summary("y", "BBB"), _summary("x", "AAA")]
        features = {"x": FeatureSet("x", 0, 0, 0)}

        result = analyze(tracks, features)

        for view in (result.energy_sorted, result.tempo_sorted, result.valence_sorted):
            self.assertEqual([t.name for t in view], ["AAA", "BBB"])
        missing = next(t for t in result.energy_sorted if t.id == "y")
        self.assertEqual((missing.energy, missing.tempo, missing.valence), (0.0, 0.0, 0.0))

    def test_every_view_is_a_permutation_of_the_input(self) -> None:
        tracks = [_summary(f"id{i}", f"Song {i % 7}") for i in range(40)]
        features = {f"id{i}": FeatureSet(f"id{i}", energy=(i % 5) / 5, tempo=float(i % 3), valence=0.5) for i in range(0, 40, 2)}

        result = analyze(tracks, features)

        expected = sorted(t.id for t in tracks)
        for view in (result.energy_sorted, result.tempo_sorted, result.valence_sorted):
            self.assertEqual(len(view), len(tracks))
            self.assertEqual(sorted(t.id for t in view), expected)

    def test_sorting_is_idempotent(self) -> None:
        tracks = [_summary(f"id{i}", f"Song {i % 4}") for i in range(20)]
        merged = merge_tracks(tracks, {f"id{i}": FeatureSet(f"id{i}", energy=(i % 3) / 3) for i in range(20)})

        once = sort_tracks(merged, "energy")
        self.assertEqual(sort_tracks(once, "energy"), once)
        self.assertEqual(sort_tracks(list(reversed(merged)), "energy"), once)

    def test_identical_names_fall_back_to_id(self) -> None:
        merged = [
            AnalyzedTrack("z", "Same", "A", "#", energy=0.5),
            AnalyzedTrack("m", "Same", "B", "#", energy=0.5),
        ]

        self.assertEqual([t.id for t in sort_tracks(merged, "energy")], ["m", "z"])

    def test_name_tie_break_ignores_case(self) -> None:
        merged = [AnalyzedTrack("1", "banana", "A", "#"), AnalyzedTrack("2", "Apple", "A", "#")]

        self.assertEqual([t.name for t in sort_tracks(merged, "tempo")], ["Apple", "banana"])

    def test_accented_names_sort_with_their_base_letter(self) -> None:
        merged = [
            AnalyzedTrack("1", "Zebra", "A", "#", energy=0.5),
            AnalyzedTrack("2", "Éclair", "A", "#", energy=0.5),
            AnalyzedTrack("3", "Eagle", "A", "#", energy=0.5),
            AnalyzedTrack("4", "edge", "A", "#", energy=0.5),
        ]

        self.assertEqual(
            [t.name for t in sort_tracks(merged, "energy")],
            ["Eagle", "Éclair", "edge", "Zebra"],
        )

    def test_merge_preserves_input_order_and_fields(self) -> None:
        tracks, features = _three_tracks()

        merged = merge_tracks(tracks, features)

        self.assertEqual([t.id for t in merged], ["a", "b", "c"])
        self.assertEqual(merged[0], AnalyzedTrack("a", "Alpha", "Artist", "#", 0.7, 120, 0.2))

    def test_sort_rejects_unknown_field(self) -> None:
        with self.assertRaises(ValueError):
            sort_tracks([], "danceability")

    def test_empty_playlist(self) -> None:
        result = analyze([], {})
        self.assertEqual(result.energy_sorted, ())


class AnalyzePlaylistTests(unittest.TestCase):
    def test_requests_features_for_exactly_the_fetched_ids(self) -> None:
        tracks, features = _three_tracks()
        service = MagicMock()
        service.get_all_playlist_tracks.return_value = tracks
        service.get_audio_features.return_value = features

        result = analyze_playlist("playlist123", service)

        service.get_all_playlist_tracks.assert_called_once_with("playlist123")
        service.get_audio_features.assert_called_once_with(["a", "b", "c"])
        self.assertEqual([t.id for t in result.energy_sorted], ["b", "a", "c"])

    def test_two_analyses_share_one_token_request(self) -> None:
        def fake_fetch(url, **kwargs):
            if url == TOKEN_URL:
                return {"access_token": "tok", "token_type": "Bearer", "expires_in": 3600}
            if "/tracks?" in url:
                return {"items": [{"track": {"id": "a", "name": "Alpha"}}], "total": 1}
            return {"audio_features": [{"id": "a", "energy": 0.3, "tempo": 90, "valence": 0.1}]}

        fetch = MagicMock(side_effect=fake_fetch)
        service = SpotifyService(TokenProvider("id", "secret", fetch=fetch, clock=lambda: 0.0), fetch=fetch)

        analyze_playlist("p", service)
        result = analyze_playlist("p", service)

        token_calls = [c for c in fetch.call_args_list if c.args[0] == TOKEN_URL]
        self.assertEqual(len(token_calls), 1)
        self.assertEqual(fetch.call_count, 5)
        self.assertEqual(result.tempo_sorted[0].tempo, 90)


if __name__ == "__main__":
    unittest.main()
