"""
Taste Cluster Tests

Seeded k-means over one-hot genre/theme/mode vectors of the library.
"""

import numpy as np
import pytest

from reco.models import RecoConfig, ensure_user_games
from reco.stages.clustering import detect_taste_clusters, kmeans
from reco.stages.run_cache import RunCache

from .conftest import NOW_MS, sessions, user_game

TWO_MOODS = RecoConfig(cluster_k=2)


def two_mood_library():
    rpgs = [
        user_game(f"rpg-{i}", f"RPG {i}", genres=["RPG"], themes=["Fantasy"], gameModes=["Single player"],
                  hoursPlayed=10 * (i + 1), embedding=[1.0, 0.0])
        for i in range(3)
    ]
    racers = [
        user_game(f"race-{i}", f"Racer {i}", genres=["Racing"], themes=["Open world"], gameModes=["Multiplayer"],
                  hoursPlayed=5)
        for i in range(3)
    ]
    return ensure_user_games(rpgs + racers)


class TestKMeans:
    def test_separates_disjoint_groups(self):
        vectors = np.array([[1, 1, 0, 0]] * 3 + [[0, 0, 1, 1]] * 3, dtype=float)
        assignments = kmeans(vectors, 2, 10, seed=3)
        assert len(set(assignments[:3])) == 1
        assert len(set(assignments[3:])) == 1
        assert assignments[0] != assignments[3]

    def test_seed_is_deterministic(self):
        vectors = np.random.default_rng(0).random((12, 5))
        assert list(kmeans(vectors, 3, 10, seed=42)) == list(kmeans(vectors, 3, 10, seed=42))


class TestDetectTasteClusters:
    def test_two_moods(self):
        clusters = detect_taste_clusters(two_mood_library(), RunCache(NOW_MS), TWO_MOODS, seed=7)
        assert sorted(c.label for c in clusters) == ["RPG", "Racing"]
        assert all(c.game_count == 3 for c in clusters)

    def test_top_games_ranked_by_engagement(self):
        clusters = detect_taste_clusters(two_mood_library(), RunCache(NOW_MS), TWO_MOODS, seed=7)
        rpg = next(c for c in clusters if c.label == "RPG")
        assert rpg.top_games == ["RPG 2", "RPG 1", "RPG 0"]

    def test_semantic_centroid_only_with_embeddings(self):
        clusters = detect_taste_clusters(two_mood_library(), RunCache(NOW_MS), TWO_MOODS, seed=7)
        by_label = {c.label: c for c in clusters}
        assert by_label["RPG"].semantic_centroid == [1.0, 0.0]
        assert by_label["Racing"].semantic_centroid is None

    def test_small_library_is_skipped(self):
        games = ensure_user_games([user_game(str(i), f"G{i}") for i in range(5)])
        assert detect_taste_clusters(games, RunCache(NOW_MS), seed=1) == []

    def test_same_seed_same_clusters(self, library):
        games = ensure_user_games(library * 2)
        first = detect_taste_clusters(games, RunCache(NOW_MS), seed=11)
        second = detect_taste_clusters(games, RunCache(NOW_MS), seed=11)
        assert [c.model_dump() for c in first] == [c.model_dump() for c in second]

    @pytest.mark.parametrize("seed", range(10))
    def test_two_genres_at_default_k(self, seed):
        # Three target clusters over two genres: at least one initial centroid duplicates another
        games = []
        for genre in ("RPG", "Racing"):
            for i in range(3):
                timestamps, durations = sessions(90, 4, 10)
                games.append(
                    user_game(f"{genre}-{i}", f"{genre} {i}", genres=[genre],
                              sessionTimestamps=timestamps, sessionDurations=durations)
                )
        clusters = detect_taste_clusters(ensure_user_games(games), RunCache(NOW_MS), RecoConfig(), seed=seed)
        assert clusters
        assert all(c.game_count >= 2 for c in clusters)
        assert all(c.label for c in clusters)
        assert sum(c.game_count for c in clusters) == 6
