"""
Candidate Scoring Tests

Layer weights and their redistribution when embeddings are missing, the individual
signals (quality, popularity, recency, diversity, graph, semantic), and the composite
score bounds.

Run:
----
    pytest tests/test_scoring.py -v
"""

import pytest
from pydantic import ValidationError

from reco import recommend
from reco.models import DEFAULT_CONFIG, RecoConfig, ShelfType, ensure_candidates, ensure_user_games
from reco.models.scoring import LayerScores
from reco.models.snapshot import CandidateGame
from reco.stages.franchise import detect_franchises
from reco.stages.negative_signals import build_negative_profile
from reco.stages.ranking import build_scoring_context, composite_score, popularity_adjustment, score_candidates
from reco.stages.ranking.signals import (
    PoolStats,
    compute_diversity_bonus,
    compute_popularity_signal,
    compute_quality_signal,
    compute_recency_boost,
    genre_weight_index,
)
from reco.stages.run_cache import RunCache
from reco.stages.taste_profile import build_taste_profile
from reco.utils.scores import log_ratio

from .conftest import NOW_MS, candidate, request, user_game


def scoring_context(user_dicts, candidate_dicts, has_embeddings=False, config=DEFAULT_CONFIG):
    games = ensure_user_games(user_dicts)
    candidates = ensure_candidates(candidate_dicts)
    cache = RunCache(NOW_MS)
    profile = build_taste_profile(games, cache, config)
    ctx = build_scoring_context(
        games,
        candidates,
        profile,
        build_negative_profile(games, NOW_MS, config),
        detect_franchises(games, candidates),
        cache,
        20,
        has_embeddings,
        config,
    )
    return candidates, ctx


class TestWeights:
    def test_total_weight_is_conserved(self):
        assert DEFAULT_CONFIG.total_weight(True) == pytest.approx(DEFAULT_CONFIG.total_weight(False))

    def test_semantic_weight_moves_to_content_and_graph(self):
        with_emb = DEFAULT_CONFIG.layer_weights(True)
        without = DEFAULT_CONFIG.layer_weights(False)
        assert without["semantic_similarity"] == 0.0
        assert without["content_similarity"] == pytest.approx(with_emb["content_similarity"] + 0.07)
        assert without["graph_signal"] == pytest.approx(with_emb["graph_signal"] + 0.05)

    def test_fallback_that_loses_weight_is_rejected(self):
        with pytest.raises(ValidationError):
            RecoConfig(semantic_fallback_content=0.08)

    def test_from_dict_merges_sections(self):
        config = RecoConfig.from_dict(
            {"weights": {"content": 0.2}, "mmr": {"lambda": 0.5}, "shelf_size": 6, "unknown_key": 1}
        )
        assert config.weight_content == 0.2
        assert config.mmr_lambda == 0.5
        assert config.mmr_limit == 80
        assert config.shelf_size == 6

    def test_composite_subtracts_negative(self):
        layers = LayerScores(content_similarity=1.0, negative_signal=1.0)
        weights = {"content_similarity": 0.5}
        assert composite_score(layers, weights, 0.1) == pytest.approx(0.4)
        assert composite_score(LayerScores(negative_signal=1.0), weights, 0.1) == 0.0


class TestIntrinsicSignals:
    def test_popularity_adjustment(self):
        assert popularity_adjustment(1000, 1000) == pytest.approx(0.75)
        assert popularity_adjustment(None, 1000) == 1.0
        assert popularity_adjustment(0, 1000) == 1.0

    def test_quality_without_reviews_redistributes(self):
        # metacritic 1.0*0.40 + neutral 0.3 for recommendations, achievements, maintenance
        c = CandidateGame(game_id="x", title="X", metacritic_score=100)
        assert compute_quality_signal(c, PoolStats(current_year=2026)) == pytest.approx(0.58)

    def test_quality_with_reviews(self):
        c = CandidateGame(
            game_id="x",
            title="X",
            metacritic_score=100,
            recommendations=1000,
            review_positivity=1.0,
            review_volume=1000,
            achievements=100,
            release_date="2026-01-01",
        )
        stats = PoolStats(max_recommendations=1000, max_review_volume=1000, current_year=2026)
        assert compute_quality_signal(c, stats) == pytest.approx(1.0)

    @pytest.mark.parametrize("date, expected", [("2026-01-01", 1.0), ("2021-06-01", 0.5), ("2010", 0.0), ("", 0.3)])
    def test_recency(self, date, expected):
        c = CandidateGame(game_id="x", title="X", release_date=date)
        assert compute_recency_boost(c, 2026) == pytest.approx(expected)

    def test_diversity_rewards_unfamiliar_genres(self, library):
        profile = build_taste_profile(ensure_user_games(library), RunCache(NOW_MS))
        weights = genre_weight_index(profile)
        top = profile.genres[0].weight
        racing = CandidateGame(game_id="r", title="R", genres=["Racing"])
        action = CandidateGame(game_id="a", title="A", genres=["Action"])
        assert compute_diversity_bonus(racing, weights, top) == 0.5
        assert compute_diversity_bonus(action, weights, top) == 0.0


class TestScoreCandidates:
    def test_scores_and_layers_bounded(self, library, pool):
        candidates, ctx = scoring_context(library, pool)
        scored = score_candidates(candidates, ctx)
        assert len(scored) == len(pool)
        for s in scored:
            assert 0.0 <= s.score <= 1.0
            for name, value in s.layer_scores.model_dump().items():
                assert 0.0 <= value <= 1.0, name

    def test_sorted_descending(self, library, pool):
        candidates, ctx = scoring_context(library, pool)
        scores = [s.score for s in score_candidates(candidates, ctx)]
        assert scores == sorted(scores, reverse=True)

    def test_semantic_is_zero_without_embeddings(self):
        library = [user_game("a", "A", embedding=[1.0, 0.0])]
        pool = [candidate("c", "C", embedding=[1.0, 0.0])]
        candidates, ctx = scoring_context(library, pool, has_embeddings=False)
        assert score_candidates(candidates, ctx)[0].layer_scores.semantic_similarity == 0.0

    def test_semantic_with_embeddings(self):
        library = [user_game("a", "A", embedding=[1.0, 0.0])]
        pool = [
            candidate("same", "Same", embedding=[1.0, 0.0]),
            candidate("other", "Other", embedding=[0.0, 1.0]),
            candidate("short", "Short", embedding=[1.0]),
        ]
        candidates, ctx = scoring_context(library, pool, has_embeddings=True)
        by_id = {s.game_id: s.layer_scores.semantic_similarity for s in score_candidates(candidates, ctx)}
        assert by_id["same"] == pytest.approx(1.0)
        assert by_id["other"] == pytest.approx(0.0)
        assert by_id["short"] == 0.0

    def test_graph_direct_and_reverse_matches(self, library, pool):
        candidates, ctx = scoring_context(library, pool)
        by_id = {s.game_id: s for s in score_candidates(candidates, ctx)}
        assert by_id["lies-of-p"].reasons.similar_to == ["Elden Ring"]
        assert by_id["nioh-2"].reasons.similar_to == ["Elden Ring", "Sekiro: Shadows Die Twice"]
        assert by_id["lies-of-p"].layer_scores.graph_signal > 0
        assert by_id["forza"].layer_scores.graph_signal == 0.0

    def test_reasons(self, library, pool):
        candidates, ctx = scoring_context(library, pool)
        by_id = {s.game_id: s for s in score_candidates(candidates, ctx)}
        assert by_id["ds3"].layer_scores.studio_loyalty_boost == 0.35
        assert by_id["ds3"].reasons.is_on_sale
        assert by_id["forza"].reasons.is_stretch_pick
        assert not by_id["nioh-2"].reasons.is_stretch_pick
        assert by_id["ds3"].reasons.popularity_rank == 1
        assert by_id["puzzle"].reasons.is_hidden_gem
        assert by_id["sekiro-2"].reasons.franchise_of == "Sekiro"
        assert by_id["sekiro-2"].layer_scores.franchise_boost == pytest.approx(0.975)

    def test_progress_reported_in_scoring_range(self, library, pool):
        candidates, ctx = scoring_context(library, pool)
        seen = []
        score_candidates(candidates, ctx, on_progress=seen.append)
        assert seen
        assert all(28 <= p < 58 for p in seen)


class TestSentinelCounts:
    """Catalog rows with -1 (or other non-positive) counts are scored as unknown."""

    def test_log_ratio_of_non_positive_value(self):
        assert log_ratio(-1, 100) == 0.0
        assert log_ratio(0, 100) == 0.0
        assert log_ratio(-5, 0) == 0.0

    def test_negative_counts_become_unknown(self):
        c = CandidateGame.model_validate(
            candidate("x", "X", playerCount=-1, recommendations=-1, reviewVolume=-3, achievements=-2)
        )
        assert c.player_count is None
        assert c.recommendations is None
        assert c.review_volume is None
        assert c.achievements is None

    def test_signals_treat_negative_counts_as_neutral(self):
        # Bypasses field validation to exercise the signal guards directly
        c = CandidateGame.model_construct(game_id="x", title="X", player_count=-1, recommendations=-1)
        stats = PoolStats(max_player_count=100, max_recommendations=100, current_year=2026)
        assert compute_popularity_signal(c, stats) == pytest.approx(0.3)
        assert compute_quality_signal(c, stats) == pytest.approx(0.3)

    @pytest.mark.parametrize("field", ["playerCount", "recommendations"])
    def test_one_sentinel_row_does_not_fail_the_run(self, field):
        result = recommend(
            request(
                [user_game("x", "Xgame")],
                [candidate("a", "Aaa", **{field: -1}), candidate("b", "Bbb", playerCount=100)],
            )
        )
        assert result.error is None
        assert result.shelves[0].type == ShelfType.HERO
