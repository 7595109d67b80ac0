"""
Taste Profile Tests

Covers engagement-curve classification, per-game engagement scores, trajectory
multipliers, release-era buckets, and facet aggregation into a TasteProfile.

Run:
----
    pytest tests/test_taste_profile.py -v
"""

import pytest

from reco.models import EngagementPattern, UserGameSnapshot, ensure_user_games
from reco.stages.run_cache import RunCache
from reco.stages.taste_profile import (
    build_taste_profile,
    classify_engagement_curve,
    compute_engagement_score,
    pattern_for,
    release_bucket,
    trajectory_multiplier,
)

from .conftest import DAY_MS, NOW_ISO, NOW_MS, sessions, user_game


def snapshot(**overrides) -> UserGameSnapshot:
    return UserGameSnapshot.model_validate(user_game("g1", "Game One", **overrides))


def with_sessions(timestamps, durations, **overrides) -> UserGameSnapshot:
    return snapshot(sessionTimestamps=timestamps, sessionDurations=durations, **overrides)


class TestEngagementCurve:
    def test_fewer_than_three_sessions_is_unknown(self):
        ts, dur = sessions(30, 2, 10)
        assert classify_engagement_curve(with_sessions(ts, dur)) == EngagementPattern.UNKNOWN

    def test_sessions_within_three_days_is_binge(self):
        ts, dur = sessions(10, 3, 0.5)
        assert classify_engagement_curve(with_sessions(ts, dur)) == EngagementPattern.BINGE_DROP

    def test_growing_sessions_over_two_weeks_is_slow_burn(self):
        start = NOW_MS - 30 * DAY_MS
        ts = [start + d * DAY_MS for d in (0, 5, 12, 20)]
        game = with_sessions(ts, [30, 30, 90, 90])
        assert classify_engagement_curve(game) == EngagementPattern.SLOW_BURN

    def test_long_first_sessions_is_honeymoon(self):
        start = NOW_MS - 20 * DAY_MS
        ts = [start + d * DAY_MS for d in (0, 2, 4, 7, 10)]
        game = with_sessions(ts, [120, 120, 120, 30, 30])
        assert classify_engagement_curve(game) == EngagementPattern.HONEYMOON

    def test_steady_sessions_over_a_month_is_long_tail(self):
        ts, dur = sessions(40, 3, 15)
        assert classify_engagement_curve(with_sessions(ts, dur)) == EngagementPattern.LONG_TAIL

    def test_short_steady_span_is_unknown(self):
        ts, dur = sessions(10, 3, 3.5)
        assert classify_engagement_curve(with_sessions(ts, dur)) == EngagementPattern.UNKNOWN

    def test_caller_pattern_is_trusted_unless_unknown(self):
        ts, dur = sessions(10, 3, 0.5)
        cache = RunCache(NOW_MS)
        trusted = with_sessions(ts, dur, engagementPattern="long-tail")
        assert pattern_for(trusted, cache) == EngagementPattern.LONG_TAIL

        reclassified = UserGameSnapshot.model_validate(
            user_game("g2", "Other", sessionTimestamps=ts, sessionDurations=dur, engagementPattern="unknown")
        )
        assert pattern_for(reclassified, cache) == EngagementPattern.BINGE_DROP
        # The snapshot itself is not rewritten
        assert reclassified.engagement_pattern == EngagementPattern.UNKNOWN

    def test_unrecognized_caller_pattern_is_ignored(self):
        game = snapshot(engagementPattern="weekend-warrior")
        assert game.engagement_pattern is None


class TestEngagementScore:
    def test_known_inputs_give_exact_score(self):
        # hours 0.5*0.28 + rating 0.25 + status 0.18 + depth 0.15*0.14 + decay 0.10
        game = snapshot(status="Completed", hoursPlayed=250, rating=5, addedAt=NOW_ISO)
        score = compute_engagement_score(game, RunCache(NOW_MS))
        assert score == pytest.approx(0.691)

    def test_half_life_halves_decay_term(self):
        fresh = snapshot(status="Completed", hoursPlayed=250, rating=5, addedAt=NOW_ISO)
        old = UserGameSnapshot.model_validate(
            user_game("g2", "Old", status="Completed", hoursPlayed=250, rating=5, addedAt="2025-07-05T00:00:00Z")
        )
        cache = RunCache(NOW_MS)
        diff = compute_engagement_score(fresh, cache) - compute_engagement_score(old, cache)
        assert diff == pytest.approx(0.05, abs=1e-3)

    def test_score_is_bounded(self):
        ts, dur = sessions(200, 10, 20, minutes=600)
        game = with_sessions(ts, dur, status="Completed", hoursPlayed=2000, rating=5, addedAt=NOW_ISO)
        score = compute_engagement_score(game, RunCache(NOW_MS))
        assert 0.0 <= score <= 1.0

    def test_unparsable_dates_do_not_fail(self):
        game = snapshot(addedAt="not a date", lastSessionDate="also not a date")
        score = compute_engagement_score(game, RunCache(NOW_MS))
        assert 0.0 <= score <= 1.0

    def test_score_is_cached_per_run(self):
        cache = RunCache(NOW_MS)
        game = snapshot()
        first = compute_engagement_score(game, cache)
        assert cache.engagement["g1"] == first
        cache.engagement["g1"] = 0.123
        assert compute_engagement_score(game, cache) == 0.123


class TestTrajectory:
    @pytest.mark.parametrize(
        "trajectory, status, expected",
        [
            ([], "Playing", 1.0),
            (["Want to Play", "Playing", "Completed"], "Completed", 1.5),
            (["Playing", "On Hold"], "On Hold", 0.6),
            (["Completed", "Playing", "Completed"], "Completed", 1.3),
            (["Completed", "Want to Play"], "Want to Play", 0.5),
        ],
    )
    def test_multiplier(self, trajectory, status, expected):
        game = snapshot(statusTrajectory=trajectory, status=status)
        assert trajectory_multiplier(game) == expected


class TestReleaseBucket:
    @pytest.mark.parametrize(
        "date, bucket",
        [
            ("2024-05-01", "2023+"),
            ("2021-11-09", "2020-2022"),
            ("2016-04-12", "2015-2019"),
            ("2011-11-11", "2010-2014"),
            ("1998", "pre-2000"),
            ("", "unknown"),
            ("someday", "unknown"),
        ],
    )
    def test_bucket(self, date, bucket):
        assert release_bucket(date) == bucket


class TestTasteProfile:
    def test_facets_sorted_and_non_negative(self, library):
        profile = build_taste_profile(ensure_user_games(library), RunCache(NOW_MS))
        for facet in profile.facets():
            weights = [f.weight for f in facet]
            assert all(w >= 0 for w in weights)
            assert weights == sorted(weights, reverse=True)

    def test_totals(self, library):
        profile = build_taste_profile(ensure_user_games(library), RunCache(NOW_MS))
        assert profile.total_games == 4
        assert profile.total_hours == pytest.approx(212)
        # Unrated games are left out of the average
        assert profile.avg_rating == pytest.approx((5 + 4.5 + 4) / 3)
        assert profile.top_genre == "Action"

    def test_genres_use_canonical_names(self):
        games = ensure_user_games(
            [
                user_game("a", "A", genres=["Shooter"]),
                user_game("b", "B", genres=["FPS"]),
            ]
        )
        profile = build_taste_profile(games, RunCache(NOW_MS))
        assert [g.name for g in profile.genres] == ["FPS & Shooter"]
        assert profile.genres[0].game_count == 2

    def test_loyal_developers(self, library):
        profile = build_taste_profile(ensure_user_games(library), RunCache(NOW_MS))
        assert profile.loyal_developers == ["fromsoftware"]

    def test_empty_library(self):
        profile = build_taste_profile([], RunCache(NOW_MS))
        assert profile.total_games == 0
        assert profile.genres == []
        assert profile.top_genre == ""
