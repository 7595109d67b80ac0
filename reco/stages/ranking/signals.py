"""
Candidate-intrinsic signals: quality, popularity (debiased), recency, diversity.

Each is a pure function of the candidate and pool-level statistics; absent inputs
fall back to a neutral 0.3 rather than 0.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from ...models.profile import TasteProfile
from ...models.snapshot import CandidateGame
from ...utils.dates import year_of
from ...utils.scores import clamp01, log_ratio
from ...utils.text import norm, to_canonical_genres

NEUTRAL = 0.3


def _is_known_count(value: Optional[int]) -> bool:
    # Zero or negative counts are catalog sentinels for "unknown"
    return value is not None and value > 0


@dataclass
class PoolStats:
    """Pool maxima used for normalization (each at least 1)."""

    max_player_count: int = 1
    max_recommendations: int = 1
    max_review_volume: int = 1
    current_year: int = 1970

    @classmethod
    def from_candidates(cls, candidates: List[CandidateGame], current_year: int) -> "PoolStats":
        return cls(
            max_player_count=max([1] + [c.player_count or 0 for c in candidates]),
            max_recommendations=max([1] + [c.recommendations or 0 for c in candidates]),
            max_review_volume=max([1] + [c.review_volume or 0 for c in candidates]),
            current_year=current_year,
        )


def compute_quality_signal(candidate: CandidateGame, stats: PoolStats) -> float:
    """
    Blend of metacritic, recommendations, review sentiment, achievements, and maintenance.

    Without review data its 0.20 weight moves to metacritic (+0.10) and recommendations (+0.10).
    """
    mc = candidate.metacritic_score
    metacritic = clamp01((mc - 50) / 50) if mc else NEUTRAL

    recs = candidate.recommendations
    recommendations = log_ratio(recs, stats.max_recommendations) if _is_known_count(recs) else NEUTRAL

    achievements = clamp01(candidate.achievements / 100) if candidate.achievements else NEUTRAL

    release_year = year_of(candidate.release_date)
    if release_year is None:
        maintenance = NEUTRAL
    else:
        maintenance = clamp01(1 - (stats.current_year - release_year) / 15)

    if candidate.has_review_data:
        positivity = clamp01(candidate.review_positivity)
        volume = log_ratio(candidate.review_volume, stats.max_review_volume)
        review = positivity * 0.7 + volume * 0.3
        return (
            metacritic * 0.30
            + recommendations * 0.20
            + review * 0.20
            + achievements * 0.15
            + maintenance * 0.15
        )

    return (
        metacritic * 0.40
        + recommendations * 0.30
        + achievements * 0.15
        + maintenance * 0.15
    )


def popularity_adjustment(player_count: Optional[int], max_player_count: int) -> float:
    """Penalty factor 1 - 0.25 * log(p+1)/log(max+1); 1.0 when the count is unknown."""
    if not player_count or player_count <= 0 or max_player_count <= 0:
        return 1.0
    return 1.0 - (math.log(player_count + 1) / math.log(max_player_count + 1)) * 0.25


def compute_popularity_signal(candidate: CandidateGame, stats: PoolStats) -> float:
    players = candidate.player_count
    raw = log_ratio(players, stats.max_player_count) if _is_known_count(players) else NEUTRAL
    return raw * popularity_adjustment(candidate.player_count, stats.max_player_count)


def compute_recency_boost(candidate: CandidateGame, current_year: int) -> float:
    """Linear decay over 10 years from release."""
    release_year = year_of(candidate.release_date)
    if release_year is None:
        return NEUTRAL
    return clamp01(1 - (current_year - release_year) / 10)


def genre_weight_index(profile: TasteProfile) -> Dict[str, float]:
    return {norm(g.name): g.weight for g in profile.genres}


def compute_diversity_bonus(
    candidate: CandidateGame,
    genre_weights: Dict[str, float],
    max_genre_weight: float,
) -> float:
    """Rewards candidates away from the user's dominant genres, capped at 0.5."""
    if max_genre_weight <= 0:
        return 0.0
    genres = to_canonical_genres(candidate.genres)
    if genres:
        avg = sum(genre_weights.get(norm(g), 0.0) for g in genres) / len(genres)
    else:
        avg = 0.0
    return clamp01(1 - avg / max_genre_weight) * 0.5
