"""Signals that depend on how the user plays: time of day, session sequencing, engagement curves."""

from typing import AbstractSet, List, Tuple

from ...utils.scores import clamp01
from ..contexts import SequencingContext, TimeOfDayContext

# (curve multiplier, canonical genre keys) for each user game with a favorable curve
FavorableCurves = List[Tuple[float, AbstractSet[str]]]


def compute_time_of_day_boost(candidate_genres: AbstractSet[str], ctx: TimeOfDayContext) -> float:
    """Mean day-part affinity over the candidate genres the user has played at this time."""
    if not ctx.has_sufficient_data:
        return 0.0
    hits = [ctx.affinity[g] for g in sorted(candidate_genres) if g in ctx.affinity]
    if not hits:
        return 0.0
    return clamp01(sum(hits) / len(hits))


def compute_sequencing_boost(candidate_genres: AbstractSet[str], ctx: SequencingContext) -> float:
    """Mean transition probability from recently played genres into the candidate's, x2."""
    if not ctx.has_sufficient_data:
        return 0.0
    total = 0.0
    count = 0
    for genre_set in ctx.recent_game_genres:
        for from_genre in genre_set:
            row = ctx.transitions.get(from_genre)
            row_total = ctx.transition_totals.get(from_genre, 0.0)
            if not row or row_total == 0:
                continue
            for to_genre in sorted(candidate_genres):
                total += row.get(to_genre, 0.0) / row_total
                count += 1
    if count == 0:
        return 0.0
    return clamp01((total / count) * 2)


def compute_engagement_curve_bonus(candidate_genres: AbstractSet[str], favorable: FavorableCurves) -> float:
    """Max over favorable-curve user games of (multiplier - 1) x genre overlap fraction."""
    best = 0.0
    denominator = max(len(candidate_genres), 1)
    for multiplier, user_genres in favorable:
        overlap = len(candidate_genres & user_genres)
        if overlap > 0:
            best = max(best, (multiplier - 1) * (overlap / denominator))
    return clamp01(best)
