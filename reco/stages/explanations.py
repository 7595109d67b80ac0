"""
Explanation text for a scored game.

Clauses in priority order: franchise, similar title, studio, genre hours, sale,
hidden gem, stretch pick, critical acclaim. At most max_explanation_clauses are kept,
prefixed with the rounded match percentage.
"""

import math
from typing import List

from ..models.config import DEFAULT_CONFIG, RecoConfig
from ..models.profile import TasteProfile
from ..models.scoring import ScoredGame
from ..utils.text import norm

STUDIO_CLAUSE_MIN_BOOST = 0.1
GENRE_HOURS_MIN = 10


def explanation_clauses(
    scored: ScoredGame,
    profile: TasteProfile,
    config: RecoConfig = DEFAULT_CONFIG,
) -> List[str]:
    reasons = scored.reasons
    parts: List[str] = []

    if reasons.is_franchise_entry and reasons.franchise_of:
        parts.append(f"part of the {reasons.franchise_of} series you love")

    if reasons.similar_to:
        parts.append(f"similar to {reasons.similar_to[0]}")

    if scored.layer_scores.studio_loyalty_boost > STUDIO_CLAUSE_MIN_BOOST:
        parts.append(f"from {scored.developer}, a studio you trust")

    if reasons.shared_genres:
        first = reasons.shared_genres[0]
        genre = next((g for g in profile.genres if norm(g.name) == norm(first)), None)
        if genre is not None and genre.total_hours > GENRE_HOURS_MIN:
            parts.append(f"you've spent {round(genre.total_hours)}h in {first} games")
        else:
            parts.append(f"matches your love of {' & '.join(reasons.shared_genres[:2])}")

    if reasons.is_on_sale and scored.price and scored.price.discount_percent:
        parts.append(f"{scored.price.discount_percent}% off right now")

    if reasons.is_hidden_gem:
        parts.append(f"hidden gem with {scored.metacritic_score} Metacritic")

    if reasons.is_stretch_pick:
        parts.append("outside your comfort zone")

    if (
        not reasons.is_hidden_gem
        and scored.metacritic_score
        and scored.metacritic_score >= config.critics_choice_min_metacritic
    ):
        parts.append(f"critically acclaimed ({scored.metacritic_score}/100)")

    return parts[: config.max_explanation_clauses]


def generate_explanation(
    scored: ScoredGame,
    profile: TasteProfile,
    config: RecoConfig = DEFAULT_CONFIG,
) -> str:
    match_pct = math.floor(scored.score * 100 + 0.5)
    parts = explanation_clauses(scored, profile, config)
    if not parts:
        return f"{match_pct}% match based on your gaming taste"
    return f"{match_pct}% match: {', '.join(parts)}"
