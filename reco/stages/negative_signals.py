"""
Negative signal mining: what the user tends to reject.

A game is a negative example if it was removed from the library, parked On Hold
almost unplayed, or sat untouched on the wishlist for months.
"""

from dataclasses import dataclass, field
from typing import List

from ..models.config import DEFAULT_CONFIG, RecoConfig
from ..models.snapshot import GameStatus, UserGameSnapshot
from ..utils.dates import MS_PER_DAY, to_epoch_ms
from ..utils.similarity import FeatureVector
from ..utils.text import canonical_genre_keys, norm


@dataclass
class NegativeProfile:
    """Rejection vector over g:/t:/d: tags (values in [0, 1]) and its strength factor."""

    vector: FeatureVector = field(default_factory=dict)
    strength: float = 0.0
    negative_count: int = 0


def is_negative_example(game: UserGameSnapshot, now: float, config: RecoConfig = DEFAULT_CONFIG) -> bool:
    if game.removed_at:
        return True
    if game.status == GameStatus.ON_HOLD.value and game.hours_played < config.abandoned_max_hours:
        return True
    if game.status == GameStatus.WANT_TO_PLAY.value and game.session_count == 0:
        added = to_epoch_ms(game.added_at)
        if added is not None and (now - added) > config.stale_wishlist_days * MS_PER_DAY:
            return True
    return False


def build_negative_profile(
    games: List[UserGameSnapshot],
    now: float,
    config: RecoConfig = DEFAULT_CONFIG,
) -> NegativeProfile:
    negatives = [g for g in games if is_negative_example(g, now, config)]
    if not negatives:
        return NegativeProfile()

    counts: FeatureVector = {}
    for game in negatives:
        keys = [f"g:{g}" for g in canonical_genre_keys(game.genres)]
        keys += [f"t:{norm(t)}" for t in game.themes if norm(t)]
        if norm(game.developer):
            keys.append(f"d:{norm(game.developer)}")
        for key in keys:
            counts[key] = counts.get(key, 0.0) + 1.0

    max_count = max([1.0, *counts.values()])
    vector = {k: v / max_count for k, v in counts.items()}
    strength = min(len(negatives) / len(games), config.max_negative_strength)
    return NegativeProfile(vector=vector, strength=strength, negative_count=len(negatives))
