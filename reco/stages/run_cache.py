"""
Request-scoped memo table.

Engagement scores, engagement curves, and canonical genre sets are needed by many
stages; they are computed once per game id and kept for the duration of one run only.
A fresh RunCache is created at the start of every pipeline invocation.
"""

from typing import Dict, FrozenSet, Iterable, Optional

from ..models.snapshot import EngagementPattern, UserGameSnapshot
from ..utils.text import canonical_genre_keys


def cache_key(game_id: str, fallback: object) -> str:
    """Game id, or an identity-based key for snapshots missing one."""
    return game_id or f"#{id(fallback)}"


class RunCache:
    """Per-invocation memoization keyed by game id."""

    def __init__(self, now: float):
        self.now = now
        self.engagement: Dict[str, float] = {}
        self.patterns: Dict[str, EngagementPattern] = {}
        self._genre_keys: Dict[str, FrozenSet[str]] = {}

    def genre_keys(self, game_id: str, genres: Optional[Iterable[str]], owner: object = None) -> FrozenSet[str]:
        """Normalized canonical genre set for a game, computed once."""
        key = cache_key(game_id, owner)
        cached = self._genre_keys.get(key)
        if cached is None:
            cached = frozenset(canonical_genre_keys(genres))
            self._genre_keys[key] = cached
        return cached

    def user_genre_keys(self, game: UserGameSnapshot) -> FrozenSet[str]:
        return self.genre_keys(game.game_id, game.genres, game)
