"""
Diversity re-ranking with maximal marginal relevance.

Greedy selection: each slot takes the remaining candidate maximizing
    lambda * score - (1 - lambda) * max_jaccard_to_selected
with Jaccard over canonical genre sets computed once per candidate.
"""

from typing import FrozenSet, List, Optional

from ...models.scoring import ScoredGame
from ...utils.similarity import jaccard
from ..run_cache import RunCache


def mmr_rerank(
    scored: List[ScoredGame],
    lam: float = 0.7,
    limit: int = 80,
    cache: Optional[RunCache] = None,
) -> List[ScoredGame]:
    """
    Re-rank scored games for relevance vs redundancy.

    Args:
        scored: Scored games in any order. Not mutated.
        lam: Relevance weight (1.0 = pure score order).
        limit: Maximum number of games returned.
        cache: Run cache supplying canonical genre sets; a fresh one is used if omitted.

    Returns:
        Up to limit games, the highest-scored first.
    """
    if limit <= 0:
        return []
    remaining = sorted(scored, key=lambda s: s.score, reverse=True)
    if len(remaining) <= 1:
        return remaining[:limit]

    cache = cache or RunCache(now=0.0)
    genre_sets: List[FrozenSet[str]] = [cache.genre_keys(s.game_id, s.genres, s) for s in remaining]
    remaining_idx = list(range(len(remaining)))
    neg_lam = 1 - lam

    selected_idx = [remaining_idx.pop(0)]
    # Running max similarity of each remaining item to anything selected
    max_sim = {i: 0.0 for i in remaining_idx}

    while len(selected_idx) < limit and remaining_idx:
        last = genre_sets[selected_idx[-1]]
        best_pos = 0
        best_mmr = float("-inf")
        for pos, i in enumerate(remaining_idx):
            sim = jaccard(genre_sets[i], last)
            if sim > max_sim[i]:
                max_sim[i] = sim
            value = lam * remaining[i].score - neg_lam * max_sim[i]
            if value > best_mmr:
                best_mmr = value
                best_pos = pos
        selected_idx.append(remaining_idx.pop(best_pos))

    return [remaining[i] for i in selected_idx]
