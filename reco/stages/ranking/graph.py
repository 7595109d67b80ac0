"""
Graph signal: bounded traversal from a candidate to the user's library.

Per user game (weight = engagement x trajectory multiplier), first match wins:
  direct   user game lists the candidate as similar       weight * 1.0
  reverse  candidate lists the user game as similar        weight * 0.8
  2-hop    both list a common similar title                weight * 0.4
  edge     a co-occurrence neighbor of the candidate has
           the user game's title or one of its similar
           titles                                          weight * jaccard * 0.3
Traversal stops once graph_max_matches user games matched. Signal = sum / 3, clamped.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from ...models.config import DEFAULT_CONFIG, RecoConfig
from ...models.snapshot import CandidateGame, UserGameSnapshot
from ...utils.scores import clamp01
from ...utils.text import norm
from ..contexts import CoOccurrenceGraph, GraphUserContext
from ..run_cache import cache_key


@dataclass
class GraphResult:
    score: float = 0.0
    similar_to: List[str] = field(default_factory=list)


def compute_graph_signal(
    candidate: CandidateGame,
    user_games: List[UserGameSnapshot],
    co_occurrence: CoOccurrenceGraph,
    user_ctx: GraphUserContext,
    neighbor_titles: Dict[str, str],
    config: RecoConfig = DEFAULT_CONFIG,
) -> GraphResult:
    """
    neighbor_titles maps candidate id -> normalized title, so co-occurrence neighbors
    can be compared with user game titles.
    """
    candidate_title = norm(candidate.title)
    candidate_similar = {norm(t) for t in candidate.similar_game_titles if norm(t)}
    total = 0.0
    similar_to: List[str] = []

    for ug in user_games:
        if len(similar_to) >= config.graph_max_matches:
            break
        key = cache_key(ug.game_id, ug)
        weight = user_ctx.weights[key]
        ug_similar = user_ctx.similar_title_sets[key]
        ug_title = user_ctx.title_norms[key]

        if candidate_title in ug_similar:
            total += weight * 1.0
            similar_to.append(ug.title)
            continue

        if ug_title and ug_title in candidate_similar:
            total += weight * 0.8
            similar_to.append(ug.title)
            continue

        if ug_similar & candidate_similar:
            total += weight * 0.4
            similar_to.append(ug.title)
            continue

        for neighbor_id, jaccard in co_occurrence.get(candidate.game_id, {}).items():
            neighbor_title = neighbor_titles.get(neighbor_id, "")
            if neighbor_title and (neighbor_title == ug_title or neighbor_title in ug_similar):
                total += weight * jaccard * 0.3
                break

    # Deduplicate keeping order
    unique = list(dict.fromkeys(similar_to))[: config.graph_max_matches]
    return GraphResult(score=clamp01(total / 3), similar_to=unique)
