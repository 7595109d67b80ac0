"""
Run-level scoring contexts, built once before the scoring loop and read-only after.

- co-occurrence graph between candidates (shared canonical genre + >= N shared tags)
- graph user context (normalized titles / similar-title sets / traversal weights)
- time-of-day genre affinity for the current day-part
- genre-to-genre session transition table
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Set

from ..models.config import DEFAULT_CONFIG, RecoConfig
from ..models.snapshot import CandidateGame, UserGameSnapshot
from ..utils.dates import local_hour_of_ms, to_epoch_ms
from ..utils.text import canonical_genre_keys, norm
from .run_cache import RunCache, cache_key
from .taste_profile import compute_engagement_score, trajectory_multiplier

logger = logging.getLogger(__name__)

# candidate id -> {neighbor id -> jaccard}
CoOccurrenceGraph = Dict[str, Dict[str, float]]


def candidate_tag_set(candidate: CandidateGame) -> FrozenSet[str]:
    tags = {f"g:{g}" for g in canonical_genre_keys(candidate.genres)}
    tags.update(f"t:{norm(t)}" for t in candidate.themes if norm(t))
    tags.update(f"m:{norm(m)}" for m in candidate.game_modes if norm(m))
    return frozenset(tags)


def build_co_occurrence_graph(
    candidates: List[CandidateGame],
    config: RecoConfig = DEFAULT_CONFIG,
) -> CoOccurrenceGraph:
    """
    Link candidates that share a canonical genre and at least graph_min_shared_tags tags.

    Edge weight is the Jaccard similarity of the tag sets. Each node keeps at most
    graph_max_neighbors edges, taken in candidate order.
    """
    tag_sets: Dict[str, FrozenSet[str]] = {}
    genre_index: Dict[str, List[str]] = {}
    for c in candidates:
        tag_sets[c.game_id] = candidate_tag_set(c)
        for genre in canonical_genre_keys(c.genres):
            ids = genre_index.setdefault(genre, [])
            if not ids or ids[-1] != c.game_id:
                ids.append(c.game_id)

    edges: CoOccurrenceGraph = {}
    for c in candidates:
        my_tags = tag_sets[c.game_id]
        # dict preserves insertion order, so neighbor iteration is deterministic
        neighbor_ids: Dict[str, None] = {}
        for genre in canonical_genre_keys(c.genres):
            for other_id in genre_index.get(genre, []):
                if other_id != c.game_id:
                    neighbor_ids[other_id] = None

        neighbors = 0
        for other_id in neighbor_ids:
            if neighbors >= config.graph_max_neighbors:
                break
            other_tags = tag_sets[other_id]
            intersection = len(my_tags & other_tags)
            if intersection < config.graph_min_shared_tags:
                continue
            union = len(my_tags) + len(other_tags) - intersection
            edges.setdefault(c.game_id, {})[other_id] = intersection / union if union else 0.0
            neighbors += 1

    logger.debug(
        "[graph] nodes=%d with_edges=%d edges=%d",
        len(candidates), len(edges), sum(len(v) for v in edges.values()),
    )
    return edges


@dataclass
class GraphUserContext:
    """Per-user-game lookups for graph traversal, keyed by game id."""

    similar_title_sets: Dict[str, Set[str]] = field(default_factory=dict)
    title_norms: Dict[str, str] = field(default_factory=dict)
    weights: Dict[str, float] = field(default_factory=dict)


def build_graph_user_context(
    user_games: List[UserGameSnapshot],
    cache: RunCache,
    config: RecoConfig = DEFAULT_CONFIG,
) -> GraphUserContext:
    ctx = GraphUserContext()
    for ug in user_games:
        key = cache_key(ug.game_id, ug)
        ctx.similar_title_sets[key] = {norm(t) for t in ug.similar_game_titles if norm(t)}
        ctx.title_norms[key] = norm(ug.title)
        ctx.weights[key] = compute_engagement_score(ug, cache, config) * trajectory_multiplier(ug)
    return ctx


def day_part(hour: int) -> str:
    if hour < 6:
        return "night"
    if hour < 12:
        return "morning"
    if hour < 18:
        return "afternoon"
    return "evening"


@dataclass
class TimeOfDayContext:
    """Share of current day-part sessions per canonical genre key."""

    affinity: Dict[str, float] = field(default_factory=dict)
    has_sufficient_data: bool = False


def build_time_of_day_context(
    user_games: List[UserGameSnapshot],
    current_hour: int,
    config: RecoConfig = DEFAULT_CONFIG,
) -> TimeOfDayContext:
    bucket = day_part(current_hour)
    affinity: Dict[str, float] = {}
    sessions_in_bucket = 0

    for ug in user_games:
        genres = canonical_genre_keys(ug.genres)
        for ts in ug.session_timestamps:
            if day_part(local_hour_of_ms(ts)) != bucket:
                continue
            sessions_in_bucket += 1
            for genre in genres:
                affinity[genre] = affinity.get(genre, 0.0) + 1.0

    if sessions_in_bucket < config.time_of_day_min_sessions:
        return TimeOfDayContext()
    return TimeOfDayContext(
        affinity={k: v / sessions_in_bucket for k, v in affinity.items()},
        has_sufficient_data=True,
    )


@dataclass
class SequencingContext:
    """Genre-to-genre transition counts between consecutive sessions of different games."""

    transitions: Dict[str, Dict[str, float]] = field(default_factory=dict)
    transition_totals: Dict[str, float] = field(default_factory=dict)
    recent_game_genres: List[List[str]] = field(default_factory=list)
    has_sufficient_data: bool = False


def build_sequencing_context(
    user_games: List[UserGameSnapshot],
    config: RecoConfig = DEFAULT_CONFIG,
) -> SequencingContext:
    sessions = []
    for index, ug in enumerate(user_games):
        genres = canonical_genre_keys(ug.genres)
        owner = cache_key(ug.game_id, ug)
        for ts in ug.session_timestamps:
            sessions.append((ts, index, owner, genres))

    if len(sessions) < config.sequencing_min_sessions:
        return SequencingContext()

    sessions.sort(key=lambda s: (s[0], s[1]))

    transitions: Dict[str, Dict[str, float]] = {}
    for (_, _, cur_owner, cur_genres), (_, _, next_owner, next_genres) in zip(sessions, sessions[1:]):
        if cur_owner == next_owner:
            continue
        for from_genre in cur_genres:
            row = transitions.setdefault(from_genre, {})
            for to_genre in next_genres:
                row[to_genre] = row.get(to_genre, 0.0) + 1.0

    totals = {g: sum(row.values()) for g, row in transitions.items()}

    played = [
        (to_epoch_ms(g.last_session_date) or 0.0, g)
        for g in user_games
        if g.last_session_date
    ]
    played.sort(key=lambda p: p[0], reverse=True)
    recent = [canonical_genre_keys(g.genres) for _, g in played[: config.sequencing_recent_games]]

    return SequencingContext(
        transitions=transitions,
        transition_totals=totals,
        recent_game_genres=recent,
        has_sufficient_data=bool(recent),
    )
