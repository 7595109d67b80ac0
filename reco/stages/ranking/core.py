"""
Candidate scoring: every signal per candidate, then the weighted composite.

    score = clamp01(sum(layer * weight) - negative * weight_negative)

All run-level inputs live in a ScoringContext built once before the loop; scoring a
candidate never reads another candidate's score.
Submodules used: content, graph, signals, contextual.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, Optional, Set

from ...models.config import DEFAULT_CONFIG, RecoConfig
from ...models.franchise import FranchiseCluster
from ...models.profile import TasteProfile
from ...models.scoring import LayerScores, MatchReasons, ScoredGame
from ...models.snapshot import CandidateGame, UserGameSnapshot
from ...utils.dates import year_of_ms
from ...utils.scores import clamp01
from ...utils.similarity import FeatureVector, sparse_cosine
from ...utils.text import norm, to_canonical_genres
from ..contexts import (
    CoOccurrenceGraph,
    GraphUserContext,
    SequencingContext,
    TimeOfDayContext,
    build_co_occurrence_graph,
    build_graph_user_context,
    build_sequencing_context,
    build_time_of_day_context,
)
from ..franchise import compute_franchise_boost, compute_studio_loyalty_boost
from ..negative_signals import NegativeProfile
from ..run_cache import RunCache
from ..taste_profile import curve_multiplier
from .content import (
    build_taste_embedding,
    candidate_to_vector,
    content_similarity,
    profile_to_vector,
    semantic_similarity,
)
from .contextual import (
    FavorableCurves,
    compute_engagement_curve_bonus,
    compute_sequencing_boost,
    compute_time_of_day_boost,
)
from .graph import compute_graph_signal
from .signals import (
    PoolStats,
    compute_diversity_bonus,
    compute_popularity_signal,
    compute_quality_signal,
    compute_recency_boost,
    genre_weight_index,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

SCORING_PROGRESS_START = 28
SCORING_PROGRESS_SPAN = 30


@dataclass
class ScoringContext:
    """Read-only run-level inputs shared by every candidate."""

    user_games: List[UserGameSnapshot]
    profile: TasteProfile
    negative: NegativeProfile
    franchises: List[FranchiseCluster]
    cache: RunCache
    config: RecoConfig
    has_embeddings: bool
    profile_vector: FeatureVector
    taste_embedding: Optional[List[float]]
    co_occurrence: CoOccurrenceGraph
    graph_user: GraphUserContext
    time_of_day: TimeOfDayContext
    sequencing: SequencingContext
    stats: PoolStats
    user_game_ids: Set[str] = field(default_factory=set)
    neighbor_titles: Dict[str, str] = field(default_factory=dict)
    favorable_curves: FavorableCurves = field(default_factory=list)
    genre_weights: Dict[str, float] = field(default_factory=dict)
    max_genre_weight: float = 1.0
    popularity_ranks: Dict[str, int] = field(default_factory=dict)
    weights: Dict[str, float] = field(default_factory=dict)


def build_scoring_context(
    user_games: List[UserGameSnapshot],
    candidates: List[CandidateGame],
    profile: TasteProfile,
    negative: NegativeProfile,
    franchises: List[FranchiseCluster],
    cache: RunCache,
    current_hour: int,
    has_embeddings: bool,
    config: RecoConfig = DEFAULT_CONFIG,
    profile_vector: Optional[FeatureVector] = None,
    co_occurrence: Optional[CoOccurrenceGraph] = None,
) -> ScoringContext:
    """Precompute everything the per-candidate loop reads."""
    if profile_vector is None:
        profile_vector = profile_to_vector(profile, config)
    if co_occurrence is None:
        co_occurrence = build_co_occurrence_graph(candidates, config)

    favorable: FavorableCurves = []
    for ug in user_games:
        multiplier = curve_multiplier(ug, cache)
        if multiplier > config.favorable_curve_threshold:
            favorable.append((multiplier, cache.user_genre_keys(ug)))

    ranked_by_players = sorted(
        (c for c in candidates if c.player_count),
        key=lambda c: c.player_count,
        reverse=True,
    )

    return ScoringContext(
        user_games=user_games,
        profile=profile,
        negative=negative,
        franchises=franchises,
        cache=cache,
        config=config,
        has_embeddings=has_embeddings,
        profile_vector=profile_vector,
        taste_embedding=build_taste_embedding(user_games, cache, has_embeddings, config),
        co_occurrence=co_occurrence,
        graph_user=build_graph_user_context(user_games, cache, config),
        time_of_day=build_time_of_day_context(user_games, current_hour, config),
        sequencing=build_sequencing_context(user_games, config),
        stats=PoolStats.from_candidates(candidates, year_of_ms(cache.now)),
        user_game_ids={g.game_id for g in user_games if g.game_id},
        neighbor_titles={c.game_id: norm(c.title) for c in candidates},
        favorable_curves=favorable,
        genre_weights=genre_weight_index(profile),
        max_genre_weight=profile.genres[0].weight if profile.genres else 1.0,
        popularity_ranks={c.game_id: i + 1 for i, c in enumerate(ranked_by_players)},
        weights=config.layer_weights(has_embeddings),
    )


def composite_score(layers: LayerScores, weights: Dict[str, float], weight_negative: float) -> float:
    positive = sum(getattr(layers, name) * weight for name, weight in weights.items())
    return clamp01(positive - layers.negative_signal * weight_negative)


def score_candidate(candidate: CandidateGame, ctx: ScoringContext) -> ScoredGame:
    config = ctx.config
    genres: FrozenSet[str] = ctx.cache.genre_keys(candidate.game_id, candidate.genres, candidate)
    candidate_vector = candidate_to_vector(candidate)

    graph = compute_graph_signal(
        candidate, ctx.user_games, ctx.co_occurrence, ctx.graph_user, ctx.neighbor_titles, config
    )
    franchise = compute_franchise_boost(candidate, ctx.franchises, ctx.user_game_ids)

    negative = 0.0
    if ctx.negative.strength > 0:
        negative = sparse_cosine(ctx.negative.vector, candidate_vector) * ctx.negative.strength

    layers = LayerScores(
        content_similarity=content_similarity(ctx.profile_vector, candidate_vector),
        semantic_similarity=(
            semantic_similarity(ctx.taste_embedding, candidate.embedding) if ctx.has_embeddings else 0.0
        ),
        graph_signal=graph.score,
        quality_signal=compute_quality_signal(candidate, ctx.stats),
        popularity_signal=compute_popularity_signal(candidate, ctx.stats),
        recency_boost=compute_recency_boost(candidate, ctx.stats.current_year),
        diversity_bonus=compute_diversity_bonus(candidate, ctx.genre_weights, ctx.max_genre_weight),
        time_of_day_boost=compute_time_of_day_boost(genres, ctx.time_of_day),
        engagement_curve_bonus=compute_engagement_curve_bonus(genres, ctx.favorable_curves),
        franchise_boost=franchise.boost,
        studio_loyalty_boost=compute_studio_loyalty_boost(candidate, ctx.profile.loyal_developers, config),
        sequencing_boost=compute_sequencing_boost(genres, ctx.sequencing),
        negative_signal=negative,
    )
    # Cosine of non-negative vectors can drift past 1.0 by a rounding error
    for name, value in layers.model_dump().items():
        setattr(layers, name, clamp01(value))

    canonical = to_canonical_genres(candidate.genres)
    shared_genres = [g for g in canonical if norm(g) in ctx.genre_weights]
    profile_themes = {t.name for t in ctx.profile.themes}
    profile_modes = {m.name for m in ctx.profile.game_modes}

    player_count = candidate.player_count
    is_hidden_gem = (candidate.metacritic_score or 0) >= config.hidden_gem_min_metacritic and (
        player_count if player_count is not None else math.inf
    ) < ctx.stats.max_player_count * config.hidden_gem_max_player_share

    reasons = MatchReasons(
        shared_genres=shared_genres,
        shared_themes=[t for t in candidate.themes if norm(t) in profile_themes],
        shared_modes=[m for m in candidate.game_modes if norm(m) in profile_modes],
        similar_to=graph.similar_to,
        metacritic_score=candidate.metacritic_score,
        popularity_rank=ctx.popularity_ranks.get(candidate.game_id),
        is_hidden_gem=is_hidden_gem,
        is_stretch_pick=bool(canonical) and not shared_genres,
        franchise_of=franchise.franchise_name,
        is_franchise_entry=franchise.is_franchise_entry,
        is_on_sale=candidate.is_on_sale,
    )

    score = composite_score(layers, ctx.weights, config.weight_negative)
    return ScoredGame.from_candidate(candidate, score, layers, reasons)


def score_candidates(
    candidates: List[CandidateGame],
    ctx: ScoringContext,
    on_progress: Optional[ProgressCallback] = None,
) -> List[ScoredGame]:
    """Score every candidate; returns the list sorted by score descending (stable)."""
    scored: List[ScoredGame] = []
    total = len(candidates)
    step = max(1, total // 5)
    for i, candidate in enumerate(candidates):
        scored.append(score_candidate(candidate, ctx))
        if on_progress is not None and i % step == 0:
            on_progress(SCORING_PROGRESS_START + int(i / total * SCORING_PROGRESS_SPAN))

    scored.sort(key=lambda s: s.score, reverse=True)
    if scored:
        logger.info(
            "[scoring] candidates=%d top=%s (%.3f) embeddings=%s",
            total, scored[0].title, scored[0].score, ctx.has_embeddings,
        )
    return scored
