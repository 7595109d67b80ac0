"""
Pipeline orchestrator: runs every stage in order for one request snapshot.

profile -> engagement curves -> negative signals -> taste vector -> co-occurrence graph
-> franchises -> scoring contexts -> scoring -> MMR -> clusters -> explanations -> shelves

The main entry point is run_pipeline. It is synchronous and reports progress through an
optional callback at each stage boundary. It has no error handling of its own; the worker
turns failures into the empty result.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple, Union

from ..models.config import RecoConfig, resolve_config
from ..models.messages import RecoRequest
from ..models.profile import TasteProfile
from ..models.scoring import ScoredGame
from ..models.shelf import RecoShelf
from ..models.snapshot import CandidateGame, UserGameSnapshot
from .clustering import detect_taste_clusters
from .contexts import build_co_occurrence_graph
from .explanations import generate_explanation
from .franchise import detect_franchises
from .negative_signals import build_negative_profile
from .ranking import build_scoring_context, mmr_rerank, score_candidates
from .ranking.content import profile_to_vector
from .run_cache import RunCache
from .shelves import build_shelves
from .taste_profile import build_taste_profile, pattern_for

logger = logging.getLogger(__name__)

ProgressListener = Callable[[str, int], None]

STAGE_PROFILE = "Analyzing your library..."
STAGE_PATTERNS = "Analyzing play patterns..."
STAGE_NEGATIVE = "Mining negative signals..."
STAGE_VECTORS = "Building taste vectors..."
STAGE_GRAPH = "Building similarity graph..."
STAGE_FRANCHISES = "Detecting game franchises..."
STAGE_CONTEXTS = "Building scoring contexts..."
STAGE_SCORING = "Scoring candidates..."
STAGE_MMR = "Applying diversity filter..."
STAGE_CLUSTERS = "Detecting taste clusters..."
STAGE_EXPLANATIONS = "Generating insights..."
STAGE_SHELVES = "Building shelves..."


def _eligible_candidates(
    candidates: List[CandidateGame],
    user_games: List[UserGameSnapshot],
    dismissed_ids: List[str],
) -> List[CandidateGame]:
    """Drop candidates the user owns or dismissed."""
    excluded = set(dismissed_ids)
    excluded.update(g.game_id for g in user_games if g.game_id)
    return [c for c in candidates if c.game_id not in excluded]


def run_pipeline(
    request: Union[RecoRequest, Dict],
    config: Optional[RecoConfig] = None,
    progress: Optional[ProgressListener] = None,
) -> Tuple[TasteProfile, List[RecoShelf]]:
    """
    Run the full recommendation pipeline for one request snapshot.

    Returns:
        taste_profile: Aggregated profile including taste clusters.
        shelves: Shelves in display order; [] for an empty library.
    """
    config = resolve_config(config)
    if isinstance(request, dict):
        request = RecoRequest.model_validate(request)

    def report(stage: str, percent: int) -> None:
        if progress is not None:
            progress(stage, percent)

    # Fresh per-run memo table
    cache = RunCache(now=request.now)
    user_games = request.user_games
    dismissed = set(request.dismissed_game_ids)
    candidates = _eligible_candidates(request.candidates, user_games, request.dismissed_game_ids)

    report(STAGE_PROFILE, 5)
    profile = build_taste_profile(user_games, cache, config)

    if not user_games:
        logger.info("[pipeline] cold start: empty library, candidates=%d", len(request.candidates))
        return profile, []

    if not candidates:
        logger.info("[pipeline] no eligible candidates, library=%d", len(user_games))
        return profile, build_shelves([], [], user_games, profile, [], [], request.now, dismissed, config)

    report(STAGE_PATTERNS, 8)
    for game in user_games:
        pattern_for(game, cache)

    report(STAGE_NEGATIVE, 12)
    negative = build_negative_profile(user_games, request.now, config)

    report(STAGE_VECTORS, 16)
    profile_vector = profile_to_vector(profile, config)

    report(STAGE_GRAPH, 20)
    co_occurrence = build_co_occurrence_graph(candidates, config)

    report(STAGE_FRANCHISES, 24)
    franchises = detect_franchises(user_games, candidates)

    report(STAGE_CONTEXTS, 26)
    ctx = build_scoring_context(
        user_games,
        candidates,
        profile,
        negative,
        franchises,
        cache,
        request.current_hour,
        request.has_embeddings,
        config,
        profile_vector=profile_vector,
        co_occurrence=co_occurrence,
    )

    report(STAGE_SCORING, 28)
    scored: List[ScoredGame] = score_candidates(
        candidates, ctx, on_progress=lambda pct: report(STAGE_SCORING, pct)
    )

    report(STAGE_MMR, 62)
    reranked = mmr_rerank(scored, config.mmr_lambda, config.mmr_limit, cache)

    report(STAGE_CLUSTERS, 70)
    seed = request.seed if request.seed is not None else config.cluster_seed
    profile.clusters = detect_taste_clusters(user_games, cache, config, seed=seed)

    report(STAGE_EXPLANATIONS, 76)
    # reranked holds the same objects as scored
    for s in scored:
        s.reasons.explanation = generate_explanation(s, profile, config)

    report(STAGE_SHELVES, 84)
    shelves = build_shelves(
        reranked, scored, user_games, profile, profile.clusters, franchises, request.now, dismissed, config
    )

    logger.info(
        "[pipeline] library=%d candidates=%d scored=%d reranked=%d clusters=%d franchises=%d shelves=%d",
        len(user_games), len(candidates), len(scored), len(reranked),
        len(profile.clusters), len(franchises), len(shelves),
    )
    return profile, shelves
