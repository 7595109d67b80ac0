"""
Candidate scoring and diversity re-ranking.

Public API: build_scoring_context, score_candidates, mmr_rerank, popularity_adjustment.
- core: ScoringContext and the composite score.
- Submodules: content, graph, signals, contextual, mmr.
"""

from .core import ScoringContext, build_scoring_context, composite_score, score_candidate, score_candidates
from .mmr import mmr_rerank
from .signals import popularity_adjustment

__all__ = [
    "ScoringContext",
    "build_scoring_context",
    "composite_score",
    "score_candidate",
    "score_candidates",
    "mmr_rerank",
    "popularity_adjustment",
]
