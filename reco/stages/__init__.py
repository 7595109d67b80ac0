"""Pipeline stages: taste profile, negative signals, franchises, scoring, MMR, clusters, shelves."""

from .clustering import detect_taste_clusters
from .franchise import detect_franchises, extract_franchise_base
from .negative_signals import build_negative_profile
from .orchestrator import run_pipeline
from .ranking import mmr_rerank, score_candidates
from .run_cache import RunCache
from .shelves import build_shelves
from .taste_profile import build_taste_profile, classify_engagement_curve, compute_engagement_score

__all__ = [
    "RunCache",
    "build_negative_profile",
    "build_shelves",
    "build_taste_profile",
    "classify_engagement_curve",
    "compute_engagement_score",
    "detect_franchises",
    "detect_taste_clusters",
    "extract_franchise_base",
    "mmr_rerank",
    "run_pipeline",
    "score_candidates",
]
