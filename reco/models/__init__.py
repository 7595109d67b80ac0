"""Data models for the recommendation engine."""

from .config import DEFAULT_CONFIG, RecoConfig, resolve_config
from .franchise import FranchiseCluster, FranchiseEntry
from .messages import ProgressMessage, RecoRequest, ResultMessage
from .profile import FeatureWeight, TasteCluster, TasteProfile
from .scoring import LayerScores, MatchReasons, ScoredGame
from .shelf import RecoShelf, ShelfType
from .snapshot import (
    CandidateGame,
    EngagementPattern,
    GameStatus,
    PriceInfo,
    UserGameSnapshot,
    ensure_candidates,
    ensure_user_games,
)

__all__ = [
    "DEFAULT_CONFIG",
    "CandidateGame",
    "EngagementPattern",
    "FeatureWeight",
    "FranchiseCluster",
    "FranchiseEntry",
    "GameStatus",
    "LayerScores",
    "MatchReasons",
    "PriceInfo",
    "ProgressMessage",
    "RecoConfig",
    "RecoRequest",
    "RecoShelf",
    "ResultMessage",
    "ScoredGame",
    "ShelfType",
    "TasteCluster",
    "TasteProfile",
    "UserGameSnapshot",
    "ensure_candidates",
    "ensure_user_games",
    "resolve_config",
]
