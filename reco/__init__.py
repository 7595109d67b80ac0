"""
Game recommendation & shelf ranking engine.

Single entry point for the engine package:
- models/: RecoConfig, snapshots, TasteProfile, ScoredGame, RecoShelf, messages
- stages/: taste profile, negative signals, franchises, scoring, MMR, clusters, shelves
- worker: RecoWorker (background execution, exactly one terminal result)
- providers: embedding providers and attach_embeddings
"""

from typing import Dict, Optional, Union

from .models import (
    DEFAULT_CONFIG,
    CandidateGame,
    ProgressMessage,
    RecoConfig,
    RecoRequest,
    RecoShelf,
    ResultMessage,
    ScoredGame,
    ShelfType,
    TasteProfile,
    UserGameSnapshot,
    resolve_config,
)
from .providers import EmbeddingProvider, HttpEmbeddingProvider, JsonEmbeddingProvider, attach_embeddings
from .stages import run_pipeline
from .worker import RecoWorker, run_sync


def recommend(request: Union[RecoRequest, Dict], config: Optional[RecoConfig] = None) -> ResultMessage:
    """Run the pipeline synchronously; never raises for pipeline failures."""
    return run_sync(request, resolve_config(config))


__all__ = [
    "DEFAULT_CONFIG",
    "CandidateGame",
    "EmbeddingProvider",
    "HttpEmbeddingProvider",
    "JsonEmbeddingProvider",
    "ProgressMessage",
    "RecoConfig",
    "RecoRequest",
    "RecoShelf",
    "RecoWorker",
    "ResultMessage",
    "ScoredGame",
    "ShelfType",
    "TasteProfile",
    "UserGameSnapshot",
    "attach_embeddings",
    "recommend",
    "resolve_config",
    "run_pipeline",
    "run_sync",
]
