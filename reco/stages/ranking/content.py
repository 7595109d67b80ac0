"""
Content and semantic similarity.

Content: sparse cosine between the taste-profile vector and a one-hot candidate vector
over prefixed tags (g: genre, t: theme, m: mode, p: perspective, d: developer).
Semantic: dense cosine between the candidate embedding and the engagement-weighted
mean of the user's game embeddings.
"""

from typing import List, Optional, Sequence

from ...models.config import DEFAULT_CONFIG, RecoConfig
from ...models.profile import TasteProfile
from ...models.snapshot import CandidateGame, UserGameSnapshot
from ...utils.similarity import FeatureVector, cosine_similarity, sparse_cosine, weighted_mean_vector
from ...utils.text import canonical_genre_keys, norm
from ..run_cache import RunCache
from ..taste_profile import compute_engagement_score


def profile_to_vector(profile: TasteProfile, config: RecoConfig = DEFAULT_CONFIG) -> FeatureVector:
    vec: FeatureVector = {}
    for f in profile.genres:
        vec[f"g:{norm(f.name)}"] = f.weight
    for f in profile.themes:
        vec[f"t:{f.name}"] = f.weight
    for f in profile.game_modes:
        vec[f"m:{f.name}"] = f.weight
    for f in profile.perspectives:
        vec[f"p:{f.name}"] = f.weight
    for f in profile.developers[: config.content_top_developers]:
        vec[f"d:{f.name}"] = f.weight
    return vec


def candidate_to_vector(candidate: CandidateGame) -> FeatureVector:
    vec: FeatureVector = {}
    for g in canonical_genre_keys(candidate.genres):
        vec[f"g:{g}"] = 1.0
    for prefix, values in (
        ("t", candidate.themes),
        ("m", candidate.game_modes),
        ("p", candidate.perspectives),
    ):
        for value in values:
            if norm(value):
                vec[f"{prefix}:{norm(value)}"] = 1.0
    if norm(candidate.developer):
        vec[f"d:{norm(candidate.developer)}"] = 1.0
    return vec


def content_similarity(profile_vector: FeatureVector, candidate_vector: FeatureVector) -> float:
    return sparse_cosine(profile_vector, candidate_vector)


def build_taste_embedding(
    user_games: List[UserGameSnapshot],
    cache: RunCache,
    has_embeddings: bool,
    config: RecoConfig = DEFAULT_CONFIG,
) -> Optional[List[float]]:
    """Engagement-weighted mean of user embeddings; None when the run has none."""
    if not has_embeddings:
        return None
    embedded = [g for g in user_games if g.has_embedding]
    if not embedded:
        return None
    pooled = weighted_mean_vector(
        [g.embedding for g in embedded],
        [compute_engagement_score(g, cache, config) for g in embedded],
    )
    return pooled or None


def semantic_similarity(
    taste_embedding: Optional[Sequence[float]],
    candidate_embedding: Optional[Sequence[float]],
) -> float:
    """Dense cosine; 0 when either side is missing or dimensions differ."""
    if not taste_embedding or not candidate_embedding:
        return 0.0
    return cosine_similarity(taste_embedding, candidate_embedding)
