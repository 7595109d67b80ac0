"""
Taste cluster detection: k-means over one-hot genre/theme/mode vectors of the library.

Initial centroids are distinct library games drawn with numpy's Generator; pass a seed
for reproducible clusters.
"""

import logging
from typing import List, Optional

import numpy as np

from ..models.config import DEFAULT_CONFIG, RecoConfig
from ..models.profile import TasteCluster
from ..models.snapshot import UserGameSnapshot
from ..utils.similarity import weighted_mean_vector
from ..utils.text import capitalize, canonical_genre_keys, norm
from .run_cache import RunCache
from .taste_profile import build_taste_profile, compute_engagement_score

logger = logging.getLogger(__name__)


def _game_tags(game: UserGameSnapshot) -> List[str]:
    tags = [f"g:{g}" for g in canonical_genre_keys(game.genres)]
    tags += [f"t:{norm(t)}" for t in game.themes if norm(t)]
    tags += [f"m:{norm(m)}" for m in game.game_modes if norm(m)]
    return tags


def _one_hot_matrix(games: List[UserGameSnapshot]) -> np.ndarray:
    rows = [_game_tags(g) for g in games]
    keys = list(dict.fromkeys(tag for row in rows for tag in row))
    index = {k: i for i, k in enumerate(keys)}
    matrix = np.zeros((len(games), len(keys)), dtype=float)
    for r, row in enumerate(rows):
        for tag in row:
            matrix[r, index[tag]] = 1.0
    return matrix


def kmeans(vectors: np.ndarray, k: int, iterations: int, seed: Optional[int] = None) -> np.ndarray:
    """Fixed-iteration k-means with Euclidean distance; returns the cluster index per row."""
    rng = np.random.default_rng(seed)
    n = len(vectors)
    picks = rng.choice(n, size=min(k, n), replace=False)
    centroids = vectors[picks].copy()
    assignments = np.zeros(n, dtype=int)

    for _ in range(iterations):
        distances = ((vectors[:, None, :] - centroids[None, :, :]) ** 2).sum(axis=2)
        # argmin keeps the lowest index on ties
        assignments = distances.argmin(axis=1)
        for c in range(len(centroids)):
            members = vectors[assignments == c]
            if len(members):
                centroids[c] = members.mean(axis=0)
    return assignments


def detect_taste_clusters(
    user_games: List[UserGameSnapshot],
    cache: RunCache,
    config: RecoConfig = DEFAULT_CONFIG,
    seed: Optional[int] = None,
) -> List[TasteCluster]:
    """
    Find distinct play "moods" in the library.

    Skipped (returns []) when the library has fewer than 2k games or no tags.
    Clusters smaller than cluster_min_members are dropped; the rest are sorted by size.
    """
    k = config.cluster_k
    if k <= 0 or len(user_games) < k * 2:
        return []

    vectors = _one_hot_matrix(user_games)
    if vectors.shape[1] == 0:
        return []

    if seed is None:
        seed = config.cluster_seed
    assignments = kmeans(vectors, k, config.cluster_iterations, seed)

    clusters: List[TasteCluster] = []
    for c in range(k):
        members = [g for g, a in zip(user_games, assignments) if a == c]
        if len(members) < config.cluster_min_members:
            continue

        profile = build_taste_profile(members, cache, config)
        ranked = sorted(members, key=lambda g: compute_engagement_score(g, cache, config), reverse=True)
        label = capitalize(profile.top_genre) if profile.top_genre else f"Cluster {c + 1}"

        embedded = [g for g in members if g.has_embedding]
        centroid = None
        if embedded:
            centroid = weighted_mean_vector([g.embedding for g in embedded], [1.0] * len(embedded)) or None

        clusters.append(
            TasteCluster(
                id=c,
                label=label,
                profile=profile,
                game_count=len(members),
                top_games=[g.title for g in ranked[:3]],
                semantic_centroid=centroid,
            )
        )

    clusters.sort(key=lambda cl: cl.game_count, reverse=True)
    logger.debug("[clusters] %s", [(cl.label, cl.game_count) for cl in clusters])
    return clusters
