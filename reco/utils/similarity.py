"""
Similarity utilities — sparse tag-vector cosine, dense embedding cosine, set Jaccard.
"""

import math
from typing import AbstractSet, Dict, List, Sequence

import numpy as np

# Sparse feature vector keyed by prefixed tag, e.g. "g:rpg", "t:fantasy", "d:fromsoftware"
FeatureVector = Dict[str, float]


def sparse_cosine(a: FeatureVector, b: FeatureVector) -> float:
    """Cosine similarity between two sparse tag vectors."""
    if not a or not b:
        return 0.0
    dot = 0.0
    for key, val_a in a.items():
        val_b = b.get(key)
        if val_b is not None:
            dot += val_a * val_b
    mag_a = math.sqrt(sum(v * v for v in a.values()))
    mag_b = math.sqrt(sum(v * v for v in b.values()))
    if mag_a == 0 or mag_b == 0:
        return 0.0
    return dot / (mag_a * mag_b)


def cosine_similarity(v1: Sequence[float], v2: Sequence[float]) -> float:
    """Compute cosine similarity between two dense vectors."""
    if v1 is None or v2 is None or len(v1) == 0 or len(v2) == 0 or len(v1) != len(v2):
        return 0.0
    v1_arr = np.asarray(v1, dtype=float)
    v2_arr = np.asarray(v2, dtype=float)
    norm_product = np.linalg.norm(v1_arr) * np.linalg.norm(v2_arr)
    return float(np.dot(v1_arr, v2_arr) / norm_product) if norm_product > 0 else 0.0


def weighted_mean_vector(vectors: List[Sequence[float]], weights: List[float]) -> List[float]:
    """Weighted mean of equal-length vectors; vectors of a different length than the first are skipped."""
    if not vectors:
        return []
    dim = len(vectors[0])
    kept = [(np.asarray(v, dtype=float), w) for v, w in zip(vectors, weights) if len(v) == dim]
    total = sum(w for _, w in kept)
    if total <= 0:
        return []
    pooled = sum(v * w for v, w in kept) / total
    return pooled.tolist()


def jaccard(a: AbstractSet[str], b: AbstractSet[str]) -> float:
    intersection = len(a & b)
    union = len(a) + len(b) - intersection
    return intersection / union if union > 0 else 0.0
