"""Shared utilities for tags, dates, scores, and similarity."""

from .dates import parse_date, to_epoch_ms, year_of
from .scores import clamp01, log_ratio
from .similarity import FeatureVector, cosine_similarity, jaccard, sparse_cosine
from .text import CANONICAL_GENRES, canonical_genre_keys, norm, to_canonical_genre, to_canonical_genres

__all__ = [
    "CANONICAL_GENRES",
    "FeatureVector",
    "canonical_genre_keys",
    "clamp01",
    "cosine_similarity",
    "jaccard",
    "log_ratio",
    "norm",
    "parse_date",
    "sparse_cosine",
    "to_canonical_genre",
    "to_canonical_genres",
    "to_epoch_ms",
    "year_of",
]
