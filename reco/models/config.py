"""
Engine configuration — scoring weights, thresholds, and caps.

RecoConfig defaults are defined here. The server may pass a dict
(e.g. from a JSON file named by RECO_CONFIG_PATH); from_dict() merges it with these defaults.
"""

from typing import Dict, Optional

from pydantic import BaseModel, model_validator


class RecoConfig(BaseModel):
    """Configuration for the recommendation engine."""

    # -------------------------------------------------------------------------
    # Composite Score Weights (embeddings available)
    # score = clamp01(sum(layer * weight) - negative * weight_negative)
    # -------------------------------------------------------------------------

    weight_content: float = 0.15
    weight_semantic: float = 0.12
    weight_graph: float = 0.14
    weight_quality: float = 0.11
    weight_popularity: float = 0.06
    weight_recency: float = 0.06
    weight_diversity: float = 0.04
    weight_time_of_day: float = 0.03
    weight_engagement_curve: float = 0.03
    weight_franchise: float = 0.08
    weight_studio: float = 0.05
    weight_sequencing: float = 0.04
    weight_negative: float = 0.06

    # When embeddings are unavailable, weight_semantic moves to content + graph.
    # The two shares must add up to weight_semantic.
    semantic_fallback_content: float = 0.07
    semantic_fallback_graph: float = 0.05

    # -------------------------------------------------------------------------
    # Engagement Score
    # -------------------------------------------------------------------------

    # Hours beyond this do not increase normalized hours.
    max_hours: float = 500.0
    # Average session length (minutes) that counts as full session depth.
    full_session_minutes: float = 240.0
    # Temporal decay half-life measured from last activity.
    decay_half_life_days: float = 180.0

    # -------------------------------------------------------------------------
    # Loyalty / Negative Signals
    # -------------------------------------------------------------------------

    loyal_min_games: int = 2
    loyal_min_avg_rating: float = 3.5
    loyal_min_hours: float = 20.0
    studio_loyalty_boost: float = 0.35

    # Want-to-Play games untouched for longer than this count as rejected.
    stale_wishlist_days: float = 180.0
    # On-Hold games with fewer hours than this count as rejected.
    abandoned_max_hours: float = 2.0
    # Cap on the negative strength factor.
    max_negative_strength: float = 0.5

    # -------------------------------------------------------------------------
    # Graph Signal
    # -------------------------------------------------------------------------

    # Minimum shared tags for a co-occurrence edge between two candidates.
    graph_min_shared_tags: int = 3
    # Max neighbors kept per node (bounds the O(n^2) edge build).
    graph_max_neighbors: int = 150
    # Stop traversing user games once this many matched.
    graph_max_matches: int = 3
    # Profile developers used in the content vector.
    content_top_developers: int = 20

    # -------------------------------------------------------------------------
    # Context Signals
    # -------------------------------------------------------------------------

    # Minimum sessions in the current day-part before time-of-day applies.
    time_of_day_min_sessions: int = 3
    # Minimum total sessions before sequencing applies.
    sequencing_min_sessions: int = 4
    sequencing_recent_games: int = 3
    # Engagement curves with multiplier above this feed the curve bonus.
    favorable_curve_threshold: float = 1.1

    # -------------------------------------------------------------------------
    # Diversity Re-Ranking (MMR)
    # mmr = lambda * score - (1 - lambda) * max_jaccard_to_selected
    # -------------------------------------------------------------------------

    mmr_lambda: float = 0.7
    mmr_limit: int = 80

    # -------------------------------------------------------------------------
    # Taste Clusters (k-means)
    # -------------------------------------------------------------------------

    cluster_k: int = 3
    cluster_iterations: int = 10
    cluster_min_members: int = 2
    # Fixed seed for deterministic centroid initialization; None = random.
    cluster_seed: Optional[int] = None

    # -------------------------------------------------------------------------
    # Shelves
    # -------------------------------------------------------------------------

    shelf_size: int = 12
    hidden_gem_min_metacritic: int = 80
    # Hidden gems have fewer players than this fraction of the pool max.
    hidden_gem_max_player_share: float = 0.1
    critics_choice_min_metacritic: int = 85
    stretch_pick_min_score: float = 0.12
    coming_soon_min_score: float = 0.15
    deal_min_discount: int = 20
    new_release_window_days: int = 60
    max_explanation_clauses: int = 3

    @model_validator(mode="after")
    def semantic_fallback_conserves_weight(self):
        moved = self.semantic_fallback_content + self.semantic_fallback_graph
        if abs(moved - self.weight_semantic) > 1e-9:
            raise ValueError(
                f"Semantic fallback shares must sum to weight_semantic "
                f"({self.weight_semantic}), got {moved}"
            )
        return self

    def layer_weights(self, has_embeddings: bool) -> Dict[str, float]:
        """Active positive-layer weights for a run, keyed by LayerScores field name."""
        content = self.weight_content
        semantic = self.weight_semantic
        graph = self.weight_graph
        if not has_embeddings:
            content += self.semantic_fallback_content
            graph += self.semantic_fallback_graph
            semantic = 0.0
        return {
            "content_similarity": content,
            "semantic_similarity": semantic,
            "graph_signal": graph,
            "quality_signal": self.weight_quality,
            "popularity_signal": self.weight_popularity,
            "recency_boost": self.weight_recency,
            "diversity_bonus": self.weight_diversity,
            "time_of_day_boost": self.weight_time_of_day,
            "engagement_curve_bonus": self.weight_engagement_curve,
            "franchise_boost": self.weight_franchise,
            "studio_loyalty_boost": self.weight_studio,
            "sequencing_boost": self.weight_sequencing,
        }

    def total_weight(self, has_embeddings: bool) -> float:
        """Sum of active layer weights plus the negative weight."""
        return sum(self.layer_weights(has_embeddings).values()) + self.weight_negative

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "RecoConfig":
        """Create config from dictionary (e.g., loaded from JSON)."""
        flat = {}
        if "weights" in config_dict:
            for key, value in config_dict["weights"].items():
                flat[f"weight_{key}"] = value
        if "semantic_fallback" in config_dict:
            sf = config_dict["semantic_fallback"]
            if "content" in sf:
                flat["semantic_fallback_content"] = sf["content"]
            if "graph" in sf:
                flat["semantic_fallback_graph"] = sf["graph"]
        if "mmr" in config_dict:
            mmr = config_dict["mmr"]
            flat["mmr_lambda"] = mmr.get("lambda", 0.7)
            flat["mmr_limit"] = mmr.get("limit", 80)
        if "clustering" in config_dict:
            cl = config_dict["clustering"]
            for key in ("k", "iterations", "min_members", "seed"):
                if key in cl:
                    flat[f"cluster_{key}"] = cl[key]
        if "graph" in config_dict:
            gr = config_dict["graph"]
            for key in ("min_shared_tags", "max_neighbors", "max_matches"):
                if key in gr:
                    flat[f"graph_{key}"] = gr[key]
        if "shelves" in config_dict:
            flat.update(config_dict["shelves"])
        # Top-level flat keys win over sections
        flat.update({k: v for k, v in config_dict.items() if not isinstance(v, dict)})
        allowed = set(cls.model_fields)
        filtered = {k: v for k, v in flat.items() if k in allowed}
        return cls.model_validate(filtered)


DEFAULT_CONFIG = RecoConfig()


def resolve_config(config: Optional["RecoConfig"]) -> "RecoConfig":
    """Return config or DEFAULT_CONFIG when none is provided."""
    return config if config is not None else DEFAULT_CONFIG
