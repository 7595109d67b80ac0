"""
Taste profile model — the user's aggregated feature affinities and taste clusters.

One TasteProfile is produced per run and returned to the caller.
"""

from typing import List, Optional

from .snapshot import WireModel


class FeatureWeight(WireModel):
    """Aggregated strength of one facet value (a genre, theme, developer, ...)."""

    name: str
    weight: float = 0.0
    game_count: int = 0
    total_hours: float = 0.0
    avg_rating: float = 0.0


class TasteCluster(WireModel):
    """A detected taste cluster: a coherent play "mood" in the user's library."""

    id: int
    label: str
    profile: "TasteProfile"
    game_count: int
    top_games: List[str] = []
    # Mean of member embeddings; None when no member has one.
    semantic_centroid: Optional[List[float]] = None


class TasteProfile(WireModel):
    """The full user taste profile computed from the library."""

    genres: List[FeatureWeight] = []
    themes: List[FeatureWeight] = []
    game_modes: List[FeatureWeight] = []
    perspectives: List[FeatureWeight] = []
    developers: List[FeatureWeight] = []
    publishers: List[FeatureWeight] = []
    eras: List[FeatureWeight] = []
    total_games: int = 0
    total_hours: float = 0.0
    avg_rating: float = 0.0
    top_genre: str = ""
    top_theme: str = ""
    clusters: List[TasteCluster] = []
    loyal_developers: List[str] = []

    @classmethod
    def empty(cls) -> "TasteProfile":
        """Default profile returned when the pipeline fails."""
        return cls()

    def facets(self) -> List[List[FeatureWeight]]:
        return [
            self.genres,
            self.themes,
            self.game_modes,
            self.perspectives,
            self.developers,
            self.publishers,
            self.eras,
        ]


TasteCluster.model_rebuild()
