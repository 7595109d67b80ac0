"""
Scoring model — ScoredGame and its layer scores and match reasons.

A ScoredGame is the unit ranked, re-ranked, and shelved.
"""

from typing import List, Optional

from pydantic import Field

from .snapshot import CandidateGame, PriceInfo, UserGameSnapshot, WireModel


class LayerScores(WireModel):
    """Individual layer scores for debugging / display. All in [0, 1]."""

    content_similarity: float = 0.0
    # 0 when embeddings are unavailable
    semantic_similarity: float = 0.0
    graph_signal: float = 0.0
    quality_signal: float = 0.0
    popularity_signal: float = 0.0
    recency_boost: float = 0.0
    diversity_bonus: float = 0.0
    time_of_day_boost: float = 0.0
    engagement_curve_bonus: float = 0.0
    franchise_boost: float = 0.0
    studio_loyalty_boost: float = 0.0
    sequencing_boost: float = 0.0
    negative_signal: float = 0.0


class MatchReasons(WireModel):
    """Why a game was recommended."""

    shared_genres: List[str] = []
    shared_themes: List[str] = []
    shared_modes: List[str] = []
    # titles of user games it is similar to
    similar_to: List[str] = []
    metacritic_score: Optional[int] = None
    popularity_rank: Optional[int] = None
    is_hidden_gem: bool = False
    is_stretch_pick: bool = False
    franchise_of: Optional[str] = None
    is_franchise_entry: bool = False
    is_on_sale: bool = False
    explanation: str = ""


class ScoredGame(WireModel):
    """A candidate with its composite score, layer scores, and reasons."""

    game_id: str
    title: str
    cover_url: Optional[str] = None
    header_image: Optional[str] = None
    developer: str = ""
    publisher: str = ""
    genres: List[str] = []
    themes: List[str] = []
    game_modes: List[str] = []
    platforms: List[str] = []
    metacritic_score: Optional[int] = None
    player_count: Optional[int] = None
    release_date: str = ""
    coming_soon: bool = False
    score: float = 0.0
    layer_scores: LayerScores = Field(default_factory=LayerScores)
    reasons: MatchReasons = Field(default_factory=MatchReasons)
    price: Optional[PriceInfo] = None

    @classmethod
    def from_candidate(
        cls,
        candidate: CandidateGame,
        score: float,
        layer_scores: LayerScores,
        reasons: MatchReasons,
    ) -> "ScoredGame":
        return cls(
            game_id=candidate.game_id,
            title=candidate.title,
            cover_url=candidate.cover_url,
            header_image=candidate.header_image,
            developer=candidate.developer,
            publisher=candidate.publisher,
            genres=candidate.genres,
            themes=candidate.themes,
            game_modes=candidate.game_modes,
            platforms=candidate.platforms,
            metacritic_score=candidate.metacritic_score,
            player_count=candidate.player_count,
            release_date=candidate.release_date,
            coming_soon=candidate.coming_soon,
            score=score,
            layer_scores=layer_scores,
            reasons=reasons,
            price=candidate.price,
        )

    @classmethod
    def from_user_game(cls, game: UserGameSnapshot, explanation: str) -> "ScoredGame":
        """Unscored entry for shelves built directly from the library."""
        return cls(
            game_id=game.game_id,
            title=game.title,
            developer=game.developer,
            publisher=game.publisher,
            genres=game.genres,
            themes=game.themes,
            game_modes=game.game_modes,
            release_date=game.release_date,
            score=0.0,
            reasons=MatchReasons(explanation=explanation),
        )
