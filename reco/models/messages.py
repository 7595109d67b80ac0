"""
Engine messages — the request snapshot in, progress notifications and one terminal result out.

Serialize outbound messages with model_dump(by_alias=True) for the camelCase wire format.
"""

from typing import List, Literal, Optional

from pydantic import Field

from .profile import TasteProfile
from .shelf import RecoShelf
from .snapshot import CandidateGame, UserGameSnapshot, WireModel


class RecoRequest(WireModel):
    """Full input snapshot for one invocation."""

    user_games: List[UserGameSnapshot] = []
    candidates: List[CandidateGame] = []
    # epoch ms; temporal decay, recency and release windows are measured from here
    now: float = 0.0
    current_hour: int = Field(default=12, ge=0, le=23)
    has_embeddings: bool = False
    dismissed_game_ids: List[str] = []
    # Fixed k-means seed; overrides RecoConfig.cluster_seed when set.
    seed: Optional[int] = None


class ProgressMessage(WireModel):
    type: Literal["progress"] = "progress"
    stage: str
    percent: int = Field(ge=0, le=100)


class ResultMessage(WireModel):
    type: Literal["result"] = "result"
    taste_profile: TasteProfile = Field(default_factory=TasteProfile.empty)
    shelves: List[RecoShelf] = []
    compute_time_ms: int = 0
    # Set only when the pipeline failed and this is the empty fallback.
    error: Optional[str] = None

    @classmethod
    def failed(cls, error: str, compute_time_ms: int) -> "ResultMessage":
        return cls(
            taste_profile=TasteProfile.empty(),
            shelves=[],
            compute_time_ms=compute_time_ms,
            error=error,
        )
