"""Shelf model — a named, ordered presentation grouping of scored games."""

from enum import Enum
from typing import List, Optional

from .scoring import ScoredGame
from .snapshot import WireModel


class ShelfType(str, Enum):
    HERO = "hero"
    COMPLETE_THE_SERIES = "complete-the-series"
    BECAUSE_YOU_LOVED = "because-you-loved"
    FROM_STUDIOS_YOU_LOVE = "from-studios-you-love"
    DEEP_IN_GENRE = "deep-in-genre"
    FOR_YOUR_MOOD = "for-your-mood"
    HIDDEN_GEMS = "hidden-gems"
    DEALS_FOR_YOU = "deals-for-you"
    FREE_FOR_YOU = "free-for-you"
    CRITICS_CHOICE = "critics-choice"
    STRETCH_PICKS = "stretch-picks"
    NEW_RELEASES_FOR_YOU = "new-releases-for-you"
    UPCOMING_SEQUELS = "upcoming-sequels"
    COMING_SOON_FOR_YOU = "coming-soon-for-you"
    TRENDING_NOW = "trending-now"
    FINISH_AND_TRY = "finish-and-try"
    UNFINISHED_BUSINESS = "unfinished-business"


class RecoShelf(WireModel):
    type: ShelfType
    title: str
    subtitle: Optional[str] = None
    # The seed game title for "because you loved X" / "finish X" shelves.
    seed_game_title: Optional[str] = None
    games: List[ScoredGame] = []
