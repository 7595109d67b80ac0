"""Franchise models — game series detected from title heuristics, rebuilt every run."""

from typing import List

from .snapshot import WireModel


class FranchiseEntry(WireModel):
    game_id: str
    title: str
    release_date: str = ""
    is_user_owned: bool = False
    # 0-based position in franchise chronology
    sequence_index: int = 0


class FranchiseCluster(WireModel):
    base_name: str
    display_name: str
    entries: List[FranchiseEntry] = []
    user_played_ids: List[str] = []
    user_avg_rating: float = 0.0
    user_total_hours: float = 0.0
    developer: str = ""

    def contains(self, game_id: str) -> bool:
        return any(e.game_id == game_id for e in self.entries)
