"""
Franchise & studio loyalty detection.

Franchises are found by stripping numbering, edition suffixes and subtitles from titles
across the library and the candidate pool. This is a heuristic: unrelated games that
share a leading word can end up grouped together.
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from ..models.config import DEFAULT_CONFIG, RecoConfig
from ..models.franchise import FranchiseCluster, FranchiseEntry
from ..models.snapshot import CandidateGame, UserGameSnapshot
from ..utils.dates import to_epoch_ms
from ..utils.scores import clamp01
from ..utils.text import norm

logger = logging.getLogger(__name__)

FRANCHISE_STRIP_PATTERNS = [
    # Numbered sequels: "Game 2", "Game II"
    re.compile(r"\s+([\divxlc]+|\d+)$", re.IGNORECASE),
    re.compile(
        r"\s*:\s*(remastered|goty|game of the year|deluxe|ultimate|definitive|complete|enhanced"
        r"|anniversary|remake|hd|collection|gold|premium|special|digital|standard)(\s+edition)?$",
        re.IGNORECASE,
    ),
    re.compile(r"\s+edition$", re.IGNORECASE),
    # "(2018)", "(PC)"
    re.compile(r"\s*\([^)]*\)$"),
    re.compile(r"\s*:\s+[^:]+$"),
    re.compile(r"\s+-\s+.*$"),
]
MAX_STRIP_ROUNDS = 3
MIN_BASE_LENGTH = 3

_DISPLAY_SPLIT = re.compile(r"[:\-–]")


def extract_franchise_base(title: str) -> str:
    """Normalized franchise base name for a title, e.g. "Hades II" -> "hades"."""
    base = (title or "").strip()
    for _ in range(MAX_STRIP_ROUNDS):
        changed = False
        for pattern in FRANCHISE_STRIP_PATTERNS:
            stripped = pattern.sub("", base, count=1).strip()
            if len(stripped) >= MIN_BASE_LENGTH and stripped != base:
                base = stripped
                changed = True
        if not changed:
            break
    return norm(base)


@dataclass
class _FranchiseAccumulator:
    entries: Dict[str, FranchiseEntry] = field(default_factory=dict)
    developers: Counter = field(default_factory=Counter)
    user_ratings: List[float] = field(default_factory=list)
    user_hours: float = 0.0

    def add(
        self,
        game_id: str,
        title: str,
        release_date: str,
        is_user: bool,
        developer: str,
        rating: float,
        hours: float,
    ) -> None:
        entry = self.entries.get(game_id)
        if entry is None:
            self.entries[game_id] = FranchiseEntry(
                game_id=game_id, title=title, release_date=release_date, is_user_owned=is_user
            )
        elif is_user:
            entry.is_user_owned = True
        if norm(developer):
            self.developers[norm(developer)] += 1
        if is_user:
            if rating > 0:
                self.user_ratings.append(rating)
            self.user_hours += hours


def _release_sort_key(entry: FranchiseEntry):
    # Unparsable dates sort last
    ts = to_epoch_ms(entry.release_date)
    return (ts is None, ts or 0.0)


def detect_franchises(
    user_games: List[UserGameSnapshot],
    candidates: List[CandidateGame],
) -> List[FranchiseCluster]:
    """
    Group library and candidate titles into franchises.

    A base name becomes a FranchiseCluster when it spans at least two distinct game ids
    and at least one of them is in the user's library. Clusters are sorted by the
    user's hours in them, descending.
    """
    groups: Dict[str, _FranchiseAccumulator] = {}

    def add(game_id, title, release_date, is_user, developer, rating, hours):
        base = extract_franchise_base(title)
        if len(base) < MIN_BASE_LENGTH:
            return
        groups.setdefault(base, _FranchiseAccumulator()).add(
            game_id, title, release_date, is_user, developer, rating, hours
        )

    for ug in user_games:
        add(ug.game_id, ug.title, ug.release_date, True, ug.developer, ug.rating, ug.hours_played)
    for c in candidates:
        add(c.game_id, c.title, c.release_date, False, c.developer, 0.0, 0.0)

    franchises: List[FranchiseCluster] = []
    for base, acc in groups.items():
        if len(acc.entries) < 2:
            continue
        if not any(e.is_user_owned for e in acc.entries.values()):
            continue

        entries = sorted(acc.entries.values(), key=_release_sort_key)
        for index, entry in enumerate(entries):
            entry.sequence_index = index

        top_developer = acc.developers.most_common(1)[0][0] if acc.developers else ""
        avg_rating = sum(acc.user_ratings) / len(acc.user_ratings) if acc.user_ratings else 0.0
        display_name = _DISPLAY_SPLIT.split(entries[0].title)[0].strip() or base

        franchises.append(
            FranchiseCluster(
                base_name=base,
                display_name=display_name,
                entries=entries,
                user_played_ids=[e.game_id for e in entries if e.is_user_owned],
                user_avg_rating=avg_rating,
                user_total_hours=acc.user_hours,
                developer=top_developer,
            )
        )

    franchises.sort(key=lambda f: f.user_total_hours, reverse=True)
    logger.debug("[franchise] detected=%d %s", len(franchises), [f.base_name for f in franchises])
    return franchises


@dataclass
class FranchiseMatch:
    boost: float = 0.0
    franchise_name: Optional[str] = None
    is_franchise_entry: bool = False


def compute_franchise_boost(
    candidate: CandidateGame,
    franchises: List[FranchiseCluster],
    user_game_ids: Set[str],
) -> FranchiseMatch:
    """Boost for an unowned entry in a franchise the user has played."""
    if candidate.game_id in user_game_ids:
        return FranchiseMatch()

    base = extract_franchise_base(candidate.title)
    for franchise in franchises:
        if franchise.base_name != base and not franchise.contains(candidate.game_id):
            continue

        if franchise.user_avg_rating >= 4:
            rating_mult = 1.5
        elif franchise.user_avg_rating >= 3:
            rating_mult = 1.0
        else:
            rating_mult = 0.5
        completion = min(len(franchise.user_played_ids) / len(franchise.entries), 0.8)
        boost = clamp01((0.4 + completion * 0.5) * rating_mult)
        return FranchiseMatch(
            boost=boost, franchise_name=franchise.display_name, is_franchise_entry=True
        )

    return FranchiseMatch()


def compute_studio_loyalty_boost(
    candidate: CandidateGame,
    loyal_developers: List[str],
    config: RecoConfig = DEFAULT_CONFIG,
) -> float:
    """Flat boost when the candidate's developer or publisher is a loyal developer."""
    if not loyal_developers:
        return 0.0
    loyal = {norm(d) for d in loyal_developers}
    developer = norm(candidate.developer)
    publisher = norm(candidate.publisher)
    if (developer and developer in loyal) or (publisher and publisher in loyal):
        return config.studio_loyalty_boost
    return 0.0
