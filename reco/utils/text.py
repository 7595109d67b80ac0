"""
Tag normalization and the canonical genre list.

Raw catalog genres are mapped to canonical values so that e.g. "FPS" and
"Shooter" merge into "FPS & Shooter". Genres outside the list map to None.
"""

from typing import Iterable, List, Optional

CANONICAL_GENRES = (
    "Action",
    "Adventure",
    "Casual",
    "Fighting",
    "FPS & Shooter",
    "Horror & Gore",
    "MMO",
    "Puzzle",
    "Racing",
    "RPG",
    "Simulation",
    "Sports",
    "Strategy",
    "Survival",
    "Souls-like",
)

_RAW_TO_CANONICAL = {
    "action": "Action",
    "adventure": "Adventure",
    "casual": "Casual",
    "fighting": "Fighting",
    "fps": "FPS & Shooter",
    "shooter": "FPS & Shooter",
    "fps & shooter": "FPS & Shooter",
    "horror": "Horror & Gore",
    "gore": "Horror & Gore",
    "violent": "Horror & Gore",
    "horror & gore": "Horror & Gore",
    "mmo": "MMO",
    "massively multiplayer": "MMO",
    "puzzle": "Puzzle",
    "racing": "Racing",
    "rpg": "RPG",
    "role-playing (rpg)": "RPG",
    "simulation": "Simulation",
    "simulator": "Simulation",
    "sport": "Sports",
    "sports": "Sports",
    "strategy": "Strategy",
    "survival": "Survival",
    "souls-like": "Souls-like",
    "soulslike": "Souls-like",
}


def norm(value: Optional[str]) -> str:
    """Lowercase and trim a tag or title for comparison."""
    return (value or "").strip().lower()


def to_canonical_genre(raw: Optional[str]) -> Optional[str]:
    """Canonical genre for a raw genre string, or None if not in the list."""
    key = norm(raw)
    if not key:
        return None
    return _RAW_TO_CANONICAL.get(key)


def to_canonical_genres(raw: Optional[Iterable[str]]) -> List[str]:
    """Canonical genres for a list of raw genres, deduplicated in first-seen order."""
    seen = set()
    out = []
    for r in raw or []:
        can = to_canonical_genre(r)
        if can is not None and can not in seen:
            seen.add(can)
            out.append(can)
    return out


def canonical_genre_keys(raw: Optional[Iterable[str]]) -> List[str]:
    """Normalized canonical genre keys (e.g. "fps & shooter") for set comparisons."""
    return [norm(g) for g in to_canonical_genres(raw)]


def capitalize(value: str) -> str:
    return value[:1].upper() + value[1:] if value else value
