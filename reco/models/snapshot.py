"""
Input snapshots — the user's library games and the candidate catalog pool.

Built from request dicts via UserGameSnapshot.model_validate(d) or ensure_user_games().
Both accept camelCase keys (gameId, hoursPlayed, ...) as sent by the caller.
Missing or null fields fall back to defaults: empty lists, 0 for numbers, "" for strings.
Numeric fields holding something that is not a finite number (e.g. "lots") fall back to
their default too, and negative catalog counts are treated as unknown.
"""

import math
from enum import Enum
from typing import Any, Dict, List, Optional, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel


class GameStatus(str, Enum):
    WANT_TO_PLAY = "Want to Play"
    PLAYING = "Playing"
    PLAYING_NOW = "Playing Now"
    ON_HOLD = "On Hold"
    COMPLETED = "Completed"


class EngagementPattern(str, Enum):
    HONEYMOON = "honeymoon"
    LONG_TAIL = "long-tail"
    BINGE_DROP = "binge-drop"
    SLOW_BURN = "slow-burn"
    UNKNOWN = "unknown"


def _number_kind(annotation: Any) -> Optional[type]:
    """int or float for plain and Optional numeric annotations; None otherwise."""
    if annotation in (int, float):
        return annotation
    if get_origin(annotation) is Union:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1 and args[0] in (int, float):
            return args[0]
    return None


def _as_number(value: Any, kind: type) -> Optional[Union[int, float]]:
    """value read as a finite number of the given kind, or None when it cannot be."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number) if kind is int else number


class WireModel(BaseModel):
    """Base for models exchanged with the caller: camelCase aliases, nulls and unreadable numbers become defaults."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def _lenient_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        kinds = {}
        for name, field in cls.model_fields.items():
            kind = _number_kind(field.annotation)
            if kind is not None:
                kinds[name] = kinds[field.alias or name] = kind
        out = {}
        for key, value in data.items():
            if value is not None and key in kinds:
                value = _as_number(value, kinds[key])
            if value is not None:
                out[key] = value
        return out


class PriceInfo(WireModel):
    is_free: bool = False
    final_formatted: Optional[str] = None
    discount_percent: Optional[int] = None


class UserGameSnapshot(WireModel):
    """
    One played/owned game from the user's library.

    status is kept as a plain string so unknown values from the caller do not
    fail validation; compare against GameStatus values.
    session_timestamps are epoch ms, session_durations are minutes, same order.
    """

    game_id: str = ""
    title: str = ""
    genres: List[str] = []
    themes: List[str] = []
    game_modes: List[str] = []
    perspectives: List[str] = []
    developer: str = ""
    publisher: str = ""
    release_date: str = ""
    status: str = GameStatus.WANT_TO_PLAY.value
    hours_played: float = 0.0
    rating: float = 0.0
    added_at: str = ""
    removed_at: Optional[str] = None
    last_session_date: Optional[str] = None
    status_trajectory: List[str] = []
    similar_game_titles: List[str] = []
    engagement_pattern: Optional[EngagementPattern] = None
    session_timestamps: List[float] = []
    session_durations: List[float] = []
    # Precomputed by the caller when available; otherwise derived from the session lists.
    session_count_hint: Optional[int] = None
    avg_session_minutes_hint: Optional[float] = None
    embedding: Optional[List[float]] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_session_hints(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            for key, hint in (
                ("sessionCount", "sessionCountHint"),
                ("session_count", "session_count_hint"),
                ("avgSessionMinutes", "avgSessionMinutesHint"),
                ("avg_session_minutes", "avg_session_minutes_hint"),
            ):
                if key in data and hint not in data:
                    data[hint] = data.pop(key)
        return data

    @field_validator("engagement_pattern", mode="before")
    @classmethod
    def _unrecognized_pattern_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and value not in {p.value for p in EngagementPattern}:
            return None
        return value

    @property
    def session_count(self) -> int:
        if self.session_count_hint is not None:
            return self.session_count_hint
        return len(self.session_timestamps)

    @property
    def avg_session_minutes(self) -> float:
        if self.avg_session_minutes_hint is not None:
            return self.avg_session_minutes_hint
        if not self.session_durations:
            return 0.0
        return sum(self.session_durations) / len(self.session_durations)

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)


class CandidateGame(WireModel):
    """One not-yet-owned game from the catalog pool."""

    game_id: str = ""
    title: str = ""
    cover_url: Optional[str] = None
    header_image: Optional[str] = None
    developer: str = ""
    publisher: str = ""
    genres: List[str] = []
    themes: List[str] = []
    game_modes: List[str] = []
    perspectives: List[str] = []
    platforms: List[str] = []
    metacritic_score: Optional[int] = None
    player_count: Optional[int] = None
    release_date: str = ""
    similar_game_titles: List[str] = []
    recommendations: Optional[int] = None
    achievements: Optional[int] = None
    coming_soon: bool = False
    review_positivity: Optional[float] = None
    review_volume: Optional[int] = None
    price: Optional[PriceInfo] = None
    embedding: Optional[List[float]] = None

    @field_validator("player_count", "recommendations", "review_volume", "achievements")
    @classmethod
    def _negative_count_is_unknown(cls, value: Optional[int]) -> Optional[int]:
        return None if value is not None and value < 0 else value

    @property
    def has_review_data(self) -> bool:
        return (
            self.review_positivity is not None
            and self.review_volume is not None
            and self.review_volume > 0
        )

    @property
    def is_on_sale(self) -> bool:
        return bool(self.price and self.price.discount_percent and self.price.discount_percent > 0)


def ensure_user_games(
    items: Optional[List[Union[Dict, "UserGameSnapshot"]]],
) -> List["UserGameSnapshot"]:
    """Convert list of dicts or snapshots to list of UserGameSnapshot models for the pipeline."""
    return [
        UserGameSnapshot.model_validate(g) if isinstance(g, dict) else g
        for g in items or []
    ]


def ensure_candidates(
    items: Optional[List[Union[Dict, "CandidateGame"]]],
) -> List["CandidateGame"]:
    """Convert list of dicts or candidates to list of CandidateGame models for the pipeline."""
    return [
        CandidateGame.model_validate(c) if isinstance(c, dict) else c
        for c in items or []
    ]
