"""
Taste profile: engagement curves, per-game engagement scores, and facet aggregation.

Every facet value (genre, theme, mode, perspective, developer, publisher, era) gets a
FeatureWeight whose weight is the sum of the engagement scores of the games carrying it.
Genres are mapped to canonical genres first; all other facet names are normalized
(lowercase, trimmed).
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from ..models.config import DEFAULT_CONFIG, RecoConfig
from ..models.profile import FeatureWeight, TasteProfile
from ..models.snapshot import EngagementPattern, GameStatus, UserGameSnapshot
from ..utils.dates import MS_PER_DAY, to_epoch_ms, year_of
from ..utils.scores import clamp01
from ..utils.text import CANONICAL_GENRES, norm, to_canonical_genres
from .run_cache import RunCache, cache_key

logger = logging.getLogger(__name__)

STATUS_WEIGHTS: Dict[str, float] = {
    GameStatus.COMPLETED.value: 1.0,
    GameStatus.PLAYING_NOW.value: 0.9,
    GameStatus.PLAYING.value: 0.7,
    GameStatus.ON_HOLD.value: 0.3,
    GameStatus.WANT_TO_PLAY.value: 0.1,
}
UNKNOWN_STATUS_WEIGHT = 0.3

CURVE_MULTIPLIERS: Dict[EngagementPattern, float] = {
    EngagementPattern.LONG_TAIL: 1.4,
    EngagementPattern.SLOW_BURN: 1.3,
    EngagementPattern.HONEYMOON: 0.9,
    EngagementPattern.BINGE_DROP: 0.6,
    EngagementPattern.UNKNOWN: 1.0,
}

# Keyed by the lowercase status trajectory joined with "|".
TRAJECTORY_MULTIPLIERS: Dict[str, float] = {
    "want to play|playing|completed": 1.5,
    "want to play|playing now|completed": 1.6,
    "playing|completed": 1.3,
    "playing now|completed": 1.4,
    "want to play|playing": 1.1,
    "playing|on hold": 0.6,
    "want to play": 0.3,
}

_CANONICAL_BY_KEY = {norm(g): g for g in CANONICAL_GENRES}


def _mean(values: List[float]) -> float:
    return sum(values) / len(values)


def classify_engagement_curve(game: UserGameSnapshot) -> EngagementPattern:
    """
    Classify how play sessions evolved over time.

    Rules are checked in order: too few sessions, binge, slow burn, honeymoon, long tail.
    """
    timestamps = game.session_timestamps
    durations = game.session_durations
    if game.session_count < 3 or not timestamps:
        return EngagementPattern.UNKNOWN

    span_days = (max(timestamps) - min(timestamps)) / MS_PER_DAY
    if span_days <= 3:
        return EngagementPattern.BINGE_DROP

    is_spread = span_days >= 14

    if len(durations) >= 4:
        half = len(durations) // 2
        if is_spread and _mean(durations[half:]) > _mean(durations[:half]) * 1.2:
            return EngagementPattern.SLOW_BURN

    if len(durations) >= 5:
        if _mean(durations[:3]) > _mean(durations[3:]) * 1.5:
            return EngagementPattern.HONEYMOON

    if is_spread:
        return EngagementPattern.LONG_TAIL
    return EngagementPattern.UNKNOWN


def pattern_for(game: UserGameSnapshot, cache: RunCache) -> EngagementPattern:
    """Caller-supplied pattern when it is informative, else the classified one (cached per run)."""
    if game.engagement_pattern is not None and game.engagement_pattern != EngagementPattern.UNKNOWN:
        return game.engagement_pattern
    key = cache_key(game.game_id, game)
    pattern = cache.patterns.get(key)
    if pattern is None:
        pattern = classify_engagement_curve(game)
        cache.patterns[key] = pattern
    return pattern


def curve_multiplier(game: UserGameSnapshot, cache: RunCache) -> float:
    return CURVE_MULTIPLIERS[pattern_for(game, cache)]


def trajectory_multiplier(game: UserGameSnapshot) -> float:
    """Weight of a game's status history; a full want-to-play to completed run counts most."""
    if not game.status_trajectory:
        return 1.0
    key = "|".join(s.lower() for s in game.status_trajectory)
    if key in TRAJECTORY_MULTIPLIERS:
        return TRAJECTORY_MULTIPLIERS[key]
    if game.status == GameStatus.COMPLETED.value:
        return 1.3
    if game.status == GameStatus.ON_HOLD.value:
        return 0.6
    if game.status in (GameStatus.PLAYING.value, GameStatus.PLAYING_NOW.value):
        return 1.0
    if game.removed_at:
        return 0.2
    return 0.5


def _last_activity_ms(game: UserGameSnapshot) -> Optional[float]:
    if game.last_session_date:
        last = to_epoch_ms(game.last_session_date)
        if last is not None:
            return last
    return to_epoch_ms(game.added_at)


def compute_engagement_score(
    game: UserGameSnapshot,
    cache: RunCache,
    config: RecoConfig = DEFAULT_CONFIG,
) -> float:
    """
    How much a game says about the user's taste, in [0, 1].

    base = hours*0.28 + rating*0.25 + status*0.18 + session_depth*0.14
           + decay*0.10 + (curve - 1)*0.05
    score = clamp01(base * curve)
    """
    key = cache_key(game.game_id, game)
    cached = cache.engagement.get(key)
    if cached is not None:
        return cached

    hours_norm = clamp01(min(game.hours_played, config.max_hours) / config.max_hours)
    rating_norm = clamp01(game.rating / 5)
    status_score = STATUS_WEIGHTS.get(game.status, UNKNOWN_STATUS_WEIGHT)

    if game.session_count > 0:
        session_depth = clamp01(game.avg_session_minutes / config.full_session_minutes)
    else:
        session_depth = hours_norm * 0.3

    last_activity = _last_activity_ms(game)
    if last_activity is None:
        temporal_decay = 0.0
    else:
        age_days = max(0.0, (cache.now - last_activity) / MS_PER_DAY)
        temporal_decay = 0.5 ** (age_days / config.decay_half_life_days)

    curve = curve_multiplier(game, cache)
    base = (
        hours_norm * 0.28
        + rating_norm * 0.25
        + status_score * 0.18
        + session_depth * 0.14
        + temporal_decay * 0.10
        + (curve - 1) * 0.05
    )
    score = clamp01(base * curve)
    cache.engagement[key] = score
    return score


def release_bucket(date_str: str) -> str:
    year = year_of(date_str)
    if year is None:
        return "unknown"
    if year >= 2023:
        return "2023+"
    if year >= 2020:
        return "2020-2022"
    if year >= 2015:
        return "2015-2019"
    if year >= 2010:
        return "2010-2014"
    if year >= 2000:
        return "2000-2009"
    return "pre-2000"


def build_feature_map(
    games: List[UserGameSnapshot],
    cache: RunCache,
    extractor: Callable[[UserGameSnapshot], Iterable[str]],
    config: RecoConfig = DEFAULT_CONFIG,
) -> List[FeatureWeight]:
    """Aggregate one facet across games; sorted by weight descending."""
    acc: Dict[str, Dict[str, float]] = {}
    for game in games:
        engagement = compute_engagement_score(game, cache, config)
        for feature in extractor(game):
            key = norm(feature)
            if not key:
                continue
            entry = acc.setdefault(
                key, {"weight": 0.0, "count": 0, "hours": 0.0, "rating_sum": 0.0, "rated": 0}
            )
            entry["weight"] += engagement
            entry["count"] += 1
            entry["hours"] += game.hours_played
            if game.rating > 0:
                entry["rating_sum"] += game.rating
                entry["rated"] += 1

    features = [
        FeatureWeight(
            name=name,
            weight=data["weight"],
            game_count=int(data["count"]),
            total_hours=data["hours"],
            avg_rating=data["rating_sum"] / data["rated"] if data["rated"] else 0.0,
        )
        for name, data in acc.items()
    ]
    # Stable sort keeps first-seen order among equal weights
    features.sort(key=lambda f: f.weight, reverse=True)
    return features


def _developer_of(game: UserGameSnapshot) -> List[str]:
    return [game.developer] if game.developer else []


def _publisher_of(game: UserGameSnapshot) -> List[str]:
    return [game.publisher] if game.publisher else []


def _era_of(game: UserGameSnapshot) -> List[str]:
    return [release_bucket(game.release_date)] if game.release_date else []


def build_taste_profile(
    games: List[UserGameSnapshot],
    cache: RunCache,
    config: RecoConfig = DEFAULT_CONFIG,
) -> TasteProfile:
    """Aggregate the library into a TasteProfile (clusters are filled in later)."""
    genres = build_feature_map(games, cache, lambda g: to_canonical_genres(g.genres), config)
    for feature in genres:
        feature.name = _CANONICAL_BY_KEY.get(feature.name, feature.name)

    themes = build_feature_map(games, cache, lambda g: g.themes, config)
    game_modes = build_feature_map(games, cache, lambda g: g.game_modes, config)
    perspectives = build_feature_map(games, cache, lambda g: g.perspectives, config)
    developers = build_feature_map(games, cache, _developer_of, config)
    publishers = build_feature_map(games, cache, _publisher_of, config)
    eras = build_feature_map(games, cache, _era_of, config)

    total_hours = sum(g.hours_played for g in games)
    rated = [g.rating for g in games if g.rating > 0]
    avg_rating = sum(rated) / len(rated) if rated else 0.0

    loyal_developers = [
        d.name
        for d in developers
        if d.game_count >= config.loyal_min_games
        and (d.avg_rating >= config.loyal_min_avg_rating or d.total_hours >= config.loyal_min_hours)
    ]
    logger.debug(
        "[profile] games=%d genres=%d loyal_developers=%s",
        len(games), len(genres), loyal_developers,
    )

    return TasteProfile(
        genres=genres,
        themes=themes,
        game_modes=game_modes,
        perspectives=perspectives,
        developers=developers,
        publishers=publishers,
        eras=eras,
        total_games=len(games),
        total_hours=total_hours,
        avg_rating=avg_rating,
        top_genre=genres[0].name if genres else "",
        top_theme=themes[0].name if themes else "",
        clusters=[],
        loyal_developers=loyal_developers,
    )
