"""
Shelf assembly: partition the ranked list into named shelves.

Shelves are built in a fixed order and each consumes the game ids it shows, so no game
appears on two shelves. A shelf is only emitted when it reaches its minimum size.
Franchise gaps are reserved before the hero is picked so the hero never empties a
complete-the-series shelf.
"""

import logging
from typing import Iterable, List, Optional, Set

from ..models.config import DEFAULT_CONFIG, RecoConfig
from ..models.franchise import FranchiseCluster
from ..models.profile import TasteCluster, TasteProfile
from ..models.scoring import ScoredGame
from ..models.shelf import RecoShelf, ShelfType
from ..models.snapshot import GameStatus, UserGameSnapshot
from ..utils.dates import MS_PER_DAY, to_epoch_ms
from ..utils.text import canonical_genre_keys, capitalize, norm, to_canonical_genre

logger = logging.getLogger(__name__)

UNFINISHED_EXPLANATION = "You've been playing this, pick it back up!"
UNFINISHED_STATUSES = (GameStatus.PLAYING.value, GameStatus.PLAYING_NOW.value, GameStatus.ON_HOLD.value)

MAX_FRANCHISE_SHELVES = 3
FRANCHISE_SHELF_SIZE = 10
MOOD_SHELF_SIZE = 10
SMALL_SHELF_SIZE = 8


def _genre_key(raw: str) -> str:
    """Canonical key for a raw genre, or the raw normalized genre when unmapped."""
    return norm(to_canonical_genre(raw) or raw)


def _is_future_or_undated(game: ScoredGame, now: float) -> bool:
    if game.release_date == "":
        return True
    released = to_epoch_ms(game.release_date)
    if released is not None and released > now:
        return True
    return game.coming_soon


def _last_activity(game: UserGameSnapshot) -> float:
    for value in (game.last_session_date, game.added_at):
        ts = to_epoch_ms(value) if value else None
        if ts is not None:
            return ts
    return float("-inf")


class _ShelfAssembly:
    """Ordered shelf list plus the set of game ids already shown."""

    def __init__(self):
        self.shelves: List[RecoShelf] = []
        self.used: Set[str] = set()

    def unused(self, games: Iterable[ScoredGame]) -> List[ScoredGame]:
        return [g for g in games if g.game_id not in self.used]

    def emit(
        self,
        shelf_type: ShelfType,
        title: str,
        games: List[ScoredGame],
        min_size: int,
        subtitle: Optional[str] = None,
        seed_game_title: Optional[str] = None,
    ) -> bool:
        if len(games) < min_size:
            return False
        self.shelves.append(
            RecoShelf(
                type=shelf_type,
                title=title,
                subtitle=subtitle,
                seed_game_title=seed_game_title,
                games=games,
            )
        )
        self.used.update(g.game_id for g in games)
        return True


def _franchise_gaps(
    franchises: List[FranchiseCluster],
    reranked: List[ScoredGame],
    all_scored: List[ScoredGame],
) -> List[tuple]:
    """(franchise, unowned scored entries) for the top franchises worth completing."""
    by_id = {s.game_id: s for s in all_scored}
    by_id.update({s.game_id: s for s in reranked})
    gaps = []
    for franchise in franchises[:MAX_FRANCHISE_SHELVES]:
        if franchise.user_avg_rating < 3 and franchise.user_total_hours < 10:
            continue
        missing = [by_id[e.game_id] for e in franchise.entries if not e.is_user_owned and e.game_id in by_id]
        gaps.append((franchise, missing))
    return gaps


def build_unfinished_business(
    user_games: List[UserGameSnapshot],
    excluded_ids: Set[str],
    limit: int = SMALL_SHELF_SIZE,
) -> List[ScoredGame]:
    """In-progress library games, stalest first, as unscored entries."""
    in_progress = [
        g for g in user_games if g.status in UNFINISHED_STATUSES and g.game_id not in excluded_ids
    ]
    in_progress.sort(key=_last_activity)
    return [ScoredGame.from_user_game(g, UNFINISHED_EXPLANATION) for g in in_progress[:limit]]


def build_shelves(
    reranked: List[ScoredGame],
    all_scored: List[ScoredGame],
    user_games: List[UserGameSnapshot],
    profile: TasteProfile,
    clusters: List[TasteCluster],
    franchises: List[FranchiseCluster],
    now: float,
    dismissed_ids: Optional[Set[str]] = None,
    config: RecoConfig = DEFAULT_CONFIG,
) -> List[RecoShelf]:
    """
    Build every shelf in display order.

    reranked is the MMR output; all_scored is every scored candidate (upcoming shelves
    draw from it so unreleased games cut by MMR can still appear).
    """
    size = config.shelf_size
    out = _ShelfAssembly()

    gaps = _franchise_gaps(franchises, reranked, all_scored)
    reserved = {g.game_id for _, missing in gaps for g in missing[:FRANCHISE_SHELF_SIZE]}

    hero = next((s for s in reranked if s.game_id not in reserved), None)
    if hero is not None:
        out.emit(ShelfType.HERO, "Your Next Obsession", [hero], 1)

    for franchise, missing in gaps:
        games = out.unused(missing)[:FRANCHISE_SHELF_SIZE]
        out.emit(
            ShelfType.COMPLETE_THE_SERIES,
            f"Complete the {franchise.display_name} Series",
            games,
            1,
            subtitle=f"You've played {len(franchise.user_played_ids)} of {len(franchise.entries)} entries",
        )

    loved = [g for g in user_games if g.rating >= 4 or g.hours_played >= 20]
    if loved:
        best = sorted(loved, key=lambda g: g.rating * 10 + g.hours_played, reverse=True)[0]
        best_title = norm(best.title)
        games = [
            s for s in out.unused(reranked) if any(norm(t) == best_title for t in s.reasons.similar_to)
        ][:size]
        out.emit(
            ShelfType.BECAUSE_YOU_LOVED,
            f"Because you loved {best.title}",
            games,
            2,
            seed_game_title=best.title,
        )

    if profile.loyal_developers:
        games = [s for s in out.unused(reranked) if s.layer_scores.studio_loyalty_boost > 0][:size]
        studios = ", ".join(capitalize(d) for d in profile.loyal_developers[:3])
        out.emit(
            ShelfType.FROM_STUDIOS_YOU_LOVE,
            "From Studios You Love",
            games,
            2,
            subtitle=f"Games by {studios}",
        )

    if profile.top_genre:
        top = norm(profile.top_genre)
        games = [s for s in out.unused(reranked) if any(_genre_key(g) == top for g in s.genres)][:size]
        out.emit(
            ShelfType.DEEP_IN_GENRE,
            f"Deep in {capitalize(profile.top_genre)}",
            games,
            2,
            subtitle="More from your favourite genre",
        )

    for cluster in clusters:
        if not cluster.label or cluster.game_count < 2:
            continue
        cluster_genres = {norm(g.name) for g in cluster.profile.genres[:3]}
        games = [
            s for s in out.unused(reranked) if any(_genre_key(g) in cluster_genres for g in s.genres)
        ][:MOOD_SHELF_SIZE]
        out.emit(
            ShelfType.FOR_YOUR_MOOD,
            f"For your {cluster.label} side",
            games,
            3,
            subtitle=f"Based on {' & '.join(cluster.top_games[:2])}",
        )

    out.emit(
        ShelfType.HIDDEN_GEMS,
        "Hidden Gems",
        [s for s in out.unused(reranked) if s.reasons.is_hidden_gem][:size],
        2,
        subtitle="Critically acclaimed, under the radar",
    )

    deals = [
        s
        for s in out.unused(reranked)
        if s.reasons.is_on_sale and s.price and (s.price.discount_percent or 0) >= config.deal_min_discount
    ]
    deals.sort(key=lambda s: s.price.discount_percent or 0, reverse=True)
    out.emit(
        ShelfType.DEALS_FOR_YOU,
        "Deals For You",
        deals[:size],
        2,
        subtitle="Games on sale that match your taste",
    )

    out.emit(
        ShelfType.FREE_FOR_YOU,
        "Free For You",
        [s for s in out.unused(reranked) if s.price and s.price.is_free][:size],
        2,
        subtitle="Great free games matching your taste",
    )

    critics = [
        s for s in out.unused(reranked) if (s.metacritic_score or 0) >= config.critics_choice_min_metacritic
    ]
    critics.sort(key=lambda s: s.metacritic_score or 0, reverse=True)
    out.emit(
        ShelfType.CRITICS_CHOICE,
        "Critics' Choice",
        critics[:size],
        2,
        subtitle="Top-rated by reviewers, matched to your taste",
    )

    out.emit(
        ShelfType.STRETCH_PICKS,
        "Stretch Picks",
        [
            s
            for s in out.unused(reranked)
            if s.reasons.is_stretch_pick and s.score > config.stretch_pick_min_score
        ][:size],
        2,
        subtitle="Outside your comfort zone, but you might love them",
    )

    window_start = now - config.new_release_window_days * MS_PER_DAY
    new_releases = []
    for s in out.unused(reranked):
        released = to_epoch_ms(s.release_date)
        if released is not None and window_start < released <= now:
            new_releases.append(s)
    out.emit(
        ShelfType.NEW_RELEASES_FOR_YOU,
        "New Releases For You",
        new_releases[:size],
        2,
        subtitle="Recently launched games matching your taste",
    )

    upcoming = [
        s for s in out.unused(all_scored) if s.reasons.is_franchise_entry and _is_future_or_undated(s, now)
    ]
    upcoming.sort(key=lambda s: s.score, reverse=True)
    out.emit(
        ShelfType.UPCOMING_SEQUELS,
        "Upcoming Sequels",
        upcoming[:SMALL_SHELF_SIZE],
        1,
        subtitle="New entries in franchises you love",
    )

    coming_soon = [
        s
        for s in out.unused(all_scored)
        if _is_future_or_undated(s, now) and s.score > config.coming_soon_min_score
    ]
    coming_soon.sort(key=lambda s: s.score, reverse=True)
    out.emit(
        ShelfType.COMING_SOON_FOR_YOU,
        "Coming Soon For You",
        coming_soon[:size],
        2,
        subtitle="Upcoming games you might love",
    )

    trending = [s for s in out.unused(reranked) if (s.player_count or 0) > 0]
    trending.sort(key=lambda s: s.player_count or 0, reverse=True)
    out.emit(
        ShelfType.TRENDING_NOW,
        "Trending Now",
        trending[:size],
        2,
        subtitle="Popular games that match your taste",
    )

    on_hold = [g for g in user_games if g.status == GameStatus.ON_HOLD.value]
    if on_hold:
        top_on_hold = sorted(on_hold, key=lambda g: g.hours_played, reverse=True)[0]
        seed_title = norm(top_on_hold.title)
        seed_genres = set(canonical_genre_keys(top_on_hold.genres))
        games = [
            s
            for s in out.unused(reranked)
            if any(norm(t) == seed_title for t in s.reasons.similar_to)
            or any(_genre_key(g) in seed_genres for g in s.genres)
        ][:SMALL_SHELF_SIZE]
        out.emit(
            ShelfType.FINISH_AND_TRY,
            f"Finish {top_on_hold.title}, then try...",
            games,
            2,
            subtitle="Motivation to complete what you started",
            seed_game_title=top_on_hold.title,
        )

    out.emit(
        ShelfType.UNFINISHED_BUSINESS,
        "Unfinished Business",
        build_unfinished_business(user_games, dismissed_ids or set()),
        1,
        subtitle="Games you started but haven't completed",
    )

    logger.debug("[shelves] %s", [(s.type.value, len(s.games)) for s in out.shelves])
    return out.shelves
