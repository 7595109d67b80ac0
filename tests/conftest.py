"""
Shared fixtures and builders for engine tests.

Builders return camelCase dicts, the shape callers send over the wire.
"""

from typing import Dict, List

import pytest

# 2026-01-01T00:00:00Z
NOW_MS = 1767225600000.0
NOW_ISO = "2026-01-01T00:00:00Z"
DAY_MS = 24 * 60 * 60 * 1000


def days_ago_iso(days: int) -> str:
    from datetime import datetime, timedelta, timezone

    dt = datetime(2026, 1, 1, tzinfo=timezone.utc) - timedelta(days=days)
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")


def user_game(game_id: str, title: str, **overrides) -> Dict:
    game = {
        "gameId": game_id,
        "title": title,
        "genres": ["Action"],
        "themes": [],
        "gameModes": ["Single player"],
        "perspectives": [],
        "developer": "",
        "publisher": "",
        "releaseDate": "2020-05-01",
        "status": "Playing",
        "hoursPlayed": 10,
        "rating": 3,
        "addedAt": days_ago_iso(30),
        "statusTrajectory": [],
        "similarGameTitles": [],
        "sessionTimestamps": [],
        "sessionDurations": [],
    }
    game.update(overrides)
    return game


def candidate(game_id: str, title: str, **overrides) -> Dict:
    c = {
        "gameId": game_id,
        "title": title,
        "developer": "",
        "publisher": "",
        "genres": ["Action"],
        "themes": [],
        "gameModes": ["Single player"],
        "perspectives": [],
        "platforms": ["PC"],
        "metacriticScore": None,
        "playerCount": None,
        "releaseDate": "2022-03-01",
        "similarGameTitles": [],
    }
    c.update(overrides)
    return c


def sessions(start_days_ago: int, count: int, every_days: float, minutes: float = 60):
    """(timestamps, durations) for count evenly spaced sessions ending before NOW_MS."""
    start = NOW_MS - start_days_ago * DAY_MS
    timestamps = [start + i * every_days * DAY_MS for i in range(count)]
    return timestamps, [minutes] * count


def request(user_games: List[Dict], candidates: List[Dict], **overrides) -> Dict:
    req = {
        "userGames": user_games,
        "candidates": candidates,
        "now": NOW_MS,
        "currentHour": 20,
        "hasEmbeddings": False,
        "dismissedGameIds": [],
        "seed": 7,
    }
    req.update(overrides)
    return req


@pytest.fixture
def library() -> List[Dict]:
    """A small varied library: RPG fan with a shooter side and an abandoned game."""
    elden_ts, elden_dur = sessions(120, 6, 20, minutes=150)
    doom_ts, doom_dur = sessions(40, 4, 7, minutes=45)
    return [
        user_game(
            "elden-ring",
            "Elden Ring",
            genres=["RPG", "Action"],
            themes=["Fantasy", "Open world"],
            developer="FromSoftware",
            publisher="Bandai Namco",
            releaseDate="2022-02-25",
            status="Completed",
            hoursPlayed=140,
            rating=5,
            statusTrajectory=["Want to Play", "Playing", "Completed"],
            similarGameTitles=["Lies of P", "Nioh 2"],
            lastSessionDate=days_ago_iso(20),
            sessionTimestamps=elden_ts,
            sessionDurations=elden_dur,
        ),
        user_game(
            "sekiro",
            "Sekiro: Shadows Die Twice",
            genres=["Action", "Adventure"],
            themes=["Historical"],
            developer="FromSoftware",
            releaseDate="2019-03-22",
            status="Completed",
            hoursPlayed=60,
            rating=4.5,
            similarGameTitles=["Nioh 2"],
            lastSessionDate=days_ago_iso(200),
        ),
        user_game(
            "doom",
            "DOOM Eternal",
            genres=["Shooter", "Action"],
            themes=["Science fiction"],
            developer="id Software",
            releaseDate="2020-03-20",
            status="On Hold",
            hoursPlayed=12,
            rating=4,
            lastSessionDate=days_ago_iso(10),
            sessionTimestamps=doom_ts,
            sessionDurations=doom_dur,
        ),
        user_game(
            "farm",
            "Farm Life",
            genres=["Simulation", "Casual"],
            status="Want to Play",
            hoursPlayed=0,
            rating=0,
            addedAt=days_ago_iso(400),
        ),
    ]


@pytest.fixture
def pool() -> List[Dict]:
    """Candidate pool covering most shelves."""
    return [
        candidate(
            "lies-of-p",
            "Lies of P",
            genres=["RPG", "Action"],
            themes=["Fantasy"],
            developer="Neowiz",
            metacriticScore=84,
            playerCount=20000,
            releaseDate="2023-09-19",
            similarGameTitles=["Elden Ring"],
        ),
        candidate(
            "nioh-2",
            "Nioh 2",
            genres=["Action", "RPG"],
            themes=["Historical", "Fantasy"],
            developer="Team Ninja",
            metacriticScore=85,
            playerCount=900000,
            releaseDate="2021-02-05",
        ),
        candidate(
            "armored-core",
            "Armored Core VI",
            genres=["Action", "Shooter"],
            themes=["Science fiction"],
            developer="FromSoftware",
            metacriticScore=87,
            playerCount=300000,
            releaseDate="2023-08-25",
        ),
        candidate(
            "ds3",
            "Dark Souls III",
            genres=["RPG", "Action"],
            themes=["Fantasy"],
            developer="FromSoftware",
            metacriticScore=89,
            playerCount=1000000,
            releaseDate="2016-04-12",
            price={"isFree": False, "finalFormatted": "$14.99", "discountPercent": 75},
        ),
        candidate(
            "bloodborne",
            "Bloodborne",
            genres=["Action"],
            themes=["Horror"],
            developer="FromSoftware",
            playerCount=100000,
            releaseDate="2015-03-24",
        ),
        candidate(
            "quake",
            "Quake Champions",
            genres=["Shooter"],
            themes=["Science fiction"],
            developer="id Software",
            playerCount=50000,
            releaseDate="2017-08-22",
            price={"isFree": True},
        ),
        candidate(
            "stardew",
            "Stardew Valley",
            genres=["Simulation", "RPG"],
            themes=["Sandbox"],
            developer="ConcernedApe",
            metacriticScore=89,
            playerCount=600000,
            releaseDate="2016-02-26",
        ),
        candidate(
            "forza",
            "Forza Horizon 5",
            genres=["Racing"],
            themes=["Open world"],
            developer="Playground Games",
            metacriticScore=92,
            playerCount=400000,
            releaseDate="2021-11-09",
            price={"isFree": False, "discountPercent": 50},
        ),
        candidate(
            "puzzle",
            "Tiny Puzzles",
            genres=["Puzzle"],
            developer="Small Studio",
            metacriticScore=82,
            playerCount=1000,
            releaseDate="2025-12-10",
        ),
        candidate(
            "sekiro-2",
            "Sekiro 2",
            genres=["Action", "Adventure"],
            developer="FromSoftware",
            releaseDate="",
            comingSoon=True,
        ),
    ]
