"""Constants for the court rotation queue."""
from enum import Enum
from typing import TypedDict


class Level(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class PlayerStatus(str, Enum):
    QUEUED = "queued"
    STANDBY = "standby"
    PLAYING = "playing"


class CourtCountOption(TypedDict):
    count: int
    label: str


TEAM_SIZE = 4
HISTORY_LIMIT = 50
AVG_GAME_MINS = 15
DEFAULT_COURT_COUNT = 2
MAX_COURT_COUNT = 10
STORAGE_PREFIX = "pickleball_queue_v3"

COURT_COUNT_OPTIONS: list[CourtCountOption] = [
    {"count": n, "label": f"{n} Courts"} for n in (1, 2, 3, 4, 5, 6, 8, 10)
]

# Older snapshots used "waiting" before standby existed.
LEGACY_STATUSES = {"waiting": PlayerStatus.QUEUED}

DEMO_PLAYER_NAMES = [
    "Ben Johns", "Anna Leigh", "Tyson McGuffin", "Catherine Parenteau",
    "JW Johnson", "Lea Jansen", "Riley Newman", "Parris Todd",
    "Zane Navratil", "Lucy Kovalova", "Matt Wright", "Callie Smith",
    "Dekel Bar", "Vivienne David", "Jay Devilliers",
]
