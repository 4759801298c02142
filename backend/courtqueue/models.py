"""
Records of the in-memory aggregate: players, courts, finished games.
The Session owns all three and is handed to every command function.
"""
from dataclasses import dataclass, field

from .constants import LEGACY_STATUSES, Level, PlayerStatus


def _optional_int(value) -> int | None:
    return None if value is None else int(value)

@dataclass
class Player:
    id: str
    name: str
    level: Level
    status: PlayerStatus
    joined_at: int  # ms since epoch, FIFO key
    started_at: int | None = None  # set only while playing
    court_number: int | None = None  # Court.id, set only while playing
    last_partner_ids: list[str] = field(default_factory=list)

    @property
    def is_playing(self) -> bool:
        return self.status == PlayerStatus.PLAYING

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "level": self.level.value,
            "status": self.status.value,
            "joinedAt": self.joined_at,
            "startedAt": self.started_at,
            "courtNumber": self.court_number,
            "lastPartnerIds": list(self.last_partner_ids),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Player":
        raw_status = data["status"]
        status = LEGACY_STATUSES.get(raw_status) or PlayerStatus(raw_status)
        player = cls(
            id=str(data["id"]),
            name=str(data["name"]),
            level=Level(data["level"]),
            status=status,
            joined_at=int(data["joinedAt"]),
            started_at=_optional_int(data.get("startedAt")),
            court_number=_optional_int(data.get("courtNumber")),
            last_partner_ids=[str(pid) for pid in data.get("lastPartnerIds") or []],
        )
        if not player.is_playing:
            player.started_at = None
            player.court_number = None
        elif player.started_at is None or player.court_number is None:
            raise ValueError(f"playing player {player.id} without court or start time")
        return player


@dataclass
class Court:
    id: int
    name: str | None = None

    @property
    def label(self) -> str:
        return self.name or f"Court {self.id}"

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class PlayerSnapshot:
    name: str
    level: Level


@dataclass(frozen=True)
class GameHistoryEntry:
    id: str
    timestamp: int  # finish time
    duration: int  # minutes
    court: int
    players: tuple[PlayerSnapshot, ...]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "duration": self.duration,
            "court": self.court,
            "players": [{"name": p.name, "level": p.level.value} for p in self.players],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GameHistoryEntry":
        return cls(
            id=str(data["id"]),
            timestamp=int(data["timestamp"]),
            duration=int(data["duration"]),
            court=int(data["court"]),
            players=tuple(
                PlayerSnapshot(name=str(p["name"]), level=Level(p["level"]))
                for p in data["players"]
            ),
        )


@dataclass
class Session:
    players: list[Player] = field(default_factory=list)
    courts: list[Court] = field(default_factory=list)
    history: list[GameHistoryEntry] = field(default_factory=list)
    next_court_id: int = 1

    def get_player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def get_court(self, court_id: int) -> Court | None:
        for c in self.courts:
            if c.id == court_id:
                return c
        return None

    def players_on_court(self, court_id: int) -> list[Player]:
        return [p for p in self.players if p.court_number == court_id]

    def is_court_occupied(self, court_id: int) -> bool:
        return any(p.court_number == court_id for p in self.players)

    def with_status(self, status: PlayerStatus) -> list[Player]:
        return [p for p in self.players if p.status == status]
