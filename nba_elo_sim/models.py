from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from nba_elo_sim.elo import INITIAL_RATING


class Conference(str, Enum):
    WEST = "West"
    EAST = "East"


class Division(str, Enum):
    ATLANTIC = "Atlantic"
    CENTRAL = "Central"
    SOUTHEAST = "Southeast"
    NORTHWEST = "Northwest"
    PACIFIC = "Pacific"
    SOUTHWEST = "Southwest"


@dataclass
class Team:
    code: str
    full_name: str
    conference: Conference
    division: Division
    rating: float = INITIAL_RATING
    wins: int = 0
    losses: int = 0

    @property
    def win_pct(self) -> float:
        total = self.wins + self.losses
        return (self.wins / total) if total else 0.0


@dataclass(frozen=True)
class Game:
    game_id: int
    game_date: datetime
    home_idx: int
    away_idx: int
    home_score: int | None = None
    away_score: int | None = None

    @property
    def is_played(self) -> bool:
        return self.home_score is not None and self.away_score is not None


@dataclass(frozen=True)
class GameEvent:
    label: str
    home: str
    away: str
    home_won: bool
    expected: float
    home_before: float
    home_after: float
    away_before: float
    away_after: float
    delta: float
    home_score: int | None = None
    away_score: int | None = None

    @property
    def winner(self) -> str:
        return self.home if self.home_won else self.away


@dataclass(frozen=True)
class GameResult:
    label: str
    home: str
    away: str
    home_won: bool

    @property
    def winner(self) -> str:
        return self.home if self.home_won else self.away


@dataclass(frozen=True)
class RoundResult:
    label: str
    team_a: str
    team_b: str
    team_a_wins: int
    team_b_wins: int

    @property
    def winner(self) -> str:
        return self.team_a if self.team_a_wins > self.team_b_wins else self.team_b

    @property
    def games_played(self) -> int:
        return self.team_a_wins + self.team_b_wins


@dataclass(frozen=True)
class ConferenceResult:
    conference: str
    play_in: tuple[GameResult, GameResult, GameResult]
    round_1: tuple[RoundResult, RoundResult, RoundResult, RoundResult]
    semifinals: tuple[RoundResult, RoundResult]
    finals: RoundResult
    champion: str


@dataclass(frozen=True)
class PostseasonResult:
    west: ConferenceResult
    east: ConferenceResult
    finals: RoundResult
    champion: str

    def all_rounds(self) -> list[tuple[str, str, RoundResult]]:
        """Flatten every series as (conference, stage, result), bracket order."""
        rows: list[tuple[str, str, RoundResult]] = []
        for conf in (self.west, self.east):
            rows.extend((conf.conference, "round_1", r) for r in conf.round_1)
            rows.extend((conf.conference, "semifinals", r) for r in conf.semifinals)
            rows.append((conf.conference, "conference_finals", conf.finals))
        rows.append(("League", "finals", self.finals))
        return rows
