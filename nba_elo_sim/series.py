from __future__ import annotations

import random

from nba_elo_sim.game import SILENT, GameReporter, simulate_game
from nba_elo_sim.models import RoundResult, Team

WINS_TO_ADVANCE = 4
MAX_GAMES = 2 * WINS_TO_ADVANCE - 1
# 2-2-1-1-1: the team without home court hosts games 3, 4 and 6
AWAY_GAMES = frozenset({3, 4, 6})


def advantaged_first(team_a: Team, team_b: Team) -> bool:
    """True when team_a holds home court; equal records favour team_a."""
    return team_a.losses <= team_b.losses


def advantaged_hosts(game_number: int) -> bool:
    return game_number not in AWAY_GAMES


class Series:
    def __init__(self, label: str, team_a: Team, team_b: Team) -> None:
        self.label = label
        self.team_a = team_a
        self.team_b = team_b
        self.team_a_wins = 0
        self.team_b_wins = 0

    @property
    def finished(self) -> bool:
        return WINS_TO_ADVANCE in (self.team_a_wins, self.team_b_wins)

    def hosts(self, game_number: int) -> tuple[Team, Team]:
        if advantaged_first(self.team_a, self.team_b):
            favoured, other = self.team_a, self.team_b
        else:
            favoured, other = self.team_b, self.team_a
        if advantaged_hosts(game_number):
            return favoured, other
        return other, favoured

    def play_game(self, game_number: int, rng: random.Random | None, reporter: GameReporter) -> None:
        home, away = self.hosts(game_number)
        event = simulate_game(
            f"{self.label} game {game_number}",
            home,
            away,
            rng=rng,
            count_record=False,
            reporter=reporter,
        )
        if event.winner == self.team_a.code:
            self.team_a_wins += 1
        else:
            self.team_b_wins += 1

    def simulate(
        self,
        rng: random.Random | None = None,
        reporter: GameReporter = SILENT,
    ) -> tuple[Team, RoundResult]:
        game_number = 0
        while not self.finished:
            game_number += 1
            if game_number > MAX_GAMES:
                raise RuntimeError(f"{self.label}: no winner after {MAX_GAMES} games")
            self.play_game(game_number, rng, reporter)

        if self.team_a_wins == self.team_b_wins:
            raise RuntimeError(f"{self.label}: both sides reached {WINS_TO_ADVANCE} wins")

        result = RoundResult(
            label=self.label,
            team_a=self.team_a.code,
            team_b=self.team_b.code,
            team_a_wins=self.team_a_wins,
            team_b_wins=self.team_b_wins,
        )
        winner = self.team_a if self.team_a_wins == WINS_TO_ADVANCE else self.team_b
        return winner, result
