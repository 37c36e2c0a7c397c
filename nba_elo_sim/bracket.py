from __future__ import annotations

import logging
import random

from nba_elo_sim.game import SILENT, GameReporter, simulate_game
from nba_elo_sim.league import League
from nba_elo_sim.models import (
    Conference,
    ConferenceResult,
    GameResult,
    PostseasonResult,
    RoundResult,
    Team,
)
from nba_elo_sim.series import Series

logger = logging.getLogger(__name__)

POSTSEASON_TEAMS = 10


def _round_labels(conference: str) -> list[list[str]]:
    return [
        [
            f"{conference} round 1 (1 vs 8)",
            f"{conference} round 1 (2 vs 7)",
            f"{conference} round 1 (3 vs 6)",
            f"{conference} round 1 (4 vs 5)",
        ],
        [
            f"{conference} semifinals (1/8 vs 4/5)",
            f"{conference} semifinals (2/7 vs 3/6)",
        ],
        [f"{conference} finals"],
    ]


def _play_single(
    label: str,
    home: Team,
    away: Team,
    rng: random.Random | None,
    reporter: GameReporter,
) -> tuple[Team, Team, GameResult]:
    event = simulate_game(label, home, away, rng=rng, count_record=False, reporter=reporter)
    result = GameResult(label=label, home=home.code, away=away.code, home_won=event.home_won)
    if event.home_won:
        return home, away, result
    return away, home, result


def _play_round(
    labels: list[str],
    teams: list[Team],
    rng: random.Random | None,
    reporter: GameReporter,
) -> tuple[list[Team], list[RoundResult]]:
    """Pair first with last, working inwards, and keep the series winners."""
    if len(teams) % 2:
        raise RuntimeError(f"Cannot pair an odd field of {len(teams)} teams")
    if len(labels) != len(teams) // 2:
        raise RuntimeError(f"Expected {len(teams) // 2} round labels, got {len(labels)}")

    remaining = list(teams)
    winners: list[Team] = []
    results: list[RoundResult] = []
    for label in labels:
        team_a = remaining.pop(0)
        team_b = remaining.pop()
        winner, result = Series(label, team_a, team_b).simulate(rng=rng, reporter=reporter)
        winners.append(winner)
        results.append(result)
    return winners, results


class ConferenceBracket:
    def __init__(self, name: str, teams: list[Team]) -> None:
        if len(teams) < POSTSEASON_TEAMS:
            raise ValueError(
                f"{name} needs at least {POSTSEASON_TEAMS} teams for the postseason, got {len(teams)}"
            )
        self.name = name
        self.teams = list(teams[:POSTSEASON_TEAMS])

    def simulate_play_in(
        self,
        rng: random.Random | None = None,
        reporter: GameReporter = SILENT,
    ) -> tuple[list[Team], tuple[GameResult, GameResult, GameResult]]:
        """Resolve seeds 7-10 into the 7 and 8 seeds; returns the 8-team field."""
        seventh, eighth, ninth, tenth = self.teams[6:10]

        new_seventh, game_3_home, game_1 = _play_single(
            f"{self.name} play-in game 1", seventh, eighth, rng, reporter
        )
        game_3_away, _, game_2 = _play_single(f"{self.name} play-in game 2", ninth, tenth, rng, reporter)
        new_eighth, _, game_3 = _play_single(
            f"{self.name} play-in game 3", game_3_home, game_3_away, rng, reporter
        )
        field = self.teams[:6] + [new_seventh, new_eighth]
        return field, (game_1, game_2, game_3)

    def simulate(
        self,
        rng: random.Random | None = None,
        reporter: GameReporter = SILENT,
    ) -> tuple[Team, ConferenceResult]:
        field, play_in = self.simulate_play_in(rng=rng, reporter=reporter)

        rounds: list[list[RoundResult]] = []
        for labels in _round_labels(self.name):
            field, results = _play_round(labels, field, rng, reporter)
            rounds.append(results)

        if len(field) != 1:
            raise RuntimeError(f"{self.name} bracket ended with {len(field)} teams")
        champion = field[0]
        round_1, semifinals, finals = rounds
        logger.debug("%s champion: %s", self.name, champion.code)
        return champion, ConferenceResult(
            conference=self.name,
            play_in=play_in,
            round_1=tuple(round_1),
            semifinals=tuple(semifinals),
            finals=finals[0],
            champion=champion.code,
        )


def partition(teams: list[Team]) -> tuple[list[Team], list[Team]]:
    """Split into (west, east), each ordered by fewest losses."""
    standings = League(teams).standings()
    return standings[Conference.WEST], standings[Conference.EAST]


def simulate_postseason(
    teams: list[Team],
    rng: random.Random | None = None,
    reporter: GameReporter = SILENT,
) -> PostseasonResult:
    west, east = partition(teams)
    west_winner, west_result = ConferenceBracket(Conference.WEST.value, west).simulate(rng, reporter)
    east_winner, east_result = ConferenceBracket(Conference.EAST.value, east).simulate(rng, reporter)

    champion, finals = Series("Finals", west_winner, east_winner).simulate(rng=rng, reporter=reporter)
    logger.info("Simulated postseason: %s beat %s (%s)", champion.code, _runner_up(finals), _score(finals))
    return PostseasonResult(west=west_result, east=east_result, finals=finals, champion=champion.code)


def _runner_up(result: RoundResult) -> str:
    return result.team_b if result.winner == result.team_a else result.team_a


def _score(result: RoundResult) -> str:
    return f"{max(result.team_a_wins, result.team_b_wins)}-{min(result.team_a_wins, result.team_b_wins)}"
