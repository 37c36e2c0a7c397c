from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass

from nba_elo_sim.elo import expected_score, update_elo
from nba_elo_sim.league import League
from nba_elo_sim.models import Game, GameEvent, Team

ALL_TEAMS = "*"

_default_rng = random.Random()


class TiedGameError(ValueError):
    pass


@dataclass(frozen=True)
class GameReporter:
    """Decides which games are worth surfacing and hands them to a callback.

    An empty filter reports nothing, ``"*"`` reports every game, and a team
    code reports the games that team plays in.
    """

    team_filter: str = ""
    callback: Callable[[GameEvent], None] | None = None

    def wants(self, home: str, away: str) -> bool:
        if not self.team_filter or self.callback is None:
            return False
        return self.team_filter == ALL_TEAMS or self.team_filter in (home, away)

    def report(self, event: GameEvent) -> None:
        if self.callback is not None and self.wants(event.home, event.away):
            self.callback(event)


SILENT = GameReporter()


def _apply_result(
    label: str,
    home: Team,
    away: Team,
    home_won: bool,
    count_record: bool,
    reporter: GameReporter,
    home_score: int | None = None,
    away_score: int | None = None,
) -> GameEvent:
    home_before = home.rating
    away_before = away.rating
    expected = expected_score(home_before, away_before)
    home.rating, away.rating, delta = update_elo(home_before, away_before, home_won)

    if count_record:
        winner, loser = (home, away) if home_won else (away, home)
        winner.wins += 1
        loser.losses += 1

    event = GameEvent(
        label=label,
        home=home.code,
        away=away.code,
        home_won=home_won,
        expected=expected,
        home_before=home_before,
        home_after=home.rating,
        away_before=away_before,
        away_after=away.rating,
        delta=delta,
        home_score=home_score,
        away_score=away_score,
    )
    reporter.report(event)
    return event


def simulate_game(
    label: str,
    home: Team,
    away: Team,
    rng: random.Random | None = None,
    count_record: bool = False,
    reporter: GameReporter = SILENT,
) -> GameEvent:
    rng = rng or _default_rng
    home_won = rng.random() < expected_score(home.rating, away.rating)
    return _apply_result(label, home, away, home_won, count_record, reporter)


def play_recorded_game(
    game: Game,
    league: League,
    count_record: bool = False,
    reporter: GameReporter = SILENT,
) -> GameEvent:
    if not game.is_played:
        raise ValueError(f"Game {game.game_id} has no recorded score")
    if game.home_score == game.away_score:
        raise TiedGameError(f"Game {game.game_id} is tied {game.home_score}-{game.away_score}")

    home, away = league.teams_for(game)
    return _apply_result(
        game.game_date.date().isoformat(),
        home,
        away,
        game.home_score > game.away_score,
        count_record,
        reporter,
        home_score=game.home_score,
        away_score=game.away_score,
    )


def play_scheduled_game(
    game: Game,
    league: League,
    rng: random.Random | None = None,
    reporter: GameReporter = SILENT,
) -> GameEvent:
    """Season-mode game: recorded outcome when played, simulated otherwise."""
    if game.is_played:
        return play_recorded_game(game, league, count_record=True, reporter=reporter)
    home, away = league.teams_for(game)
    return simulate_game(
        game.game_date.date().isoformat(),
        home,
        away,
        rng=rng,
        count_record=True,
        reporter=reporter,
    )
