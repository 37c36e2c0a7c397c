from __future__ import annotations

import logging
import random
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import Any

from nba_elo_sim import display
from nba_elo_sim.api import BallDontLieClient
from nba_elo_sim.bracket import simulate_postseason
from nba_elo_sim.config import Settings
from nba_elo_sim.game import SILENT, GameReporter, play_recorded_game, play_scheduled_game
from nba_elo_sim.league import League
from nba_elo_sim.models import Conference, Division, Game, PostseasonResult, Team
from nba_elo_sim.prompts import DecisionSource
from nba_elo_sim.storage import DuckDBStorage

logger = logging.getLogger(__name__)


def parse_teams(raw_rows: list[dict[str, Any]]) -> tuple[list[Team], dict[int, int]]:
    """Build fresh Teams plus a map from API team id to League index."""
    conferences = {c.value: c for c in Conference}
    divisions = {d.value: d for d in Division}

    teams: list[Team] = []
    index: dict[int, int] = {}
    for row in sorted(raw_rows, key=lambda r: int(r["id"])):
        conference = conferences.get(str(row.get("conference", "")).strip().title())
        division = divisions.get(str(row.get("division", "")).strip().title())
        if conference is None or division is None:
            logger.debug("Skipping team without a current conference/division: %s", row.get("full_name"))
            continue
        index[int(row["id"])] = len(teams)
        teams.append(
            Team(
                code=str(row["abbreviation"]).upper(),
                full_name=str(row["full_name"]),
                conference=conference,
                division=division,
            )
        )
    return teams, index


def _score(row: dict[str, Any], *keys: str) -> int | None:
    for key in keys:
        if row.get(key) is not None:
            return int(row[key])
    return None


def _parse_date(raw: Any) -> datetime:
    parsed = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_games(raw_rows: list[dict[str, Any]], team_index: dict[int, int]) -> list[Game]:
    out: list[Game] = []
    for row in raw_rows:
        if row.get("postseason", False):
            continue
        home_team = row.get("home_team") or {}
        away_team = row.get("visitor_team") or row.get("away_team") or {}
        try:
            home_idx = team_index[int(home_team["id"])]
            away_idx = team_index[int(away_team["id"])]
        except KeyError as exc:
            raise ValueError(f"Game {row.get('id')} references an unknown team: {exc}") from exc

        game_date = row.get("date") or row.get("datetime")
        if not game_date:
            raise ValueError(f"Game {row.get('id')} has no date")

        played = "final" in str(row.get("status", "")).lower()
        out.append(
            Game(
                game_id=int(row["id"]),
                game_date=_parse_date(game_date),
                home_idx=home_idx,
                away_idx=away_idx,
                home_score=_score(row, "home_team_score") if played else None,
                away_score=_score(row, "visitor_team_score", "away_team_score") if played else None,
            )
        )
    return sorted(out, key=lambda g: (g.game_date, g.game_id))


def process_history(league: League, games: Iterable[Game], reporter: GameReporter = SILENT) -> int:
    """Replay finished historical games; ratings move, season records do not."""
    processed = 0
    for game in games:
        if not game.is_played:
            continue
        play_recorded_game(game, league, count_record=False, reporter=reporter)
        processed += 1
    logger.info("Processed %s historical games", processed)
    return processed


def simulate_season(
    league: League,
    games: Iterable[Game],
    rng: random.Random | None = None,
    reporter: GameReporter = SILENT,
) -> tuple[int, int]:
    """Run the current season in date order; returns (recorded, simulated) counts."""
    league.reset_records()
    recorded = simulated = 0
    for game in games:
        play_scheduled_game(game, league, rng=rng, reporter=reporter)
        if game.is_played:
            recorded += 1
        else:
            simulated += 1
    logger.info("Season complete: %s recorded games, %s simulated games", recorded, simulated)
    return recorded, simulated


def backfill(
    client: BallDontLieClient,
    storage: DuckDBStorage,
    settings: Settings,
    refresh_season: bool = False,
) -> None:
    """Fetch whatever is missing from storage; the current season on demand."""
    teams_raw = client.get_teams()
    teams, team_index = parse_teams(teams_raw)
    if not storage.has_teams("initial"):
        storage.insert_bronze_payload("bronze_teams_raw", payload=teams_raw)
        storage.save_teams("initial", teams)
        logger.info("Stored %s teams", len(teams))

    if not storage.has_games("history"):
        history_raw = client.get_games(settings.history_seasons)
        storage.insert_bronze_payload("bronze_games_raw", payload=history_raw, kind="history")
        storage.replace_games("history", parse_games(history_raw, team_index))

    if refresh_season or not storage.has_games("season"):
        season_raw = client.get_games([settings.season])
        storage.insert_bronze_payload("bronze_games_raw", payload=season_raw, kind="season")
        storage.replace_games("season", parse_games(season_raw, team_index))

    logger.info("Backfill complete for season=%s", settings.season)


def build_processed_league(storage: DuckDBStorage, reporter: GameReporter = SILENT) -> League:
    league = League(storage.load_teams("initial"))
    process_history(league, storage.load_games("history"), reporter=reporter)
    storage.save_teams("processed", league.teams)
    return league


def run_regular_season(
    storage: DuckDBStorage,
    settings: Settings,
    rng: random.Random | None = None,
    reporter: GameReporter = SILENT,
) -> League:
    league = League(storage.load_teams("processed"))
    simulate_season(league, storage.load_games("season"), rng=rng, reporter=reporter)
    storage.save_teams("after_season", league.teams)

    standings = display.standings_frame(league.teams)
    standings.to_csv(settings.gold_dir / "standings.csv", index=False)
    display.ratings_frame(league.teams).to_csv(settings.gold_dir / "ratings.csv", index=False)
    return league


def run_postseason(
    storage: DuckDBStorage,
    rng: random.Random | None = None,
    reporter: GameReporter = SILENT,
) -> tuple[League, PostseasonResult]:
    """Simulate a postseason on a fresh copy of the stored end-of-season state."""
    league = League(storage.load_teams("after_season"))
    result = simulate_postseason(league.teams, rng=rng, reporter=reporter)
    storage.write_postseason(result, run_ts=datetime.utcnow())
    return league, result


def run_session(
    storage: DuckDBStorage,
    settings: Settings,
    decisions: DecisionSource,
    client: BallDontLieClient | None = None,
    rng: random.Random | None = None,
    output: Callable[[str], None] = print,
) -> PostseasonResult:
    """Interactive flow: ingest, replay history, then season + postseason until done."""
    if client is not None:
        refresh = storage.has_games("season") and decisions.confirm("download current season again?")
        backfill(client, storage, settings, refresh_season=refresh)

    def reporter_for(league_codes: set[str]) -> GameReporter:
        return GameReporter(
            team_filter=decisions.choose_team(sorted(league_codes)),
            callback=lambda event: output(display.format_game_event(event)),
        )

    if not storage.has_teams("processed"):
        codes = League(storage.load_teams("initial")).codes
        league = build_processed_league(storage, reporter=reporter_for(codes))
        output(display.format_ratings(league.teams, "Teams by elo after the historical seasons:"))

    while True:
        if not storage.has_teams("after_season") or decisions.confirm("simulate season again?"):
            codes = League(storage.load_teams("processed")).codes
            run_regular_season(storage, settings, rng=rng, reporter=reporter_for(codes))

        after_season = League(storage.load_teams("after_season"))
        standings = after_season.standings()
        output(display.format_standings(standings[Conference.WEST], standings[Conference.EAST]))

        _, result = run_postseason(storage, rng=rng, reporter=reporter_for(after_season.codes))
        output(display.format_bracket(result))
        if decisions.confirm("done?"):
            return result
