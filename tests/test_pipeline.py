import itertools
import random
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from nba_elo_sim.config import Settings
from nba_elo_sim.league import League
from nba_elo_sim.models import Conference, Division, Game, Team
from nba_elo_sim.pipeline import (
    build_processed_league,
    parse_games,
    parse_teams,
    process_history,
    run_postseason,
    run_regular_season,
    run_session,
    simulate_season,
)
from nba_elo_sim.prompts import ScriptedDecisionSource
from nba_elo_sim.storage import DuckDBStorage

DIVISIONS = {
    Conference.WEST: [Division.NORTHWEST, Division.PACIFIC, Division.SOUTHWEST],
    Conference.EAST: [Division.ATLANTIC, Division.CENTRAL, Division.SOUTHEAST],
}


def _teams() -> list[Team]:
    teams: list[Team] = []
    for conference, prefix in ((Conference.WEST, "W"), (Conference.EAST, "E")):
        for i in range(15):
            teams.append(
                Team(
                    code=f"{prefix}{i + 1:02d}",
                    full_name=f"{conference.value} Team {i + 1}",
                    conference=conference,
                    division=DIVISIONS[conference][i // 5],
                )
            )
    return teams


def _schedule(n_teams: int, played_scores: dict[int, tuple[int, int]] | None = None) -> list[Game]:
    played_scores = played_scores or {}
    start = datetime(2023, 10, 24)
    games = []
    for game_id, (home, away) in enumerate(itertools.permutations(range(n_teams), 2)):
        home_score, away_score = played_scores.get(game_id, (None, None))
        games.append(
            Game(
                game_id=game_id,
                game_date=start + timedelta(hours=game_id),
                home_idx=home,
                away_idx=away,
                home_score=home_score,
                away_score=away_score,
            )
        )
    return games


def _raw_team(team_id: int, abbreviation: str, conference: str, division: str) -> dict:
    return {
        "id": team_id,
        "abbreviation": abbreviation,
        "full_name": f"{abbreviation} Full",
        "conference": conference,
        "division": division,
    }


def _settings(tmp_path: Path) -> Settings:
    gold = tmp_path / "gold"
    gold.mkdir()
    return Settings(
        project_root=tmp_path,
        data_dir=tmp_path,
        bronze_dir=tmp_path / "bronze",
        gold_dir=gold,
        db_path=tmp_path / "test.duckdb",
        api_base_url="http://localhost",
        history_seasons=(2021, 2022),
        season=2023,
        min_request_interval_seconds=0.0,
    )


def test_parse_teams_keeps_current_franchises_in_id_order() -> None:
    raw = [
        _raw_team(2, "BOS", "East", "Atlantic"),
        _raw_team(1, "ATL", "East", "Southeast"),
        _raw_team(40, "OLD", "", ""),
        _raw_team(10, "GSW", "West", "Pacific"),
    ]
    teams, index = parse_teams(raw)
    assert [t.code for t in teams] == ["ATL", "BOS", "GSW"]
    assert index == {1: 0, 2: 1, 10: 2}
    assert all(t.rating == 1000.0 and t.wins == t.losses == 0 for t in teams)
    assert teams[2].conference == Conference.WEST


def test_parse_games_maps_ids_and_drops_scores_of_unfinished_games() -> None:
    index = {1: 0, 2: 1}
    raw = [
        {
            "id": 12,
            "date": "2023-10-26",
            "status": "7:30 pm ET",
            "home_team": {"id": 2},
            "visitor_team": {"id": 1},
            "home_team_score": 0,
            "visitor_team_score": 0,
        },
        {
            "id": 11,
            "date": "2023-10-25",
            "status": "Final",
            "home_team": {"id": 1},
            "visitor_team": {"id": 2},
            "home_team_score": 101,
            "visitor_team_score": 99,
        },
        {"id": 13, "date": "2023-10-27", "status": "Final", "postseason": True, "home_team": {"id": 1}},
    ]
    games = parse_games(raw, index)
    assert [g.game_id for g in games] == [11, 12]
    assert (games[0].home_score, games[0].away_score) == (101, 99)
    assert games[1].is_played is False
    assert (games[1].home_idx, games[1].away_idx) == (1, 0)


def test_parse_games_rejects_unknown_team() -> None:
    raw = [{"id": 1, "date": "2023-10-25", "status": "Final", "home_team": {"id": 99}, "visitor_team": {"id": 1}}]
    with pytest.raises(ValueError):
        parse_games(raw, {1: 0})


def test_simulated_season_conserves_records() -> None:
    league = League(_teams())
    games = _schedule(len(league))
    recorded, simulated = simulate_season(league, games, rng=random.Random(5))

    assert (recorded, simulated) == (0, len(games))
    assert sum(t.wins for t in league) == sum(t.losses for t in league) == len(games)
    assert all(t.wins + t.losses == 2 * (len(league) - 1) for t in league)
    assert sum(t.rating for t in league) == pytest.approx(1000.0 * len(league))


def test_season_mixes_recorded_and_simulated_games() -> None:
    league = League(_teams())
    games = _schedule(len(league), played_scores={0: (120, 100), 1: (90, 95)})
    recorded, simulated = simulate_season(league, games, rng=random.Random(9))
    assert recorded == 2
    assert recorded + simulated == len(games)
    assert sum(t.wins for t in league) == len(games)


def test_history_pass_moves_ratings_only() -> None:
    league = League(_teams())
    games = _schedule(4, played_scores={i: (110, 100) for i in range(12)})
    assert process_history(league, games) == 12
    assert all(t.wins == t.losses == 0 for t in league)
    assert league[0].rating != 1000.0


def test_storage_backed_season_and_postseason(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    storage = DuckDBStorage(settings.db_path)
    storage.save_teams("initial", _teams())
    storage.replace_games("history", _schedule(30, played_scores={i: (100, 80 + i % 20) for i in range(200)}))
    storage.replace_games("season", _schedule(30, played_scores={0: (99, 98)}))

    processed = build_processed_league(storage)
    assert storage.load_teams("processed")[0].rating == pytest.approx(processed[0].rating)

    league = run_regular_season(storage, settings, rng=random.Random(1))
    assert sum(t.wins for t in league) == 30 * 29
    assert (settings.gold_dir / "standings.csv").exists()

    after_season = storage.load_teams("after_season")
    _, result = run_postseason(storage, rng=random.Random(2))
    assert result.champion in {t.code for t in after_season}
    # postseason games leave the stored end-of-season snapshot alone
    assert [t.rating for t in storage.load_teams("after_season")] == [t.rating for t in after_season]


def test_run_session_without_api(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    storage = DuckDBStorage(settings.db_path)
    storage.save_teams("initial", _teams())
    storage.replace_games("history", _schedule(30, played_scores={i: (100, 95) for i in range(50)}))
    storage.replace_games("season", _schedule(30))

    lines: list[str] = []
    decisions = ScriptedDecisionSource(team="W01", confirmations=[False, False, True])
    result = run_session(storage, settings, decisions, rng=random.Random(4), output=lines.append)

    assert result.champion
    assert any(line.startswith("Teams by elo") for line in lines)
    assert any("Standings after season" in line for line in lines)
    assert any("Champion: " in line for line in lines)
    game_lines = [line for line in lines if " | exp: " in line]
    assert game_lines and all("W01" in line for line in game_lines)
    assert decisions.confirmations == []
