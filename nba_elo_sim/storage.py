from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import duckdb

from nba_elo_sim.models import Conference, Division, Game, PostseasonResult, Team

TEAM_STAGES = {"initial", "processed", "after_season"}
GAME_KINDS = {"history", "season"}


class DuckDBStorage:
    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> duckdb.DuckDBPyConnection:
        return duckdb.connect(str(self.db_path))

    def _init_schema(self) -> None:
        with self._connect() as con:
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS bronze_teams_raw (
                    fetched_at TIMESTAMP,
                    payload JSON
                );
                """
            )
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS bronze_games_raw (
                    kind VARCHAR,
                    fetched_at TIMESTAMP,
                    payload JSON
                );
                """
            )
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS teams (
                    stage VARCHAR,
                    team_idx INTEGER,
                    code VARCHAR,
                    full_name VARCHAR,
                    conference VARCHAR,
                    division VARCHAR,
                    rating DOUBLE,
                    wins INTEGER,
                    losses INTEGER,
                    updated_at TIMESTAMP,
                    PRIMARY KEY (stage, team_idx)
                );
                """
            )
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS games (
                    kind VARCHAR,
                    game_id BIGINT,
                    game_date TIMESTAMP,
                    home_idx INTEGER,
                    away_idx INTEGER,
                    home_score INTEGER,
                    away_score INTEGER,
                    PRIMARY KEY (kind, game_id)
                );
                """
            )
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS postseason_runs (
                    run_ts TIMESTAMP,
                    champion VARCHAR,
                    west_champion VARCHAR,
                    east_champion VARCHAR
                );
                """
            )
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS postseason_rounds (
                    run_ts TIMESTAMP,
                    conference VARCHAR,
                    stage VARCHAR,
                    label VARCHAR,
                    team_a VARCHAR,
                    team_b VARCHAR,
                    team_a_wins INTEGER,
                    team_b_wins INTEGER
                );
                """
            )

    def insert_bronze_payload(self, table: str, payload: list[dict[str, Any]], kind: str | None = None) -> None:
        fetched_at = datetime.utcnow()
        with self._connect() as con:
            if table == "bronze_teams_raw":
                con.execute(
                    "INSERT INTO bronze_teams_raw(fetched_at, payload) VALUES (?, ?)",
                    [fetched_at, json.dumps(payload)],
                )
            elif table == "bronze_games_raw":
                con.execute(
                    "INSERT INTO bronze_games_raw(kind, fetched_at, payload) VALUES (?, ?, ?)",
                    [kind, fetched_at, json.dumps(payload)],
                )
            else:
                raise ValueError(f"Unsupported bronze table: {table}")

    def has_teams(self, stage: str) -> bool:
        _check(stage, TEAM_STAGES, "team stage")
        with self._connect() as con:
            row = con.execute("SELECT COUNT(*) FROM teams WHERE stage = ?", [stage]).fetchone()
        return bool(row and row[0])

    def save_teams(self, stage: str, teams: list[Team]) -> None:
        _check(stage, TEAM_STAGES, "team stage")
        updated_at = datetime.utcnow()
        with self._connect() as con:
            con.execute("DELETE FROM teams WHERE stage = ?", [stage])
            con.executemany(
                """
                INSERT INTO teams(
                    stage, team_idx, code, full_name, conference, division, rating, wins, losses, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        stage,
                        idx,
                        t.code,
                        t.full_name,
                        t.conference.value,
                        t.division.value,
                        t.rating,
                        t.wins,
                        t.losses,
                        updated_at,
                    )
                    for idx, t in enumerate(teams)
                ],
            )

    def load_teams(self, stage: str) -> list[Team]:
        _check(stage, TEAM_STAGES, "team stage")
        with self._connect() as con:
            rows = con.execute(
                """
                SELECT code, full_name, conference, division, rating, wins, losses
                FROM teams
                WHERE stage = ?
                ORDER BY team_idx
                """,
                [stage],
            ).fetchall()
        if not rows:
            raise RuntimeError(f"No '{stage}' team snapshot stored in {self.db_path}")
        return [
            Team(
                code=r[0],
                full_name=r[1],
                conference=Conference(r[2]),
                division=Division(r[3]),
                rating=r[4],
                wins=r[5],
                losses=r[6],
            )
            for r in rows
        ]

    def has_games(self, kind: str) -> bool:
        _check(kind, GAME_KINDS, "game kind")
        with self._connect() as con:
            row = con.execute("SELECT COUNT(*) FROM games WHERE kind = ?", [kind]).fetchone()
        return bool(row and row[0])

    def replace_games(self, kind: str, games: list[Game]) -> None:
        _check(kind, GAME_KINDS, "game kind")
        with self._connect() as con:
            con.execute("DELETE FROM games WHERE kind = ?", [kind])
            if not games:
                return
            con.executemany(
                """
                INSERT INTO games(kind, game_id, game_date, home_idx, away_idx, home_score, away_score)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (kind, g.game_id, g.game_date, g.home_idx, g.away_idx, g.home_score, g.away_score)
                    for g in games
                ],
            )

    def load_games(self, kind: str) -> list[Game]:
        _check(kind, GAME_KINDS, "game kind")
        with self._connect() as con:
            rows = con.execute(
                """
                SELECT game_id, game_date, home_idx, away_idx, home_score, away_score
                FROM games
                WHERE kind = ?
                ORDER BY game_date, game_id
                """,
                [kind],
            ).fetchall()
        return [
            Game(
                game_id=r[0],
                game_date=r[1],
                home_idx=r[2],
                away_idx=r[3],
                home_score=r[4],
                away_score=r[5],
            )
            for r in rows
        ]

    def write_postseason(self, result: PostseasonResult, run_ts: datetime) -> None:
        with self._connect() as con:
            con.execute(
                """
                INSERT INTO postseason_runs(run_ts, champion, west_champion, east_champion)
                VALUES (?, ?, ?, ?)
                """,
                [run_ts, result.champion, result.west.champion, result.east.champion],
            )
            con.executemany(
                """
                INSERT INTO postseason_rounds(
                    run_ts, conference, stage, label, team_a, team_b, team_a_wins, team_b_wins
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (run_ts, conference, stage, r.label, r.team_a, r.team_b, r.team_a_wins, r.team_b_wins)
                    for conference, stage, r in result.all_rounds()
                ],
            )


def _check(value: str, allowed: set[str], what: str) -> None:
    if value not in allowed:
        raise ValueError(f"Unsupported {what}: {value}")
