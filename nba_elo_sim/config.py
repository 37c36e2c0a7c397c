from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_HISTORY_SEASONS = "2018,2019,2020,2021,2022"


def _parse_seasons(raw: str) -> tuple[int, ...]:
    return tuple(int(part) for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    project_root: Path
    data_dir: Path
    bronze_dir: Path
    gold_dir: Path
    db_path: Path
    api_base_url: str
    history_seasons: tuple[int, ...]
    season: int
    min_request_interval_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        project_root = Path(__file__).resolve().parent.parent
        data_dir = Path(os.getenv("NBA_ELO_DATA_DIR", str(project_root / "data")))
        season_raw = os.getenv("SEASON", "").strip()
        return Settings(
            project_root=project_root,
            data_dir=data_dir,
            bronze_dir=data_dir / "bronze",
            gold_dir=data_dir / "gold",
            db_path=data_dir / "nba_elo.duckdb",
            api_base_url=os.getenv("BALLDONTLIE_BASE_URL", "https://api.balldontlie.io/v1"),
            history_seasons=_parse_seasons(os.getenv("HISTORY_SEASONS", DEFAULT_HISTORY_SEASONS)),
            season=int(season_raw) if season_raw else infer_season(),
            min_request_interval_seconds=float(os.getenv("BDL_MIN_REQUEST_INTERVAL_SECONDS", "12.5")),
        )


def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def load_settings() -> Settings:
    settings = Settings.from_env()
    load_dotenv(dotenv_path=settings.project_root / ".env", override=False)
    load_dotenv(override=False)
    settings = Settings.from_env()
    settings.bronze_dir.mkdir(parents=True, exist_ok=True)
    settings.gold_dir.mkdir(parents=True, exist_ok=True)
    return settings


def infer_season(today: datetime | None = None) -> int:
    """BALLDONTLIE labels a season by the year it starts in."""
    now = today or datetime.utcnow()
    return now.year if now.month >= 10 else now.year - 1
