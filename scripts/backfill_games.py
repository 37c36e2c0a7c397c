from __future__ import annotations

import argparse
import sys

from nba_elo_sim.api import BallDontLieClient
from nba_elo_sim.config import configure_logging, load_settings
from nba_elo_sim.pipeline import backfill, build_processed_league
from nba_elo_sim.storage import DuckDBStorage


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch NBA teams and games and replay the historical seasons")
    parser.add_argument("--refresh-season", action="store_true", help="Download the current season again")
    return parser.parse_args()


def main() -> int:
    configure_logging()
    settings = load_settings()
    args = parse_args()

    try:
        client = BallDontLieClient(
            base_url=settings.api_base_url,
            min_request_interval_seconds=settings.min_request_interval_seconds,
        )
        storage = DuckDBStorage(db_path=settings.db_path)
        backfill(client=client, storage=storage, settings=settings, refresh_season=args.refresh_season)
        build_processed_league(storage)
    except Exception as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
