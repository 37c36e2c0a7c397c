from __future__ import annotations

import argparse
import random
import sys

from nba_elo_sim.api import BallDontLieClient
from nba_elo_sim.config import configure_logging, load_settings
from nba_elo_sim.pipeline import run_session
from nba_elo_sim.prompts import ConsoleDecisionSource
from nba_elo_sim.storage import DuckDBStorage


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate the NBA season and postseason with Elo ratings")
    parser.add_argument("--offline", action="store_true", help="Use stored data only, skip the API")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed (default: a fresh draw every run)")
    return parser.parse_args()


def main() -> int:
    configure_logging()
    settings = load_settings()
    args = parse_args()

    try:
        client = None
        if not args.offline:
            client = BallDontLieClient(
                base_url=settings.api_base_url,
                min_request_interval_seconds=settings.min_request_interval_seconds,
            )
        storage = DuckDBStorage(db_path=settings.db_path)
        rng = random.Random(args.seed) if args.seed is not None else None
        run_session(
            storage=storage,
            settings=settings,
            decisions=ConsoleDecisionSource(),
            client=client,
            rng=rng,
        )
    except Exception as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
