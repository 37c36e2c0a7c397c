from __future__ import annotations

from pathlib import Path

import duckdb
import pandas as pd
import streamlit as st

PROJECT_ROOT = Path(__file__).resolve().parent
DB_PATH = PROJECT_ROOT / "data" / "nba_elo.duckdb"


@st.cache_data(ttl=300)
def load_data() -> tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame]:
    with duckdb.connect(str(DB_PATH), read_only=True) as con:
        teams = con.execute(
            """
            SELECT code, full_name, conference, division, wins, losses, rating
            FROM teams
            WHERE stage = 'after_season'
            ORDER BY conference DESC, losses, team_idx
            """
        ).fetch_df()
        runs = con.execute("SELECT * FROM postseason_runs ORDER BY run_ts DESC LIMIT 1").fetch_df()
        if runs.empty:
            return teams, runs, pd.DataFrame()

        rounds = con.execute(
            """
            SELECT conference, stage, label, team_a, team_b, team_a_wins, team_b_wins
            FROM postseason_rounds
            WHERE run_ts = ?
            """,
            [runs.iloc[0]["run_ts"]],
        ).fetch_df()
    return teams, runs, rounds


def main() -> None:
    st.set_page_config(page_title="NBA Elo Simulator", layout="wide")
    st.title("NBA Elo Season & Postseason Simulator")

    if not DB_PATH.exists():
        st.warning("DuckDB file not found. Run scripts/run_simulation.py first.")
        return

    teams, runs, rounds = load_data()
    if teams.empty:
        st.warning("No simulated season found. Run scripts/run_simulation.py first.")
        return

    st.subheader("Elo Ratings")
    st.bar_chart(teams.sort_values("rating", ascending=False).set_index("code")["rating"])

    st.subheader("Standings")
    left, right = st.columns(2)
    left.dataframe(teams[teams["conference"] == "West"], hide_index=True)
    right.dataframe(teams[teams["conference"] == "East"], hide_index=True)

    if runs.empty:
        st.info("No postseason simulated yet.")
        return

    st.subheader(f"Latest Postseason (champion: {runs.iloc[0]['champion']})")
    rounds_out = rounds.copy()
    rounds_out["series"] = (
        rounds_out["team_a"]
        + " "
        + rounds_out["team_a_wins"].astype(str)
        + "-"
        + rounds_out["team_b_wins"].astype(str)
        + " "
        + rounds_out["team_b"]
    )
    st.dataframe(rounds_out[["conference", "stage", "label", "series"]], hide_index=True)


if __name__ == "__main__":
    main()
