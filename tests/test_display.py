import random

from nba_elo_sim.bracket import simulate_postseason
from nba_elo_sim.display import format_bracket, format_game_event, format_standings, standings_frame
from nba_elo_sim.models import Conference, Division, GameEvent, Team


def _teams() -> list[Team]:
    out = []
    for conference, prefix in ((Conference.WEST, "W"), (Conference.EAST, "E")):
        for i in range(15):
            out.append(
                Team(
                    code=f"{prefix}{i:02d}",
                    full_name=f"{conference.value} {i}",
                    conference=conference,
                    division=Division.PACIFIC if prefix == "W" else Division.CENTRAL,
                    rating=1000.0 - i,
                    wins=60 - i,
                    losses=22 + i,
                )
            )
    return out


def test_game_event_line_shows_ratings_and_change() -> None:
    event = GameEvent(
        label="2023-10-24",
        home="LAL",
        away="DEN",
        home_won=False,
        expected=0.4821,
        home_before=1010.0,
        home_after=994.57,
        away_before=990.0,
        away_after=1005.43,
        delta=-15.43,
        home_score=107,
        away_score=119,
    )
    line = format_game_event(event)
    assert line.startswith("2023-10-24")
    assert "LAL 107 - 119 DEN" in line
    assert "exp: 48%" in line
    assert "1010.00 ->  994.57 (-15.43)" in line
    assert "(+15.43)" in line


def test_standings_table_lists_both_conferences() -> None:
    teams = _teams()
    text = format_standings(teams[:15], teams[15:])
    assert "West Conference" in text and "East Conference" in text
    assert " 1. West 0" in text and "60-22" in text


def test_standings_frame_orders_west_then_fewest_losses() -> None:
    df = standings_frame(list(reversed(_teams())))
    assert list(df["code"][:3]) == ["W00", "W01", "W02"]
    assert df.iloc[15]["code"] == "E00"


def test_bracket_renders_every_round() -> None:
    result = simulate_postseason(_teams(), rng=random.Random(3))
    text = format_bracket(result)

    assert f"Champion: {result.champion}" in text
    for _, _, r in result.all_rounds():
        assert f"{r.team_a} {r.team_a_wins}-{r.team_b_wins} {r.team_b}" in text
    for line in text.splitlines():
        if "│" in line:
            assert line.index("│") == 29
