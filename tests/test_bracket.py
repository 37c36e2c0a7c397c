import random

import pytest

from nba_elo_sim.bracket import ConferenceBracket, _play_round, partition, simulate_postseason
from nba_elo_sim.models import Conference, Division, Team


class FixedDraws:
    def __init__(self, *draws: float) -> None:
        self.draws = list(draws)

    def random(self) -> float:
        return self.draws.pop(0)


def _conference(prefix: str, conference: Conference, size: int = 15) -> list[Team]:
    division = Division.PACIFIC if conference == Conference.WEST else Division.ATLANTIC
    return [
        Team(
            code=f"{prefix}{seed:02d}",
            full_name=f"{conference.value} {seed}",
            conference=conference,
            division=division,
            rating=1000.0 + 10 * (size - seed),
            wins=82 - (20 + seed),
            losses=20 + seed,
        )
        for seed in range(1, size + 1)
    ]


def _league() -> list[Team]:
    # interleave so partition has to do the sorting
    west = _conference("W", Conference.WEST)
    east = _conference("E", Conference.EAST)
    return [t for pair in zip(reversed(west), east) for t in pair]


def test_partition_orders_each_conference_by_losses() -> None:
    west, east = partition(_league())
    assert [t.code for t in west] == [f"W{s:02d}" for s in range(1, 16)]
    assert [t.code for t in east] == [f"E{s:02d}" for s in range(1, 16)]


def test_play_in_forced_outcomes() -> None:
    teams = [t for t in _conference("E", Conference.EAST, size=10)]
    for team in teams:
        team.rating = 1000.0
    by_code = {t.code: t for t in teams}
    bracket = ConferenceBracket("East", teams)

    # game 1: 7 beats 8, game 2: 10 beats 9, game 3: 8 (home) beats 10
    field, (game_1, game_2, game_3) = bracket.simulate_play_in(rng=FixedDraws(0.0, 0.99, 0.0))

    assert field[6] is by_code["E07"]
    assert field[7] is by_code["E08"]
    assert [t.code for t in field[:6]] == [f"E{s:02d}" for s in range(1, 7)]
    assert by_code["E09"] not in field and by_code["E10"] not in field

    assert (game_1.home, game_1.away, game_1.winner) == ("E07", "E08", "E07")
    assert (game_2.home, game_2.away, game_2.winner) == ("E09", "E10", "E10")
    assert (game_3.home, game_3.away, game_3.winner) == ("E08", "E10", "E08")
    assert game_3.label == "East play-in game 3"


def test_play_in_does_not_touch_records() -> None:
    teams = _conference("W", Conference.WEST, size=10)
    before = [(t.wins, t.losses) for t in teams]
    ConferenceBracket("West", teams).simulate_play_in(rng=random.Random(1))
    assert [(t.wins, t.losses) for t in teams] == before


def test_conference_bracket_shape() -> None:
    teams = _conference("W", Conference.WEST)
    champion, result = ConferenceBracket("West", teams).simulate(rng=random.Random(11))

    seeds_7_to_10 = {"W07", "W08", "W09", "W10"}
    round_1_teams = {c for r in result.round_1 for c in (r.team_a, r.team_b)}
    assert len(round_1_teams) == 8
    assert {f"W{s:02d}" for s in range(1, 7)} <= round_1_teams
    assert len(seeds_7_to_10 - round_1_teams) == 2
    assert not round_1_teams & {f"W{s:02d}" for s in range(11, 16)}

    assert [r.team_a for r in result.round_1][:3] == ["W01", "W02", "W03"]
    assert result.round_1[3].team_a == "W04" and result.round_1[3].team_b == "W05"
    assert result.round_1[2].team_b == "W06"

    winners = [r.winner for r in result.round_1]
    assert (result.semifinals[0].team_a, result.semifinals[0].team_b) == (winners[0], winners[3])
    assert (result.semifinals[1].team_a, result.semifinals[1].team_b) == (winners[1], winners[2])
    assert (result.finals.team_a, result.finals.team_b) == tuple(r.winner for r in result.semifinals)
    assert result.champion == result.finals.winner == champion.code

    for r in (*result.round_1, *result.semifinals, result.finals):
        assert max(r.team_a_wins, r.team_b_wins) == 4
    assert result.round_1[0].label == "West round 1 (1 vs 8)"
    assert result.semifinals[1].label == "West semifinals (2/7 vs 3/6)"


def test_bracket_needs_ten_teams() -> None:
    with pytest.raises(ValueError):
        ConferenceBracket("East", _conference("E", Conference.EAST, size=9))


def test_odd_round_is_a_logic_error() -> None:
    teams = _conference("E", Conference.EAST, size=3)
    with pytest.raises(RuntimeError):
        _play_round(["a"], teams, random.Random(0), reporter=None)


def test_postseason_produces_one_champion_and_conserves_rating_mass() -> None:
    teams = _league()
    total = sum(t.rating for t in teams)
    records = {t.code: (t.wins, t.losses) for t in teams}

    result = simulate_postseason(teams, rng=random.Random(7))

    assert result.west.champion.startswith("W")
    assert result.east.champion.startswith("E")
    assert (result.finals.team_a, result.finals.team_b) == (result.west.champion, result.east.champion)
    assert result.champion == result.finals.winner
    assert len(result.all_rounds()) == 15
    assert sum(t.rating for t in teams) == pytest.approx(total)
    assert {t.code: (t.wins, t.losses) for t in teams} == records


def test_unseeded_runs_use_fresh_draws() -> None:
    champions = {simulate_postseason(_league()).champion for _ in range(40)}
    assert len(champions) > 1
