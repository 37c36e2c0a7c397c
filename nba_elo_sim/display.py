from __future__ import annotations

from string import Template

import pandas as pd

from nba_elo_sim.models import ConferenceResult, GameEvent, GameResult, PostseasonResult, RoundResult, Team

_BRANCH = " ─┐"
_JOIN = " ─┘"

# Each placeholder takes one "AAA 4-2 BBB" matchup (11 columns).
_CONFERENCE_TEMPLATE = Template(
    "\n".join(
        [
            "$conference conference",
            "play-in: $play_in_1 | $play_in_2 | $play_in_3",
            "",
            "$r1_0" + _BRANCH,
            " " * 13 + "├─ $semi_0" + _BRANCH,
            "$r1_3" + _JOIN + " " * 15 + "│",
            " " * 29 + "├─ $final ─> $champion",
            "$r1_1" + _BRANCH + " " * 15 + "│",
            " " * 13 + "├─ $semi_1" + _JOIN,
            "$r1_2" + _JOIN,
        ]
    )
)

_FINALS_TEMPLATE = Template("Finals: $finals\nChampion: $champion")


def standings_frame(teams: list[Team]) -> pd.DataFrame:
    rows = [
        {
            "code": t.code,
            "full_name": t.full_name,
            "conference": t.conference.value,
            "division": t.division.value,
            "wins": t.wins,
            "losses": t.losses,
            "win_pct": round(t.win_pct, 3),
            "rating": round(t.rating, 2),
        }
        for t in teams
    ]
    df = pd.DataFrame(
        rows,
        columns=["code", "full_name", "conference", "division", "wins", "losses", "win_pct", "rating"],
    )
    # mergesort keeps league order among equal records
    return df.sort_values(["conference", "losses"], ascending=[False, True], kind="mergesort").reset_index(
        drop=True
    )


def ratings_frame(teams: list[Team]) -> pd.DataFrame:
    df = standings_frame(teams).sort_values("rating", ascending=False, kind="mergesort")
    df.insert(0, "rank", range(1, len(df) + 1))
    return df.reset_index(drop=True)


def format_ratings(teams: list[Team], title: str) -> str:
    ordered = sorted(teams, key=lambda t: t.rating, reverse=True)
    half = (len(ordered) + 1) // 2
    better, worse = ordered[:half], ordered[half:]
    lines = [title, ""]
    for i, top in enumerate(better):
        line = f"{i + 1:>2}. {top.full_name:<23} elo: {top.rating:>7.2f}"
        if i < len(worse):
            low = worse[i]
            line += f" | {i + half + 1:>2}. {low.full_name:<23} elo: {low.rating:>7.2f}"
        lines.append(line)
    return "\n".join(lines)


def _standing_cell(place: int, team: Team) -> str:
    return f"{place:>2}. {team.full_name:23} {team.wins:>2}-{team.losses:<2} elo: {team.rating:>7.2f}"


def format_standings(west: list[Team], east: list[Team]) -> str:
    width = len(_standing_cell(1, west[0])) if west else 47
    lines = ["Standings after season:", "", f"{'West Conference':<{width}} | East Conference"]
    for i in range(max(len(west), len(east))):
        left = _standing_cell(i + 1, west[i]) if i < len(west) else ""
        right = _standing_cell(i + 1, east[i]) if i < len(east) else ""
        lines.append(f"{left:<{width}} | {right}")
    return "\n".join(lines)


def format_game_event(event: GameEvent) -> str:
    if event.home_score is not None and event.away_score is not None:
        score = f"{event.home_score:>3} - {event.away_score:<3}"
    else:
        score = "W - L" if event.home_won else "L - W"
    return (
        f"{event.label:<35}: {event.home} {score} {event.away} | exp: {int(event.expected * 100):>2}% | "
        f"{event.home_before:>7.2f} -> {event.home_after:>7.2f} ({event.delta:+06.2f}), "
        f"{event.away_before:>7.2f} -> {event.away_after:>7.2f} ({-event.delta:+06.2f})"
    )


def _code(code: str) -> str:
    return code[:3].ljust(3)


def _series_cell(result: RoundResult) -> str:
    return f"{_code(result.team_a)} {result.team_a_wins}-{result.team_b_wins} {_code(result.team_b)}"


def _game_cell(result: GameResult) -> str:
    score = "W-L" if result.home_won else "L-W"
    return f"{_code(result.home)} {score} {_code(result.away)}"


def format_conference(result: ConferenceResult) -> str:
    values = {
        "conference": result.conference,
        "final": _series_cell(result.finals),
        "champion": result.champion,
    }
    values.update({f"play_in_{i + 1}": _game_cell(g) for i, g in enumerate(result.play_in)})
    values.update({f"r1_{i}": _series_cell(r) for i, r in enumerate(result.round_1)})
    values.update({f"semi_{i}": _series_cell(r) for i, r in enumerate(result.semifinals)})
    return _CONFERENCE_TEMPLATE.substitute(values)


def format_bracket(result: PostseasonResult) -> str:
    return "\n\n".join(
        [
            format_conference(result.west),
            format_conference(result.east),
            _FINALS_TEMPLATE.substitute(finals=_series_cell(result.finals), champion=result.champion),
        ]
    )
