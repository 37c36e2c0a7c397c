from __future__ import annotations

from collections.abc import Iterator

from nba_elo_sim.models import Conference, Game, Team


class League:
    """Owns every Team for one simulation pass.

    Games address teams by index; series and brackets hold the Team objects
    themselves, so every rating change lands on the same record.
    """

    def __init__(self, teams: list[Team]) -> None:
        self.teams = teams
        self._by_code = {t.code: t for t in teams}
        if len(self._by_code) != len(teams):
            raise ValueError("Team codes must be unique")

    def __len__(self) -> int:
        return len(self.teams)

    def __iter__(self) -> Iterator[Team]:
        return iter(self.teams)

    def __getitem__(self, idx: int) -> Team:
        if not 0 <= idx < len(self.teams):
            raise ValueError(f"Team index {idx} out of range (league has {len(self.teams)} teams)")
        return self.teams[idx]

    def by_code(self, code: str) -> Team:
        try:
            return self._by_code[code]
        except KeyError:
            raise ValueError(f"Unknown team code: {code}") from None

    @property
    def codes(self) -> set[str]:
        return set(self._by_code)

    def teams_for(self, game: Game) -> tuple[Team, Team]:
        return self[game.home_idx], self[game.away_idx]

    def reset_records(self) -> None:
        for team in self.teams:
            team.wins = 0
            team.losses = 0

    def standings(self) -> dict[Conference, list[Team]]:
        # sorted() is stable, so equal records keep league order
        ordered = sorted(self.teams, key=lambda t: t.losses)
        return {
            conference: [t for t in ordered if t.conference == conference]
            for conference in (Conference.WEST, Conference.EAST)
        }
