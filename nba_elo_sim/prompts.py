from __future__ import annotations

from collections.abc import Callable, Collection
from typing import Protocol

from nba_elo_sim.game import ALL_TEAMS


class DecisionSource(Protocol):
    def choose_team(self, codes: Collection[str]) -> str: ...

    def confirm(self, question: str) -> bool: ...


class ConsoleDecisionSource:
    """Asks on the terminal; ``read``/``write`` can be swapped for tests."""

    def __init__(
        self,
        read: Callable[[], str] = input,
        write: Callable[[str], None] = print,
    ) -> None:
        self.read = read
        self.write = write

    def choose_team(self, codes: Collection[str]) -> str:
        self.write(
            "Enter the abbreviation of a team to print its games "
            f"('{ALL_TEAMS}' for every game, empty for none)"
        )
        while True:
            answer = self.read().strip().upper()
            if answer in ("", ALL_TEAMS) or answer in codes:
                return answer
            self.write("Didn't find a team with this abbreviation, try again")

    def confirm(self, question: str) -> bool:
        self.write(f"{question} (y/n)")
        while True:
            answer = self.read().strip()[:1].lower()
            if answer == "y":
                return True
            if answer == "n":
                return False
            self.write("Try again")


class ScriptedDecisionSource:
    """Replays fixed answers; used for unattended runs."""

    def __init__(self, team: str = "", confirmations: list[bool] | None = None) -> None:
        self.team = team
        self.confirmations = list(confirmations or [])

    def choose_team(self, codes: Collection[str]) -> str:
        return self.team

    def confirm(self, question: str) -> bool:
        if not self.confirmations:
            raise RuntimeError(f"No scripted answer left for: {question}")
        return self.confirmations.pop(0)
