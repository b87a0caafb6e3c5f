"""Shared builders for the Coachboard test suite."""
from datetime import date

from coachboard.models import Match, Player
from coachboard.services import (
    InMemoryMatchRepository, InMemoryRosterProvider, PersistenceError,
    ServiceFactory
)

TEAM_ID = 10
MATCH_ID = 1

ROSTER = [
    Player(player_id=pid, full_name=f"Player {pid:02d}", team_id=TEAM_ID, jersey_number=pid)
    for pid in range(1, 13)
] + [Player(player_id=99, full_name="Other Team", team_id=20, jersey_number=9)]


class FailingRepository(InMemoryMatchRepository):
    """In-memory repository whose writes can be switched to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False

    def _write(self, sheet) -> None:
        if self.fail_writes:
            raise PersistenceError("disk unavailable")
        super()._write(sheet)


def make_match(match_id: int = MATCH_ID, opponent: str = "Rovers") -> Match:
    return Match(
        match_id=match_id,
        team_id=TEAM_ID,
        match_date=date(2024, 9, 14),
        opponent=opponent,
        location="Home",
    )


def build_suite(call_ups=range(1, 10), repository=None, match_id: int = MATCH_ID) -> dict:
    """
    Services sharing one repository, with one registered match.

    Players 1-12 are on the roster; ``call_ups`` (default 1-9) are called up.
    """
    factory = ServiceFactory(repository or InMemoryMatchRepository(), InMemoryRosterProvider(ROSTER))
    suite = factory.create_complete_service_suite()
    suite['repository'].add_match(make_match(match_id))
    if call_ups:
        suite['call_ups'].set_call_ups(match_id, list(call_ups))
    suite['commands'].clear_history()
    return suite


def fill_quarter(suite: dict, quarter: int, players, match_id: int = MATCH_ID) -> None:
    for player_id in players:
        suite['assignments'].assign(match_id, player_id, quarter, "FULL")
