"""
Roster provider interface.

Rosters are owned by the team management screens; the lineup engine only
needs to know which players belong to a team and how to display them.
"""
from typing import Dict, Iterable, List, Optional, Protocol

from ..models import Player


class RosterProvider(Protocol):
    """Read-only access to team rosters."""

    def players_for_team(self, team_id: int) -> List[Player]:
        """Players on the team's roster."""
        ...

    def get_player(self, player_id: int) -> Optional[Player]:
        """Look up a single player, None when unknown."""
        ...


class InMemoryRosterProvider:
    """Roster provider backed by a list of players."""

    def __init__(self, players: Optional[Iterable[Player]] = None):
        self._players: Dict[int, Player] = {}
        for player in players or []:
            self.add_player(player)

    def add_player(self, player: Player) -> None:
        self._players[player.player_id] = player

    def players_for_team(self, team_id: int) -> List[Player]:
        return sorted(
            (player for player in self._players.values() if player.team_id == team_id),
            key=lambda player: (player.jersey_number is None, player.jersey_number, player.full_name),
        )

    def get_player(self, player_id: int) -> Optional[Player]:
        return self._players.get(player_id)
