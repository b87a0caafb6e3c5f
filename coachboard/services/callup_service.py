"""
Call-up registry: which roster players are available for a match.

The size of the call-up list gates every lineup mutation; shrinking it
below the minimum keeps existing assignments but blocks new ones.
"""
import logging
from typing import Iterable, List, Optional

from .lineup_validator import LineupValidationService
from .match_commands import MatchCommandManager, SetCallUpsCommand
from .roster_service import RosterProvider

logger = logging.getLogger(__name__)


class CallUpRegistry:
    """Maintains the call-up list of each match."""

    def __init__(self, command_manager: MatchCommandManager,
                 roster_provider: Optional[RosterProvider] = None,
                 validator: Optional[LineupValidationService] = None):
        self.command_manager = command_manager
        self.roster_provider = roster_provider
        self.validator = validator or LineupValidationService()

    def set_call_ups(self, match_id: int, player_ids: Iterable[int]) -> List[int]:
        """
        Replace the call-up list of a match.

        Args:
            match_id: Match to update
            player_ids: Ids of the players called up

        Returns:
            Sorted ids now called up

        Raises:
            LineupValidationError: If an id is malformed or not on the team roster
            NotFoundError: If the match is unknown
            PersistenceError: If the write fails
        """
        player_ids = list(player_ids)
        roster_ids = None
        if self.roster_provider is not None:
            team_id = self.command_manager.view(match_id).match.team_id
            roster_ids = {
                player.player_id for player in self.roster_provider.players_for_team(team_id)
            }
        command = SetCallUpsCommand(match_id, player_ids, roster_ids, self.validator)
        called_up = self.command_manager.execute_command(command)
        if len(called_up) < self.validator.gate_validator.min_call_ups:
            logger.info(
                "Match %s has %d call-ups; lineup edits are blocked",
                match_id, len(called_up),
            )
        return sorted(called_up)

    def list_call_ups(self, match_id: int) -> List[int]:
        return sorted(self.command_manager.view(match_id).call_ups)

    def is_complete(self, match_id: int) -> bool:
        """True when enough players are called up to edit the lineup."""
        sheet = self.command_manager.view(match_id)
        return self.validator.gate_validator.validate(sheet).is_valid
