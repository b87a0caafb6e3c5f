"""
Quarter assignment ledger.

Records each called-up player's fraction (NONE / HALF / FULL) per quarter
and derives periods played from it.
"""
from typing import Dict, Optional, Union

from ..models import FieldOccupancy, Fraction
from ..utils import QUARTERS
from .errors import LineupValidationError
from .lineup_validator import LineupValidationService
from .match_commands import AssignFractionCommand, MatchCommandManager


class QuarterAssignmentLedger:
    """Direct per-quarter fraction assignments of a match."""

    def __init__(self, command_manager: MatchCommandManager,
                 validator: Optional[LineupValidationService] = None):
        self.command_manager = command_manager
        self.validator = validator or LineupValidationService()

    def assign(self, match_id: int, player_id: int, quarter: int,
               fraction: Union[Fraction, str, None]) -> Fraction:
        """
        Set a player's fraction for a quarter.

        Assigning the fraction the player already holds changes nothing.

        Args:
            match_id: Match to update
            player_id: Called-up player
            quarter: Quarter 1-4
            fraction: Fraction member or its name

        Returns:
            The fraction now stored

        Raises:
            IncompleteCallUpError: Fewer than seven players are called up
            CapacityError: The quarter has no free field slot
            InvalidSubstitutionPairError: The player is part of an active pair
            LineupValidationError: Bad quarter, fraction or player
            PersistenceError: The write failed
        """
        try:
            fraction = Fraction.parse(fraction)
        except ValueError as exc:
            raise LineupValidationError(str(exc)) from exc
        command = AssignFractionCommand(match_id, player_id, quarter, fraction, self.validator)
        return self.command_manager.execute_command(command)

    def get(self, match_id: int, quarter: int) -> Dict[int, Fraction]:
        """Fraction of every called-up player in a quarter."""
        self.validator.quarter_validator.validate(quarter).raise_if_invalid()
        return self.command_manager.view(match_id).quarter_fractions(quarter)

    def periods_played(self, match_id: int, player_id: int) -> float:
        return self.command_manager.view(match_id).periods_played(player_id)

    def periods_played_by_player(self, match_id: int) -> Dict[int, float]:
        sheet = self.command_manager.view(match_id)
        players = set(sheet.call_ups) | {player_id for player_id, _ in sheet.assignments}
        return {player_id: sheet.periods_played(player_id) for player_id in sorted(players)}

    def field_occupancy(self, match_id: int, quarter: int) -> FieldOccupancy:
        """Field/bench partition of a quarter."""
        self.validator.quarter_validator.validate(quarter).raise_if_invalid()
        return self.command_manager.view(match_id).field_occupancy(quarter)

    def occupancy_by_quarter(self, match_id: int) -> Dict[int, FieldOccupancy]:
        sheet = self.command_manager.view(match_id)
        return {quarter: sheet.field_occupancy(quarter) for quarter in QUARTERS}
