"""
Substitution coordinator.

A substitution links a field player with a bench player in one quarter.
Both get HALF credit and share one field slot, so forming or reversing a
pair never changes the quarter's slot usage.
"""
from typing import List, Optional

from ..models import Substitution
from .lineup_validator import LineupValidationService
from .match_commands import (
    ApplySubstitutionCommand, MatchCommandManager, RemoveSubstitutionCommand
)


class SubstitutionCoordinator:
    """Forms and reverses substitution pairs."""

    def __init__(self, command_manager: MatchCommandManager,
                 validator: Optional[LineupValidationService] = None):
        self.command_manager = command_manager
        self.validator = validator or LineupValidationService()

    def apply(self, match_id: int, quarter: int, player_out: int, player_in: int) -> Substitution:
        """
        Pair ``player_out`` (on the field) with ``player_in`` (on the bench).

        Raises:
            IncompleteCallUpError: Fewer than seven players are called up
            InvalidSubstitutionPairError: Same side, self pair, or already paired
            LineupValidationError: Bad quarter or player not called up
            PersistenceError: The write failed
        """
        command = ApplySubstitutionCommand(
            match_id, quarter, player_out, player_in, self.validator
        )
        return self.command_manager.execute_command(command)

    def remove(self, match_id: int, quarter: int, player_out: int, player_in: int) -> Substitution:
        """
        Reverse an active pair.

        The outgoing player gets FULL back and the incoming player returns to
        the fraction held before the pair was formed.

        Raises:
            NotFoundError: No such active pair
            IncompleteCallUpError: Fewer than seven players are called up
            PersistenceError: The write failed
        """
        command = RemoveSubstitutionCommand(
            match_id, quarter, player_out, player_in, self.validator
        )
        return self.command_manager.execute_command(command)

    def list(self, match_id: int, quarter: Optional[int] = None) -> List[Substitution]:
        if quarter is not None:
            self.validator.quarter_validator.validate(quarter).raise_if_invalid()
        return self.command_manager.view(match_id).active_pairs(quarter)
