"""
Quarter outcome ledger: goal events and opponent goals per quarter.

Team goals are never stored; they are the number of goal events recorded
for the quarter.
"""
from typing import List, Optional

from ..models import GoalEvent, MatchScore, QuarterResult
from ..utils import QUARTERS
from .lineup_validator import LineupValidationService
from .match_commands import (
    AddGoalCommand, MatchCommandManager, RemoveGoalCommand, SetOpponentGoalsCommand
)


class QuarterOutcomeLedger:
    """Records what happened in each quarter of a match."""

    def __init__(self, command_manager: MatchCommandManager,
                 validator: Optional[LineupValidationService] = None):
        self.command_manager = command_manager
        self.validator = validator or LineupValidationService()

    def add_goal(self, match_id: int, quarter: int, scorer_id: int,
                 assister_id: Optional[int] = None) -> GoalEvent:
        """
        Record a goal for the team.

        Raises:
            LineupValidationError: Bad quarter, participant not called up,
                or the scorer assisting themselves
            PersistenceError: The write failed
        """
        command = AddGoalCommand(match_id, quarter, scorer_id, assister_id, self.validator)
        return self.command_manager.execute_command(command)

    def remove_goal(self, goal_id: str) -> GoalEvent:
        """
        Delete a goal event.

        Raises:
            NotFoundError: No match holds a goal with this id
        """
        match_id = self.command_manager.repository.find_match_for_goal(goal_id)
        return self.command_manager.execute_command(
            RemoveGoalCommand(match_id, goal_id, self.validator)
        )

    def set_opponent_goals(self, match_id: int, quarter: int, count: int) -> int:
        return self.command_manager.execute_command(
            SetOpponentGoalsCommand(match_id, quarter, count, self.validator)
        )

    def team_goals(self, match_id: int, quarter: int) -> int:
        self.validator.quarter_validator.validate(quarter).raise_if_invalid()
        return self.command_manager.view(match_id).team_goals(quarter)

    def list_goals(self, match_id: int, quarter: Optional[int] = None) -> List[GoalEvent]:
        """Goal events in the order they were recorded."""
        if quarter is not None:
            self.validator.quarter_validator.validate(quarter).raise_if_invalid()
        return self.command_manager.view(match_id).goals_in(quarter)

    def quarter_results(self, match_id: int) -> List[QuarterResult]:
        sheet = self.command_manager.view(match_id)
        return [sheet.quarter_result(quarter) for quarter in QUARTERS]

    def totals(self, match_id: int) -> MatchScore:
        """Final score summed over the four quarters."""
        return self.command_manager.view(match_id).score()
