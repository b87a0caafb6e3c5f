"""
Command pattern implementation for match sheet mutations.

Every change to a match (call-ups, fractions, substitutions, goals, opponent
goals) is a command. The manager runs a command against a private copy of
the authoritative sheet, commits the copy as one versioned write, and only
then publishes it as the known-good view. A rejected or failed command
leaves both the store and the view untouched. Committed commands can be
undone and redone.
"""
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set

from ..models import Fraction, GoalEvent, MatchSheet, Substitution
from ..utils import DEFAULT_HISTORY_SIZE, now_ts
from .errors import LineupError, NotFoundError, StaleWriteError
from .lineup_validator import LineupValidationService
from .persistence_service import MatchRepository

logger = logging.getLogger(__name__)


class MatchCommand(ABC):
    """Abstract base class for all match commands."""

    def __init__(self, match_id: int, validator: Optional[LineupValidationService] = None):
        self.match_id = match_id
        self.validator = validator or LineupValidationService()

    @abstractmethod
    def apply(self, sheet: MatchSheet) -> Any:
        """
        Validate and apply the command to a working copy of the sheet.

        Args:
            sheet: Private copy of the match sheet; mutated in place

        Returns:
            The command's result value

        Raises:
            LineupError: If the command is not valid for the sheet
        """
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Get human-readable description of the command."""
        pass


class SetCallUpsCommand(MatchCommand):
    """Replace the call-up list of a match."""

    def __init__(self, match_id: int, player_ids: Iterable[int],
                 roster_ids: Optional[Set[int]] = None,
                 validator: Optional[LineupValidationService] = None):
        super().__init__(match_id, validator)
        self.player_ids = list(player_ids)
        self.roster_ids = roster_ids

    def apply(self, sheet: MatchSheet) -> Set[int]:
        self.validator.validate_call_ups(self.player_ids, self.roster_ids).raise_if_invalid()
        # Existing assignments are kept even when the list shrinks below the gate
        sheet.call_ups = set(self.player_ids)
        return set(sheet.call_ups)

    @property
    def description(self) -> str:
        return f"Call up {len(set(self.player_ids))} players for match {self.match_id}"


class AssignFractionCommand(MatchCommand):
    """Set a player's fraction for a quarter directly (drag to field / bench)."""

    def __init__(self, match_id: int, player_id: int, quarter: int, fraction: Fraction,
                 validator: Optional[LineupValidationService] = None):
        super().__init__(match_id, validator)
        self.player_id = player_id
        self.quarter = quarter
        self.fraction = fraction

    def apply(self, sheet: MatchSheet) -> Fraction:
        self.validator.validate_assignment(
            sheet, self.player_id, self.quarter, self.fraction
        ).raise_if_invalid()
        sheet.set_fraction(self.player_id, self.quarter, self.fraction)
        return self.fraction

    @property
    def description(self) -> str:
        return f"Q{self.quarter}: player {self.player_id} -> {self.fraction.value}"


class ApplySubstitutionCommand(MatchCommand):
    """Link a field player and a bench player as a Half/Half pair."""

    def __init__(self, match_id: int, quarter: int, player_out: int, player_in: int,
                 validator: Optional[LineupValidationService] = None):
        super().__init__(match_id, validator)
        self.quarter = quarter
        self.player_out = player_out
        self.player_in = player_in

    def apply(self, sheet: MatchSheet) -> Substitution:
        self.validator.validate_substitution(
            sheet, self.quarter, self.player_out, self.player_in
        ).raise_if_invalid()

        substitution = Substitution(
            match_id=sheet.match_id,
            quarter=self.quarter,
            player_out=self.player_out,
            player_in=self.player_in,
            player_in_previous=sheet.fraction_of(self.player_in, self.quarter),
            created_ts=now_ts(),
        )
        # One FULL becomes one pair: slot usage is unchanged
        sheet.substitutions.append(substitution)
        sheet.set_fraction(self.player_out, self.quarter, Fraction.HALF)
        sheet.set_fraction(self.player_in, self.quarter, Fraction.HALF)
        return substitution

    @property
    def description(self) -> str:
        return f"Q{self.quarter}: substitute {self.player_out} -> {self.player_in}"


class RemoveSubstitutionCommand(MatchCommand):
    """Reverse an active pair, restoring both players' previous fractions."""

    def __init__(self, match_id: int, quarter: int, player_out: int, player_in: int,
                 validator: Optional[LineupValidationService] = None):
        super().__init__(match_id, validator)
        self.quarter = quarter
        self.player_out = player_out
        self.player_in = player_in

    def apply(self, sheet: MatchSheet) -> Substitution:
        self.validator.validate_substitution_removal(sheet, self.quarter).raise_if_invalid()

        substitution = sheet.find_pair(self.quarter, self.player_out, self.player_in)
        if substitution is None:
            raise NotFoundError(
                f"No active substitution {self.player_out} -> {self.player_in} "
                f"in quarter {self.quarter}"
            )
        sheet.substitutions.remove(substitution)
        sheet.set_fraction(self.player_out, self.quarter, Fraction.FULL)
        sheet.set_fraction(self.player_in, self.quarter, substitution.player_in_previous)
        return substitution

    @property
    def description(self) -> str:
        return f"Q{self.quarter}: undo substitution {self.player_out} -> {self.player_in}"


class AddGoalCommand(MatchCommand):
    """Append a goal event to a quarter."""

    def __init__(self, match_id: int, quarter: int, scorer_id: int,
                 assister_id: Optional[int] = None,
                 validator: Optional[LineupValidationService] = None):
        super().__init__(match_id, validator)
        self.quarter = quarter
        self.scorer_id = scorer_id
        self.assister_id = assister_id
        # Fixed at construction so a redo re-creates the same event
        self.goal_id = uuid.uuid4().hex

    def apply(self, sheet: MatchSheet) -> GoalEvent:
        self.validator.validate_goal(
            sheet, self.quarter, self.scorer_id, self.assister_id
        ).raise_if_invalid()
        goal = GoalEvent(
            goal_id=self.goal_id,
            match_id=sheet.match_id,
            quarter=self.quarter,
            scorer_id=self.scorer_id,
            assister_id=self.assister_id,
            created_ts=now_ts(),
        )
        sheet.goals.append(goal)
        return goal

    @property
    def description(self) -> str:
        return f"Q{self.quarter}: goal by {self.scorer_id}"


class RemoveGoalCommand(MatchCommand):
    """Delete one goal event."""

    def __init__(self, match_id: int, goal_id: str,
                 validator: Optional[LineupValidationService] = None):
        super().__init__(match_id, validator)
        self.goal_id = goal_id

    def apply(self, sheet: MatchSheet) -> GoalEvent:
        goal = sheet.find_goal(self.goal_id)
        if goal is None:
            raise NotFoundError(f"Goal {self.goal_id} not found in match {sheet.match_id}")
        sheet.goals.remove(goal)
        return goal

    @property
    def description(self) -> str:
        return f"Remove goal {self.goal_id}"


class SetOpponentGoalsCommand(MatchCommand):
    """Set the opponent's goal count for a quarter."""

    def __init__(self, match_id: int, quarter: int, count: int,
                 validator: Optional[LineupValidationService] = None):
        super().__init__(match_id, validator)
        self.quarter = quarter
        self.count = count

    def apply(self, sheet: MatchSheet) -> int:
        self.validator.validate_opponent_goals(self.quarter, self.count).raise_if_invalid()
        sheet.opponent_goals[self.quarter] = self.count
        return self.count

    @property
    def description(self) -> str:
        return f"Q{self.quarter}: opponent goals = {self.count}"


@dataclass
class CommandRecord:
    """History entry: the command, the sheet before it and the versions it produced."""
    command: MatchCommand
    before: MatchSheet
    after_version: int
    undone_version: Optional[int] = None


class MatchCommandManager:
    """
    Runs match commands against the repository and keeps the known-good views.

    The in-memory view of a match is replaced only after the repository
    acknowledged the write, so callers always re-render from committed state.
    """

    def __init__(self, repository: MatchRepository, max_history: int = DEFAULT_HISTORY_SIZE):
        """
        Initialize command manager.

        Args:
            repository: Authoritative store for match sheets
            max_history: Maximum number of commands to keep in history
        """
        self.repository = repository
        self.max_history = max_history
        self._views: Dict[int, MatchSheet] = {}
        self._command_history: List[CommandRecord] = []
        self._current_index = -1

    # ---------- Views ---------- #

    def view(self, match_id: int) -> MatchSheet:
        """Last known-good sheet of a match (loaded on first access)."""
        if match_id not in self._views:
            self._views[match_id] = self.repository.load(match_id)
        return self._views[match_id].copy()

    def refresh(self, match_id: int) -> MatchSheet:
        """Drop the cached view and reload it from the repository."""
        self._views[match_id] = self.repository.load(match_id)
        return self._views[match_id].copy()

    def forget(self, match_id: int) -> None:
        self._views.pop(match_id, None)

    # ---------- Execution ---------- #

    def execute_command(self, command: MatchCommand) -> Any:
        """
        Execute a command as one atomic write and add it to history.

        Args:
            command: Command to execute

        Returns:
            The command's result value

        Raises:
            LineupError: Validation failures, NotFoundError, StaleWriteError
                or PersistenceError; the view is unchanged in every case
        """
        before = self.repository.load(command.match_id)
        working = before.copy()
        try:
            result = command.apply(working)
        except LineupError as exc:
            logger.warning("Rejected '%s': %s", command.description, exc)
            raise

        if working == before:
            # Same resulting state: nothing to write
            self._views[command.match_id] = before
            return result

        committed = self._commit(command, working, before.version)

        # Remove any commands after current index (for redo functionality)
        self._command_history = self._command_history[:self._current_index + 1]
        self._command_history.append(
            CommandRecord(command=command, before=before, after_version=committed.version)
        )
        self._current_index += 1

        # Trim history if too long
        if len(self._command_history) > self.max_history:
            self._command_history.pop(0)
            self._current_index -= 1

        return result

    def _commit(self, command: MatchCommand, sheet: MatchSheet,
                expected_version: int) -> MatchSheet:
        try:
            committed = self.repository.save(sheet, expected_version)
        except LineupError as exc:
            logger.warning("Write failed for '%s': %s", command.description, exc)
            raise
        self._views[command.match_id] = committed
        logger.info(
            "Committed '%s' (match %s, version %s)",
            command.description, command.match_id, committed.version,
        )
        return committed

    def undo(self) -> bool:
        """
        Undo the last command by restoring the sheet it started from.

        Returns:
            True if undo was successful, False if there is nothing to undo

        Raises:
            StaleWriteError: If the match changed after the command committed
        """
        if not self.can_undo():
            return False

        record = self._command_history[self._current_index]
        current = self.repository.load(record.command.match_id)
        if current.version != record.after_version:
            raise StaleWriteError(
                f"Cannot undo '{record.command.description}': match "
                f"{record.command.match_id} changed since"
            )
        committed = self._commit(record.command, record.before.copy(), current.version)
        record.undone_version = committed.version

        # The previous command on this match now expects the restored version
        previous = self._neighbour(self._current_index, record.command.match_id, step=-1)
        if previous is not None and previous.after_version == record.before.version:
            previous.after_version = committed.version

        self._current_index -= 1
        return True

    def redo(self) -> bool:
        """
        Redo the next command, re-validating it against the current sheet.

        Returns:
            True if redo was successful, False if there is nothing to redo
        """
        if not self.can_redo():
            return False

        record = self._command_history[self._current_index + 1]
        current = self.repository.load(record.command.match_id)
        if current.version != record.undone_version:
            raise StaleWriteError(
                f"Cannot redo '{record.command.description}': match "
                f"{record.command.match_id} changed since"
            )
        working = current.copy()
        record.command.apply(working)
        committed = self._commit(record.command, working, current.version)
        replaced_version = record.after_version
        record.before = current
        record.after_version = committed.version
        self._current_index += 1

        # The next undone command on this match now starts from the redone version
        following = self._neighbour(self._current_index, record.command.match_id, step=1)
        if following is not None and following.undone_version == replaced_version:
            following.undone_version = committed.version
        return True

    def _neighbour(self, index: int, match_id: int, step: int) -> Optional[CommandRecord]:
        """Nearest history entry for the same match before (-1) or after (+1) ``index``."""
        index += step
        while 0 <= index < len(self._command_history):
            if self._command_history[index].command.match_id == match_id:
                return self._command_history[index]
            index += step
        return None

    def can_undo(self) -> bool:
        """Check if undo is available."""
        return self._current_index >= 0

    def can_redo(self) -> bool:
        """Check if redo is available."""
        return self._current_index < len(self._command_history) - 1

    def get_command_history(self) -> List[str]:
        """Get history of command descriptions."""
        return [record.command.description for record in self._command_history]

    def clear_history(self) -> None:
        """Clear command history."""
        self._command_history.clear()
        self._current_index = -1
