"""
Lineup validation service for keeping the quarter ledgers consistent.

This module holds the rules every lineup and outcome mutation must pass
before it is applied: the call-up gate, the seven-slot capacity, the
substitution pairing rules and the goal participant checks. Rules collect
messages into a ValidationResult; the first failing rule decides which
error kind is raised.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Set, Type

from ..models import Fraction, MatchSheet
from ..utils import FIELD_SLOTS, MIN_CALL_UPS, QUARTERS
from .errors import (
    CapacityError, IncompleteCallUpError, InvalidSubstitutionPairError,
    LineupError, LineupValidationError
)


class ValidationResult:
    """Result of a validation operation with success status and error messages."""

    def __init__(self, is_valid: bool = True, errors: Optional[List[str]] = None,
                 kinds: Optional[List[Type[LineupError]]] = None):
        self.is_valid = is_valid
        self.errors = errors or []
        self.kinds = kinds or []

    def add_error(self, error: str, kind: Type[LineupError] = LineupValidationError) -> None:
        """Add an error message and mark as invalid."""
        self.errors.append(error)
        self.kinds.append(kind)
        self.is_valid = False

    def combine(self, other: 'ValidationResult') -> 'ValidationResult':
        """Combine with another validation result."""
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            errors=self.errors + other.errors,
            kinds=self.kinds + other.kinds,
        )

    def raise_if_invalid(self) -> None:
        """Raise the kind of the first failure, carrying every message."""
        if self.is_valid:
            return
        raise self.kinds[0]("; ".join(self.errors))


class ValidationRule(ABC):
    """Abstract base class for validation rules."""

    @abstractmethod
    def validate(self, *args, **kwargs) -> ValidationResult:
        """Perform validation and return result."""
        pass


class QuarterValidator(ValidationRule):
    """Quarters are always exactly 1..4."""

    def validate(self, quarter: int) -> ValidationResult:
        result = ValidationResult()
        if isinstance(quarter, bool) or quarter not in QUARTERS:
            result.add_error(f"Invalid quarter: {quarter!r} (must be 1-4)")
        return result


class CallUpGateValidator(ValidationRule):
    """Lineup edits need a complete call-up list."""

    def __init__(self, min_call_ups: int = MIN_CALL_UPS):
        self.min_call_ups = min_call_ups

    def validate(self, sheet: MatchSheet) -> ValidationResult:
        result = ValidationResult()
        count = len(sheet.call_ups)
        if count < self.min_call_ups:
            result.add_error(
                f"At least {self.min_call_ups} players must be called up before "
                f"editing the lineup ({count} called up)",
                IncompleteCallUpError,
            )
        return result


class CalledUpPlayerValidator(ValidationRule):
    """Players named in a mutation must be called up for the match."""

    def validate(self, sheet: MatchSheet, player_ids: Iterable[int]) -> ValidationResult:
        result = ValidationResult()
        for player_id in player_ids:
            if player_id not in sheet.call_ups:
                result.add_error(
                    f"Player {player_id} is not called up for match {sheet.match_id}"
                )
        return result


class AssignmentValidator(ValidationRule):
    """Direct fraction changes: pairing lock and field capacity."""

    def __init__(self, field_slots: int = FIELD_SLOTS):
        self.field_slots = field_slots

    def validate(self, sheet: MatchSheet, player_id: int, quarter: int,
                 fraction: Fraction) -> ValidationResult:
        result = ValidationResult()

        pair = sheet.pair_for(player_id, quarter)
        if pair is not None:
            result.add_error(
                f"Player {player_id} is part of the substitution "
                f"{pair.player_out} -> {pair.player_in} in quarter {quarter}; "
                f"remove the substitution first",
                InvalidSubstitutionPairError,
            )
            return result

        current = sheet.fraction_of(player_id, quarter)
        # Only an increase in occupancy can break the slot limit
        if fraction is Fraction.FULL and current is not Fraction.FULL:
            used = sheet.slots_used(quarter)
            if used + 1 > self.field_slots:
                result.add_error(
                    f"Quarter {quarter} already has {used} of {self.field_slots} "
                    f"field slots in use",
                    CapacityError,
                )
        return result


class SubstitutionPairValidator(ValidationRule):
    """A pair links one field occupant with one player who is not on the field."""

    def validate(self, sheet: MatchSheet, quarter: int, player_out: int,
                 player_in: int) -> ValidationResult:
        result = ValidationResult()

        if player_out == player_in:
            result.add_error(
                f"Player {player_out} cannot be substituted for themselves",
                InvalidSubstitutionPairError,
            )
            return result

        if sheet.find_pair(quarter, player_out, player_in) is not None:
            result.add_error(
                f"Substitution {player_out} -> {player_in} is already active "
                f"in quarter {quarter}",
                InvalidSubstitutionPairError,
            )
            return result

        for player_id in (player_out, player_in):
            if sheet.pair_for(player_id, quarter) is not None:
                result.add_error(
                    f"Player {player_id} is already part of a substitution in "
                    f"quarter {quarter}",
                    InvalidSubstitutionPairError,
                )
        if not result.is_valid:
            return result

        out_fraction = sheet.fraction_of(player_out, quarter)
        in_fraction = sheet.fraction_of(player_in, quarter)
        if out_fraction is not Fraction.FULL:
            result.add_error(
                f"Player {player_out} is not on the field in quarter {quarter}",
                InvalidSubstitutionPairError,
            )
        if in_fraction is Fraction.FULL:
            result.add_error(
                f"Player {player_in} is already on the field in quarter {quarter}",
                InvalidSubstitutionPairError,
            )
        return result


class GoalValidator(ValidationRule):
    """Scorer and assister must be called up and distinct."""

    def validate(self, sheet: MatchSheet, scorer_id: int,
                 assister_id: Optional[int] = None) -> ValidationResult:
        participants = [scorer_id]
        result = ValidationResult()
        if assister_id is not None:
            if assister_id == scorer_id:
                result.add_error("A player cannot assist their own goal")
            else:
                participants.append(assister_id)
        return result.combine(CalledUpPlayerValidator().validate(sheet, participants))


class OpponentGoalsValidator(ValidationRule):
    """Opponent goals are a non-negative integer."""

    def validate(self, count: int) -> ValidationResult:
        result = ValidationResult()
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            result.add_error(f"Opponent goals must be a non-negative integer, got {count!r}")
        return result


class CallUpListValidator(ValidationRule):
    """Call-up lists may only contain players of the match's team."""

    def validate(self, player_ids: Iterable[int],
                 roster_ids: Optional[Set[int]] = None) -> ValidationResult:
        result = ValidationResult()
        for player_id in player_ids:
            if isinstance(player_id, bool) or not isinstance(player_id, int):
                result.add_error(f"Invalid player id: {player_id!r}")
            elif roster_ids is not None and player_id not in roster_ids:
                result.add_error(f"Player {player_id} is not on the team roster")
        return result


class LineupValidationService:
    """
    Orchestrates the validation rules for each kind of mutation.

    Each method returns a ValidationResult; callers use
    ``raise_if_invalid()`` to turn it into the matching error kind.
    """

    def __init__(self, field_slots: int = FIELD_SLOTS, min_call_ups: int = MIN_CALL_UPS):
        self.quarter_validator = QuarterValidator()
        self.gate_validator = CallUpGateValidator(min_call_ups)
        self.player_validator = CalledUpPlayerValidator()
        self.assignment_validator = AssignmentValidator(field_slots)
        self.pair_validator = SubstitutionPairValidator()
        self.goal_validator = GoalValidator()
        self.opponent_goals_validator = OpponentGoalsValidator()
        self.call_up_list_validator = CallUpListValidator()

    def validate_assignment(self, sheet: MatchSheet, player_id: int, quarter: int,
                            fraction: Fraction) -> ValidationResult:
        """
        Validate a direct fraction change.

        Args:
            sheet: Current match sheet
            player_id: Player being (re)assigned
            quarter: Target quarter
            fraction: Requested fraction

        Returns:
            ValidationResult for the assignment
        """
        result = self.gate_validator.validate(sheet)
        result = result.combine(self.quarter_validator.validate(quarter))
        if not result.is_valid:
            return result
        # Lowering a row frees a slot and stays allowed after the player left the call-ups
        if fraction.credit > sheet.fraction_of(player_id, quarter).credit:
            result = result.combine(self.player_validator.validate(sheet, [player_id]))
            if not result.is_valid:
                return result
        return result.combine(
            self.assignment_validator.validate(sheet, player_id, quarter, fraction)
        )

    def validate_substitution(self, sheet: MatchSheet, quarter: int, player_out: int,
                              player_in: int) -> ValidationResult:
        """Validate forming a new substitution pair."""
        result = self.gate_validator.validate(sheet)
        result = result.combine(self.quarter_validator.validate(quarter))
        if not result.is_valid:
            return result
        result = result.combine(
            self.player_validator.validate(sheet, [player_out, player_in])
        )
        if not result.is_valid:
            return result
        return result.combine(
            self.pair_validator.validate(sheet, quarter, player_out, player_in)
        )

    def validate_substitution_removal(self, sheet: MatchSheet, quarter: int) -> ValidationResult:
        """Reversal is a lineup mutation too, so it passes the call-up gate."""
        result = self.gate_validator.validate(sheet)
        return result.combine(self.quarter_validator.validate(quarter))

    def validate_goal(self, sheet: MatchSheet, quarter: int, scorer_id: int,
                      assister_id: Optional[int] = None) -> ValidationResult:
        """Validate a new goal event."""
        result = self.quarter_validator.validate(quarter)
        return result.combine(self.goal_validator.validate(sheet, scorer_id, assister_id))

    def validate_opponent_goals(self, quarter: int, count: int) -> ValidationResult:
        result = self.quarter_validator.validate(quarter)
        return result.combine(self.opponent_goals_validator.validate(count))

    def validate_call_ups(self, player_ids: Iterable[int],
                          roster_ids: Optional[Set[int]] = None) -> ValidationResult:
        return self.call_up_list_validator.validate(player_ids, roster_ids)
