"""
Unit tests for the quarter assignment ledger.

Tests the seven-slot capacity, no-op re-assignment, the pairing lock and
periods played.
"""
import unittest

from coachboard.models import Fraction
from coachboard.services import (
    CapacityError, InvalidSubstitutionPairError, LineupValidationError
)
from tests.helpers import MATCH_ID, build_suite, fill_quarter


class TestQuarterAssignmentLedger(unittest.TestCase):
    """Test direct fraction assignments."""

    def setUp(self) -> None:
        self.suite = build_suite()
        self.ledger = self.suite['assignments']

    def test_assign_and_get(self) -> None:
        self.ledger.assign(MATCH_ID, 3, 2, "FULL")

        fractions = self.ledger.get(MATCH_ID, 2)

        self.assertIs(fractions[3], Fraction.FULL)
        self.assertIs(fractions[4], Fraction.NONE)
        self.assertEqual(set(fractions), set(range(1, 10)))

    def test_eighth_full_player_is_rejected(self) -> None:
        fill_quarter(self.suite, 1, range(1, 8))

        with self.assertRaises(CapacityError):
            self.ledger.assign(MATCH_ID, 8, 1, Fraction.FULL)

        occupancy = self.ledger.field_occupancy(MATCH_ID, 1)
        self.assertEqual(occupancy.slots_used, 7)
        self.assertNotIn(8, occupancy.full_players)

    def test_capacity_is_per_quarter(self) -> None:
        fill_quarter(self.suite, 1, range(1, 8))

        self.ledger.assign(MATCH_ID, 8, 2, Fraction.FULL)

        self.assertEqual(self.ledger.field_occupancy(MATCH_ID, 2).slots_used, 1)

    def test_freeing_a_slot_allows_a_new_full_player(self) -> None:
        fill_quarter(self.suite, 1, range(1, 8))

        self.ledger.assign(MATCH_ID, 7, 1, Fraction.NONE)
        self.ledger.assign(MATCH_ID, 8, 1, Fraction.FULL)

        occupancy = self.ledger.field_occupancy(MATCH_ID, 1)
        self.assertEqual(occupancy.full_players, frozenset({1, 2, 3, 4, 5, 6, 8}))
        self.assertIn(7, occupancy.bench_players)

    def test_same_fraction_is_a_no_op(self) -> None:
        self.ledger.assign(MATCH_ID, 1, 1, Fraction.FULL)
        version = self.suite['commands'].view(MATCH_ID).version
        history = self.suite['commands'].get_command_history()

        result = self.ledger.assign(MATCH_ID, 1, 1, Fraction.FULL)

        self.assertIs(result, Fraction.FULL)
        self.assertEqual(self.suite['commands'].view(MATCH_ID).version, version)
        self.assertEqual(self.suite['commands'].get_command_history(), history)

    def test_full_player_keeps_slot_when_reassigned_full(self) -> None:
        fill_quarter(self.suite, 1, range(1, 8))

        self.ledger.assign(MATCH_ID, 7, 1, "full")

        self.assertEqual(self.ledger.field_occupancy(MATCH_ID, 1).slots_used, 7)

    def test_paired_player_cannot_be_reassigned(self) -> None:
        self.ledger.assign(MATCH_ID, 1, 1, Fraction.FULL)
        self.suite['substitutions'].apply(MATCH_ID, 1, 1, 8)

        with self.assertRaises(InvalidSubstitutionPairError):
            self.ledger.assign(MATCH_ID, 8, 1, Fraction.NONE)
        with self.assertRaises(InvalidSubstitutionPairError):
            self.ledger.assign(MATCH_ID, 1, 1, Fraction.FULL)

        self.assertIs(self.ledger.get(MATCH_ID, 1)[8], Fraction.HALF)

    def test_player_must_be_called_up(self) -> None:
        with self.assertRaises(LineupValidationError):
            self.ledger.assign(MATCH_ID, 10, 1, Fraction.FULL)

    def test_dropped_player_can_still_be_benched(self) -> None:
        fill_quarter(self.suite, 1, range(1, 8))
        self.suite['call_ups'].set_call_ups(MATCH_ID, range(2, 10))

        self.ledger.assign(MATCH_ID, 1, 1, Fraction.NONE)

        occupancy = self.ledger.field_occupancy(MATCH_ID, 1)
        self.assertEqual(occupancy.slots_used, 6)
        self.assertNotIn(1, self.ledger.get(MATCH_ID, 1))

    def test_dropped_player_cannot_be_raised(self) -> None:
        self.ledger.assign(MATCH_ID, 1, 1, Fraction.HALF)
        self.suite['call_ups'].set_call_ups(MATCH_ID, range(2, 10))

        with self.assertRaises(LineupValidationError):
            self.ledger.assign(MATCH_ID, 1, 1, Fraction.FULL)
        with self.assertRaises(LineupValidationError):
            self.ledger.assign(MATCH_ID, 1, 2, Fraction.HALF)

        self.assertIs(self.ledger.get(MATCH_ID, 1)[1], Fraction.HALF)

    def test_invalid_quarter_and_fraction(self) -> None:
        with self.assertRaises(LineupValidationError):
            self.ledger.assign(MATCH_ID, 1, 5, Fraction.FULL)
        with self.assertRaises(LineupValidationError):
            self.ledger.assign(MATCH_ID, 1, 0, Fraction.FULL)
        with self.assertRaises(LineupValidationError):
            self.ledger.assign(MATCH_ID, 1, 1, "QUARTER")
        with self.assertRaises(LineupValidationError):
            self.ledger.get(MATCH_ID, 5)


class TestPeriodsPlayed(unittest.TestCase):
    """Test the derived periods-played value."""

    def setUp(self) -> None:
        self.suite = build_suite()
        self.ledger = self.suite['assignments']

    def test_full_in_every_quarter(self) -> None:
        for quarter in (1, 2, 3, 4):
            self.ledger.assign(MATCH_ID, 1, quarter, Fraction.FULL)

        self.assertEqual(self.ledger.periods_played(MATCH_ID, 1), 4.0)

    def test_full_full_half_none(self) -> None:
        self.ledger.assign(MATCH_ID, 2, 1, Fraction.FULL)
        self.ledger.assign(MATCH_ID, 2, 2, Fraction.FULL)
        self.ledger.assign(MATCH_ID, 2, 3, Fraction.FULL)
        self.suite['substitutions'].apply(MATCH_ID, 3, 2, 9)

        self.assertEqual(self.ledger.periods_played(MATCH_ID, 2), 2.5)
        self.assertEqual(self.ledger.periods_played(MATCH_ID, 9), 0.5)

    def test_periods_played_by_player(self) -> None:
        self.ledger.assign(MATCH_ID, 4, 1, Fraction.FULL)

        periods = self.ledger.periods_played_by_player(MATCH_ID)

        self.assertEqual(periods[4], 1.0)
        self.assertEqual(periods[5], 0.0)
        self.assertEqual(len(periods), 9)


def test_occupancy_by_quarter_covers_four_quarters():
    suite = build_suite()
    fill_quarter(suite, 3, range(1, 4))

    occupancy = suite['assignments'].occupancy_by_quarter(MATCH_ID)

    assert sorted(occupancy) == [1, 2, 3, 4]
    assert occupancy[3].slots_used == 3
    assert occupancy[1].slots_used == 0
