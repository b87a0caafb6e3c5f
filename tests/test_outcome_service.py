"""Tests for the quarter outcome ledger."""

import pytest

from coachboard.services import LineupValidationError, NotFoundError
from tests.helpers import MATCH_ID, build_suite, make_match


@pytest.fixture
def suite():
    return build_suite()


def test_team_goals_equal_number_of_goal_events(suite):
    outcomes = suite['outcomes']
    goals = [
        outcomes.add_goal(MATCH_ID, 1, 3),
        outcomes.add_goal(MATCH_ID, 1, 4, assister_id=3),
        outcomes.add_goal(MATCH_ID, 2, 5),
    ]

    assert outcomes.team_goals(MATCH_ID, 1) == 2
    assert outcomes.team_goals(MATCH_ID, 2) == 1

    outcomes.remove_goal(goals[0].goal_id)

    assert outcomes.team_goals(MATCH_ID, 1) == 1
    assert [goal.goal_id for goal in outcomes.list_goals(MATCH_ID)] == [
        goals[1].goal_id, goals[2].goal_id
    ]


def test_goals_keep_insertion_order(suite):
    outcomes = suite['outcomes']
    first = outcomes.add_goal(MATCH_ID, 3, 6)
    second = outcomes.add_goal(MATCH_ID, 1, 2)
    third = outcomes.add_goal(MATCH_ID, 3, 7)

    assert outcomes.list_goals(MATCH_ID) == [first, second, third]
    assert outcomes.list_goals(MATCH_ID, 3) == [first, third]


def test_scorer_does_not_need_to_be_on_the_field(suite):
    goal = suite['outcomes'].add_goal(MATCH_ID, 4, 9)

    assert goal.scorer_id == 9
    assert suite['assignments'].periods_played(MATCH_ID, 9) == 0.0


def test_goal_participants_must_be_called_up(suite):
    outcomes = suite['outcomes']

    with pytest.raises(LineupValidationError):
        outcomes.add_goal(MATCH_ID, 1, 10)
    with pytest.raises(LineupValidationError):
        outcomes.add_goal(MATCH_ID, 1, 3, assister_id=11)
    with pytest.raises(LineupValidationError):
        outcomes.add_goal(MATCH_ID, 1, 3, assister_id=3)
    with pytest.raises(LineupValidationError):
        outcomes.add_goal(MATCH_ID, 5, 3)

    assert outcomes.list_goals(MATCH_ID) == []


def test_remove_unknown_goal(suite):
    outcomes = suite['outcomes']
    goal = outcomes.add_goal(MATCH_ID, 1, 3)
    outcomes.remove_goal(goal.goal_id)

    with pytest.raises(NotFoundError):
        outcomes.remove_goal(goal.goal_id)
    with pytest.raises(NotFoundError):
        outcomes.remove_goal("missing")


def test_opponent_goals_and_totals(suite):
    outcomes = suite['outcomes']
    outcomes.add_goal(MATCH_ID, 1, 3)
    outcomes.add_goal(MATCH_ID, 2, 3)
    outcomes.set_opponent_goals(MATCH_ID, 2, 1)
    outcomes.set_opponent_goals(MATCH_ID, 4, 3)

    results = outcomes.quarter_results(MATCH_ID)
    totals = outcomes.totals(MATCH_ID)

    assert [(r.quarter, r.team_goals, r.opponent_goals) for r in results] == [
        (1, 1, 0), (2, 1, 1), (3, 0, 0), (4, 0, 3)
    ]
    assert results[1].result == "draw"
    assert (totals.team_goals, totals.opponent_goals) == (2, 4)
    assert totals.result == "loss"


def test_opponent_goals_can_be_overwritten(suite):
    outcomes = suite['outcomes']
    outcomes.set_opponent_goals(MATCH_ID, 1, 2)
    outcomes.set_opponent_goals(MATCH_ID, 1, 0)

    assert outcomes.quarter_results(MATCH_ID)[0].opponent_goals == 0


def test_opponent_goals_must_be_non_negative_integers(suite):
    outcomes = suite['outcomes']

    with pytest.raises(LineupValidationError):
        outcomes.set_opponent_goals(MATCH_ID, 1, -1)
    with pytest.raises(LineupValidationError):
        outcomes.set_opponent_goals(MATCH_ID, 1, 1.5)
    with pytest.raises(LineupValidationError):
        outcomes.set_opponent_goals(MATCH_ID, 0, 1)


def test_goals_are_kept_per_match(suite):
    suite['repository'].add_match(make_match(2, opponent="United"))
    suite['call_ups'].set_call_ups(2, range(1, 8))
    goal = suite['outcomes'].add_goal(2, 1, 4)

    assert suite['outcomes'].team_goals(MATCH_ID, 1) == 0
    suite['outcomes'].remove_goal(goal.goal_id)
    assert suite['outcomes'].list_goals(2) == []
