"""
MatchSheet model for the Coachboard application.

This module contains the MatchSheet dataclass which represents the complete
lineup and outcome state of one match: call-ups, per-quarter fractions,
active substitution pairs, goal events and opponent goals, together with
the JSON mapping used by the persistence layer.
"""
import copy
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple

from .fraction import Fraction
from .match import Match
from ..utils import FIELD_SLOTS, QUARTERS


def result_label(team_goals: int, opponent_goals: int) -> str:
    """Classify a score as 'win', 'loss' or 'draw'."""
    if team_goals > opponent_goals:
        return "win"
    if team_goals < opponent_goals:
        return "loss"
    return "draw"


@dataclass(frozen=True)
class Substitution:
    """
    One active mid-quarter swap.

    While the row exists both players hold HALF in the quarter and together
    they occupy a single field slot. ``player_in_previous`` remembers the
    incoming player's fraction before the pair was formed so that reversal
    restores it exactly.
    """
    match_id: int
    quarter: int
    player_out: int
    player_in: int
    player_in_previous: Fraction = Fraction.NONE
    created_ts: Optional[float] = None

    def involves(self, player_id: int) -> bool:
        return player_id in (self.player_out, self.player_in)

    def matches(self, player_out: int, player_in: int) -> bool:
        return self.player_out == player_out and self.player_in == player_in

    def to_dict(self) -> Dict[str, Any]:
        return {
            "match_id": self.match_id,
            "period": self.quarter,
            "player_out": self.player_out,
            "player_in": self.player_in,
            "player_in_previous": self.player_in_previous.value,
            "created_ts": self.created_ts,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Substitution":
        return cls(
            match_id=int(data["match_id"]),
            quarter=int(data["period"]),
            player_out=int(data["player_out"]),
            player_in=int(data["player_in"]),
            player_in_previous=Fraction.parse(data.get("player_in_previous")),
            created_ts=data.get("created_ts"),
        )


@dataclass(frozen=True)
class GoalEvent:
    """A goal scored by the team in one quarter."""
    goal_id: str
    match_id: int
    quarter: int
    scorer_id: int
    assister_id: Optional[int] = None
    created_ts: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.goal_id,
            "match_id": self.match_id,
            "quarter": self.quarter,
            "scorer_id": self.scorer_id,
            "assister_id": self.assister_id,
            "created_ts": self.created_ts,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GoalEvent":
        assister = data.get("assister_id")
        return cls(
            goal_id=str(data["id"]),
            match_id=int(data["match_id"]),
            quarter=int(data["quarter"]),
            scorer_id=int(data["scorer_id"]),
            assister_id=int(assister) if assister is not None else None,
            created_ts=data.get("created_ts"),
        )


@dataclass(frozen=True)
class QuarterResult:
    """Score of a single quarter; team goals are always derived from events."""
    match_id: int
    quarter: int
    team_goals: int
    opponent_goals: int

    @property
    def goal_difference(self) -> int:
        return self.team_goals - self.opponent_goals

    @property
    def result(self) -> str:
        return result_label(self.team_goals, self.opponent_goals)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "match_id": self.match_id,
            "quarter": self.quarter,
            "team_goals": self.team_goals,
            "opponent_goals": self.opponent_goals,
        }


@dataclass(frozen=True)
class MatchScore:
    """Final score summed over quarters 1-4."""
    team_goals: int
    opponent_goals: int

    @property
    def result(self) -> str:
        return result_label(self.team_goals, self.opponent_goals)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "team_goals": self.team_goals,
            "opponent_goals": self.opponent_goals,
            "result": self.result,
        }


@dataclass(frozen=True)
class FieldOccupancy:
    """
    Field/bench partition of one quarter.

    Attributes:
        quarter: Quarter number (1-4)
        full_players: Players holding FULL, each using one slot
        pairs: Active substitution pairs, each using one slot
        bench_players: Everyone else known to the quarter (NONE, or an
            unpaired HALF)
    """
    quarter: int
    full_players: FrozenSet[int]
    pairs: Tuple[Substitution, ...]
    bench_players: FrozenSet[int]

    @property
    def players_in(self) -> FrozenSet[int]:
        return frozenset(pair.player_in for pair in self.pairs)

    @property
    def players_out(self) -> FrozenSet[int]:
        return frozenset(pair.player_out for pair in self.pairs)

    @property
    def paired_players(self) -> FrozenSet[int]:
        return self.players_in | self.players_out

    @property
    def on_field_players(self) -> FrozenSet[int]:
        """Players shown on the field: FULL players plus incoming pair members."""
        return self.full_players | self.players_in

    @property
    def slots_used(self) -> int:
        return len(self.full_players) + len(self.pairs)

    @property
    def free_slots(self) -> int:
        return FIELD_SLOTS - self.slots_used

    def to_dict(self) -> Dict[str, Any]:
        return {
            "quarter": self.quarter,
            "full_players": sorted(self.full_players),
            "paired_players": sorted(self.paired_players),
            "bench_players": sorted(self.bench_players),
            "pairs": [
                {"player_out": pair.player_out, "player_in": pair.player_in}
                for pair in self.pairs
            ],
            "slots_used": self.slots_used,
            "free_slots": self.free_slots,
        }


@dataclass
class MatchSheet:
    """
    Represents the complete lineup and outcome state of a match.

    Attributes:
        match: The match this sheet belongs to
        call_ups: Ids of players available for the match
        assignments: Fraction per (player_id, quarter); missing key means NONE
        substitutions: Active substitution pairs, in creation order
        goals: Goal events, in insertion order
        opponent_goals: Opponent goals per quarter
        version: Optimistic concurrency token, bumped by every committed write
    """
    match: Match
    call_ups: Set[int] = field(default_factory=set)
    assignments: Dict[Tuple[int, int], Fraction] = field(default_factory=dict)
    substitutions: List[Substitution] = field(default_factory=list)
    goals: List[GoalEvent] = field(default_factory=list)
    opponent_goals: Dict[int, int] = field(default_factory=dict)
    version: int = 0

    @property
    def match_id(self) -> int:
        return self.match.match_id

    # ---------- Assignments ---------- #

    def fraction_of(self, player_id: int, quarter: int) -> Fraction:
        return self.assignments.get((player_id, quarter), Fraction.NONE)

    def set_fraction(self, player_id: int, quarter: int, fraction: Fraction) -> None:
        """Store a fraction; NONE removes the row."""
        if fraction is Fraction.NONE:
            self.assignments.pop((player_id, quarter), None)
        else:
            self.assignments[(player_id, quarter)] = fraction

    def quarter_fractions(self, quarter: int) -> Dict[int, Fraction]:
        """
        Fraction of every player relevant to a quarter.

        Includes all called-up players (NONE when unassigned) plus any player
        that still has a row in the quarter after leaving the call-up list.
        """
        fractions = {player_id: Fraction.NONE for player_id in self.call_ups}
        for (player_id, q), fraction in self.assignments.items():
            if q == quarter:
                fractions[player_id] = fraction
        return fractions

    def full_count(self, quarter: int) -> int:
        return sum(
            1 for (_, q), fraction in self.assignments.items()
            if q == quarter and fraction is Fraction.FULL
        )

    def slots_used(self, quarter: int) -> int:
        return self.full_count(quarter) + len(self.active_pairs(quarter))

    def periods_played(self, player_id: int) -> float:
        return sum(self.fraction_of(player_id, quarter).credit for quarter in QUARTERS)

    # ---------- Substitutions ---------- #

    def active_pairs(self, quarter: Optional[int] = None) -> List[Substitution]:
        if quarter is None:
            return list(self.substitutions)
        return [sub for sub in self.substitutions if sub.quarter == quarter]

    def pair_for(self, player_id: int, quarter: int) -> Optional[Substitution]:
        for sub in self.substitutions:
            if sub.quarter == quarter and sub.involves(player_id):
                return sub
        return None

    def find_pair(self, quarter: int, player_out: int, player_in: int) -> Optional[Substitution]:
        for sub in self.substitutions:
            if sub.quarter == quarter and sub.matches(player_out, player_in):
                return sub
        return None

    def field_occupancy(self, quarter: int) -> FieldOccupancy:
        """Partition the quarter into FULL players, active pairs and the bench."""
        fractions = self.quarter_fractions(quarter)
        pairs = tuple(self.active_pairs(quarter))
        paired = {player for pair in pairs for player in (pair.player_out, pair.player_in)}
        full = frozenset(
            player_id for player_id, fraction in fractions.items()
            if fraction is Fraction.FULL and player_id not in paired
        )
        bench = frozenset(
            player_id for player_id in fractions
            if player_id not in full and player_id not in paired
        )
        return FieldOccupancy(quarter=quarter, full_players=full, pairs=pairs, bench_players=bench)

    # ---------- Outcome ---------- #

    def goals_in(self, quarter: Optional[int] = None) -> List[GoalEvent]:
        if quarter is None:
            return list(self.goals)
        return [goal for goal in self.goals if goal.quarter == quarter]

    def find_goal(self, goal_id: str) -> Optional[GoalEvent]:
        for goal in self.goals:
            if goal.goal_id == goal_id:
                return goal
        return None

    def team_goals(self, quarter: int) -> int:
        return len(self.goals_in(quarter))

    def quarter_result(self, quarter: int) -> QuarterResult:
        return QuarterResult(
            match_id=self.match_id,
            quarter=quarter,
            team_goals=self.team_goals(quarter),
            opponent_goals=self.opponent_goals.get(quarter, 0),
        )

    def score(self) -> MatchScore:
        return MatchScore(
            team_goals=sum(self.team_goals(q) for q in QUARTERS),
            opponent_goals=sum(self.opponent_goals.get(q, 0) for q in QUARTERS),
        )

    # ---------- Copy / serialization ---------- #

    def copy(self) -> "MatchSheet":
        """Deep copy used as the working copy of a command."""
        return copy.deepcopy(self)

    def to_json(self) -> dict:
        """
        Convert MatchSheet to a JSON-serializable dictionary.

        Rows are laid out like the backend tables they mirror
        (match_player_periods, match_substitutions, match_goals,
        match_quarter_results).

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return {
            "match": self.match.to_dict(),
            "version": self.version,
            "call_ups": sorted(self.call_ups),
            "periods": [
                {
                    "match_id": self.match_id,
                    "player_id": player_id,
                    "period": quarter,
                    "fraction": fraction.to_storage(),
                }
                for (player_id, quarter), fraction in sorted(self.assignments.items())
            ],
            "substitutions": [sub.to_dict() for sub in self.substitutions],
            "goals": [goal.to_dict() for goal in self.goals],
            "quarter_results": [
                {"match_id": self.match_id, "quarter": quarter, "opponent_goals": goals}
                for quarter, goals in sorted(self.opponent_goals.items())
            ],
        }

    @staticmethod
    def from_json(data: dict) -> "MatchSheet":
        """
        Create MatchSheet from JSON dictionary.

        Args:
            data: Dictionary with match sheet data

        Returns:
            New MatchSheet instance

        Raises:
            KeyError: If required keys are missing
            ValueError: If a stored value is malformed
        """
        sheet = MatchSheet(match=Match.from_dict(data["match"]))
        sheet.version = int(data.get("version", 0))
        sheet.call_ups = {int(player_id) for player_id in data.get("call_ups", [])}

        for row in data.get("periods", []) or []:
            fraction = Fraction.parse(row.get("fraction"))
            sheet.set_fraction(int(row["player_id"]), int(row["period"]), fraction)

        sheet.substitutions = [
            Substitution.from_dict(row) for row in data.get("substitutions", []) or []
        ]
        sheet.goals = [GoalEvent.from_dict(row) for row in data.get("goals", []) or []]

        for row in data.get("quarter_results", []) or []:
            sheet.opponent_goals[int(row["quarter"])] = int(row.get("opponent_goals", 0))
        return sheet
