"""Dataclasses representing post-match reports handed to the statistics consumer."""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

from .fraction import Fraction
from .match_sheet import MatchScore, result_label


@dataclass
class FormationSnapshot:
    """Players occupying field slots together in one quarter."""

    quarter: int
    members: List[Tuple[int, Fraction]]
    team_goals: int
    opponent_goals: int

    @property
    def formation_key(self) -> str:
        """Stable key for grouping identical formations across matches."""
        return "-".join(str(player_id) for player_id in sorted(pid for pid, _ in self.members))

    @property
    def result(self) -> str:
        return result_label(self.team_goals, self.opponent_goals)


@dataclass
class PlayerMatchSummary:
    """Aggregated participation information for a single player."""

    player_id: int
    name: str
    jersey_number: Optional[int]
    called_up: bool
    fractions: Dict[int, Fraction]
    periods_played: float
    goals: int
    assists: int
    target_periods: float
    delta_periods: float
    fairness: str


@dataclass
class MatchReport:
    """Snapshot of a match's lineup and outcome ledgers."""

    generated_ts: float
    match_id: int
    team_id: int
    opponent: str
    match_date: date
    called_up_count: int
    score: MatchScore
    formations: List[FormationSnapshot] = field(default_factory=list)
    players: List[PlayerMatchSummary] = field(default_factory=list)
    target_periods_per_player: float = 0.0
    average_periods: float = 0.0
    min_periods: float = 0.0
    max_periods: float = 0.0
    fairness_counts: Dict[str, int] = field(default_factory=dict)
