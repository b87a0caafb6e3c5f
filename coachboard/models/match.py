"""
Match and roster player models.

Both entities are owned by external CRUD screens; the lineup engine only
reads them. Player ids and match ids are stable integers.
"""
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Player:
    """A roster player as supplied by the roster provider."""
    player_id: int
    full_name: str
    team_id: Optional[int] = None
    jersey_number: Optional[int] = None

    def display_name(self) -> str:
        if self.jersey_number is None:
            return self.full_name
        return f"#{self.jersey_number} {self.full_name}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "full_name": self.full_name,
            "team_id": self.team_id,
            "jersey_number": self.jersey_number,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        jersey = data.get("jersey_number")
        team_id = data.get("team_id")
        return cls(
            player_id=int(data["player_id"]),
            full_name=data.get("full_name", ""),
            team_id=int(team_id) if team_id is not None else None,
            jersey_number=int(jersey) if jersey is not None else None,
        )


@dataclass
class Match:
    """
    A scheduled match of a team against an opponent.

    Attributes:
        match_id: Stable identifier of the match
        team_id: Team playing the match
        match_date: Date the match is played
        opponent: Opponent team name
        location: Optional venue
        notes: Optional coach notes
    """
    match_id: int
    team_id: int
    match_date: date
    opponent: str
    location: Optional[str] = None
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "match_id": self.match_id,
            "team_id": self.team_id,
            "match_date": self.match_date.isoformat(),
            "opponent": self.opponent,
            "location": self.location,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Match":
        """Create from dictionary for JSON deserialization."""
        raw_date = data["match_date"]
        match_date = raw_date if isinstance(raw_date, date) else date.fromisoformat(raw_date)
        return cls(
            match_id=int(data["match_id"]),
            team_id=int(data["team_id"]),
            match_date=match_date,
            opponent=data.get("opponent", ""),
            location=data.get("location"),
            notes=data.get("notes"),
        )
