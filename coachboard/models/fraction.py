"""Participation fraction for a player in a single quarter."""

from enum import Enum
from typing import Optional, Union


class Fraction(Enum):
    """
    A player's participation credit in a quarter.

    NONE means the player sat the quarter out, HALF means the player was one
    side of a mid-quarter substitution, FULL means the player held a field
    slot for the whole quarter.
    """
    NONE = "NONE"
    HALF = "HALF"
    FULL = "FULL"

    @property
    def credit(self) -> float:
        """Periods credited for this fraction (0, 0.5 or 1)."""
        return _CREDITS[self]

    @classmethod
    def parse(cls, value: Union["Fraction", str, None]) -> "Fraction":
        """
        Convert stored or user supplied values into a Fraction.

        Accepts Fraction members, their names in any case (the stored form
        is 'FULL' / 'HALF') and None or an empty string for NONE.

        Raises:
            ValueError: If the value does not name a fraction
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.NONE
        if isinstance(value, str):
            key = value.strip().upper()
            if not key:
                return cls.NONE
            try:
                return cls[key]
            except KeyError:
                pass
        raise ValueError(f"Invalid fraction: {value!r} (expected NONE, HALF or FULL)")

    def to_storage(self) -> Optional[str]:
        """Stored representation; NONE has no row, so it maps to None."""
        return None if self is Fraction.NONE else self.value


_CREDITS = {
    Fraction.NONE: 0.0,
    Fraction.HALF: 0.5,
    Fraction.FULL: 1.0,
}
