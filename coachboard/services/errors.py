"""
Error kinds raised by the lineup engine.

Every mutating call either returns a value or raises one of these. All of
them are recoverable: the caller surfaces the message and the ledger's
visible state is exactly as it was before the attempt.
"""
from typing import Any, Dict


class LineupError(Exception):
    """Base class for all lineup engine errors."""

    kind = "lineup_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class IncompleteCallUpError(LineupError):
    """Fewer than seven players are called up for the match."""

    kind = "incomplete_call_up"


class CapacityError(LineupError):
    """The change would put more than seven players' worth of slots on the field."""

    kind = "capacity"


class InvalidSubstitutionPairError(LineupError):
    """Both players are on the same side, or one of them is already paired."""

    kind = "invalid_substitution_pair"


class NotFoundError(LineupError):
    """The match, substitution or goal does not exist."""

    kind = "not_found"


class PersistenceError(LineupError):
    """The underlying storage failed; nothing was written."""

    kind = "persistence"


class LineupValidationError(LineupError):
    """Malformed input: bad quarter, unknown player, negative score, ..."""

    kind = "validation"


class StaleWriteError(LineupError):
    """The stored match changed since it was read; the write was rejected."""

    kind = "stale_write"
