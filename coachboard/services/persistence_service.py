"""
Persistence layer for the Coachboard application.

This module defines the MatchRepository interface used as the authoritative
store for match sheets, plus an in-memory implementation and a JSON file
implementation. Every save is a single compare-and-set write guarded by the
sheet's version token, so a command's changes land completely or not at all.
"""
import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..models import Match, MatchSheet
from .errors import (
    LineupValidationError, NotFoundError, PersistenceError, StaleWriteError
)

logger = logging.getLogger(__name__)


class MatchRepository(ABC):
    """Authoritative store of match sheets keyed by match id."""

    def __init__(self) -> None:
        self._lock = threading.RLock()

    # ---------- Storage primitives ---------- #

    @abstractmethod
    def _read(self, match_id: int) -> Optional[MatchSheet]:
        """Return the stored sheet or None when the match is unknown."""

    @abstractmethod
    def _write(self, sheet: MatchSheet) -> None:
        """Store the sheet as one atomic write."""

    @abstractmethod
    def _remove(self, match_id: int) -> None:
        """Remove the stored sheet."""

    @abstractmethod
    def list_match_ids(self) -> List[int]:
        """Ids of all stored matches."""

    # ---------- Public API ---------- #

    def add_match(self, match: Match) -> MatchSheet:
        """
        Register a match with an empty sheet.

        Raises:
            LineupValidationError: If the match id is already stored
            PersistenceError: If the write fails
        """
        with self._lock:
            if self._read(match.match_id) is not None:
                raise LineupValidationError(f"Match {match.match_id} already exists")
            sheet = MatchSheet(match=match)
            self._write(sheet)
            logger.info("Registered match %s against %s", match.match_id, match.opponent)
            return sheet.copy()

    def load(self, match_id: int) -> MatchSheet:
        """
        Load a private copy of a match sheet.

        Raises:
            NotFoundError: If the match is unknown
            PersistenceError: If the store cannot be read
        """
        with self._lock:
            sheet = self._read(match_id)
        if sheet is None:
            raise NotFoundError(f"Match {match_id} not found")
        return sheet.copy()

    def save(self, sheet: MatchSheet, expected_version: int) -> MatchSheet:
        """
        Commit a sheet if the stored version still equals ``expected_version``.

        Args:
            sheet: New state of the match
            expected_version: Version the caller read before mutating

        Returns:
            Copy of the committed sheet with its new version

        Raises:
            NotFoundError: If the match is unknown
            StaleWriteError: If someone else committed in between
            PersistenceError: If the write fails (nothing is stored)
        """
        with self._lock:
            current = self._read(sheet.match_id)
            if current is None:
                raise NotFoundError(f"Match {sheet.match_id} not found")
            if current.version != expected_version:
                raise StaleWriteError(
                    f"Match {sheet.match_id} changed (version {current.version}, "
                    f"expected {expected_version}); reload and try again"
                )
            stored = sheet.copy()
            stored.version = expected_version + 1
            self._write(stored)
        return stored.copy()

    def delete_match(self, match_id: int) -> None:
        with self._lock:
            if self._read(match_id) is None:
                raise NotFoundError(f"Match {match_id} not found")
            self._remove(match_id)

    def find_match_for_goal(self, goal_id: str) -> int:
        """
        Locate the match that holds a goal event.

        Raises:
            NotFoundError: If no match has a goal with this id
        """
        with self._lock:
            for match_id in self.list_match_ids():
                sheet = self._read(match_id)
                if sheet is not None and sheet.find_goal(goal_id) is not None:
                    return match_id
        raise NotFoundError(f"Goal {goal_id} not found")


class InMemoryMatchRepository(MatchRepository):
    """Repository backed by a dictionary; used by tests and the default web app."""

    def __init__(self) -> None:
        super().__init__()
        self._sheets: Dict[int, MatchSheet] = {}

    def _read(self, match_id: int) -> Optional[MatchSheet]:
        return self._sheets.get(match_id)

    def _write(self, sheet: MatchSheet) -> None:
        self._sheets[sheet.match_id] = sheet.copy()

    def _remove(self, match_id: int) -> None:
        del self._sheets[match_id]

    def list_match_ids(self) -> List[int]:
        return sorted(self._sheets)


class JsonMatchRepository(MatchRepository):
    """
    Repository storing one JSON document per match in a directory.

    Writes go to a temporary file in the same directory which then replaces
    the match document, so a failed write never leaves a partial sheet.
    """

    FILE_PREFIX = "match_"

    def __init__(self, data_dir: str) -> None:
        super().__init__()
        self.data_dir = data_dir

    def _path_for(self, match_id: int) -> str:
        return os.path.join(self.data_dir, f"{self.FILE_PREFIX}{match_id}.json")

    def _read(self, match_id: int) -> Optional[MatchSheet]:
        path = self._path_for(match_id)
        if not os.path.exists(path):
            return None
        return load_sheet_from_file(path)

    def _write(self, sheet: MatchSheet) -> None:
        save_sheet_to_file(sheet, self._path_for(sheet.match_id))

    def _remove(self, match_id: int) -> None:
        try:
            os.remove(self._path_for(match_id))
        except OSError as exc:
            raise PersistenceError(f"Unable to delete match {match_id}: {exc}") from exc

    def list_match_ids(self) -> List[int]:
        if not os.path.isdir(self.data_dir):
            return []
        ids = []
        for filename in os.listdir(self.data_dir):
            if filename.startswith(self.FILE_PREFIX) and filename.endswith(".json"):
                raw_id = filename[len(self.FILE_PREFIX):-len(".json")]
                if raw_id.isdigit():
                    ids.append(int(raw_id))
        return sorted(ids)


def save_sheet_to_file(sheet: MatchSheet, file_path: str) -> None:
    """
    Save a match sheet to a JSON file atomically.

    Args:
        sheet: The match sheet to save
        file_path: Path where to save the file

    Raises:
        PersistenceError: If the file cannot be written; the previous
            content of ``file_path`` is left untouched
    """
    directory = os.path.dirname(file_path) or "."
    tmp_path = None
    try:
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".tmp_", suffix=".json", dir=directory)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(sheet.to_json(), f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, file_path)
        tmp_path = None
    except (OSError, TypeError, ValueError) as exc:
        logger.error("Failed to save match %s to %s: %s", sheet.match_id, file_path, exc)
        raise PersistenceError(f"Unable to save match {sheet.match_id}: {exc}") from exc
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)


def load_sheet_from_file(file_path: str) -> MatchSheet:
    """
    Load a match sheet from a JSON file.

    Raises:
        PersistenceError: If the file cannot be read or holds invalid data
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return MatchSheet.from_json(data)
    except (OSError, KeyError, TypeError, ValueError) as exc:
        logger.error("Failed to load match sheet from %s: %s", file_path, exc)
        raise PersistenceError(f"Unable to load {file_path}: {exc}") from exc
