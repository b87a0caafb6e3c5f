"""
Services package for Coachboard.

This package contains service classes that handle the lineup and outcome
business logic, plus the factory that wires them together.
"""
from .errors import (
    CapacityError, IncompleteCallUpError, InvalidSubstitutionPairError,
    LineupError, LineupValidationError, NotFoundError, PersistenceError,
    StaleWriteError
)
from .persistence_service import (
    InMemoryMatchRepository, JsonMatchRepository, MatchRepository,
    load_sheet_from_file, save_sheet_to_file
)
from .lineup_validator import LineupValidationService, ValidationResult
from .match_commands import MatchCommand, MatchCommandManager
from .roster_service import InMemoryRosterProvider, RosterProvider
from .callup_service import CallUpRegistry
from .lineup_service import QuarterAssignmentLedger
from .substitution_service import SubstitutionCoordinator
from .outcome_service import QuarterOutcomeLedger
from .report_service import MatchReportExporter, MatchReportService
from .service_factory import ServiceFactory

__all__ = [
    "CapacityError", "IncompleteCallUpError", "InvalidSubstitutionPairError",
    "LineupError", "LineupValidationError", "NotFoundError", "PersistenceError",
    "StaleWriteError", "InMemoryMatchRepository", "JsonMatchRepository",
    "MatchRepository", "load_sheet_from_file", "save_sheet_to_file",
    "LineupValidationService", "ValidationResult", "MatchCommand",
    "MatchCommandManager", "InMemoryRosterProvider", "RosterProvider",
    "CallUpRegistry", "QuarterAssignmentLedger", "SubstitutionCoordinator",
    "QuarterOutcomeLedger", "MatchReportExporter", "MatchReportService",
    "ServiceFactory"
]
