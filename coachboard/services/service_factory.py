"""
Service Factory for dependency injection.

This module provides a factory for creating properly configured service
instances that share one repository, one command manager and one validator.
"""
from typing import Optional

from .callup_service import CallUpRegistry
from .lineup_service import QuarterAssignmentLedger
from .lineup_validator import LineupValidationService
from .match_commands import MatchCommandManager
from .outcome_service import QuarterOutcomeLedger
from .persistence_service import InMemoryMatchRepository, MatchRepository
from .report_service import MatchReportExporter, MatchReportService
from .roster_service import RosterProvider
from .substitution_service import SubstitutionCoordinator


class ServiceFactory:
    """
    Factory for creating service instances with proper dependency injection.

    All services created by one factory run their mutations through the same
    MatchCommandManager, so they share the undo history and the known-good
    views.
    """

    def __init__(self, repository: Optional[MatchRepository] = None,
                 roster_provider: Optional[RosterProvider] = None):
        """
        Initialize factory.

        Args:
            repository: Authoritative match store (in-memory when omitted)
            roster_provider: Optional roster lookup used for call-up checks
                and report names
        """
        self.repository = repository or InMemoryMatchRepository()
        self.roster_provider = roster_provider
        self._command_manager: Optional[MatchCommandManager] = None
        self._validator: Optional[LineupValidationService] = None
        self._export_service: Optional[MatchReportExporter] = None

    def create_call_up_registry(self) -> CallUpRegistry:
        return CallUpRegistry(
            self._get_command_manager(), self.roster_provider, self._get_validator()
        )

    def create_assignment_ledger(self) -> QuarterAssignmentLedger:
        return QuarterAssignmentLedger(self._get_command_manager(), self._get_validator())

    def create_substitution_coordinator(self) -> SubstitutionCoordinator:
        return SubstitutionCoordinator(self._get_command_manager(), self._get_validator())

    def create_outcome_ledger(self) -> QuarterOutcomeLedger:
        return QuarterOutcomeLedger(self._get_command_manager(), self._get_validator())

    def create_report_service(self) -> MatchReportService:
        """
        Create MatchReportService with injected dependencies.

        Returns:
            Configured MatchReportService instance
        """
        return MatchReportService(
            command_manager=self._get_command_manager(),
            roster_provider=self.roster_provider,
            export_service=self._get_export_service(),
        )

    def create_complete_service_suite(self) -> dict:
        """
        Create a complete suite of services with proper dependencies.

        Returns:
            Dictionary containing all configured services
        """
        return {
            'call_ups': self.create_call_up_registry(),
            'assignments': self.create_assignment_ledger(),
            'substitutions': self.create_substitution_coordinator(),
            'outcomes': self.create_outcome_ledger(),
            'reports': self.create_report_service(),
            'commands': self._get_command_manager(),
            'repository': self.repository,
        }

    def _get_command_manager(self) -> MatchCommandManager:
        """Get singleton command manager."""
        if self._command_manager is None:
            self._command_manager = MatchCommandManager(self.repository)
        return self._command_manager

    def _get_validator(self) -> LineupValidationService:
        """Get singleton validator."""
        if self._validator is None:
            self._validator = LineupValidationService()
        return self._validator

    def _get_export_service(self) -> MatchReportExporter:
        """Get singleton export service."""
        if self._export_service is None:
            self._export_service = MatchReportExporter()
        return self._export_service

    def configure_custom_validator(self, validator: LineupValidationService) -> None:
        self._validator = validator

    def configure_custom_export_service(self, exporter: MatchReportExporter) -> None:
        """Configure custom export service."""
        self._export_service = exporter
