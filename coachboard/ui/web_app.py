"""
Web application module for Coachboard.

This module contains the Flask web server that exposes the call-up,
lineup, substitution and outcome operations as a JSON API, plus the
match report and statistics export.
"""
import logging
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from ..models import Match, MatchSheet
from ..services import (
    CapacityError, IncompleteCallUpError, InMemoryMatchRepository,
    InvalidSubstitutionPairError, JsonMatchRepository, LineupError,
    LineupValidationError, MatchRepository, NotFoundError, PersistenceError,
    RosterProvider, ServiceFactory, StaleWriteError
)
from ..utils import DEFAULT_HOST, DEFAULT_PORT, QUARTERS

logger = logging.getLogger(__name__)

STATUS_CODES = {
    IncompleteCallUpError: 409,
    CapacityError: 409,
    InvalidSubstitutionPairError: 409,
    StaleWriteError: 409,
    LineupValidationError: 400,
    NotFoundError: 404,
    PersistenceError: 503,
}


class WebAppState:
    """
    State holder for the web application.

    Builds every service from one ServiceFactory so they share the
    repository, the command manager and its undo history.
    """

    def __init__(self, repository: Optional[MatchRepository] = None,
                 roster_provider: Optional[RosterProvider] = None):
        self.service_factory = ServiceFactory(
            repository or InMemoryMatchRepository(), roster_provider
        )
        self.roster_provider = roster_provider

        services = self.service_factory.create_complete_service_suite()
        self.call_up_registry = services['call_ups']
        self.assignment_ledger = services['assignments']
        self.substitution_coordinator = services['substitutions']
        self.outcome_ledger = services['outcomes']
        self.report_service = services['reports']
        self.command_manager = services['commands']
        self.repository = services['repository']


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise LineupValidationError("Request body must be a JSON object")
    return data


def _int_field(data: Dict[str, Any], key: str, required: bool = True) -> Optional[int]:
    value = data.get(key)
    if value is None:
        if required:
            raise LineupValidationError(f"Field '{key}' is required")
        return None
    if isinstance(value, bool):
        raise LineupValidationError(f"Field '{key}' must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise LineupValidationError(f"Field '{key}' must be an integer") from exc


def _sheet_payload(sheet: MatchSheet) -> Dict[str, Any]:
    """Committed state of a match as shown by the lineup screen."""
    return {
        "match": sheet.match.to_dict(),
        "version": sheet.version,
        "call_ups": sorted(sheet.call_ups),
        "quarters": [
            {
                "quarter": quarter,
                "fractions": {
                    str(player_id): fraction.value
                    for player_id, fraction in sorted(sheet.quarter_fractions(quarter).items())
                },
                "occupancy": sheet.field_occupancy(quarter).to_dict(),
                "result": sheet.quarter_result(quarter).to_dict(),
            }
            for quarter in QUARTERS
        ],
        "substitutions": [sub.to_dict() for sub in sheet.substitutions],
        "goals": [goal.to_dict() for goal in sheet.goals],
        "score": sheet.score().to_dict(),
    }


def create_app(state: Optional[WebAppState] = None) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        state: Services to serve; a fresh in-memory state when omitted

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    app_state = state or WebAppState()
    app.config["APP_STATE"] = app_state

    @app.errorhandler(LineupError)
    def handle_lineup_error(exc: LineupError):
        status = STATUS_CODES.get(type(exc), 400)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, exc)
        return jsonify({"success": False, "error": exc.message, "kind": exc.kind}), status

    # ==================== Matches ==================== #

    @app.route("/api/matches", methods=["GET"])
    def list_matches():
        matches = []
        for match_id in app_state.repository.list_match_ids():
            matches.append(app_state.command_manager.view(match_id).match.to_dict())
        return jsonify({"success": True, "matches": matches})

    @app.route("/api/matches", methods=["POST"])
    def create_match():
        """Register a match with an empty lineup."""
        data = _json_body()
        try:
            match = Match.from_dict(data)
        except KeyError as exc:
            raise LineupValidationError(f"Field {exc} is required") from exc
        except (TypeError, ValueError) as exc:
            raise LineupValidationError(f"Invalid match data: {exc}") from exc
        sheet = app_state.repository.add_match(match)
        return jsonify({"success": True, "match": _sheet_payload(sheet)}), 201

    @app.route("/api/matches/<int:match_id>", methods=["GET"])
    def get_match(match_id: int):
        sheet = app_state.command_manager.view(match_id)
        return jsonify({"success": True, "match": _sheet_payload(sheet)})

    @app.route("/api/matches/<int:match_id>", methods=["DELETE"])
    def delete_match(match_id: int):
        app_state.repository.delete_match(match_id)
        app_state.command_manager.forget(match_id)
        return jsonify({"success": True, "message": f"Match {match_id} deleted"})

    # ==================== Call-ups ==================== #

    @app.route("/api/matches/<int:match_id>/call-ups", methods=["GET"])
    def get_call_ups(match_id: int):
        return jsonify({
            "success": True,
            "call_ups": app_state.call_up_registry.list_call_ups(match_id),
            "complete": app_state.call_up_registry.is_complete(match_id),
        })

    @app.route("/api/matches/<int:match_id>/call-ups", methods=["PUT"])
    def set_call_ups(match_id: int):
        data = _json_body()
        player_ids = data.get("player_ids")
        if not isinstance(player_ids, list):
            raise LineupValidationError("Field 'player_ids' must be a list")
        call_ups = app_state.call_up_registry.set_call_ups(match_id, player_ids)
        return jsonify({
            "success": True,
            "call_ups": call_ups,
            "complete": app_state.call_up_registry.is_complete(match_id),
        })

    # ==================== Quarter assignments ==================== #

    @app.route("/api/matches/<int:match_id>/quarters/<int:quarter>", methods=["GET"])
    def get_quarter(match_id: int, quarter: int):
        fractions = app_state.assignment_ledger.get(match_id, quarter)
        occupancy = app_state.assignment_ledger.field_occupancy(match_id, quarter)
        return jsonify({
            "success": True,
            "quarter": quarter,
            "fractions": {str(pid): fraction.value for pid, fraction in sorted(fractions.items())},
            "occupancy": occupancy.to_dict(),
        })

    @app.route(
        "/api/matches/<int:match_id>/quarters/<int:quarter>/players/<int:player_id>",
        methods=["PUT"],
    )
    def assign_fraction(match_id: int, quarter: int, player_id: int):
        """Set a player's fraction for a quarter."""
        data = _json_body()
        if "fraction" not in data:
            raise LineupValidationError("Field 'fraction' is required")
        fraction = app_state.assignment_ledger.assign(
            match_id, player_id, quarter, data["fraction"]
        )
        return jsonify({
            "success": True,
            "fraction": fraction.value,
            "occupancy": app_state.assignment_ledger.field_occupancy(match_id, quarter).to_dict(),
        })

    @app.route("/api/matches/<int:match_id>/periods", methods=["GET"])
    def get_periods_played(match_id: int):
        periods = app_state.assignment_ledger.periods_played_by_player(match_id)
        return jsonify({
            "success": True,
            "periods_played": {str(pid): value for pid, value in periods.items()},
        })

    @app.route("/api/matches/<int:match_id>/players/<int:player_id>/periods", methods=["GET"])
    def get_player_periods(match_id: int, player_id: int):
        return jsonify({
            "success": True,
            "player_id": player_id,
            "periods_played": app_state.assignment_ledger.periods_played(match_id, player_id),
        })

    # ==================== Substitutions ==================== #

    @app.route("/api/matches/<int:match_id>/substitutions", methods=["GET"])
    def list_substitutions(match_id: int):
        quarter = request.args.get("quarter", type=int)
        pairs = app_state.substitution_coordinator.list(match_id, quarter)
        return jsonify({"success": True, "substitutions": [sub.to_dict() for sub in pairs]})

    @app.route("/api/matches/<int:match_id>/quarters/<int:quarter>/substitutions",
               methods=["POST"])
    def apply_substitution(match_id: int, quarter: int):
        """Pair a field player with a bench player."""
        data = _json_body()
        substitution = app_state.substitution_coordinator.apply(
            match_id, quarter, _int_field(data, "player_out"), _int_field(data, "player_in")
        )
        return jsonify({"success": True, "substitution": substitution.to_dict()}), 201

    @app.route(
        "/api/matches/<int:match_id>/quarters/<int:quarter>/substitutions/"
        "<int:player_out>/<int:player_in>",
        methods=["DELETE"],
    )
    def remove_substitution(match_id: int, quarter: int, player_out: int, player_in: int):
        app_state.substitution_coordinator.remove(match_id, quarter, player_out, player_in)
        return jsonify({"success": True, "message": "Substitution removed"})

    # ==================== Outcome ==================== #

    @app.route("/api/matches/<int:match_id>/goals", methods=["GET"])
    def list_goals(match_id: int):
        quarter = request.args.get("quarter", type=int)
        goals = app_state.outcome_ledger.list_goals(match_id, quarter)
        return jsonify({"success": True, "goals": [goal.to_dict() for goal in goals]})

    @app.route("/api/matches/<int:match_id>/goals", methods=["POST"])
    def add_goal(match_id: int):
        data = _json_body()
        goal = app_state.outcome_ledger.add_goal(
            match_id,
            _int_field(data, "quarter"),
            _int_field(data, "scorer_id"),
            _int_field(data, "assister_id", required=False),
        )
        return jsonify({"success": True, "goal": goal.to_dict()}), 201

    @app.route("/api/goals/<goal_id>", methods=["DELETE"])
    def remove_goal(goal_id: str):
        app_state.outcome_ledger.remove_goal(goal_id)
        return jsonify({"success": True, "message": f"Goal {goal_id} removed"})

    @app.route("/api/matches/<int:match_id>/quarters/<int:quarter>/opponent-goals",
               methods=["PUT"])
    def set_opponent_goals(match_id: int, quarter: int):
        data = _json_body()
        count = data.get("count")
        if isinstance(count, bool) or not isinstance(count, int):
            raise LineupValidationError("Field 'count' must be a non-negative integer")
        app_state.outcome_ledger.set_opponent_goals(match_id, quarter, count)
        return jsonify({
            "success": True,
            "result": app_state.outcome_ledger.quarter_results(match_id)[quarter - 1].to_dict(),
        })

    @app.route("/api/matches/<int:match_id>/results", methods=["GET"])
    def get_results(match_id: int):
        results = app_state.outcome_ledger.quarter_results(match_id)
        return jsonify({
            "success": True,
            "quarters": [result.to_dict() for result in results],
            "totals": app_state.outcome_ledger.totals(match_id).to_dict(),
        })

    # ==================== Reports ==================== #

    @app.route("/api/matches/<int:match_id>/report", methods=["GET"])
    def get_report(match_id: int):
        report = app_state.report_service.generate_match_report(match_id)
        return jsonify({
            "success": True,
            "report": {
                "match_id": report.match_id,
                "opponent": report.opponent,
                "match_date": report.match_date.isoformat(),
                "called_up_count": report.called_up_count,
                "score": report.score.to_dict(),
                "target_periods_per_player": report.target_periods_per_player,
                "average_periods": report.average_periods,
                "min_periods": report.min_periods,
                "max_periods": report.max_periods,
                "fairness_counts": report.fairness_counts,
                "formations": [
                    {
                        "quarter": formation.quarter,
                        "formation_key": formation.formation_key,
                        "members": [
                            {"player_id": pid, "fraction": fraction.value}
                            for pid, fraction in formation.members
                        ],
                        "team_goals": formation.team_goals,
                        "opponent_goals": formation.opponent_goals,
                        "result": formation.result,
                    }
                    for formation in report.formations
                ],
                "players": [
                    {
                        "player_id": summary.player_id,
                        "name": summary.name,
                        "jersey_number": summary.jersey_number,
                        "called_up": summary.called_up,
                        "fractions": {
                            str(q): fraction.value for q, fraction in summary.fractions.items()
                        },
                        "periods_played": summary.periods_played,
                        "goals": summary.goals,
                        "assists": summary.assists,
                        "target_periods": summary.target_periods,
                        "delta_periods": summary.delta_periods,
                        "fairness": summary.fairness,
                    }
                    for summary in report.players
                ],
            },
        })

    @app.route("/api/matches/<int:match_id>/report.csv", methods=["GET"])
    def get_report_csv(match_id: int):
        try:
            csv_text = app_state.report_service.generate_report_csv(match_id)
        except ValueError as exc:
            return jsonify({"success": False, "error": str(exc)}), 400
        return app.response_class(
            csv_text,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=match_{match_id}_report.csv"},
        )

    @app.route("/api/matches/<int:match_id>/export", methods=["GET"])
    def get_export(match_id: int):
        """Raw ledger tables for the statistics consumer."""
        return jsonify({"success": True, "data": app_state.report_service.export_payload(match_id)})

    # ==================== History ==================== #

    @app.route("/api/undo", methods=["POST"])
    def undo_action():
        """Undo the last action."""
        if app_state.command_manager.undo():
            return jsonify({"success": True, "message": "Action undone"})
        return jsonify({"success": False, "message": "Nothing to undo"}), 400

    @app.route("/api/redo", methods=["POST"])
    def redo_action():
        """Redo the next action."""
        if app_state.command_manager.redo():
            return jsonify({"success": True, "message": "Action redone"})
        return jsonify({"success": False, "message": "Nothing to redo"}), 400

    @app.route("/api/command-history", methods=["GET"])
    def get_command_history():
        """Get command history for undo/redo UI."""
        return jsonify({
            "success": True,
            "history": app_state.command_manager.get_command_history(),
            "can_undo": app_state.command_manager.can_undo(),
            "can_redo": app_state.command_manager.can_redo(),
        })

    # ==================== Roster ==================== #

    @app.route("/api/teams/<int:team_id>/players", methods=["GET"])
    def get_team_players(team_id: int):
        if app_state.roster_provider is None:
            return jsonify({"success": True, "players": []})
        players = app_state.roster_provider.players_for_team(team_id)
        return jsonify({"success": True, "players": [player.to_dict() for player in players]})

    return app


def run_web_app(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT,
                data_dir: Optional[str] = None) -> None:
    """
    Run the web application.

    Args:
        host: Host address to bind to (default: localhost only)
        port: Port number to listen on
        data_dir: Directory holding one JSON document per match; matches
            are kept in memory when omitted
    """
    repository = JsonMatchRepository(data_dir) if data_dir else InMemoryMatchRepository()
    logger.info("Starting Coachboard on %s:%s (data: %s)", host, port, data_dir or "memory")
    app = create_app(WebAppState(repository))
    app.run(host=host, port=port, debug=False)
