"""Match reports and statistics export for the lineup and outcome ledgers."""

from __future__ import annotations

import csv
import io
import statistics
from collections import Counter
from typing import Any, Dict, List, Optional, Protocol

from ..models import (
    FormationSnapshot, Fraction, MatchReport, MatchSheet, PlayerMatchSummary
)
from ..utils import (
    APP_TITLE, FAIRNESS_THRESHOLD_PERIODS, FIELD_SLOTS, QUARTER_LABELS, QUARTERS,
    fmt_ts, now_ts
)
from .match_commands import MatchCommandManager
from .roster_service import RosterProvider


class ExportServiceInterface(Protocol):
    """Interface for report export."""

    def export_to_csv(self, report: MatchReport) -> str:
        """Export report to CSV format."""
        ...


FAIRNESS_ORDER = {"under": 0, "ok": 1, "over": 2}


class MatchReportExporter:
    """Short player table: periods, target, delta and fairness."""

    HEADER = ["Name", "Periods Played", "Target Periods", "Delta", "Fairness Status"]

    def export_to_csv(self, report: MatchReport) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(self.HEADER)
        for summary in report.players:
            writer.writerow(
                [
                    summary.name,
                    f"{summary.periods_played:.1f}",
                    f"{summary.target_periods:.2f}",
                    f"{summary.delta_periods:+.2f}",
                    summary.fairness,
                ]
            )
        csv_text = buffer.getvalue()
        buffer.close()
        return csv_text


class MatchReportService:
    """
    Build match reports from committed match sheets.

    Reports are always generated from the command manager's known-good view,
    so the statistics consumer never sees a write that did not land.
    """

    def __init__(
        self,
        command_manager: MatchCommandManager,
        roster_provider: Optional[RosterProvider] = None,
        export_service: Optional[ExportServiceInterface] = None,
    ) -> None:
        self.command_manager = command_manager
        self.roster_provider = roster_provider
        self.export_service = export_service or MatchReportExporter()

    def generate_match_report(self, match_id: int) -> MatchReport:
        """Build a :class:`MatchReport` snapshot for a match."""

        sheet = self.command_manager.view(match_id)
        player_ids = sorted(
            set(sheet.call_ups) | {player_id for player_id, _ in sheet.assignments}
        )
        called_up_count = len(sheet.call_ups)

        # Four quarters of seven slots shared equally among the call-ups
        target_per_player = (
            len(QUARTERS) * FIELD_SLOTS / called_up_count if called_up_count else 0.0
        )

        goals = Counter(goal.scorer_id for goal in sheet.goals)
        assists = Counter(
            goal.assister_id for goal in sheet.goals if goal.assister_id is not None
        )

        summaries: List[PlayerMatchSummary] = []
        for player_id in player_ids:
            periods = sheet.periods_played(player_id)
            called_up = player_id in sheet.call_ups
            delta = periods - target_per_player if called_up else 0.0
            name, jersey_number = self._describe_player(player_id)
            summaries.append(
                PlayerMatchSummary(
                    player_id=player_id,
                    name=name,
                    jersey_number=jersey_number,
                    called_up=called_up,
                    fractions={q: sheet.fraction_of(player_id, q) for q in QUARTERS},
                    periods_played=periods,
                    goals=goals.get(player_id, 0),
                    assists=assists.get(player_id, 0),
                    target_periods=target_per_player if called_up else 0.0,
                    delta_periods=delta,
                    fairness=self._classify_fairness(delta) if called_up else "not called up",
                )
            )

        summaries.sort(
            key=lambda item: (
                FAIRNESS_ORDER.get(item.fairness, 3),
                item.delta_periods,
                item.name,
            )
        )

        totals = [summary.periods_played for summary in summaries if summary.called_up]
        fairness_counter = Counter(
            summary.fairness for summary in summaries if summary.called_up
        )
        fairness_counts = {
            "under": fairness_counter.get("under", 0),
            "ok": fairness_counter.get("ok", 0),
            "over": fairness_counter.get("over", 0),
        }

        return MatchReport(
            generated_ts=now_ts(),
            match_id=sheet.match_id,
            team_id=sheet.match.team_id,
            opponent=sheet.match.opponent,
            match_date=sheet.match.match_date,
            called_up_count=called_up_count,
            score=sheet.score(),
            formations=[self._formation(sheet, quarter) for quarter in QUARTERS],
            players=summaries,
            target_periods_per_player=target_per_player,
            average_periods=statistics.mean(totals) if totals else 0.0,
            min_periods=min(totals) if totals else 0.0,
            max_periods=max(totals) if totals else 0.0,
            fairness_counts=fairness_counts,
        )

    def generate_report_csv(self, match_id: int, report: Optional[MatchReport] = None) -> str:
        """Return a CSV document describing a match report.

        Args:
            match_id: Match to report on
            report: Optional pre-generated :class:`MatchReport` snapshot.

        Returns:
            CSV formatted string containing summary information, one row per
            quarter and a table of player level metrics.

        Raises:
            ValueError: If nobody is called up for the match.
        """

        report = report or self.generate_match_report(match_id)
        if report.called_up_count == 0:
            raise ValueError("Cannot export a report without any called-up players")

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")

        writer.writerow([f"{APP_TITLE} Match Report"])
        writer.writerow(["Generated", fmt_ts(report.generated_ts)])
        writer.writerow(["Match", report.match_id])
        writer.writerow(["Date", report.match_date.isoformat()])
        writer.writerow(["Opponent", report.opponent])
        writer.writerow(["Called Up", report.called_up_count])
        writer.writerow(["Score", f"{report.score.team_goals}-{report.score.opponent_goals}"])
        writer.writerow(["Result", report.score.result])
        writer.writerow(["Target Periods Per Player", round(report.target_periods_per_player, 2)])
        writer.writerow(["Average Periods", round(report.average_periods, 2)])
        writer.writerow(["Minimum Periods", report.min_periods])
        writer.writerow(["Maximum Periods", report.max_periods])

        fairness_counts = report.fairness_counts or {}
        writer.writerow(["Players Under Target", fairness_counts.get("under", 0)])
        writer.writerow(["Players On Target", fairness_counts.get("ok", 0)])
        writer.writerow(["Players Over Target", fairness_counts.get("over", 0)])
        writer.writerow([])

        writer.writerow(["Quarter", "Team Goals", "Opponent Goals", "Result", "Formation"])
        for formation in report.formations:
            writer.writerow(
                [
                    formation.quarter,
                    formation.team_goals,
                    formation.opponent_goals,
                    formation.result,
                    formation.formation_key,
                ]
            )
        writer.writerow([])

        writer.writerow(
            ["Name", "Number", "Called Up"]
            + [QUARTER_LABELS[quarter] for quarter in QUARTERS]
            + ["Periods Played", "Goals", "Assists", "Target Periods", "Delta", "Fairness"]
        )
        for summary in report.players:
            writer.writerow(
                [
                    summary.name,
                    summary.jersey_number if summary.jersey_number is not None else "",
                    "yes" if summary.called_up else "no",
                ]
                + [self._fraction_cell(summary.fractions[q]) for q in QUARTERS]
                + [
                    summary.periods_played,
                    summary.goals,
                    summary.assists,
                    round(summary.target_periods, 2),
                    round(summary.delta_periods, 2),
                    summary.fairness,
                ]
            )

        csv_text = buffer.getvalue()
        buffer.close()
        return csv_text

    def export_match_report_csv(self, match_id: int) -> str:
        """Short CSV produced by the injected export service."""
        return self.export_service.export_to_csv(self.generate_match_report(match_id))

    def export_payload(self, match_id: int) -> Dict[str, Any]:
        """
        Raw tables for the statistics consumer.

        Rows are keyed by (match, quarter, player) exactly as stored, with
        team goals added to each quarter result.
        """
        sheet = self.command_manager.view(match_id)
        stored = sheet.to_json()
        return {
            "match": stored["match"],
            "call_ups": stored["call_ups"],
            "periods": stored["periods"],
            "substitutions": [
                {key: value for key, value in row.items() if key != "player_in_previous"}
                for row in stored["substitutions"]
            ],
            "goals": stored["goals"],
            "quarter_results": [sheet.quarter_result(q).to_dict() for q in QUARTERS],
            "score": sheet.score().to_dict(),
        }

    def _describe_player(self, player_id: int):
        player = self.roster_provider.get_player(player_id) if self.roster_provider else None
        if player is None:
            return f"Player {player_id}", None
        return player.full_name, player.jersey_number

    @staticmethod
    def _formation(sheet: MatchSheet, quarter: int) -> FormationSnapshot:
        occupancy = sheet.field_occupancy(quarter)
        members = sorted(
            (player_id, sheet.fraction_of(player_id, quarter))
            for player_id in occupancy.full_players | occupancy.paired_players
        )
        result = sheet.quarter_result(quarter)
        return FormationSnapshot(
            quarter=quarter,
            members=members,
            team_goals=result.team_goals,
            opponent_goals=result.opponent_goals,
        )

    @staticmethod
    def _fraction_cell(fraction: Fraction) -> str:
        return "" if fraction is Fraction.NONE else fraction.value

    @staticmethod
    def _classify_fairness(delta_periods: float) -> str:
        if delta_periods <= -FAIRNESS_THRESHOLD_PERIODS:
            return "under"
        if delta_periods >= FAIRNESS_THRESHOLD_PERIODS:
            return "over"
        return "ok"
