"""
Team conflict analysis.

analyze_conflicts() is pure: given a candidate date range, the team's live
requests and the team size, it reports how many colleagues are already off
and how serious that is. TeamConflictService fetches those inputs.
"""
import enum
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from app.core.exceptions import InvalidRangeError
from app.models.employee import Employee
from app.models.leave_request import LeaveRequest, ACTIVE_STATUSES
from app.services.base import BaseService
from app.services.working_days import iter_dates


class ConflictSeverity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class ConflictThresholds:
    warning_percent: float = 25.0
    critical_percent: float = 50.0


@dataclass
class ConflictAnalysis:
    has_conflict: bool
    severity: ConflictSeverity
    overlapping_requests: List[Any]
    team_coverage_percent: int
    message: str
    suggestions: List[str] = field(default_factory=list)


def overlaps(start: date, end: date, other_start: date, other_end: date) -> bool:
    """Inclusive interval intersection. Half days still count as the whole day."""
    return start <= other_end and end >= other_start


def coverage_percent(absent: int, team_size: int) -> int:
    """Share of the team absent, rounded half up and capped at 100."""
    if team_size <= 0:
        return 0
    return min(100, math.floor(100 * absent / team_size + 0.5))


def classify_severity(percent: float, thresholds: ConflictThresholds) -> ConflictSeverity:
    if percent >= thresholds.critical_percent:
        return ConflictSeverity.HIGH
    if percent >= thresholds.warning_percent:
        return ConflictSeverity.MEDIUM
    return ConflictSeverity.LOW


def _describe(severity: ConflictSeverity, overlapping: int, percent: int):
    if overlapping == 0:
        return "No team members are off during this period.", []
    people = "team member" if overlapping == 1 else "team members"
    if severity == ConflictSeverity.HIGH:
        return (
            f"Critical: {percent}% of your team will be unavailable during this period.",
            ["Consider adjusting your dates", "Check with your manager before submitting"],
        )
    if severity == ConflictSeverity.MEDIUM:
        return f"{overlapping} {people} already have leave booked during this period.", []
    return f"{overlapping} {people} also off during this period.", []


def analyze_conflicts(
    candidate_start: date,
    candidate_end: date,
    team_requests: Sequence[Any],
    team_size: int,
    thresholds: Optional[ConflictThresholds] = None,
) -> ConflictAnalysis:
    """
    team_requests must already be limited to the team's approved/pending
    requests, excluding the requester's own. Each item needs employee_id,
    start_date and end_date attributes. Coverage counts people, so several
    requests from one colleague count once.
    """
    if candidate_start > candidate_end:
        raise InvalidRangeError()
    thresholds = thresholds or ConflictThresholds()

    overlapping = [
        r for r in team_requests
        if overlaps(candidate_start, candidate_end, r.start_date, r.end_date)
    ]
    absent = {r.employee_id for r in overlapping}
    percent = coverage_percent(len(absent), team_size)
    severity = classify_severity(percent, thresholds)
    message, suggestions = _describe(severity, len(absent), percent)

    return ConflictAnalysis(
        has_conflict=len(overlapping) > 0,
        severity=severity,
        overlapping_requests=overlapping,
        team_coverage_percent=percent,
        message=message,
        suggestions=suggestions,
    )


def no_conflict() -> ConflictAnalysis:
    return ConflictAnalysis(
        has_conflict=False,
        severity=ConflictSeverity.LOW,
        overlapping_requests=[],
        team_coverage_percent=0,
        message="",
    )


def team_availability(
    start: date,
    end: date,
    team_members: Sequence[Employee],
    team_requests: Sequence[Any],
) -> List[Dict[str, Any]]:
    """Per-day headcount for a team calendar."""
    if start > end:
        raise InvalidRangeError()

    names = {m.employee_id: m.display_name for m in team_members}
    days = []
    for day in iter_dates(start, end):
        on_leave = [
            {
                "employee_id": r.employee_id,
                "employee_name": r.employee_name or names.get(r.employee_id),
                "leave_type_id": r.leave_type_id,
                "status": r.status,
            }
            for r in team_requests
            if r.start_date <= day <= r.end_date
        ]
        absent = {entry["employee_id"] for entry in on_leave}
        total = len(team_members)
        days.append({
            "date": day,
            "total_members": total,
            "available_members": max(total - len(absent), 0),
            "on_leave": on_leave,
        })
    return days


class TeamConflictService(BaseService):
    def __init__(self, db: Session, thresholds: Optional[ConflictThresholds] = None, enabled: bool = True):
        super().__init__(db)
        self.thresholds = thresholds or ConflictThresholds()
        self.enabled = enabled

    def team_members(self, team_id: Optional[str]) -> List[Employee]:
        if not team_id:
            return []
        return self.db.query(Employee).filter(
            Employee.team_id == team_id,
            Employee.is_active.is_(True),
        ).order_by(Employee.display_name).all()

    def team_requests(
        self,
        team_id: Optional[str],
        start: date,
        end: date,
        exclude_employee_id: Optional[str] = None,
    ) -> List[LeaveRequest]:
        """Approved and pending requests in the team that touch [start, end]."""
        if not team_id:
            return []
        query = self.db.query(LeaveRequest).filter(
            LeaveRequest.team_id == team_id,
            LeaveRequest.status.in_(ACTIVE_STATUSES),
            LeaveRequest.start_date <= end,
            LeaveRequest.end_date >= start,
        )
        if exclude_employee_id:
            query = query.filter(LeaveRequest.employee_id != exclude_employee_id)
        return query.order_by(LeaveRequest.start_date, LeaveRequest.id).all()

    def analyze(self, employee_id: str, team_id: Optional[str], start: date, end: date) -> ConflictAnalysis:
        if start > end:
            raise InvalidRangeError()
        if not self.enabled:
            return no_conflict()

        requests = self.team_requests(team_id, start, end, exclude_employee_id=employee_id)
        team_size = len(self.team_members(team_id))
        analysis = analyze_conflicts(start, end, requests, team_size, self.thresholds)

        if analysis.has_conflict:
            self._logger.info(
                f"Conflict check for {employee_id}: {analysis.severity.value} ({analysis.team_coverage_percent}%)",
                extra={"employee_id": employee_id, "team_id": team_id, "overlapping": len(requests)},
            )
        return analysis

    def availability(self, team_id: Optional[str], start: date, end: date) -> List[Dict[str, Any]]:
        if start > end:
            raise InvalidRangeError()
        return team_availability(start, end, self.team_members(team_id), self.team_requests(team_id, start, end))
