import pytest
from datetime import date
from types import SimpleNamespace

from app.core.exceptions import InvalidRangeError
from app.models.leave_request import LeaveRequest, LeaveStatus
from app.services.conflict_analyzer import (
    ConflictSeverity,
    ConflictThresholds,
    TeamConflictService,
    analyze_conflicts,
    coverage_percent,
    team_availability,
)

START = date(2026, 3, 9)
END = date(2026, 3, 13)


def _leave(employee_id, start, end, half_day_start=False):
    return SimpleNamespace(
        employee_id=employee_id,
        employee_name=employee_id.title(),
        leave_type_id=1,
        status="approved",
        start_date=start,
        end_date=end,
        half_day_start=half_day_start,
    )


def test_no_overlap_is_low_without_conflict():
    analysis = analyze_conflicts(START, END, [], team_size=4)
    assert analysis.has_conflict is False
    assert analysis.severity == ConflictSeverity.LOW
    assert analysis.team_coverage_percent == 0


def test_one_of_four_is_medium():
    requests = [_leave("bob", date(2026, 3, 12), date(2026, 3, 16))]
    analysis = analyze_conflicts(START, END, requests, team_size=4)
    assert analysis.has_conflict is True
    assert analysis.team_coverage_percent == 25
    assert analysis.severity == ConflictSeverity.MEDIUM
    assert len(analysis.overlapping_requests) == 1


def test_two_of_four_is_high_with_suggestions():
    requests = [
        _leave("bob", date(2026, 3, 12), date(2026, 3, 16)),
        _leave("carol", date(2026, 3, 9), date(2026, 3, 9)),
    ]
    analysis = analyze_conflicts(START, END, requests, team_size=4)
    assert analysis.team_coverage_percent == 50
    assert analysis.severity == ConflictSeverity.HIGH
    assert analysis.suggestions


def test_one_colleague_with_two_requests_counts_once():
    requests = [
        _leave("bob", date(2026, 3, 9), date(2026, 3, 9)),
        _leave("bob", date(2026, 3, 12), date(2026, 3, 12)),
    ]
    analysis = analyze_conflicts(START, END, requests, team_size=4)
    assert len(analysis.overlapping_requests) == 2
    assert analysis.team_coverage_percent == 25
    assert analysis.severity == ConflictSeverity.MEDIUM


def test_intervals_touching_on_a_single_day_overlap():
    requests = [_leave("bob", END, date(2026, 3, 20))]
    assert analyze_conflicts(START, END, requests, team_size=4).has_conflict


def test_adjacent_intervals_do_not_overlap():
    requests = [_leave("bob", date(2026, 3, 14), date(2026, 3, 20))]
    analysis = analyze_conflicts(START, END, requests, team_size=4)
    assert analysis.has_conflict is False


def test_half_day_absence_still_counts_as_overlap():
    requests = [_leave("bob", END, END, half_day_start=True)]
    assert analyze_conflicts(START, END, requests, team_size=4).has_conflict


def test_custom_thresholds():
    requests = [_leave("bob", START, END)]
    thresholds = ConflictThresholds(warning_percent=10, critical_percent=20)
    analysis = analyze_conflicts(START, END, requests, team_size=4, thresholds=thresholds)
    assert analysis.severity == ConflictSeverity.HIGH


def test_coverage_rounding_and_empty_team():
    assert coverage_percent(1, 3) == 33
    assert coverage_percent(2, 3) == 67
    assert coverage_percent(1, 8) == 13  # 12.5 rounds half up
    assert coverage_percent(3, 0) == 0
    assert coverage_percent(5, 4) == 100


def test_invalid_range():
    with pytest.raises(InvalidRangeError):
        analyze_conflicts(END, START, [], team_size=4)


def test_team_availability_counts_each_day():
    members = [SimpleNamespace(employee_id=e, display_name=e.title()) for e in ("alice", "bob", "carol")]
    requests = [_leave("bob", date(2026, 3, 10), date(2026, 3, 11))]
    days = team_availability(date(2026, 3, 9), date(2026, 3, 11), members, requests)
    assert [d["available_members"] for d in days] == [3, 2, 2]
    assert days[1]["on_leave"][0]["employee_id"] == "bob"


def _request(db_session, employee_id, status, start=START, end=END, team_id="team-a"):
    leave = LeaveRequest(
        employee_id=employee_id,
        team_id=team_id,
        start_date=start,
        end_date=end,
        total_days=5,
        status=status,
    )
    db_session.add(leave)
    db_session.commit()
    return leave


def test_service_ignores_own_rejected_and_other_team_requests(db_session, make_employee):
    for name in ("alice", "bob", "carol", "dave"):
        make_employee(name)
    make_employee("erin", team_id="team-b")

    _request(db_session, "alice", LeaveStatus.PENDING.value)           # requester
    _request(db_session, "bob", LeaveStatus.APPROVED.value)
    _request(db_session, "carol", LeaveStatus.REJECTED.value)
    _request(db_session, "dave", LeaveStatus.CANCELLED.value)
    _request(db_session, "erin", LeaveStatus.APPROVED.value, team_id="team-b")

    analysis = TeamConflictService(db_session).analyze("alice", "team-a", START, END)
    assert [r.employee_id for r in analysis.overlapping_requests] == ["bob"]
    assert analysis.team_coverage_percent == 25
    assert analysis.severity == ConflictSeverity.MEDIUM


def test_service_disabled_reports_nothing(db_session, make_employee):
    make_employee("alice")
    make_employee("bob")
    _request(db_session, "bob", LeaveStatus.APPROVED.value)

    analysis = TeamConflictService(db_session, enabled=False).analyze("alice", "team-a", START, END)
    assert analysis.has_conflict is False
