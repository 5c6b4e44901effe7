import pytest
from datetime import date

from app.models.leave_request import LeaveRequest, LeaveStatus
from app.services.reason_tags import migrate_tagged_reasons, parse_tagged_reason


def test_parse_both_tags():
    parsed = parse_tagged_reason("[LEAVETYPE:3][STATUS:approved] Family wedding")
    assert parsed.leave_type_ref == "3"
    assert parsed.status == LeaveStatus.APPROVED
    assert parsed.reason == "Family wedding"
    assert parsed.tagged is True


def test_parse_plain_reason():
    parsed = parse_tagged_reason("Dentist")
    assert parsed.tagged is False
    assert parsed.leave_type_ref is None
    assert parsed.status == LeaveStatus.PENDING
    assert parsed.reason == "Dentist"


def test_parse_unknown_status_falls_back_to_pending():
    parsed = parse_tagged_reason("[STATUS:escalated]")
    assert parsed.status == LeaveStatus.PENDING
    assert parsed.reason is None


def _legacy(db_session, reason, leave_type_id=None):
    leave = LeaveRequest(
        employee_id="alice",
        leave_type_id=leave_type_id,
        start_date=date(2026, 3, 9),
        end_date=date(2026, 3, 13),
        total_days=5,
        reason=reason,
        status=LeaveStatus.PENDING.value,
    )
    db_session.add(leave)
    db_session.commit()
    return leave.id


def test_migration_moves_tags_into_columns(db_session, annual_leave, personal_leave):
    by_id = _legacy(db_session, f"[LEAVETYPE:{annual_leave.id}][STATUS:approved] Family wedding")
    by_code = _legacy(db_session, "[LEAVETYPE:pl][STATUS:rejected]")
    unknown = _legacy(db_session, "[LEAVETYPE:ZZ] Mystery")
    plain = _legacy(db_session, "Just a reason")

    stats = migrate_tagged_reasons(db_session)
    assert stats == {"scanned": 3, "migrated": 3, "unresolved_type": 1}

    db_session.expire_all()
    first = db_session.get(LeaveRequest, by_id)
    assert (first.leave_type_id, first.status, first.reason) == (annual_leave.id, "approved", "Family wedding")
    second = db_session.get(LeaveRequest, by_code)
    assert (second.leave_type_id, second.status, second.reason) == (personal_leave.id, "rejected", None)
    third = db_session.get(LeaveRequest, unknown)
    assert (third.leave_type_id, third.reason) == (None, "Mystery")
    assert db_session.get(LeaveRequest, plain).reason == "Just a reason"

    # Second run finds nothing left to do
    assert migrate_tagged_reasons(db_session)["migrated"] == 0


def test_migration_dry_run_writes_nothing(db_session, annual_leave):
    leave_id = _legacy(db_session, "[STATUS:approved] Holiday")
    stats = migrate_tagged_reasons(db_session, dry_run=True)
    assert stats["migrated"] == 1

    db_session.expire_all()
    leave = db_session.get(LeaveRequest, leave_id)
    assert (leave.status, leave.reason) == ("pending", "[STATUS:approved] Holiday")
