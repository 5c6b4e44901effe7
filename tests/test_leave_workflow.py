import pytest
from datetime import date
from sqlalchemy import text

from app.core.exceptions import (
    AccessDeniedError,
    ConcurrencyConflictError,
    InvalidRangeError,
    InvalidTransitionError,
    NotFoundError,
    PolicyViolationError,
)
from app.models.leave_request import LeaveStatus
from app.schemas.admin import AppSettingsUpdate
from app.services import balance_ledger
from app.services.balance_ledger import BalanceLedgerService
from app.services.leave_workflow import LeaveWorkflowService, can_transition
from app.services.settings_service import SettingsService

MONDAY = date(2026, 3, 9)
FRIDAY = date(2026, 3, 13)


def _submit(workflow, leave_type, employee_id="alice", start=MONDAY, end=FRIDAY, **kwargs):
    return workflow.submit(employee_id=employee_id, leave_type_id=leave_type.id, start_date=start, end_date=end, **kwargs)


def _balance(db_session, leave_type, employee_id="alice"):
    db_session.expire_all()
    return BalanceLedgerService(db_session).get_balance(employee_id, leave_type.id, 2026)


def test_transition_table():
    assert can_transition("pending", "approved")
    assert can_transition("pending", "rejected")
    assert can_transition("pending", "cancelled")
    assert can_transition("approved", "cancelled")
    assert not can_transition("approved", "rejected")
    assert not can_transition("rejected", "approved")
    assert not can_transition("cancelled", "pending")


def test_submit_approve_cancel_scenario(db_session, annual_leave, make_balance):
    """Entitlement 20: submit 5, approve, then cancel restores everything."""
    make_balance("alice", annual_leave, entitlement=20)
    workflow = LeaveWorkflowService(db_session)

    leave = _submit(workflow, annual_leave)
    assert leave.status == LeaveStatus.PENDING.value
    assert leave.total_days == 5
    balance = _balance(db_session, annual_leave)
    assert (balance.pending, balance.available) == (5, 15)

    workflow.approve(leave.id, approver_id="mgr", approver_name="Manager", comments="Enjoy")
    balance = _balance(db_session, annual_leave)
    assert (balance.used, balance.pending, balance.available) == (5, 0, 15)
    assert leave.approved_at is not None
    assert leave.approver_name == "Manager"

    workflow.cancel(leave.id)
    balance = _balance(db_session, annual_leave)
    assert (balance.used, balance.pending, balance.available) == (0, 0, 20)
    assert leave.status == LeaveStatus.CANCELLED.value
    assert leave.cancelled_at is not None


def test_reject_releases_pending(db_session, annual_leave, make_balance):
    make_balance("alice", annual_leave, entitlement=20)
    workflow = LeaveWorkflowService(db_session)
    leave = _submit(workflow, annual_leave)

    workflow.reject(leave.id, approver_id="mgr", comments="Busy week")
    balance = _balance(db_session, annual_leave)
    assert (balance.pending, balance.used, balance.available) == (0, 0, 20)
    assert leave.approver_comments == "Busy week"


def test_cancel_pending_releases_pending(db_session, annual_leave, make_balance):
    make_balance("alice", annual_leave, entitlement=20)
    workflow = LeaveWorkflowService(db_session)
    leave = _submit(workflow, annual_leave)

    workflow.cancel(leave.id)
    balance = _balance(db_session, annual_leave)
    assert (balance.pending, balance.available) == (0, 20)


def test_max_days_per_request_leaves_balance_unchanged(db_session, personal_leave, make_balance):
    make_balance("alice", personal_leave, entitlement=10)
    workflow = LeaveWorkflowService(db_session)

    with pytest.raises(PolicyViolationError):
        _submit(workflow, personal_leave, start=MONDAY, end=date(2026, 3, 12))

    balance = _balance(db_session, personal_leave)
    assert (balance.pending, balance.used, balance.available) == (0, 0, 10)
    assert workflow.list_requests(employee_id="alice") == []


def test_submit_rejects_bad_input(db_session, annual_leave, make_balance):
    make_balance("alice", annual_leave)
    workflow = LeaveWorkflowService(db_session)

    with pytest.raises(InvalidRangeError):
        _submit(workflow, annual_leave, start=FRIDAY, end=MONDAY)
    with pytest.raises(PolicyViolationError):
        # Weekend only
        _submit(workflow, annual_leave, start=date(2026, 3, 14), end=date(2026, 3, 15))
    with pytest.raises(NotFoundError):
        workflow.submit("alice", 999, MONDAY, FRIDAY)


def test_submit_inactive_leave_type(db_session, annual_leave, make_balance):
    make_balance("alice", annual_leave)
    annual_leave.is_active = False
    db_session.commit()

    with pytest.raises(PolicyViolationError):
        _submit(LeaveWorkflowService(db_session), annual_leave)


def test_submit_without_balance(db_session, annual_leave):
    with pytest.raises(NotFoundError):
        _submit(LeaveWorkflowService(db_session), annual_leave)


def test_illegal_transitions(db_session, annual_leave, make_balance):
    make_balance("alice", annual_leave)
    workflow = LeaveWorkflowService(db_session)

    rejected = _submit(workflow, annual_leave)
    workflow.reject(rejected.id, approver_id="mgr")
    with pytest.raises(InvalidTransitionError):
        workflow.approve(rejected.id, approver_id="mgr")
    with pytest.raises(InvalidTransitionError):
        workflow.cancel(rejected.id)

    approved = _submit(workflow, annual_leave)
    workflow.approve(approved.id, approver_id="mgr")
    with pytest.raises(InvalidTransitionError):
        workflow.approve(approved.id, approver_id="mgr")
    with pytest.raises(InvalidTransitionError):
        workflow.reject(approved.id, approver_id="mgr")

    workflow.cancel(approved.id)
    with pytest.raises(InvalidTransitionError) as exc:
        workflow.cancel(approved.id)
    assert exc.value.status_code == 409


def test_self_approval_is_blocked_by_default(db_session, annual_leave, make_balance):
    make_balance("alice", annual_leave)
    workflow = LeaveWorkflowService(db_session)
    leave = _submit(workflow, annual_leave)

    with pytest.raises(AccessDeniedError):
        workflow.approve(leave.id, approver_id="alice")

    SettingsService(db_session).update_settings(AppSettingsUpdate(allow_self_approval=True))
    approved = LeaveWorkflowService(db_session).approve(leave.id, approver_id="alice")
    assert approved.status == LeaveStatus.APPROVED.value


def test_auto_approve_when_leave_type_needs_no_approval(db_session, annual_leave, make_balance):
    annual_leave.requires_approval = False
    db_session.commit()
    make_balance("alice", annual_leave, entitlement=20)
    workflow = LeaveWorkflowService(db_session)

    leave = workflow.auto_approve(_submit(workflow, annual_leave))
    assert leave.status == LeaveStatus.APPROVED.value
    assert leave.approver_id == "system"
    balance = _balance(db_session, annual_leave)
    assert (balance.used, balance.pending) == (5, 0)


def test_auto_approve_leaves_pending_when_approval_required(db_session, annual_leave, make_balance):
    make_balance("alice", annual_leave)
    workflow = LeaveWorkflowService(db_session)
    leave = workflow.auto_approve(_submit(workflow, annual_leave))
    assert leave.status == LeaveStatus.PENDING.value


def test_concurrent_balance_change_aborts_approval(db_session, annual_leave, make_balance):
    make_balance("alice", annual_leave, entitlement=20)
    workflow = LeaveWorkflowService(db_session)
    leave = _submit(workflow, annual_leave)

    balance = _balance(db_session, annual_leave)
    assert balance.version is not None
    # Another writer bumps the row behind this session's back
    db_session.execute(
        text("UPDATE leave_balances SET version = version + 1 WHERE id = :id"),
        {"id": balance.id},
    )

    with pytest.raises(ConcurrencyConflictError):
        workflow.approve(leave.id, approver_id="mgr")

    db_session.expire_all()
    assert workflow.get_request(leave.id).status == LeaveStatus.PENDING.value
    balance = _balance(db_session, annual_leave)
    assert (balance.pending, balance.used) == (5, 0)


def test_transitions_keep_the_balance_year_charged_at_submit(db_session, annual_leave, make_balance):
    make_balance("alice", annual_leave, year=2025, entitlement=20)
    make_balance("alice", annual_leave, year=2026, entitlement=20)
    first = _submit(LeaveWorkflowService(db_session), annual_leave, start=date(2026, 3, 2), end=date(2026, 3, 6))
    second = _submit(LeaveWorkflowService(db_session), annual_leave)
    assert (first.leave_year, second.leave_year) == (2026, 2026)

    # The leave year now starts in April, so March 2026 falls in 2025
    SettingsService(db_session).update_settings(AppSettingsUpdate(financial_year_start="04-06"))
    workflow = LeaveWorkflowService(db_session)
    assert workflow.leave_year(date(2026, 3, 2)) == 2025

    workflow.cancel(first.id)
    workflow.approve(second.id, approver_id="mgr")

    db_session.expire_all()
    ledger = BalanceLedgerService(db_session)
    current = ledger.get_balance("alice", annual_leave.id, 2026)
    previous = ledger.get_balance("alice", annual_leave.id, 2025)
    assert (current.pending, current.used) == (0, 5)
    assert (previous.pending, previous.used) == (0, 0)


def test_available_holds_through_mixed_transitions(db_session, annual_leave, make_balance):
    make_balance("alice", annual_leave, entitlement=20, carry_over=2)
    workflow = LeaveWorkflowService(db_session)

    def snapshot():
        balance = _balance(db_session, annual_leave)
        return balance.used, balance.pending, balance_ledger.available(balance)

    first = _submit(workflow, annual_leave)                                                  # 5 days
    second = _submit(workflow, annual_leave, start=date(2026, 4, 6), end=date(2026, 4, 8))   # 3 days
    third = _submit(workflow, annual_leave, start=date(2026, 5, 4), end=date(2026, 5, 5))    # 2 days
    assert snapshot() == (0, 10, 12)

    workflow.approve(first.id, approver_id="mgr")
    assert snapshot() == (5, 5, 12)

    workflow.reject(third.id, approver_id="mgr")
    assert snapshot() == (5, 3, 14)

    # Cancelling approved leave gives back used days; the open reservation stays put
    workflow.cancel(first.id)
    assert snapshot() == (0, 3, 19)

    workflow.cancel(second.id)
    assert snapshot() == (0, 0, 22)
