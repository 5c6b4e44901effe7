"""
Leave request lifecycle.

    pending  -> approved | rejected | cancelled
    approved -> cancelled
    rejected, cancelled: terminal

Every transition updates the request and its balance inside one
transaction. Both rows are version-checked, so a concurrent change to
either one aborts the whole transition instead of losing an update.
"""
from datetime import date, datetime, timezone
from typing import Dict, FrozenSet, List, Optional, Set

from sqlalchemy.orm import Session

from app.core.config import Config, settings as app_config
from app.core.exceptions import (
    AccessDeniedError,
    InvalidRangeError,
    InvalidTransitionError,
    NotFoundError,
    PolicyViolationError,
)
from app.models.leave_balance import LeaveBalance
from app.models.leave_request import LeaveRequest, LeaveStatus
from app.models.leave_type import LeaveType
from app.schemas.admin import AppSettings
from app.services import balance_ledger
from app.services.balance_ledger import BalanceLedgerService
from app.services.base import BaseService
from app.services.leave_catalog import HolidayService
from app.services.settings_service import SettingsService
from app.services.working_days import leave_year_for, working_days

TRANSITIONS: Dict[LeaveStatus, FrozenSet[LeaveStatus]] = {
    LeaveStatus.PENDING: frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED}),
    LeaveStatus.APPROVED: frozenset({LeaveStatus.CANCELLED}),
    LeaveStatus.REJECTED: frozenset(),
    LeaveStatus.CANCELLED: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    return LeaveStatus(target) in TRANSITIONS[LeaveStatus(current)]


def ensure_transition(current: str, target: str) -> None:
    if not can_transition(current, target):
        raise InvalidTransitionError(LeaveStatus(current).value, LeaveStatus(target).value)


class LeaveWorkflowService(BaseService):
    def __init__(self, db: Session, app_settings: Optional[AppSettings] = None, config: Config = app_config):
        super().__init__(db)
        self.config = config
        self.settings = app_settings or SettingsService(db, config).get_settings()
        self.ledger = BalanceLedgerService(db)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_request(self, request_id: int) -> LeaveRequest:
        leave = self.db.get(LeaveRequest, request_id)
        if leave is None:
            raise NotFoundError("Leave request", request_id)
        return leave

    def list_requests(
        self,
        employee_id: Optional[str] = None,
        team_id: Optional[str] = None,
        statuses: Optional[List[str]] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[LeaveRequest]:
        query = self.db.query(LeaveRequest)
        if employee_id:
            query = query.filter(LeaveRequest.employee_id == employee_id)
        if team_id:
            query = query.filter(LeaveRequest.team_id == team_id)
        if statuses:
            query = query.filter(LeaveRequest.status.in_(statuses))
        if start:
            query = query.filter(LeaveRequest.end_date >= start)
        if end:
            query = query.filter(LeaveRequest.start_date <= end)
        return query.order_by(LeaveRequest.start_date.desc(), LeaveRequest.id.desc()).all()

    def leave_year(self, day: date) -> int:
        return leave_year_for(day, self.settings.financial_year_start)

    def _holidays(self, start: date, end: date, region: Optional[str]) -> Set[date]:
        if not self.config.leave.exclude_public_holidays:
            return set()
        return HolidayService(self.db).holiday_dates(region or self.settings.default_region, start, end)

    def calculate_total_days(
        self,
        start: date,
        end: date,
        half_day_start: bool = False,
        half_day_end: bool = False,
        region: Optional[str] = None,
    ) -> float:
        if start > end:
            raise InvalidRangeError()
        return working_days(
            start,
            end,
            half_day_start,
            half_day_end,
            weekend_days=self.config.leave.weekend_days,
            holidays=self._holidays(start, end, region),
        )

    def _balance_for(self, leave: LeaveRequest) -> LeaveBalance:
        """The balance charged at submission, even if the leave year boundary has moved since."""
        year = leave.leave_year if leave.leave_year is not None else self.leave_year(leave.start_date)
        return self.ledger.get_balance(leave.employee_id, leave.leave_type_id, year)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def submit(
        self,
        employee_id: str,
        leave_type_id: int,
        start_date: date,
        end_date: date,
        half_day_start: bool = False,
        half_day_end: bool = False,
        reason: Optional[str] = None,
        employee_name: Optional[str] = None,
        employee_email: Optional[str] = None,
        team_id: Optional[str] = None,
        region: Optional[str] = None,
    ) -> LeaveRequest:
        if start_date > end_date:
            raise InvalidRangeError(details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()})

        leave_type = self.db.get(LeaveType, leave_type_id)
        if leave_type is None:
            raise NotFoundError("Leave type", leave_type_id)
        if not leave_type.is_active:
            raise PolicyViolationError(
                f"Leave type '{leave_type.name}' is no longer available",
                details={"leave_type_id": leave_type_id},
            )

        total_days = self.calculate_total_days(start_date, end_date, half_day_start, half_day_end, region)
        if total_days <= 0:
            raise PolicyViolationError(
                "The selected dates contain no working days",
                details={"total_days": total_days},
            )
        if leave_type.max_days_per_request is not None and total_days > leave_type.max_days_per_request:
            raise PolicyViolationError(
                f"{leave_type.name} is limited to {leave_type.max_days_per_request:g} days per request",
                details={"total_days": total_days, "max_days_per_request": leave_type.max_days_per_request},
            )

        year = self.leave_year(start_date)
        balance = self.ledger.get_balance(employee_id, leave_type_id, year)

        leave = LeaveRequest(
            employee_id=employee_id,
            employee_name=employee_name,
            employee_email=employee_email,
            team_id=team_id,
            leave_type_id=leave_type_id,
            start_date=start_date,
            end_date=end_date,
            half_day_start=half_day_start,
            half_day_end=half_day_end,
            total_days=total_days,
            leave_year=year,
            reason=reason,
            status=LeaveStatus.PENDING.value,
        )
        with self.transaction():
            self.db.add(leave)
            balance_ledger.apply_pending_delta(balance, total_days)

        self._logger.info(
            f"Leave request {leave.id} submitted by {employee_id}: {total_days:g} day(s)",
            extra={"leave_request_id": leave.id, "employee_id": employee_id, "leave_type_id": leave_type_id},
        )
        return leave

    def requires_approval(self, leave: LeaveRequest) -> bool:
        if not self.settings.approval_required:
            return False
        leave_type = self.db.get(LeaveType, leave.leave_type_id)
        return leave_type is None or leave_type.requires_approval

    def auto_approve(self, leave: LeaveRequest) -> LeaveRequest:
        """Approve on the system's behalf when no human approval is needed."""
        if leave.status != LeaveStatus.PENDING.value or self.requires_approval(leave):
            return leave
        return self.approve(
            leave.id,
            approver_id=self.config.system_approver_id,
            approver_name=self.config.system_approver_name,
            comments="Approved automatically: no approval required for this leave type",
        )

    def _check_not_self(self, leave: LeaveRequest, approver_id: str) -> None:
        if leave.employee_id == approver_id and not self.settings.allow_self_approval:
            raise AccessDeniedError("You cannot review your own leave request")

    def approve(
        self,
        request_id: int,
        approver_id: str,
        approver_name: Optional[str] = None,
        comments: Optional[str] = None,
    ) -> LeaveRequest:
        leave = self.get_request(request_id)
        ensure_transition(leave.status, LeaveStatus.APPROVED)
        self._check_not_self(leave, approver_id)
        balance = self._balance_for(leave)

        with self.transaction():
            leave.status = LeaveStatus.APPROVED.value
            leave.approver_id = approver_id
            leave.approver_name = approver_name
            leave.approver_comments = comments
            leave.approved_at = datetime.now(timezone.utc)
            balance_ledger.move_pending_to_used(balance, leave.total_days)

        self._logger.info(
            f"Leave request {leave.id} approved by {approver_id}",
            extra={"leave_request_id": leave.id, "employee_id": leave.employee_id},
        )
        return leave

    def reject(
        self,
        request_id: int,
        approver_id: str,
        approver_name: Optional[str] = None,
        comments: Optional[str] = None,
    ) -> LeaveRequest:
        leave = self.get_request(request_id)
        ensure_transition(leave.status, LeaveStatus.REJECTED)
        self._check_not_self(leave, approver_id)
        balance = self._balance_for(leave)

        with self.transaction():
            leave.status = LeaveStatus.REJECTED.value
            leave.approver_id = approver_id
            leave.approver_name = approver_name
            leave.approver_comments = comments
            balance_ledger.apply_pending_delta(balance, -leave.total_days)

        self._logger.info(
            f"Leave request {leave.id} rejected by {approver_id}",
            extra={"leave_request_id": leave.id, "employee_id": leave.employee_id},
        )
        return leave

    def cancel(self, request_id: int) -> LeaveRequest:
        leave = self.get_request(request_id)
        previous = leave.status
        ensure_transition(previous, LeaveStatus.CANCELLED)
        balance = self._balance_for(leave)

        with self.transaction():
            leave.status = LeaveStatus.CANCELLED.value
            leave.cancelled_at = datetime.now(timezone.utc)
            if previous == LeaveStatus.PENDING.value:
                balance_ledger.apply_pending_delta(balance, -leave.total_days)
            else:
                balance_ledger.apply_used_delta(balance, -leave.total_days)

        self._logger.info(
            f"Leave request {leave.id} cancelled (was {previous})",
            extra={"leave_request_id": leave.id, "employee_id": leave.employee_id},
        )
        return leave
