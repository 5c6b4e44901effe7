"""
Balance ledger: entitlement, used, pending and carry-over per
(employee, leave type, leave year).

The module-level functions are the arithmetic; they work on any object with
the four counter attributes and never touch the database. BalanceLedgerService
wraps them with lookups and admin operations.
"""
import logging
from typing import Iterable, List, Optional

from app.core.exceptions import NotFoundError
from app.models.leave_balance import LeaveBalance
from app.models.leave_type import LeaveType
from app.services.base import BaseService

logger = logging.getLogger(__name__)


def available(balance) -> float:
    """entitlement + carry_over - used - pending. Not clamped: negative means over-allocated."""
    return (
        (balance.entitlement or 0.0)
        + (balance.carry_over or 0.0)
        - (balance.used or 0.0)
        - (balance.pending or 0.0)
    )


def _floored(current: Optional[float], delta: float, field: str, balance) -> float:
    result = (current or 0.0) + delta
    if result < 0:
        logger.warning(
            f"Ledger {field} would drop below zero; clamped to 0",
            extra={"field": field, "current": current, "delta": delta,
                   "employee_id": getattr(balance, "employee_id", None)},
        )
        return 0.0
    return result


def apply_pending_delta(balance, delta_days: float):
    """Adjust pending days. Never goes below zero."""
    balance.pending = _floored(balance.pending, delta_days, "pending", balance)
    return balance


def apply_used_delta(balance, delta_days: float):
    """Adjust used days. Never goes below zero."""
    balance.used = _floored(balance.used, delta_days, "used", balance)
    return balance


def move_pending_to_used(balance, days: float):
    """Approval: the reservation becomes consumption."""
    apply_pending_delta(balance, -days)
    apply_used_delta(balance, days)
    return balance


def carry_over_for(balance, allow_carry_over: bool, max_carry_over_days: float) -> float:
    """Unused days that move into the next leave year."""
    if not allow_carry_over:
        return 0.0
    return min(max(available(balance), 0.0), max_carry_over_days)


class BalanceLedgerService(BaseService):
    def find_balance(self, employee_id: str, leave_type_id: int, year: int) -> Optional[LeaveBalance]:
        return self.db.query(LeaveBalance).filter(
            LeaveBalance.employee_id == employee_id,
            LeaveBalance.leave_type_id == leave_type_id,
            LeaveBalance.year == year,
        ).first()

    def get_balance(self, employee_id: str, leave_type_id: int, year: int) -> LeaveBalance:
        balance = self.find_balance(employee_id, leave_type_id, year)
        if balance is None:
            raise NotFoundError("Leave balance", f"{employee_id}/{leave_type_id}/{year}")
        return balance

    def list_balances(self, employee_id: Optional[str] = None, year: Optional[int] = None) -> List[LeaveBalance]:
        query = self.db.query(LeaveBalance)
        if employee_id:
            query = query.filter(LeaveBalance.employee_id == employee_id)
        if year:
            query = query.filter(LeaveBalance.year == year)
        return query.order_by(LeaveBalance.employee_id, LeaveBalance.year, LeaveBalance.leave_type_id).all()

    def initialize_year(
        self,
        employee_id: str,
        year: int,
        active_leave_types: Optional[Iterable[LeaveType]] = None,
    ) -> List[LeaveBalance]:
        """
        One zero-valued balance per active leave type. Existing rows are kept
        as they are, so calling this twice never creates duplicates.
        """
        if active_leave_types is None:
            active_leave_types = self.db.query(LeaveType).filter(LeaveType.is_active.is_(True)).all()

        balances = []
        created = 0
        seen = set()
        with self.transaction():
            for leave_type in active_leave_types:
                if not leave_type.is_active or leave_type.id in seen:
                    continue
                seen.add(leave_type.id)
                balance = self.find_balance(employee_id, leave_type.id, year)
                if balance is None:
                    balance = LeaveBalance(
                        employee_id=employee_id,
                        leave_type_id=leave_type.id,
                        year=year,
                        entitlement=0.0,
                        used=0.0,
                        pending=0.0,
                        carry_over=0.0,
                    )
                    self.db.add(balance)
                    created += 1
                balances.append(balance)

        self._logger.info(
            f"Initialized {created} balance(s) for {employee_id} in {year}",
            extra={"employee_id": employee_id, "year": year, "existing": len(balances) - created},
        )
        return balances

    def override_balance(
        self,
        employee_id: str,
        leave_type_id: int,
        year: int,
        entitlement: float,
        carry_over: Optional[float] = None,
    ) -> LeaveBalance:
        """Admin override of entitlement (and optionally carry-over). Creates the row if missing."""
        if self.db.get(LeaveType, leave_type_id) is None:
            raise NotFoundError("Leave type", leave_type_id)

        with self.transaction():
            balance = self.find_balance(employee_id, leave_type_id, year)
            if balance is None:
                balance = LeaveBalance(
                    employee_id=employee_id,
                    leave_type_id=leave_type_id,
                    year=year,
                    used=0.0,
                    pending=0.0,
                    carry_over=0.0,
                )
                self.db.add(balance)
            balance.entitlement = entitlement
            if carry_over is not None:
                balance.carry_over = carry_over

        self.db.refresh(balance)
        self._logger.info(
            f"Balance override for {employee_id}: type {leave_type_id}, {year} -> {entitlement}",
            extra={"employee_id": employee_id, "leave_type_id": leave_type_id, "year": year},
        )
        return balance

    def roll_over(
        self,
        from_year: int,
        allow_carry_over: bool,
        max_carry_over_days: float,
        employee_id: Optional[str] = None,
    ) -> List[LeaveBalance]:
        """
        Manual year-end rollover. Each balance in from_year gets a matching
        row in from_year + 1 with the same entitlement and the unused days
        (capped) as carry-over. Re-running recomputes the carry-over only.
        """
        to_year = from_year + 1
        sources = self.list_balances(employee_id=employee_id, year=from_year)
        results = []

        with self.transaction():
            for source in sources:
                target = self.find_balance(source.employee_id, source.leave_type_id, to_year)
                if target is None:
                    target = LeaveBalance(
                        employee_id=source.employee_id,
                        leave_type_id=source.leave_type_id,
                        year=to_year,
                        entitlement=source.entitlement,
                        used=0.0,
                        pending=0.0,
                    )
                    self.db.add(target)
                target.carry_over = carry_over_for(source, allow_carry_over, max_carry_over_days)
                results.append(target)

        self._logger.info(
            f"Rolled over {len(results)} balance(s) from {from_year} to {to_year}",
            extra={"from_year": from_year, "employee_id": employee_id},
        )
        return results
