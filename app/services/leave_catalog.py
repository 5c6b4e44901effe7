"""
Reference data administered by HR: leave types and public holidays.
"""
from datetime import date
from typing import List, Optional, Set

from app.core.exceptions import NotFoundError, PolicyViolationError
from app.models.leave_balance import LeaveBalance
from app.models.leave_request import LeaveRequest
from app.models.leave_type import LeaveType
from app.models.public_holiday import PublicHoliday
from app.schemas.admin import (
    LeaveTypeCreate,
    LeaveTypeUpdate,
    PublicHolidayCreate,
    PublicHolidayUpdate,
)
from app.services.base import BaseService


class LeaveTypeService(BaseService):
    def list_leave_types(self, include_inactive: bool = False) -> List[LeaveType]:
        query = self.db.query(LeaveType)
        if not include_inactive:
            query = query.filter(LeaveType.is_active.is_(True))
        return query.order_by(LeaveType.sort_order, LeaveType.name).all()

    def get_leave_type(self, leave_type_id: int) -> LeaveType:
        leave_type = self.db.get(LeaveType, leave_type_id)
        if leave_type is None:
            raise NotFoundError("Leave type", leave_type_id)
        return leave_type

    def _ensure_code_free(self, code: str, exclude_id: Optional[int] = None) -> None:
        query = self.db.query(LeaveType).filter(
            LeaveType.code == code,
            LeaveType.is_active.is_(True),
        )
        if exclude_id is not None:
            query = query.filter(LeaveType.id != exclude_id)
        if query.first() is not None:
            raise PolicyViolationError(
                f"An active leave type already uses code '{code}'",
                details={"code": code},
            )

    def create_leave_type(self, data: LeaveTypeCreate) -> LeaveType:
        if data.is_active:
            self._ensure_code_free(data.code)
        leave_type = LeaveType(**data.model_dump())
        with self.transaction():
            self.db.add(leave_type)
        self._logger.info(f"Created leave type {leave_type.code}", extra={"leave_type_id": leave_type.id})
        return leave_type

    def update_leave_type(self, leave_type_id: int, data: LeaveTypeUpdate) -> LeaveType:
        leave_type = self.get_leave_type(leave_type_id)
        changes = data.model_dump(exclude_unset=True)

        code = changes.get("code", leave_type.code)
        is_active = changes.get("is_active", leave_type.is_active)
        if is_active and (code != leave_type.code or not leave_type.is_active):
            self._ensure_code_free(code, exclude_id=leave_type.id)

        with self.transaction():
            for key, value in changes.items():
                setattr(leave_type, key, value)
        return leave_type

    def is_referenced(self, leave_type_id: int) -> bool:
        in_requests = self.db.query(LeaveRequest.id).filter(LeaveRequest.leave_type_id == leave_type_id).first()
        in_balances = self.db.query(LeaveBalance.id).filter(LeaveBalance.leave_type_id == leave_type_id).first()
        return in_requests is not None or in_balances is not None

    def delete_leave_type(self, leave_type_id: int) -> bool:
        """
        Hard-delete an unused leave type; archive one that requests or
        balances still point at. Returns True when the row was deleted.
        """
        leave_type = self.get_leave_type(leave_type_id)
        if self.is_referenced(leave_type_id):
            with self.transaction():
                leave_type.is_active = False
            self._logger.info(f"Archived leave type {leave_type_id} (still referenced)")
            return False

        with self.transaction():
            self.db.delete(leave_type)
        self._logger.info(f"Deleted leave type {leave_type_id}")
        return True


class HolidayService(BaseService):
    def _query(self, region: Optional[str]):
        query = self.db.query(PublicHoliday)
        if region:
            query = query.filter(PublicHoliday.region == region)
        return query

    def list_holidays(self, region: Optional[str] = None, year: Optional[int] = None) -> List[PublicHoliday]:
        """
        Holidays for a region and year. Recurring holidays are listed once per
        year on their month/day even if they were entered for another year.
        """
        holidays = self._query(region).order_by(PublicHoliday.date).all()
        if year is None:
            return holidays

        listed = []
        for holiday in holidays:
            if holiday.date.year == year:
                listed.append(holiday)
            elif holiday.is_recurring and _on_year(holiday.date, year) is not None:
                listed.append(PublicHoliday(
                    id=holiday.id,
                    name=holiday.name,
                    date=_on_year(holiday.date, year),
                    region=holiday.region,
                    is_recurring=True,
                ))
        return sorted(listed, key=lambda h: h.date)

    def holiday_dates(self, region: Optional[str], start: date, end: date) -> Set[date]:
        dates = set()
        for year in range(start.year, end.year + 1):
            for holiday in self.list_holidays(region, year):
                if start <= holiday.date <= end:
                    dates.add(holiday.date)
        return dates

    def get_holiday(self, holiday_id: int) -> PublicHoliday:
        holiday = self.db.get(PublicHoliday, holiday_id)
        if holiday is None:
            raise NotFoundError("Public holiday", holiday_id)
        return holiday

    def create_holiday(self, data: PublicHolidayCreate) -> PublicHoliday:
        holiday = PublicHoliday(**data.model_dump())
        with self.transaction():
            self.db.add(holiday)
        return holiday

    def update_holiday(self, holiday_id: int, data: PublicHolidayUpdate) -> PublicHoliday:
        holiday = self.get_holiday(holiday_id)
        with self.transaction():
            for key, value in data.model_dump(exclude_unset=True).items():
                setattr(holiday, key, value)
        return holiday

    def delete_holiday(self, holiday_id: int) -> None:
        holiday = self.get_holiday(holiday_id)
        with self.transaction():
            self.db.delete(holiday)


def _on_year(day: date, year: int) -> Optional[date]:
    try:
        return day.replace(year=year)
    except ValueError:  # 29 February
        return None
