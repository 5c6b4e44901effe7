# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    employee, leave_type, leave_request, leave_balance,
    public_holiday, app_setting
)

# Explicit class exports for cleaner imports
from .employee import Employee
from .leave_type import LeaveType
from .leave_request import LeaveRequest, LeaveStatus
from .leave_balance import LeaveBalance
from .public_holiday import PublicHoliday
from .app_setting import AppSetting

__all__ = [
    "Employee",
    "LeaveType",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveBalance",
    "PublicHoliday",
    "AppSetting",
]
