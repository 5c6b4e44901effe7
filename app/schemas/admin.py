from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
import datetime as dt
from typing import Optional


# --- Leave types ---

class LeaveTypeBase(BaseModel):
    """Base schema for leave type data."""
    name: str = Field(..., min_length=1, max_length=100)
    code: str = Field(..., min_length=1, max_length=20, pattern="^[A-Z0-9_]+$")
    color: str = Field("#3b82f6", pattern="^#[0-9a-fA-F]{6}$")
    icon: str = Field("calendar", max_length=50)
    requires_approval: bool = True
    max_days_per_request: Optional[float] = Field(None, gt=0)
    is_active: bool = True
    sort_order: int = 0


class LeaveTypeCreate(LeaveTypeBase):
    pass


class LeaveTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    code: Optional[str] = Field(None, min_length=1, max_length=20, pattern="^[A-Z0-9_]+$")
    color: Optional[str] = Field(None, pattern="^#[0-9a-fA-F]{6}$")
    icon: Optional[str] = Field(None, max_length=50)
    requires_approval: Optional[bool] = None
    max_days_per_request: Optional[float] = Field(None, gt=0)
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None

    @field_validator("name", "code", "color", "icon", "requires_approval", "is_active", "sort_order")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class LeaveTypeResponse(LeaveTypeBase):
    model_config = ConfigDict(from_attributes=True)

    id: int


class LeaveTypeDeleteResult(BaseModel):
    id: int
    deleted: bool
    archived: bool


# --- Public holidays ---

class PublicHolidayCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    date: dt.date
    region: str = Field(..., min_length=2, max_length=10)
    is_recurring: bool = False


class PublicHolidayUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    date: Optional[dt.date] = None
    region: Optional[str] = Field(None, min_length=2, max_length=10)
    is_recurring: Optional[bool] = None

    @field_validator("name", "date", "region", "is_recurring")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


# --- Employee directory ---

class EmployeeUpsert(BaseModel):
    display_name: Optional[str] = None
    email: Optional[str] = None
    team_id: Optional[str] = None
    region: Optional[str] = None
    is_active: bool = True


class EmployeeResponse(EmployeeUpsert):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: str


# --- Balances ---

class BalanceOverride(BaseModel):
    employee_id: str
    leave_type_id: int
    year: int = Field(..., ge=2000, le=2100)
    entitlement: float = Field(..., ge=0)
    carry_over: Optional[float] = Field(None, ge=0)


class BalanceInitializeRequest(BaseModel):
    employee_id: str
    year: int = Field(..., ge=2000, le=2100)


class RolloverRequest(BaseModel):
    from_year: int = Field(..., ge=2000, le=2100)
    employee_id: Optional[str] = None


# --- Settings ---

class AppSettings(BaseModel):
    """Parsed application settings (defaults come from app.core.config)."""
    app_name: str
    default_region: str
    default_annual_entitlement: float
    financial_year_start: str = Field(..., pattern=r"^(0[1-9]|1[0-2])-(0[1-9]|[12][0-9]|3[01])$")
    allow_carry_over: bool
    max_carry_over_days: float
    approval_required: bool
    allow_self_approval: bool
    ai_conflict_detection: bool
    conflict_warning_threshold: float = Field(..., ge=0, le=100)
    conflict_critical_threshold: float = Field(..., ge=0, le=100)


class AppSettingsUpdate(BaseModel):
    app_name: Optional[str] = Field(None, min_length=1, max_length=100)
    default_region: Optional[str] = Field(None, min_length=2, max_length=10)
    default_annual_entitlement: Optional[float] = Field(None, ge=0)
    financial_year_start: Optional[str] = Field(None, pattern=r"^(0[1-9]|1[0-2])-(0[1-9]|[12][0-9]|3[01])$")
    allow_carry_over: Optional[bool] = None
    max_carry_over_days: Optional[float] = Field(None, ge=0)
    approval_required: Optional[bool] = None
    allow_self_approval: Optional[bool] = None
    ai_conflict_detection: Optional[bool] = None
    conflict_warning_threshold: Optional[float] = Field(None, ge=0, le=100)
    conflict_critical_threshold: Optional[float] = Field(None, ge=0, le=100)

    @model_validator(mode="after")
    def check_threshold_order(self):
        warning = self.conflict_warning_threshold
        critical = self.conflict_critical_threshold
        if warning is not None and critical is not None and warning > critical:
            raise ValueError("conflict_warning_threshold must not exceed conflict_critical_threshold")
        return self
