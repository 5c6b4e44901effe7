from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import List, Optional

from app.services.conflict_analyzer import ConflictAnalysis, ConflictSeverity


class LeaveRequestCreate(BaseModel):
    leave_type_id: int
    start_date: date
    end_date: date
    half_day_start: bool = False
    half_day_end: bool = False
    reason: Optional[str] = Field(None, max_length=1000)

class LeaveRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: str
    employee_name: Optional[str] = None
    employee_email: Optional[str] = None
    team_id: Optional[str] = None
    leave_type_id: Optional[int] = None
    start_date: date
    end_date: date
    half_day_start: bool
    half_day_end: bool
    total_days: float
    leave_year: Optional[int] = None
    reason: Optional[str] = None
    status: str
    approver_id: Optional[str] = None
    approver_name: Optional[str] = None
    approver_comments: Optional[str] = None
    approved_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class LeaveDecision(BaseModel):
    comments: Optional[str] = Field(None, max_length=1000)

class LeaveBalanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: str
    leave_type_id: int
    year: int
    entitlement: float
    used: float
    pending: float
    carry_over: float
    available: float

class WorkingDaysRequest(BaseModel):
    start_date: date
    end_date: date
    half_day_start: bool = False
    half_day_end: bool = False

class WorkingDaysResponse(BaseModel):
    start_date: date
    end_date: date
    total_days: float

class ConflictCheckRequest(BaseModel):
    start_date: date
    end_date: date

class CalendarLeave(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: str
    employee_name: Optional[str] = None
    leave_type_id: Optional[int] = None
    start_date: date
    end_date: date
    half_day_start: bool = False
    half_day_end: bool = False
    status: str

class ConflictAnalysisResponse(BaseModel):
    has_conflict: bool
    severity: ConflictSeverity
    overlapping_requests: List[CalendarLeave] = []
    team_coverage_percent: int
    message: str
    suggestions: List[str] = []

    @classmethod
    def from_analysis(cls, analysis: ConflictAnalysis) -> "ConflictAnalysisResponse":
        return cls(
            has_conflict=analysis.has_conflict,
            severity=analysis.severity,
            overlapping_requests=[CalendarLeave.model_validate(r) for r in analysis.overlapping_requests],
            team_coverage_percent=analysis.team_coverage_percent,
            message=analysis.message,
            suggestions=list(analysis.suggestions),
        )

class OnLeaveEntry(BaseModel):
    employee_id: str
    employee_name: Optional[str] = None
    leave_type_id: Optional[int] = None
    status: str

class TeamAvailabilityDay(BaseModel):
    date: date
    total_members: int
    available_members: int
    on_leave: List[OnLeaveEntry] = []

class LeaveTypeSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str
    color: Optional[str] = None
    icon: Optional[str] = None
    requires_approval: bool
    max_days_per_request: Optional[float] = None
    sort_order: int

class HolidayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    date: date
    region: str
    is_recurring: bool
