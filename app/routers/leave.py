from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.core.limiter import limiter
from app.database import get_db
from app.dependencies import get_app_settings, get_conflict_service, get_workflow_service
from app.routers.auth_deps import ensure_owner, ensure_owner_or_team_access, get_session_context
from app.schemas.admin import AppSettings
from app.schemas.auth import SessionContext
from app.schemas.leave import (
    ConflictAnalysisResponse,
    ConflictCheckRequest,
    HolidayResponse,
    LeaveBalanceResponse,
    LeaveRequestCreate,
    LeaveRequestResponse,
    LeaveTypeSummary,
    WorkingDaysRequest,
    WorkingDaysResponse,
)
from app.services.balance_ledger import BalanceLedgerService
from app.services.conflict_analyzer import TeamConflictService
from app.services.directory import EmployeeDirectoryService
from app.services.leave_catalog import HolidayService, LeaveTypeService
from app.services.leave_workflow import LeaveWorkflowService

router = APIRouter(
    prefix="/leave",
    tags=["leave"]
)


@router.get("/types", response_model=List[LeaveTypeSummary])
def list_leave_types(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return LeaveTypeService(db).list_leave_types()


@router.get("/holidays", response_model=List[HolidayResponse])
def list_holidays(
    region: Optional[str] = None,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    db: Session = Depends(get_db),
    app_settings: AppSettings = Depends(get_app_settings),
    ctx: SessionContext = Depends(get_session_context),
):
    return HolidayService(db).list_holidays(region or app_settings.default_region, year or date.today().year)


@router.post("/working-days", response_model=WorkingDaysResponse)
def preview_working_days(
    payload: WorkingDaysRequest,
    db: Session = Depends(get_db),
    workflow: LeaveWorkflowService = Depends(get_workflow_service),
    ctx: SessionContext = Depends(get_session_context),
):
    """Day count the request would consume, before submitting it."""
    employee = EmployeeDirectoryService(db).find(ctx.employee_id)
    total = workflow.calculate_total_days(
        payload.start_date,
        payload.end_date,
        payload.half_day_start,
        payload.half_day_end,
        region=employee.region if employee else None,
    )
    return WorkingDaysResponse(start_date=payload.start_date, end_date=payload.end_date, total_days=total)


@router.post("/conflicts/check", response_model=ConflictAnalysisResponse)
def check_conflicts(
    payload: ConflictCheckRequest,
    conflicts: TeamConflictService = Depends(get_conflict_service),
    ctx: SessionContext = Depends(get_session_context),
):
    analysis = conflicts.analyze(ctx.employee_id, ctx.team_id, payload.start_date, payload.end_date)
    return ConflictAnalysisResponse.from_analysis(analysis)


@router.post("/requests", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def submit_leave_request(
    request: Request,
    payload: LeaveRequestCreate,
    db: Session = Depends(get_db),
    workflow: LeaveWorkflowService = Depends(get_workflow_service),
    ctx: SessionContext = Depends(get_session_context),
):
    employee = EmployeeDirectoryService(db).sync_from_session(ctx)
    leave = workflow.submit(
        employee_id=ctx.employee_id,
        leave_type_id=payload.leave_type_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        half_day_start=payload.half_day_start,
        half_day_end=payload.half_day_end,
        reason=payload.reason,
        employee_name=ctx.name,
        employee_email=ctx.email,
        team_id=ctx.team_id,
        region=employee.region,
    )
    return workflow.auto_approve(leave)


@router.get("/requests", response_model=List[LeaveRequestResponse])
def list_my_requests(
    status_filter: Optional[List[str]] = Query(None, alias="status"),
    workflow: LeaveWorkflowService = Depends(get_workflow_service),
    ctx: SessionContext = Depends(get_session_context),
):
    return workflow.list_requests(employee_id=ctx.employee_id, statuses=status_filter)


@router.get("/requests/{request_id}", response_model=LeaveRequestResponse)
def get_leave_request(
    request_id: int,
    workflow: LeaveWorkflowService = Depends(get_workflow_service),
    ctx: SessionContext = Depends(get_session_context),
):
    leave = workflow.get_request(request_id)
    ensure_owner_or_team_access(ctx, leave.employee_id, leave.team_id)
    return leave


@router.post("/requests/{request_id}/cancel", response_model=LeaveRequestResponse)
def cancel_leave_request(
    request_id: int,
    workflow: LeaveWorkflowService = Depends(get_workflow_service),
    ctx: SessionContext = Depends(get_session_context),
):
    leave = workflow.get_request(request_id)
    ensure_owner(ctx, leave.employee_id)
    return workflow.cancel(request_id)


@router.get("/balances", response_model=List[LeaveBalanceResponse])
def get_my_balances(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    db: Session = Depends(get_db),
    workflow: LeaveWorkflowService = Depends(get_workflow_service),
    ctx: SessionContext = Depends(get_session_context),
):
    return BalanceLedgerService(db).list_balances(
        employee_id=ctx.employee_id,
        year=year or workflow.leave_year(date.today()),
    )
