from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.exceptions import InvalidRangeError
from app.dependencies import get_conflict_service, get_workflow_service
from app.models.leave_request import ACTIVE_STATUSES, LeaveStatus
from app.routers.auth_deps import ensure_team_access, require_manager
from app.schemas.auth import SessionContext
from app.schemas.leave import CalendarLeave, LeaveDecision, LeaveRequestResponse, TeamAvailabilityDay
from app.services.conflict_analyzer import TeamConflictService
from app.services.leave_workflow import LeaveWorkflowService

router = APIRouter(prefix="/leave", tags=["leave-manager"])


def _team_scope(ctx: SessionContext, team_id: Optional[str]) -> Optional[str]:
    """Resolve which team a manager view covers. Admins may pass any team or none."""
    if ctx.is_admin:
        return team_id
    scope = team_id or ctx.team_id
    ensure_team_access(ctx, scope)
    return scope


@router.get("/approvals", response_model=List[LeaveRequestResponse])
def list_pending_approvals(
    team_id: Optional[str] = None,
    workflow: LeaveWorkflowService = Depends(get_workflow_service),
    ctx: SessionContext = Depends(require_manager()),
):
    """Pending requests awaiting a decision, oldest start date first."""
    pending = workflow.list_requests(team_id=_team_scope(ctx, team_id), statuses=[LeaveStatus.PENDING.value])
    return sorted(pending, key=lambda r: (r.start_date, r.id))


@router.post("/requests/{request_id}/approve", response_model=LeaveRequestResponse)
def approve_leave(
    request_id: int,
    decision: Optional[LeaveDecision] = None,
    workflow: LeaveWorkflowService = Depends(get_workflow_service),
    ctx: SessionContext = Depends(require_manager()),
):
    leave = workflow.get_request(request_id)
    ensure_team_access(ctx, leave.team_id)
    return workflow.approve(
        request_id,
        approver_id=ctx.employee_id,
        approver_name=ctx.name,
        comments=decision.comments if decision else None,
    )


@router.post("/requests/{request_id}/reject", response_model=LeaveRequestResponse)
def reject_leave(
    request_id: int,
    decision: Optional[LeaveDecision] = None,
    workflow: LeaveWorkflowService = Depends(get_workflow_service),
    ctx: SessionContext = Depends(require_manager()),
):
    leave = workflow.get_request(request_id)
    ensure_team_access(ctx, leave.team_id)
    return workflow.reject(
        request_id,
        approver_id=ctx.employee_id,
        approver_name=ctx.name,
        comments=decision.comments if decision else None,
    )


@router.get("/calendar", response_model=List[CalendarLeave])
def get_team_calendar(
    start: date,
    end: date,
    team_id: Optional[str] = None,
    workflow: LeaveWorkflowService = Depends(get_workflow_service),
    ctx: SessionContext = Depends(require_manager()),
):
    """Approved and pending leave for the team between start and end (inclusive)."""
    if start > end:
        raise InvalidRangeError()
    requests = workflow.list_requests(
        team_id=_team_scope(ctx, team_id),
        statuses=list(ACTIVE_STATUSES),
        start=start,
        end=end,
    )
    return sorted(requests, key=lambda r: (r.start_date, r.id))


@router.get("/team/availability", response_model=List[TeamAvailabilityDay])
def get_team_availability(
    start: date,
    end: date,
    team_id: Optional[str] = Query(None),
    conflicts: TeamConflictService = Depends(get_conflict_service),
    ctx: SessionContext = Depends(require_manager()),
):
    scope = _team_scope(ctx, team_id)
    if scope is None:
        scope = ctx.team_id
    return conflicts.availability(scope, start, end)
