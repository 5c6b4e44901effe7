from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_app_settings
from app.routers.auth_deps import require_admin
from app.schemas.admin import (
    AppSettings,
    AppSettingsUpdate,
    BalanceInitializeRequest,
    BalanceOverride,
    EmployeeResponse,
    EmployeeUpsert,
    LeaveTypeCreate,
    LeaveTypeDeleteResult,
    LeaveTypeResponse,
    LeaveTypeUpdate,
    PublicHolidayCreate,
    PublicHolidayUpdate,
    RolloverRequest,
)
from app.schemas.leave import HolidayResponse, LeaveBalanceResponse
from app.services.balance_ledger import BalanceLedgerService
from app.services.directory import EmployeeDirectoryService
from app.services.leave_catalog import HolidayService, LeaveTypeService
from app.services.settings_service import SettingsService

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin())]
)


# --- Leave types ---

@router.get("/leave-types", response_model=List[LeaveTypeResponse])
def list_leave_types(include_inactive: bool = True, db: Session = Depends(get_db)):
    return LeaveTypeService(db).list_leave_types(include_inactive=include_inactive)


@router.post("/leave-types", response_model=LeaveTypeResponse, status_code=status.HTTP_201_CREATED)
def create_leave_type(payload: LeaveTypeCreate, db: Session = Depends(get_db)):
    return LeaveTypeService(db).create_leave_type(payload)


@router.put("/leave-types/{leave_type_id}", response_model=LeaveTypeResponse)
def update_leave_type(leave_type_id: int, payload: LeaveTypeUpdate, db: Session = Depends(get_db)):
    return LeaveTypeService(db).update_leave_type(leave_type_id, payload)


@router.delete("/leave-types/{leave_type_id}", response_model=LeaveTypeDeleteResult)
def delete_leave_type(leave_type_id: int, db: Session = Depends(get_db)):
    """
    Deletes an unused leave type. One that requests or balances still
    reference is archived (deactivated) instead.
    """
    deleted = LeaveTypeService(db).delete_leave_type(leave_type_id)
    return LeaveTypeDeleteResult(id=leave_type_id, deleted=deleted, archived=not deleted)


# --- Public holidays ---

@router.get("/holidays", response_model=List[HolidayResponse])
def list_holidays(
    region: Optional[str] = None,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    db: Session = Depends(get_db),
):
    return HolidayService(db).list_holidays(region, year)


@router.post("/holidays", response_model=HolidayResponse, status_code=status.HTTP_201_CREATED)
def create_holiday(payload: PublicHolidayCreate, db: Session = Depends(get_db)):
    return HolidayService(db).create_holiday(payload)


@router.put("/holidays/{holiday_id}", response_model=HolidayResponse)
def update_holiday(holiday_id: int, payload: PublicHolidayUpdate, db: Session = Depends(get_db)):
    return HolidayService(db).update_holiday(holiday_id, payload)


@router.delete("/holidays/{holiday_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_holiday(holiday_id: int, db: Session = Depends(get_db)):
    HolidayService(db).delete_holiday(holiday_id)


# --- Employee directory ---

@router.get("/employees", response_model=List[EmployeeResponse])
def list_employees(
    team_id: Optional[str] = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
):
    return EmployeeDirectoryService(db).list_employees(team_id=team_id, include_inactive=include_inactive)


@router.put("/employees/{employee_id}", response_model=EmployeeResponse)
def upsert_employee(employee_id: str, payload: EmployeeUpsert, db: Session = Depends(get_db)):
    return EmployeeDirectoryService(db).upsert(employee_id, payload)


# --- Balances ---

@router.get("/balances", response_model=List[LeaveBalanceResponse])
def list_balances(
    employee_id: Optional[str] = None,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    db: Session = Depends(get_db),
):
    return BalanceLedgerService(db).list_balances(employee_id=employee_id, year=year)


@router.put("/balances", response_model=LeaveBalanceResponse)
def override_balance(payload: BalanceOverride, db: Session = Depends(get_db)):
    return BalanceLedgerService(db).override_balance(
        payload.employee_id,
        payload.leave_type_id,
        payload.year,
        payload.entitlement,
        carry_over=payload.carry_over,
    )


@router.post("/balances/initialize", response_model=List[LeaveBalanceResponse])
def initialize_balances(payload: BalanceInitializeRequest, db: Session = Depends(get_db)):
    return BalanceLedgerService(db).initialize_year(payload.employee_id, payload.year)


@router.post("/balances/rollover", response_model=List[LeaveBalanceResponse])
def rollover_balances(
    payload: RolloverRequest,
    db: Session = Depends(get_db),
    app_settings: AppSettings = Depends(get_app_settings),
):
    return BalanceLedgerService(db).roll_over(
        payload.from_year,
        allow_carry_over=app_settings.allow_carry_over,
        max_carry_over_days=app_settings.max_carry_over_days,
        employee_id=payload.employee_id,
    )


# --- Settings ---

@router.get("/settings", response_model=AppSettings)
def get_settings(db: Session = Depends(get_db)):
    return SettingsService(db).get_settings()


@router.put("/settings", response_model=AppSettings)
def update_settings(payload: AppSettingsUpdate, db: Session = Depends(get_db)):
    return SettingsService(db).update_settings(payload)
