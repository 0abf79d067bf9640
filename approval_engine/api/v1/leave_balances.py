"""
Leave balance endpoints
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from approval_engine.core.deps import get_db, get_current_user, require_roles
from approval_engine.core.exceptions import ForbiddenError
from approval_engine.models.employee import Employee, Role
from approval_engine.schemas.leave import (
    BalanceAdjustRequest,
    LeaveBalanceDetail,
    LeaveBalanceOut,
    LeaveTransactionOut,
    YearCloseRequest,
    YearCloseResponse,
)
from approval_engine.services import leave_balance_service
from approval_engine.services.year_close_service import run_year_close
from approval_engine.utils.datetime_utils import today_local

router = APIRouter()


def _detail(db: Session, employee_id: int, year: int) -> LeaveBalanceDetail:
    balance = leave_balance_service.get_balance(db, employee_id, year)
    return LeaveBalanceDetail(
        balance=LeaveBalanceOut.model_validate(balance),
        transactions=[
            LeaveTransactionOut.model_validate(t)
            for t in leave_balance_service.list_transactions(db, employee_id, year)
        ],
    )


@router.get("/me", response_model=LeaveBalanceDetail)
async def my_balance(
    year: Optional[int] = Query(None, description="Calendar year, defaults to the current one"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Current user's balance and ledger movements for the year"""
    return _detail(db, current_user.id, year or today_local().year)


@router.post("/year-close", response_model=YearCloseResponse)
async def year_close(
    payload: YearCloseRequest,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.HR)),
):
    """Carry unused days of `year` into `year + 1` (HR/Admin). Safe to re-run."""
    return run_year_close(db, payload.year, current_user.id)


@router.get("/{employee_id}", response_model=LeaveBalanceDetail)
async def employee_balance(
    employee_id: int,
    year: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Balance of any employee (HR/Admin) or of yourself"""
    if employee_id != current_user.id and current_user.role not in (Role.HR, Role.ADMIN):
        raise ForbiddenError("Only HR can view other employees' balances")
    return _detail(db, employee_id, year or today_local().year)


@router.post("/{employee_id}/adjust", response_model=LeaveBalanceOut)
async def adjust_employee_balance(
    employee_id: int,
    payload: BalanceAdjustRequest,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.HR)),
):
    """Manual credit/debit/grant with a mandatory remark (HR/Admin)"""
    return leave_balance_service.adjust_balance(
        db=db,
        employee_id=employee_id,
        year=payload.year,
        kind=payload.kind,
        days=payload.days,
        remarks=payload.remarks,
        actor_id=current_user.id,
    )
