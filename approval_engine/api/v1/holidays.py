"""
Holiday management endpoints (HR-only)
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from approval_engine.core.deps import get_db, require_roles, get_current_user
from approval_engine.models.employee import Role, Employee
from approval_engine.schemas.holiday import HolidayCreate, HolidayUpdate, HolidayOut, HolidaySeedResponse
from approval_engine.services.holiday_service import (
    create_holiday,
    list_holidays,
    update_holiday,
    delete_holiday,
    seed_public_holidays,
)

router = APIRouter()


@router.post("", response_model=HolidayOut, status_code=201)
async def create_holiday_endpoint(
    holiday_data: HolidayCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.HR))
):
    """Create a holiday (HR/Admin)"""
    return create_holiday(
        db=db,
        holiday_date=holiday_data.date,
        name=holiday_data.name,
        kind=holiday_data.kind,
        active=holiday_data.active,
        actor_id=current_user.id
    )


@router.get("", response_model=List[HolidayOut])
async def list_holidays_endpoint(
    year: Optional[int] = Query(None, description="Filter by year"),
    active_only: bool = Query(False, description="Return only active holidays"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    """List holidays (any authenticated user)"""
    return list_holidays(db, year=year, active_only=active_only)


@router.post("/seed/{year}", response_model=HolidaySeedResponse)
async def seed_holidays_endpoint(
    year: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.HR))
):
    """Insert the built-in public holidays for a year (existing dates are kept)"""
    created = seed_public_holidays(db, year, actor_id=current_user.id)
    return HolidaySeedResponse(year=year, created=len(created))


@router.patch("/{holiday_id}", response_model=HolidayOut)
async def update_holiday_endpoint(
    holiday_id: int,
    holiday_data: HolidayUpdate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.HR))
):
    """Rename or deactivate a holiday (HR/Admin)"""
    return update_holiday(
        db=db,
        holiday_id=holiday_id,
        name=holiday_data.name,
        active=holiday_data.active,
        actor_id=current_user.id
    )


@router.delete("/{holiday_id}", status_code=204)
async def delete_holiday_endpoint(
    holiday_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.HR))
):
    """Delete a holiday (HR/Admin)"""
    delete_holiday(db, holiday_id, actor_id=current_user.id)
