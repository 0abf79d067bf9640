"""
Working-day calendar endpoints
"""
from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from approval_engine.core.deps import get_db, get_current_user
from approval_engine.models.employee import Employee
from approval_engine.schemas.holiday import WorkingDaysResponse
from approval_engine.services.calendar_service import count_working_days
from approval_engine.services.holiday_service import get_holiday_set

router = APIRouter()


@router.get("/working-days", response_model=WorkingDaysResponse)
async def working_days_endpoint(
    start: date = Query(..., description="First day (inclusive)"),
    end: date = Query(..., description="Last day (inclusive)"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Working days between two dates: weekends and active holidays excluded."""
    holidays = get_holiday_set(db, start, end)
    return WorkingDaysResponse(
        start=start,
        end=end,
        working_days=count_working_days(start, end, holidays),
        holidays=sorted(holidays),
    )
