"""
Leave balance schemas
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, field_serializer
from approval_engine.services.leave_balance_service import AdjustmentKind


class LeaveBalanceOut(BaseModel):
    employee_id: int
    year: int
    total_days: int
    used_days: int
    carryover_initial: int
    carryover_remaining: int
    carryover_from_year: Optional[int] = None
    remaining_days: int

    model_config = ConfigDict(from_attributes=True)


class LeaveTransactionOut(BaseModel):
    id: int
    year: int
    request_id: Optional[int] = None
    delta_days: int
    action: str
    remarks: Optional[str] = None
    action_by_employee_id: Optional[int] = None
    action_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("action_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        from approval_engine.utils.datetime_utils import iso_local
        return iso_local(dt) if dt is not None else None


class LeaveBalanceDetail(BaseModel):
    balance: LeaveBalanceOut
    transactions: List[LeaveTransactionOut] = []


class BalanceAdjustRequest(BaseModel):
    """Manual HR correction"""
    year: int = Field(..., description="Calendar year of the balance")
    kind: AdjustmentKind = Field(..., description="CREDIT, DEBIT or GRANT")
    days: int = Field(..., gt=0, description="Number of working days")
    remarks: str = Field(..., min_length=1, description="Why the balance is adjusted")


class YearCloseRequest(BaseModel):
    year: int = Field(..., description="Year being closed; balances carry into year + 1")


class YearCloseItem(BaseModel):
    employee_id: int
    carried_days: int


class YearCloseResponse(BaseModel):
    year: int
    next_year: int
    processed: int
    skipped: int
    total_carried: int
    details: List[YearCloseItem]
