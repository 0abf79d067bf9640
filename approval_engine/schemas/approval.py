"""
Approval configuration schemas: assignments and delegations
"""
from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, field_serializer, model_validator
from approval_engine.models.request import RequestStatus


class AssignmentCreate(BaseModel):
    """Map one employee or one department to an approver for a stage"""
    stage: RequestStatus = Field(..., description="pending_* stage the assignment covers")
    approver_id: int
    employee_id: Optional[int] = None
    department_id: Optional[int] = None
    delegation_start: Optional[date] = None
    delegation_end: Optional[date] = None

    @model_validator(mode="after")
    def _single_target(self):
        if (self.employee_id is None) == (self.department_id is None):
            raise ValueError("Give exactly one of employee_id or department_id")
        return self


class AssignmentOut(BaseModel):
    id: int
    stage: RequestStatus
    approver_id: int
    employee_id: Optional[int] = None
    department_id: Optional[int] = None
    delegation_start: Optional[date] = None
    delegation_end: Optional[date] = None
    delegation_id: Optional[int] = None
    active: bool

    model_config = ConfigDict(from_attributes=True)


class DelegationCreate(BaseModel):
    """HR/admin may delegate on behalf of someone; others delegate their own duties"""
    delegate_id: int
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=255)
    delegator_id: Optional[int] = Field(None, description="Defaults to the current user")


class DelegationOut(BaseModel):
    id: int
    delegator_id: int
    delegate_id: int
    start_date: date
    end_date: date
    reason: Optional[str] = None
    active: bool
    created_at: datetime
    assignments: List[AssignmentOut] = []

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        from approval_engine.utils.datetime_utils import iso_local
        return iso_local(dt) if dt is not None else None
