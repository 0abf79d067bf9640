"""
Approval configuration endpoints: stage assignments and delegations
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from approval_engine.core.deps import get_db, get_current_user, require_roles
from approval_engine.core.exceptions import ForbiddenError
from approval_engine.models.employee import Employee, Role
from approval_engine.models.request import RequestStatus
from approval_engine.schemas.approval import AssignmentCreate, AssignmentOut, DelegationCreate, DelegationOut
from approval_engine.services import approval_service

router = APIRouter()

MANAGING_ROLES = (Role.HR, Role.ADMIN)


@router.get("/assignments", response_model=List[AssignmentOut])
async def list_assignments_endpoint(
    stage: Optional[RequestStatus] = Query(None),
    approver_id: Optional[int] = Query(None),
    include_inactive: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.HR)),
):
    return approval_service.list_assignments(
        db, stage=stage, approver_id=approver_id, include_inactive=include_inactive
    )


@router.post("/assignments", response_model=AssignmentOut, status_code=201)
async def create_assignment_endpoint(
    payload: AssignmentCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.HR)),
):
    """Route a stage of one employee's or one department's requests to an approver"""
    return approval_service.create_assignment(
        db=db,
        stage=payload.stage,
        approver_id=payload.approver_id,
        actor_id=current_user.id,
        employee_id=payload.employee_id,
        department_id=payload.department_id,
        delegation_start=payload.delegation_start,
        delegation_end=payload.delegation_end,
    )


@router.delete("/assignments/{assignment_id}", status_code=204)
async def delete_assignment_endpoint(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.HR)),
):
    approval_service.delete_assignment(db, assignment_id, current_user.id)


@router.get("/delegations", response_model=List[DelegationOut])
async def list_delegations_endpoint(
    include_inactive: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """HR/Admin see every delegation; others see the ones they gave or received"""
    employee_id = None if current_user.role in MANAGING_ROLES else current_user.id
    return approval_service.list_delegations(db, employee_id=employee_id, include_inactive=include_inactive)


@router.post("/delegations", response_model=DelegationOut, status_code=201)
async def create_delegation_endpoint(
    payload: DelegationCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Hand your approval duties to a colleague for a date window"""
    delegator_id = payload.delegator_id or current_user.id
    if delegator_id != current_user.id and current_user.role not in MANAGING_ROLES:
        raise ForbiddenError("Only HR can delegate on behalf of another approver")
    return approval_service.create_delegation(
        db=db,
        delegator_id=delegator_id,
        delegate_id=payload.delegate_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        actor_id=current_user.id,
        reason=payload.reason,
    )


@router.post("/delegations/{delegation_id}/revoke", response_model=DelegationOut)
async def revoke_delegation_endpoint(
    delegation_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    delegation = approval_service.get_delegation(db, delegation_id)
    if delegation.delegator_id != current_user.id and current_user.role not in MANAGING_ROLES:
        raise ForbiddenError("Only the delegator or HR can revoke a delegation")
    return approval_service.revoke_delegation(db, delegation_id, current_user.id)
