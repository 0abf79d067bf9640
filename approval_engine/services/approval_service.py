"""
Approval configuration service - stage assignments and delegations
"""
import logging
from datetime import date
from typing import List, Optional
from sqlalchemy import and_
from sqlalchemy.orm import Session
from approval_engine.core.exceptions import InvalidRangeError, InvalidRequestError, NotFoundError
from approval_engine.models.approval import ApprovalAssignment, ApprovalDelegation
from approval_engine.models.department import Department
from approval_engine.models.employee import Employee
from approval_engine.models.request import RequestStatus
from approval_engine.services.audit_service import log_audit
from approval_engine.services.request_state_machine import STAGE_OVERRIDE_ROLES
from approval_engine.utils.datetime_utils import now_utc, today_local

logger = logging.getLogger(__name__)


def _get_active_employee(db: Session, employee_id: int, label: str) -> Employee:
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise NotFoundError(f"{label} with id {employee_id} not found")
    if not employee.active:
        raise InvalidRequestError(f"{label} {employee_id} is inactive")
    return employee


def create_assignment(
    db: Session,
    stage: RequestStatus,
    approver_id: int,
    actor_id: int,
    employee_id: Optional[int] = None,
    department_id: Optional[int] = None,
    delegation_start: Optional[date] = None,
    delegation_end: Optional[date] = None,
) -> ApprovalAssignment:
    """
    Map an employee or a whole department to an approver for one stage.

    Exactly one of employee_id / department_id must be given.
    """
    if stage not in STAGE_OVERRIDE_ROLES:
        raise InvalidRequestError(f"{stage.value} is not an approval stage")
    if (employee_id is None) == (department_id is None):
        raise InvalidRequestError("Give exactly one of employee_id or department_id")
    if delegation_start and delegation_end and delegation_start > delegation_end:
        raise InvalidRangeError(f"delegation_start ({delegation_start}) is after delegation_end ({delegation_end})")

    _get_active_employee(db, approver_id, "Approver")
    if employee_id is not None:
        _get_active_employee(db, employee_id, "Employee")
        if employee_id == approver_id:
            raise InvalidRequestError("An employee cannot be their own approver")
    else:
        department = db.query(Department).filter(Department.id == department_id).first()
        if not department:
            raise NotFoundError(f"Department with id {department_id} not found")

    assignment = ApprovalAssignment(
        stage=stage,
        employee_id=employee_id,
        department_id=department_id,
        approver_id=approver_id,
        delegation_start=delegation_start,
        delegation_end=delegation_end,
        active=True,
        created_at=now_utc(),
    )
    db.add(assignment)
    db.flush()
    log_audit(
        db=db,
        actor_id=actor_id,
        action="APPROVAL_ASSIGNMENT_CREATE",
        entity_type="approval_assignments",
        entity_id=assignment.id,
        meta={
            "stage": stage,
            "employee_id": employee_id,
            "department_id": department_id,
            "approver_id": approver_id,
            "delegation_start": delegation_start,
            "delegation_end": delegation_end,
        },
        commit=False,
    )
    db.commit()
    db.refresh(assignment)
    logger.info(
        "approval assignment created: id=%s stage=%s approver_id=%s",
        assignment.id, stage.value, approver_id,
    )
    return assignment


def list_assignments(
    db: Session,
    stage: Optional[RequestStatus] = None,
    approver_id: Optional[int] = None,
    include_inactive: bool = False,
) -> List[ApprovalAssignment]:
    q = db.query(ApprovalAssignment)
    if stage is not None:
        q = q.filter(ApprovalAssignment.stage == stage)
    if approver_id is not None:
        q = q.filter(ApprovalAssignment.approver_id == approver_id)
    if not include_inactive:
        q = q.filter(ApprovalAssignment.active == True)  # noqa: E712
    return q.order_by(ApprovalAssignment.id).all()


def delete_assignment(db: Session, assignment_id: int, actor_id: int) -> None:
    assignment = db.query(ApprovalAssignment).filter(ApprovalAssignment.id == assignment_id).first()
    if not assignment:
        raise NotFoundError(f"Approval assignment with id {assignment_id} not found")

    meta = {
        "stage": assignment.stage,
        "employee_id": assignment.employee_id,
        "department_id": assignment.department_id,
        "approver_id": assignment.approver_id,
    }
    db.delete(assignment)
    log_audit(
        db=db,
        actor_id=actor_id,
        action="APPROVAL_ASSIGNMENT_DELETE",
        entity_type="approval_assignments",
        entity_id=assignment_id,
        meta=meta,
        commit=False,
    )
    db.commit()
    logger.info("approval assignment deleted: id=%s", assignment_id)


def validate_delegation(
    db: Session,
    delegator_id: int,
    delegate_id: int,
    start_date: date,
    end_date: date,
    today: Optional[date] = None,
) -> None:
    """
    Delegation rules:
    - nobody delegates to themselves
    - start_date <= end_date and the window has not already ended
    - one delegator has at most one active delegation per day
    """
    today = today or today_local()
    if delegator_id == delegate_id:
        raise InvalidRequestError("You cannot delegate approvals to yourself")
    if start_date > end_date:
        raise InvalidRangeError(f"start_date ({start_date}) is after end_date ({end_date})")
    if end_date < today:
        raise InvalidRangeError("A delegation cannot end in the past")

    overlapping = db.query(ApprovalDelegation).filter(
        ApprovalDelegation.delegator_id == delegator_id,
        ApprovalDelegation.active == True,  # noqa: E712
        and_(
            ApprovalDelegation.start_date <= end_date,
            ApprovalDelegation.end_date >= start_date,
        ),
    ).first()
    if overlapping:
        raise InvalidRequestError(
            f"Delegation {overlapping.id} already covers "
            f"{overlapping.start_date} - {overlapping.end_date}"
        )


def create_delegation(
    db: Session,
    delegator_id: int,
    delegate_id: int,
    start_date: date,
    end_date: date,
    actor_id: int,
    reason: Optional[str] = None,
) -> ApprovalDelegation:
    """
    Hand the delegator's approval duties to ``delegate_id`` for a date window.

    Each open-ended assignment the delegator holds is copied with the delegate
    as approver and the window as its time box. Time-boxed rows win within
    their precedence level, so routing picks the delegate while the window is
    open and falls back to the delegator afterwards without any cleanup job.
    """
    validate_delegation(db, delegator_id, delegate_id, start_date, end_date)
    _get_active_employee(db, delegator_id, "Delegator")
    _get_active_employee(db, delegate_id, "Delegate")

    source_assignments = db.query(ApprovalAssignment).filter(
        ApprovalAssignment.approver_id == delegator_id,
        ApprovalAssignment.active == True,  # noqa: E712
        ApprovalAssignment.delegation_id.is_(None),
    ).all()

    delegation = ApprovalDelegation(
        delegator_id=delegator_id,
        delegate_id=delegate_id,
        start_date=start_date,
        end_date=end_date,
        reason=reason,
        active=True,
        created_at=now_utc(),
    )
    db.add(delegation)

    for source in source_assignments:
        # the delegate would otherwise approve their own requests
        if source.employee_id == delegate_id:
            continue
        delegation.assignments.append(
            ApprovalAssignment(
                stage=source.stage,
                employee_id=source.employee_id,
                department_id=source.department_id,
                approver_id=delegate_id,
                delegation_start=start_date,
                delegation_end=end_date,
                active=True,
                created_at=now_utc(),
            )
        )

    db.flush()
    log_audit(
        db=db,
        actor_id=actor_id,
        action="APPROVAL_DELEGATION_CREATE",
        entity_type="approval_delegations",
        entity_id=delegation.id,
        meta={
            "delegator_id": delegator_id,
            "delegate_id": delegate_id,
            "start_date": start_date,
            "end_date": end_date,
            "assignments": len(delegation.assignments),
        },
        commit=False,
    )
    db.commit()
    db.refresh(delegation)
    logger.info(
        "delegation created: id=%s delegator_id=%s delegate_id=%s window=%s..%s assignments=%s",
        delegation.id, delegator_id, delegate_id, start_date, end_date, len(delegation.assignments),
    )
    return delegation


def list_delegations(
    db: Session,
    employee_id: Optional[int] = None,
    include_inactive: bool = False,
) -> List[ApprovalDelegation]:
    """Delegations given or received by ``employee_id`` (all when None)."""
    q = db.query(ApprovalDelegation)
    if employee_id is not None:
        q = q.filter(
            (ApprovalDelegation.delegator_id == employee_id)
            | (ApprovalDelegation.delegate_id == employee_id)
        )
    if not include_inactive:
        q = q.filter(ApprovalDelegation.active == True)  # noqa: E712
    return q.order_by(ApprovalDelegation.start_date.desc(), ApprovalDelegation.id.desc()).all()


def get_delegation(db: Session, delegation_id: int) -> ApprovalDelegation:
    delegation = db.query(ApprovalDelegation).filter(ApprovalDelegation.id == delegation_id).first()
    if not delegation:
        raise NotFoundError(f"Delegation with id {delegation_id} not found")
    return delegation


def revoke_delegation(db: Session, delegation_id: int, actor_id: int) -> ApprovalDelegation:
    """Deactivate a delegation and the assignments it created."""
    delegation = get_delegation(db, delegation_id)
    if not delegation.active:
        return delegation

    delegation.active = False
    for assignment in delegation.assignments:
        assignment.active = False

    log_audit(
        db=db,
        actor_id=actor_id,
        action="APPROVAL_DELEGATION_REVOKE",
        entity_type="approval_delegations",
        entity_id=delegation.id,
        meta={"delegator_id": delegation.delegator_id, "delegate_id": delegation.delegate_id},
        commit=False,
    )
    db.commit()
    db.refresh(delegation)
    logger.info("delegation revoked: id=%s", delegation_id)
    return delegation
