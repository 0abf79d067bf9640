"""
Approval chain - who may act on a request's current stage.

Resolution order, first match wins:
1. an active individual assignment for the requester,
2. an active department assignment for the requester's department,
3. a principal holding one of the stage's administrative override roles.

Inside one level a time-boxed (delegated) assignment beats an open-ended one,
then the latest start, then the newest row. The requester is never resolved as
their own approver. Nothing matching is a configuration error for HR, never an
implicit approval.
"""
import logging
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict
from sqlalchemy import or_
from sqlalchemy.orm import Session

from approval_engine.core.exceptions import NoApproverConfiguredError
from approval_engine.models.approval import ApprovalAssignment
from approval_engine.models.employee import Employee
from approval_engine.models.request import Request, RequestStatus
from approval_engine.services.request_state_machine import (
    STAGE_OVERRIDE_ROLES,
    ensure_pending,
    workflow_for,
)
from approval_engine.utils.datetime_utils import to_local, today_local

logger = logging.getLogger(__name__)


class ApprovalSubject(BaseModel):
    """The parts of a request that routing depends on."""
    model_config = ConfigDict(frozen=True)

    requester_id: int
    department_id: Optional[int]
    stage: RequestStatus


def _as_date(now: Union[date, datetime]) -> date:
    if isinstance(now, datetime):
        return to_local(now).date()
    return now


def is_active_on(assignment: ApprovalAssignment, on: date) -> bool:
    """Active flag set and ``on`` inside [delegation_start, delegation_end] (open ends allowed)."""
    if not assignment.active:
        return False
    if assignment.delegation_start is not None and on < assignment.delegation_start:
        return False
    if assignment.delegation_end is not None and on > assignment.delegation_end:
        return False
    return True


def _preference(assignment: ApprovalAssignment):
    time_boxed = assignment.delegation_start is not None or assignment.delegation_end is not None
    return (time_boxed, assignment.delegation_start or date.min, assignment.id or 0)


def resolve_approver(
    subject: ApprovalSubject,
    now: Union[date, datetime],
    assignments: Iterable[ApprovalAssignment],
    override_principals: Sequence[int] = (),
) -> int:
    """
    Pure resolution over already-loaded assignments.

    Args:
        subject: requester, department and the stage being decided
        now: evaluation instant; delegation windows are compared by local calendar date
        assignments: candidate assignments (any stage/target; filtered here)
        override_principals: holders of the stage's override roles, in preference order

    Raises:
        NoApproverConfiguredError: nothing matched
    """
    on = _as_date(now)
    usable = [
        a for a in assignments
        if a.stage == subject.stage
        and a.approver_id != subject.requester_id
        and is_active_on(a, on)
    ]

    individual = [a for a in usable if a.employee_id == subject.requester_id]
    if individual:
        return max(individual, key=_preference).approver_id

    department = [
        a for a in usable
        if a.employee_id is None and subject.department_id is not None
        and a.department_id == subject.department_id
    ]
    if department:
        return max(department, key=_preference).approver_id

    for principal_id in override_principals:
        if principal_id != subject.requester_id:
            return principal_id

    raise NoApproverConfiguredError(
        f"No approver configured for stage {subject.stage.value} "
        f"(requester {subject.requester_id}, department {subject.department_id})"
    )


def load_override_principals(db: Session, stage: RequestStatus) -> List[int]:
    """Active employees holding the stage's override roles, role order first, then lowest id."""
    principals: List[int] = []
    for role in STAGE_OVERRIDE_ROLES.get(stage, ()):
        rows = db.query(Employee.id).filter(
            Employee.role == role.value,
            Employee.active == True,  # noqa: E712
        ).order_by(Employee.id).all()
        principals.extend(row[0] for row in rows if row[0] not in principals)
    return principals


def resolve_stage_approver(
    db: Session,
    requester: Employee,
    stage: RequestStatus,
    now: Optional[Union[date, datetime]] = None,
) -> int:
    """Store-backed resolution for an arbitrary stage of ``requester``'s requests."""
    subject = ApprovalSubject(
        requester_id=requester.id,
        department_id=requester.department_id,
        stage=stage,
    )
    assignments = (
        db.query(ApprovalAssignment)
        .join(Employee, Employee.id == ApprovalAssignment.approver_id)
        .filter(
            ApprovalAssignment.stage == stage,
            ApprovalAssignment.active == True,  # noqa: E712
            Employee.active == True,  # noqa: E712
            or_(
                ApprovalAssignment.employee_id == requester.id,
                ApprovalAssignment.department_id == requester.department_id,
            ),
        )
        .all()
    )
    return resolve_approver(
        subject,
        now or today_local(),
        assignments,
        load_override_principals(db, stage),
    )


def resolve_approver_for_request(
    db: Session,
    request: Request,
    now: Optional[Union[date, datetime]] = None,
) -> int:
    """Approver for the request's current stage."""
    stage = ensure_pending(request.variant, request.status)
    return resolve_stage_approver(db, request.requester, stage.status, now)


def describe_chain(
    db: Session,
    request: Request,
    now: Optional[Union[date, datetime]] = None,
) -> List[dict]:
    """Every stage of the request's workflow with the approver that would act on it today."""
    chain = []
    for stage in workflow_for(request.variant).stages:
        entry = {"stage": stage.status, "approver_id": None, "error": None, "current": stage.status == request.status}
        try:
            entry["approver_id"] = resolve_stage_approver(db, request.requester, stage.status, now)
        except NoApproverConfiguredError as e:
            entry["error"] = e.detail
        chain.append(entry)
    return chain
