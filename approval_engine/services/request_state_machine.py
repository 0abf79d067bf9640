"""
Request lifecycle rules.

    draft -> <stage 1> -> ... -> <stage n> -> approved
    any pending stage -> rejected

Each variant declares its ordered stage list and which signature a stage
needs before it can approve. Everything here is pure; request_service applies
the results to the store.
"""
import enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from approval_engine.core.exceptions import (
    InvalidTransitionError,
    TerminalStateError,
)
from approval_engine.models.employee import Role
from approval_engine.models.request import (
    RequestStatus,
    RequestVariant,
    SignatureRole,
    TERMINAL_STATUSES,
)


class Decision(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"


class Stage(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: RequestStatus
    signature_role: Optional[SignatureRole]
    requires_signature_blob: bool = True


class Workflow(BaseModel):
    model_config = ConfigDict(frozen=True)

    variant: RequestVariant
    submit_signature: Optional[SignatureRole]
    stages: Tuple[Stage, ...]

    @property
    def first_stage(self) -> Stage:
        return self.stages[0]

    def stage_for(self, status: RequestStatus) -> Stage:
        for stage in self.stages:
            if stage.status == status:
                return stage
        raise InvalidTransitionError(f"{status.value} is not a stage of {self.variant.value} requests")

    def next_status(self, status: RequestStatus) -> RequestStatus:
        """Status after approving ``status``: the next stage, or APPROVED after the last one."""
        statuses = [stage.status for stage in self.stages]
        index = statuses.index(self.stage_for(status).status)
        if index + 1 < len(statuses):
            return statuses[index + 1]
        return RequestStatus.APPROVED


_DEPARTMENT_HEAD = Stage(status=RequestStatus.PENDING_DEPARTMENT_HEAD, signature_role=SignatureRole.DEPARTMENT_HEAD)
_DIRECTOR = Stage(status=RequestStatus.PENDING_DIRECTOR, signature_role=SignatureRole.DIRECTOR)

WORKFLOWS: Dict[RequestVariant, Workflow] = {
    RequestVariant.LEAVE: Workflow(
        variant=RequestVariant.LEAVE,
        submit_signature=SignatureRole.REQUESTER,
        stages=(_DEPARTMENT_HEAD, _DIRECTOR),
    ),
    RequestVariant.PROCUREMENT: Workflow(
        variant=RequestVariant.PROCUREMENT,
        submit_signature=None,
        stages=(
            _DEPARTMENT_HEAD,
            Stage(
                status=RequestStatus.PENDING_PROCUREMENT,
                signature_role=SignatureRole.PROCUREMENT,
                requires_signature_blob=False,
            ),
            Stage(
                status=RequestStatus.PENDING_CFP,
                signature_role=SignatureRole.CFP,
                requires_signature_blob=False,
            ),
            _DIRECTOR,
        ),
    ),
    RequestVariant.HR_DOCUMENT: Workflow(
        variant=RequestVariant.HR_DOCUMENT,
        submit_signature=SignatureRole.REQUESTER,
        stages=(_DEPARTMENT_HEAD,),
    ),
}

# Roles that may act on a stage when no assignment matches, in order of preference
STAGE_OVERRIDE_ROLES: Dict[RequestStatus, Tuple[Role, ...]] = {
    RequestStatus.PENDING_DEPARTMENT_HEAD: (Role.ADMIN,),
    RequestStatus.PENDING_PROCUREMENT: (Role.PROCUREMENT, Role.ADMIN),
    RequestStatus.PENDING_CFP: (Role.CFP, Role.ADMIN),
    RequestStatus.PENDING_DIRECTOR: (Role.DIRECTOR, Role.ADMIN),
}


def workflow_for(variant: RequestVariant) -> Workflow:
    return WORKFLOWS[variant]


def is_terminal(status: RequestStatus) -> bool:
    return status in TERMINAL_STATUSES


def ensure_pending(variant: RequestVariant, status: RequestStatus) -> Stage:
    """The stage a decision would act on; fails for drafts and terminal requests."""
    if is_terminal(status):
        raise TerminalStateError(f"Request is already {status.value}")
    if status == RequestStatus.DRAFT:
        raise InvalidTransitionError("Draft requests must be submitted before they can be decided")
    return workflow_for(variant).stage_for(status)


def ensure_draft(status: RequestStatus) -> None:
    if is_terminal(status):
        raise TerminalStateError(f"Request is already {status.value}")
    if status != RequestStatus.DRAFT:
        raise InvalidTransitionError(f"Only drafts can be changed; request is {status.value}")


def target_status(variant: RequestVariant, status: RequestStatus, decision: Decision) -> RequestStatus:
    """Status a pending request moves to for ``decision``. Exactly one stage per call."""
    ensure_pending(variant, status)
    if decision == Decision.REJECT:
        return RequestStatus.REJECTED
    return workflow_for(variant).next_status(status)


def ensure_transition_allowed(
    variant: RequestVariant,
    current: RequestStatus,
    target: RequestStatus
) -> None:
    """
    Validate an explicit current -> target move.

    Allowed: draft -> first stage, stage k -> stage k+1 (or approved after the
    last stage), any stage -> rejected. Everything else, including skipping a
    stage, raises InvalidTransitionError.
    """
    workflow = workflow_for(variant)
    if current == RequestStatus.DRAFT:
        if target == workflow.first_stage.status:
            return
        raise InvalidTransitionError(
            f"A draft can only be submitted to {workflow.first_stage.status.value}, not {target.value}"
        )

    ensure_pending(variant, current)
    if target == RequestStatus.REJECTED or target == workflow.next_status(current):
        return
    raise InvalidTransitionError(
        f"Cannot move a {variant.value} request from {current.value} to {target.value}"
    )
