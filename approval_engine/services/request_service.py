"""
Request service - drafts, submission and approver decisions.

Status changes go through a compare-and-swap UPDATE guarded by the status the
caller validated against. The ledger debit on final leave approval, the
approval history row and the audit entry are written in the same transaction,
so either all of them land or none do.
"""
import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from approval_engine.constants import (
    DEFAULT_CURRENCY,
    HR_DOCUMENT_TYPES,
    PROCUREMENT_CATEGORIES,
    PROCUREMENT_URGENCIES,
)
from approval_engine.core.exceptions import (
    ConcurrentModificationError,
    ForbiddenError,
    InsufficientBalanceError,
    InvalidRangeError,
    InvalidRequestError,
    MissingSignatureError,
    NoApproverConfiguredError,
    NotFoundError,
    RequestLockedError,
    UnauthorizedApproverError,
)
from approval_engine.models.employee import Employee, Role
from approval_engine.models.notification import NotificationKind
from approval_engine.models.request import (
    ApprovalAction,
    ProcurementItem,
    Request,
    RequestApproval,
    RequestNote,
    RequestSignature,
    RequestStatus,
    RequestVariant,
    SignatureRole,
    TERMINAL_STATUSES,
)
from approval_engine.services import leave_balance_service
from approval_engine.services.approval_chain import describe_chain, resolve_approver_for_request
from approval_engine.services.audit_service import log_audit
from approval_engine.services.calendar_service import count_working_days
from approval_engine.services.holiday_service import get_holiday_set
from approval_engine.services.notification_service import (
    DatabaseNotificationSink,
    NotificationSink,
    build_message,
    notify_safely,
)
from approval_engine.services.request_state_machine import (
    Decision,
    ensure_draft,
    ensure_pending,
    ensure_transition_allowed,
    target_status,
    workflow_for,
)
from approval_engine.utils.datetime_utils import local_day_start, now_utc, to_local

logger = logging.getLogger(__name__)

REQUEST_NUMBER_PREFIXES = {
    RequestVariant.LEAVE: "CO",
    RequestVariant.PROCUREMENT: "REF",
    RequestVariant.HR_DOCUMENT: "HR",
}

PENDING_STATUSES = (
    RequestStatus.PENDING_DEPARTMENT_HEAD,
    RequestStatus.PENDING_PROCUREMENT,
    RequestStatus.PENDING_CFP,
    RequestStatus.PENDING_DIRECTOR,
)

# Roles that may read any request
OVERSIGHT_ROLES = (Role.HR, Role.ADMIN, Role.DIRECTOR)

_LOCKED_FIELDS = ("start_date", "end_date", "items")
_EDITABLE_FIELDS = (
    "title", "start_date", "end_date", "replacement_name",
    "category", "urgency", "currency", "items", "details",
)


# ---------------------------------------------------------------------------
# Lookups and permissions
# ---------------------------------------------------------------------------

def get_request(db: Session, request_id: int) -> Request:
    request = db.query(Request).filter(Request.id == request_id).first()
    if not request:
        raise NotFoundError(f"Request with id {request_id} not found")
    return request


def _get_employee(db: Session, employee_id: int) -> Employee:
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise NotFoundError(f"Employee with id {employee_id} not found")
    return employee


def _ensure_owner(request: Request, actor_id: int) -> None:
    if request.requester_id != actor_id:
        raise ForbiddenError("Only the requester can change a draft")


def can_view(db: Session, request: Request, user: Employee) -> bool:
    """Requester, oversight roles, anyone who acted on it, and the current approver."""
    if request.requester_id == user.id or user.role in OVERSIGHT_ROLES:
        return True
    if any(approval.action_by == user.id for approval in request.approvals):
        return True
    if request.status in PENDING_STATUSES:
        try:
            return resolve_approver_for_request(db, request) == user.id
        except NoApproverConfiguredError:
            return False
    return False


def get_request_for_user(db: Session, request_id: int, user: Employee) -> Request:
    request = get_request(db, request_id)
    if not can_view(db, request, user):
        raise ForbiddenError("You are not allowed to view this request")
    return request


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def next_request_number(db: Session, variant: RequestVariant, year: int) -> str:
    """CO-2026-0001 style number, sequence per prefix and year."""
    prefix = f"{REQUEST_NUMBER_PREFIXES[variant]}-{year}-"
    # sequences are zero-padded to four digits, so longer numbers are larger
    last = (
        db.query(Request.request_number)
        .filter(Request.request_number.like(f"{prefix}%"))
        .order_by(func.length(Request.request_number).desc(), Request.request_number.desc())
        .first()
    )
    sequence = int(last[0].rsplit("-", 1)[1]) + 1 if last else 1
    return f"{prefix}{sequence:04d}"


def validate_leave_year(start_date: date, end_date: date) -> None:
    """Leave never spans two calendar years; each year has its own balance."""
    if start_date.year != end_date.year:
        raise InvalidRangeError(
            f"Leave cannot span across years. Start year: {start_date.year}, end year: {end_date.year}"
        )


def validate_overlap(
    db: Session,
    requester_id: int,
    start_date: date,
    end_date: date,
    exclude_request_id: Optional[int] = None,
) -> None:
    """No overlap with the requester's other pending or approved leave."""
    query = db.query(Request).filter(
        Request.variant == RequestVariant.LEAVE,
        Request.requester_id == requester_id,
        Request.status.in_(PENDING_STATUSES + (RequestStatus.APPROVED,)),
        Request.end_date >= start_date,
        Request.start_date <= end_date,
    )
    if exclude_request_id:
        query = query.filter(Request.id != exclude_request_id)

    overlapping = query.first()
    if overlapping:
        raise InvalidRequestError(
            f"Leave overlaps with {overlapping.request_number} "
            f"({overlapping.start_date} - {overlapping.end_date})"
        )


def compute_working_days(db: Session, start_date: date, end_date: date) -> int:
    """Working days of a leave period, at least one."""
    if start_date > end_date:
        raise InvalidRangeError(f"Start date {start_date} is after end date {end_date}")
    validate_leave_year(start_date, end_date)
    days = count_working_days(start_date, end_date, get_holiday_set(db, start_date, end_date))
    if days < 1:
        raise InvalidRequestError("The selected period contains no working days")
    return days


def _build_items(items: Iterable[Mapping[str, Any]]) -> List[ProcurementItem]:
    built = []
    for position, item in enumerate(items, start=1):
        name = (item.get("name") or "").strip()
        quantity = item.get("quantity")
        unit_price = item.get("unit_price")
        if not name:
            raise InvalidRequestError(f"Item {position} has no name")
        if quantity is None or int(quantity) <= 0:
            raise InvalidRequestError(f"Item {position} must have a quantity greater than zero")
        if unit_price is None or Decimal(str(unit_price)) < 0:
            raise InvalidRequestError(f"Item {position} must have a non-negative unit price")
        built.append(ProcurementItem(
            position=position,
            name=name,
            quantity=int(quantity),
            unit=item.get("unit") or "buc",
            unit_price=Decimal(str(unit_price)),
            specifications=item.get("specifications"),
        ))
    return built


def estimated_value(items: Iterable[ProcurementItem]) -> Decimal:
    """Sum of quantity x unit_price over all items."""
    total = Decimal("0")
    for item in items:
        total += Decimal(item.quantity) * Decimal(str(item.unit_price))
    return total.quantize(Decimal("0.01"))


def _validate_choice(value: Optional[str], allowed, field: str) -> None:
    if value is not None and value not in allowed:
        raise InvalidRequestError(f"Invalid {field} '{value}'. Allowed: {', '.join(allowed)}")


def _apply_fields(db: Session, request: Request, fields: Dict[str, Any]) -> None:
    """Copy draft fields onto the request and recompute the derived ones."""
    for name in ("title", "replacement_name", "category", "urgency", "currency"):
        if name in fields:
            setattr(request, name, fields[name])
    if "details" in fields:
        request.details = dict(fields["details"] or {})

    if request.variant == RequestVariant.LEAVE:
        if "start_date" in fields:
            request.start_date = fields["start_date"]
        if "end_date" in fields:
            request.end_date = fields["end_date"]
        if request.start_date and request.end_date:
            request.working_days = compute_working_days(db, request.start_date, request.end_date)
            validate_overlap(db, request.requester_id, request.start_date, request.end_date, request.id)
        else:
            request.working_days = None

    elif request.variant == RequestVariant.PROCUREMENT:
        _validate_choice(request.category, PROCUREMENT_CATEGORIES, "category")
        _validate_choice(request.urgency, PROCUREMENT_URGENCIES, "urgency")
        request.currency = request.currency or DEFAULT_CURRENCY
        if "items" in fields:
            request.items = _build_items(fields["items"] or [])
        request.estimated_value = estimated_value(request.items)

    else:
        _validate_choice((request.details or {}).get("document_type"), HR_DOCUMENT_TYPES, "document_type")


def validate_for_submit(db: Session, request: Request) -> None:
    """Mandatory data per variant, checked when a draft leaves the requester's hands."""
    if request.variant == RequestVariant.LEAVE:
        if not request.start_date or not request.end_date:
            raise InvalidRequestError("Leave requests need a start and an end date")
        request.working_days = request.working_days or compute_working_days(db, request.start_date, request.end_date)
        validate_overlap(db, request.requester_id, request.start_date, request.end_date, request.id)

    elif request.variant == RequestVariant.PROCUREMENT:
        if not (request.title or "").strip():
            raise InvalidRequestError("Procurement requests need a title")
        if not request.category or not request.urgency:
            raise InvalidRequestError("Procurement requests need a category and an urgency")
        if not request.items:
            raise InvalidRequestError("Procurement requests need at least one item")

    else:
        if not (request.details or {}).get("document_type"):
            raise InvalidRequestError("HR document requests need details.document_type")

    workflow = workflow_for(request.variant)
    if workflow.submit_signature and request.signature_for(workflow.submit_signature) is None:
        raise MissingSignatureError("The requester must sign before submitting")


# ---------------------------------------------------------------------------
# Drafts
# ---------------------------------------------------------------------------

def create_request(
    db: Session,
    requester_id: int,
    variant: RequestVariant,
    fields: Optional[Dict[str, Any]] = None,
    signature_blob: Optional[str] = None,
    submit: bool = False,
    now: Optional[datetime] = None,
    notifier: Optional[NotificationSink] = None,
) -> Request:
    """
    Create a draft. With ``signature_blob`` the requester signs it right away;
    with ``submit`` it is submitted in the same call.
    """
    fields = {k: v for k, v in (fields or {}).items() if k in _EDITABLE_FIELDS}
    now = now or now_utc()
    _get_employee(db, requester_id)

    request = Request(
        request_number=next_request_number(db, variant, to_local(now).year),
        variant=variant,
        requester_id=requester_id,
        status=RequestStatus.DRAFT,
        details={},
        created_at=now,
    )
    db.add(request)
    try:
        _apply_fields(db, request, fields)
        if signature_blob:
            request.signatures.append(RequestSignature(
                role=SignatureRole.REQUESTER,
                signer_id=requester_id,
                signed_at=now,
                blob_ref=signature_blob,
            ))
        db.flush()
        log_audit(
            db=db,
            actor_id=requester_id,
            action="REQUEST_CREATE",
            entity_type="requests",
            entity_id=request.id,
            meta={"request_number": request.request_number, "variant": variant},
            commit=False,
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("request number taken concurrently: variant=%s requester_id=%s", variant.value, requester_id)
        raise ConcurrentModificationError("Request number already taken; retry")
    except Exception:
        db.rollback()
        raise

    db.refresh(request)
    logger.info(
        "request created: request_id=%s number=%s variant=%s requester_id=%s",
        request.id, request.request_number, variant.value, requester_id,
    )

    if submit:
        return submit_request(db, request.id, requester_id, now=now, notifier=notifier)
    return request


def update_draft(db: Session, request_id: int, actor_id: int, fields: Dict[str, Any]) -> Request:
    """Owner edits a draft. Dates and items are frozen once the requester has signed."""
    request = get_request(db, request_id)
    _ensure_owner(request, actor_id)
    ensure_draft(request.status)

    fields = {k: v for k, v in fields.items() if k in _EDITABLE_FIELDS}
    if request.signature_for(SignatureRole.REQUESTER) is not None:
        locked = [name for name in _LOCKED_FIELDS if name in fields]
        if locked:
            raise RequestLockedError(f"Signed drafts cannot change: {', '.join(locked)}")

    try:
        _apply_fields(db, request, fields)
        log_audit(
            db=db,
            actor_id=actor_id,
            action="REQUEST_UPDATE",
            entity_type="requests",
            entity_id=request.id,
            meta={"fields": sorted(fields)},
            commit=False,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(request)
    return request


def delete_draft(db: Session, request_id: int, actor_id: int) -> None:
    request = get_request(db, request_id)
    _ensure_owner(request, actor_id)
    ensure_draft(request.status)

    number = request.request_number
    db.delete(request)
    log_audit(
        db=db,
        actor_id=actor_id,
        action="REQUEST_DELETE",
        entity_type="requests",
        entity_id=request_id,
        meta={"request_number": number},
        commit=False,
    )
    db.commit()
    logger.info("draft deleted: request_id=%s number=%s", request_id, number)


def attach_signature(
    db: Session,
    request_id: int,
    signer_id: int,
    role: SignatureRole,
    blob_ref: Optional[str] = None,
    now: Optional[datetime] = None,
) -> RequestSignature:
    """
    Store a signature on the request.

    REQUESTER signs their own draft. Stage roles sign while the request waits on
    that stage, and only the approver the chain resolves for it may sign.
    """
    request = get_request(db, request_id)
    now = now or now_utc()

    if role == SignatureRole.REQUESTER:
        _ensure_owner(request, signer_id)
        ensure_draft(request.status)
        if not blob_ref:
            raise MissingSignatureError("A signature image is required")
    else:
        stage = ensure_pending(request.variant, request.status)
        if stage.signature_role != role:
            raise InvalidRequestError(
                f"The {role.value} signature is not expected while the request is {request.status.value}"
            )
        if resolve_approver_for_request(db, request, now) != signer_id:
            raise UnauthorizedApproverError()
        if stage.requires_signature_blob and not blob_ref:
            raise MissingSignatureError("A signature image is required")

    signature = _upsert_signature(request, role, signer_id, blob_ref, now)
    log_audit(
        db=db,
        actor_id=signer_id,
        action="REQUEST_SIGN",
        entity_type="requests",
        entity_id=request.id,
        meta={"role": role},
        commit=False,
    )
    db.commit()
    db.refresh(signature)
    return signature


def _upsert_signature(
    request: Request,
    role: SignatureRole,
    signer_id: int,
    blob_ref: Optional[str],
    now: datetime,
) -> RequestSignature:
    signature = request.signature_for(role)
    if signature is None:
        signature = RequestSignature(role=role, signer_id=signer_id, signed_at=now, blob_ref=blob_ref)
        request.signatures.append(signature)
    else:
        signature.signer_id = signer_id
        signature.signed_at = now
        signature.blob_ref = blob_ref or signature.blob_ref
    return signature


def add_note(db: Session, request_id: int, author: Employee, body: str) -> RequestNote:
    """Append a note; allowed in every state, including approved and rejected."""
    request = get_request_for_user(db, request_id, author)
    body = (body or "").strip()
    if not body:
        raise InvalidRequestError("A note cannot be empty")

    note = RequestNote(author_id=author.id, body=body, created_at=now_utc())
    request.notes.append(note)
    db.commit()
    db.refresh(note)
    return note


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def _compare_and_set_status(
    db: Session,
    request: Request,
    expected: RequestStatus,
    target: RequestStatus,
    values: Optional[Dict[str, Any]] = None,
) -> None:
    """
    UPDATE ... WHERE status = expected. Zero rows means another writer moved
    the request after we validated it.
    """
    changes = {Request.status: target}
    for name, value in (values or {}).items():
        changes[getattr(Request, name)] = value

    updated = db.query(Request).filter(
        Request.id == request.id,
        Request.status == expected,
    ).update(changes, synchronize_session="evaluate")
    if updated != 1:
        raise ConcurrentModificationError(
            f"Request {request.request_number} is no longer {expected.value}; reload and retry"
        )


def _notify(
    db: Session,
    notifier: Optional[NotificationSink],
    recipient_id: Optional[int],
    kind: NotificationKind,
    request: Request,
    reason: Optional[str] = None,
) -> None:
    if recipient_id is None:
        return
    sink = notifier or DatabaseNotificationSink(db)
    notify_safely(
        sink, recipient_id, kind, request.id,
        build_message(kind, request.request_number, reason), db=db,
    )


def _next_approver_or_none(db: Session, request: Request, now: Optional[datetime]) -> Optional[int]:
    try:
        return resolve_approver_for_request(db, request, now)
    except NoApproverConfiguredError:
        logger.warning(
            "no approver configured: request_id=%s status=%s",
            request.id, request.status.value,
        )
        return None


def submit_request(
    db: Session,
    request_id: int,
    actor_id: int,
    now: Optional[datetime] = None,
    notifier: Optional[NotificationSink] = None,
) -> Request:
    """
    Move a draft to its first approval stage.

    Leave requests are checked against the remaining balance here as a
    courtesy; the authoritative check is the debit at final approval.
    """
    now = now or now_utc()
    request = get_request(db, request_id)
    _ensure_owner(request, actor_id)
    ensure_draft(request.status)
    validate_for_submit(db, request)

    if request.variant == RequestVariant.LEAVE:
        balance = leave_balance_service.get_or_create_balance_row(
            db, request.requester_id, request.start_date.year
        )
        if request.working_days > balance.remaining_days:
            db.rollback()
            raise InsufficientBalanceError(
                f"Requested {request.working_days} days but only {balance.remaining_days} remain"
            )

    first = workflow_for(request.variant).first_stage.status
    ensure_transition_allowed(request.variant, RequestStatus.DRAFT, first)
    try:
        _compare_and_set_status(
            db, request, RequestStatus.DRAFT, first,
            {"submitted_at": now, "working_days": request.working_days},
        )
        db.refresh(request)
        # routing problems surface before anything is committed
        resolve_approver_for_request(db, request, now)
        log_audit(
            db=db,
            actor_id=actor_id,
            action="REQUEST_SUBMIT",
            entity_type="requests",
            entity_id=request.id,
            meta={"before": RequestStatus.DRAFT, "after": first},
            commit=False,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(request)
    logger.info(
        "request status transition: request_id=%s before=%s after=%s action=submit",
        request.id, RequestStatus.DRAFT.value, first.value,
    )
    _notify(db, notifier, _next_approver_or_none(db, request, now), NotificationKind.AWAITING_APPROVAL, request)
    return request


def decide(
    db: Session,
    request_id: int,
    approver_id: int,
    decision: Union[Decision, str],
    signature_blob: Optional[str] = None,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
    notifier: Optional[NotificationSink] = None,
) -> Request:
    """
    Approve or reject the current stage of a request.

    Args:
        db: Database session
        request_id: ID of the request
        approver_id: employee acting; must be the approver resolved for the stage
        decision: approve or reject
        signature_blob: stage signature, when not attached beforehand
        reason: mandatory for rejections
        now: evaluation instant (delegation windows, timestamps)
        notifier: sink for post-commit notifications (in-app by default)

    Returns:
        Updated Request

    Raises:
        NotFoundError, TerminalStateError, InvalidTransitionError,
        UnauthorizedApproverError, MissingSignatureError,
        InsufficientBalanceError, ConcurrentModificationError
    """
    decision = Decision(decision)
    now = now or now_utc()
    request = get_request(db, request_id)

    stage = ensure_pending(request.variant, request.status)
    before = request.status
    after = target_status(request.variant, before, decision)
    ensure_transition_allowed(request.variant, before, after)

    if resolve_approver_for_request(db, request, now) != approver_id:
        raise UnauthorizedApproverError()

    reason = (reason or "").strip() or None
    if decision == Decision.REJECT and not reason:
        raise InvalidRequestError("A reason is required to reject a request")

    if decision == Decision.APPROVE and stage.signature_role is not None:
        existing = request.signature_for(stage.signature_role)
        if signature_blob is None and existing is None and stage.requires_signature_blob:
            raise MissingSignatureError(
                f"The {stage.signature_role.value} signature is required to approve this stage"
            )

    values: Dict[str, Any] = {}
    if after in TERMINAL_STATUSES:
        values["decided_at"] = now
    if decision == Decision.REJECT:
        values["rejection_reason"] = reason

    try:
        if decision == Decision.APPROVE and stage.signature_role is not None:
            existing = request.signature_for(stage.signature_role)
            if signature_blob is not None or existing is None:
                _upsert_signature(request, stage.signature_role, approver_id, signature_blob, now)

        _compare_and_set_status(db, request, before, after, values)

        if request.variant == RequestVariant.LEAVE and after == RequestStatus.APPROVED:
            leave_balance_service.debit_for_request(
                db,
                employee_id=request.requester_id,
                year=request.start_date.year,
                days=request.working_days,
                request_id=request.id,
                actor_id=approver_id,
            )

        db.add(RequestApproval(
            request_id=request.id,
            stage=before,
            action=ApprovalAction.APPROVE if decision == Decision.APPROVE else ApprovalAction.REJECT,
            action_by=approver_id,
            remarks=reason,
            action_at=now,
        ))
        log_audit(
            db=db,
            actor_id=approver_id,
            action="REQUEST_APPROVE" if decision == Decision.APPROVE else "REQUEST_REJECT",
            entity_type="requests",
            entity_id=request.id,
            meta={
                "request_number": request.request_number,
                "before": before,
                "after": after,
                "reason": reason,
            },
            commit=False,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(request)
    logger.info(
        "request status transition: request_id=%s before=%s after=%s action=%s",
        request.id, before.value, after.value, decision.value,
    )

    if after == RequestStatus.APPROVED:
        _notify(db, notifier, request.requester_id, NotificationKind.APPROVED, request)
    elif after == RequestStatus.REJECTED:
        _notify(db, notifier, request.requester_id, NotificationKind.REJECTED, request, reason)
    else:
        _notify(
            db, notifier, _next_approver_or_none(db, request, now),
            NotificationKind.AWAITING_APPROVAL, request,
        )
    return request


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def get_approval_chain(db: Session, request_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Stages with their resolved approvers, plus the decisions taken so far."""
    request = get_request(db, request_id)
    return {
        "request_id": request.id,
        "request_number": request.request_number,
        "status": request.status,
        "stages": describe_chain(db, request, now),
        "history": list(request.approvals),
    }


def _page(q, offset: int, limit: int) -> Tuple[List[Request], int]:
    total = q.order_by(None).count()
    items = q.order_by(Request.created_at.desc(), Request.id.desc()).offset(offset).limit(limit).all()
    return items, total


def list_my_requests(
    db: Session,
    requester_id: int,
    variant: Optional[RequestVariant] = None,
    status: Optional[RequestStatus] = None,
    offset: int = 0,
    limit: int = 50,
) -> Tuple[List[Request], int]:
    """One page of the requester's requests, newest first, plus the total match count."""
    q = db.query(Request).filter(Request.requester_id == requester_id)
    if variant is not None:
        q = q.filter(Request.variant == variant)
    if status is not None:
        q = q.filter(Request.status == status)
    return _page(q, offset, limit)


def list_requests(
    db: Session,
    variant: Optional[RequestVariant] = None,
    status: Optional[RequestStatus] = None,
    department_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    offset: int = 0,
    limit: int = 50,
) -> Tuple[List[Request], int]:
    """
    All requests for oversight roles, newest first.

    The date range matches the leave period (overlap) for leave requests and
    the creation date in the local calendar for the other variants. Drafts
    are included; filter by status to hide them.
    """
    if date_from and date_to and date_from > date_to:
        raise InvalidRangeError("date_from must not be after date_to")

    q = db.query(Request)
    if variant is not None:
        q = q.filter(Request.variant == variant)
    if status is not None:
        q = q.filter(Request.status == status)
    if department_id is not None:
        q = q.join(Employee, Request.requester_id == Employee.id).filter(Employee.department_id == department_id)
    if date_from is not None:
        q = q.filter(or_(
            and_(Request.variant == RequestVariant.LEAVE, Request.end_date >= date_from),
            and_(Request.variant != RequestVariant.LEAVE, Request.created_at >= local_day_start(date_from)),
        ))
    if date_to is not None:
        q = q.filter(or_(
            and_(Request.variant == RequestVariant.LEAVE, Request.start_date <= date_to),
            and_(
                Request.variant != RequestVariant.LEAVE,
                Request.created_at < local_day_start(date_to + timedelta(days=1)),
            ),
        ))
    return _page(q, offset, limit)


def list_pending_for_approver(
    db: Session,
    approver_id: int,
    now: Optional[datetime] = None,
) -> List[Request]:
    """Pending requests whose current stage resolves to ``approver_id`` right now."""
    candidates = (
        db.query(Request)
        .filter(Request.status.in_(PENDING_STATUSES), Request.requester_id != approver_id)
        .order_by(Request.submitted_at, Request.id)
        .all()
    )
    pending = []
    for request in candidates:
        try:
            if resolve_approver_for_request(db, request, now) == approver_id:
                pending.append(request)
        except NoApproverConfiguredError:
            continue
    return pending
