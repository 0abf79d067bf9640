"""
Leave balance service - persists LeaveLedger results.

The LeaveBalance row is only ever written through the functions here, each of
which runs a leave_ledger operation and stores the resulting BalanceState.
Rows carry an optimistic version counter; a concurrent writer loses with
ConcurrentModificationError instead of overwriting the other debit.
"""
import enum
import logging
from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from approval_engine.core.config import settings
from approval_engine.core.exceptions import ConcurrentModificationError, NotFoundError
from approval_engine.models.employee import Employee
from approval_engine.models.leave import LeaveBalance, LeaveTransaction, LeaveTransactionAction
from approval_engine.services import leave_ledger as ledger
from approval_engine.services.audit_service import log_audit
from approval_engine.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


class AdjustmentKind(str, enum.Enum):
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"
    GRANT = "GRANT"


_ADJUSTMENTS = {
    AdjustmentKind.CREDIT: (ledger.credit, LeaveTransactionAction.MANUAL_CREDIT, 1),
    AdjustmentKind.DEBIT: (ledger.debit, LeaveTransactionAction.MANUAL_DEBIT, -1),
    AdjustmentKind.GRANT: (ledger.grant, LeaveTransactionAction.GRANT, 1),
}


def to_state(row: LeaveBalance) -> ledger.BalanceState:
    return ledger.BalanceState.model_validate(row)


def apply_state(row: LeaveBalance, state: ledger.BalanceState) -> None:
    row.total_days = state.total_days
    row.used_days = state.used_days
    row.carryover_initial = state.carryover_initial
    row.carryover_remaining = state.carryover_remaining
    row.carryover_from_year = state.carryover_from_year


def find_balance(db: Session, employee_id: int, year: int) -> Optional[LeaveBalance]:
    return db.query(LeaveBalance).filter(
        LeaveBalance.employee_id == employee_id,
        LeaveBalance.year == year,
    ).first()


def get_or_create_balance_row(db: Session, employee_id: int, year: int) -> LeaveBalance:
    """Fetch the (employee, year) row, opening it with the default entitlement if missing. Flushes only."""
    row = find_balance(db, employee_id, year)
    if row:
        return row

    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise NotFoundError(f"Employee with id {employee_id} not found")

    row = LeaveBalance(
        employee_id=employee_id,
        year=year,
        total_days=settings.ANNUAL_LEAVE_DAYS,
        used_days=0,
        carryover_initial=0,
        carryover_remaining=0,
    )
    db.add(row)
    db.flush()
    logger.info("Opened leave balance: employee_id=%s year=%s total=%s", employee_id, year, row.total_days)
    return row


def get_balance(db: Session, employee_id: int, year: int) -> LeaveBalance:
    """Current balance of an employee for a year (created on first access)."""
    row = get_or_create_balance_row(db, employee_id, year)
    db.commit()
    db.refresh(row)
    return row


def record_transaction(
    db: Session,
    employee_id: int,
    year: int,
    delta_days: int,
    action: LeaveTransactionAction,
    remarks: Optional[str],
    actor_id: Optional[int],
    request_id: Optional[int] = None,
) -> LeaveTransaction:
    entry = LeaveTransaction(
        employee_id=employee_id,
        request_id=request_id,
        year=year,
        delta_days=delta_days,
        action=action.value,
        remarks=remarks,
        action_by_employee_id=actor_id,
        action_at=now_utc(),
    )
    db.add(entry)
    return entry


def debit_for_request(
    db: Session,
    employee_id: int,
    year: int,
    days: int,
    request_id: int,
    actor_id: int,
) -> LeaveBalance:
    """
    Debit an approved leave request. Runs inside the caller's transaction:
    flushes (so a stale balance version fails here) but never commits.
    """
    row = get_or_create_balance_row(db, employee_id, year)
    new_state = ledger.debit(to_state(row), days)
    apply_state(row, new_state)
    record_transaction(
        db, employee_id, year, -days, LeaveTransactionAction.APPROVE_DEBIT,
        None, actor_id, request_id=request_id,
    )
    try:
        db.flush()
    except StaleDataError:
        raise ConcurrentModificationError("Leave balance changed concurrently; reload and retry")
    return row


def adjust_balance(
    db: Session,
    employee_id: int,
    year: int,
    kind: AdjustmentKind,
    days: int,
    remarks: str,
    actor_id: int,
) -> LeaveBalance:
    """
    Manual HR correction. Approved/rejected requests are never reopened; a
    compensating credit or debit is recorded here instead.
    """
    operation, action, sign = _ADJUSTMENTS[kind]
    row = get_or_create_balance_row(db, employee_id, year)
    before = to_state(row)
    try:
        after = operation(before, days)
        apply_state(row, after)
        record_transaction(db, employee_id, year, sign * days, action, remarks, actor_id)
        log_audit(
            db=db,
            actor_id=actor_id,
            action="LEAVE_BALANCE_ADJUST",
            entity_type="leave_balances",
            entity_id=row.id,
            meta={
                "kind": kind,
                "days": days,
                "remarks": remarks,
                "before_remaining": before.remaining,
                "after_remaining": after.remaining,
            },
            commit=False,
        )
        db.commit()
    except StaleDataError:
        db.rollback()
        raise ConcurrentModificationError("Leave balance changed concurrently; reload and retry")
    except Exception:
        db.rollback()
        raise

    db.refresh(row)
    logger.info(
        "leave balance adjusted: employee_id=%s year=%s kind=%s days=%s remaining=%s",
        employee_id, year, kind.value, days, row.remaining_days,
    )
    return row


def list_transactions(
    db: Session,
    employee_id: int,
    year: Optional[int] = None,
    limit: int = 100,
) -> List[LeaveTransaction]:
    q = db.query(LeaveTransaction).filter(LeaveTransaction.employee_id == employee_id)
    if year is not None:
        q = q.filter(LeaveTransaction.year == year)
    return q.order_by(LeaveTransaction.id.desc()).limit(limit).all()
