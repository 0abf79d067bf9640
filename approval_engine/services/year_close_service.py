"""
Year-end close - carry unused leave into next year's balance.
"""
import logging
from typing import Dict

from sqlalchemy.orm import Session

from approval_engine.core.config import settings
from approval_engine.models.leave import LeaveBalance, LeaveTransactionAction
from approval_engine.services import leave_ledger as ledger
from approval_engine.services.audit_service import log_audit
from approval_engine.services.leave_balance_service import (
    apply_state,
    find_balance,
    record_transaction,
    to_state,
)

logger = logging.getLogger(__name__)


def run_year_close(db: Session, year: int, actor_id: int) -> Dict:
    """
    For each balance of ``year``: carry min(remaining, MAX_CARRYOVER_DAYS) into
    ``year + 1``. Next year's row is created when missing; a row that already
    received a carry-over is left alone, so the close can be re-run safely.
    """
    next_year = year + 1
    cap = settings.MAX_CARRYOVER_DAYS

    rows = db.query(LeaveBalance).filter(LeaveBalance.year == year).order_by(LeaveBalance.employee_id).all()

    processed = 0
    skipped = 0
    total_carried = 0
    details = []

    for row in rows:
        processed += 1
        source = to_state(row)
        days = source.remaining if cap is None else min(source.remaining, cap)

        target_row = find_balance(db, row.employee_id, next_year)
        if target_row is not None and target_row.carryover_from_year is not None:
            skipped += 1
            continue

        next_total = target_row.total_days if target_row is not None else settings.ANNUAL_LEAVE_DAYS
        opened = ledger.carry_over(source, year, days, next_total)

        if target_row is None:
            target_row = LeaveBalance(employee_id=row.employee_id, year=next_year)
            db.add(target_row)
            apply_state(target_row, opened)
        else:
            # keep whatever was already used in the new year
            apply_state(target_row, opened.model_copy(update={"used_days": target_row.used_days}))

        if days > 0:
            record_transaction(
                db, row.employee_id, next_year, days, LeaveTransactionAction.CARRYOVER,
                f"Carry-over from {year}", actor_id,
            )
        total_carried += days
        details.append({"employee_id": row.employee_id, "carried_days": days})

    log_audit(
        db=db,
        actor_id=actor_id,
        action="LEAVE_YEAR_CLOSE",
        entity_type="leave_balances",
        meta={
            "year": year,
            "processed": processed,
            "skipped": skipped,
            "total_carried": total_carried,
        },
        commit=False,
    )
    db.commit()
    logger.info(
        "Year close %s -> %s: processed=%s skipped=%s carried=%s",
        year, next_year, processed, skipped, total_carried,
    )

    return {
        "year": year,
        "next_year": next_year,
        "processed": processed,
        "skipped": skipped,
        "total_carried": total_carried,
        "details": details,
    }
