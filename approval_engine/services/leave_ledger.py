"""
Leave ledger - pure arithmetic over leave balances.

Every operation takes a BalanceState and returns a new one; nothing is
mutated and nothing is persisted here. Persisting the result together with
the request transition that caused it is the caller's job
(see leave_balance_service and request_service.decide).

Invariant after every operation:
    remaining == total_days + carryover_remaining - used_days >= 0
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from approval_engine.core.exceptions import InsufficientBalanceError, InvalidAdjustmentError


class BalanceState(BaseModel):
    """Immutable snapshot of one employee's leave balance for one year."""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    employee_id: int
    year: int
    total_days: int = Field(ge=0)
    used_days: int = Field(default=0, ge=0)
    carryover_initial: int = Field(default=0, ge=0)
    carryover_remaining: int = Field(default=0, ge=0)
    carryover_from_year: Optional[int] = None

    @property
    def remaining(self) -> int:
        return self.total_days + self.carryover_remaining - self.used_days

    @property
    def carryover_used(self) -> int:
        return self.carryover_initial - self.carryover_remaining


def _require_positive(days: int) -> None:
    if days <= 0:
        raise InvalidAdjustmentError(f"Days must be a positive number, got {days}")


def debit(balance: BalanceState, days: int) -> BalanceState:
    """
    Take days off the balance, carry-over days first.

    Raises:
        InsufficientBalanceError: days exceed balance.remaining
    """
    _require_positive(days)
    if days > balance.remaining:
        raise InsufficientBalanceError(
            f"Requested {days} days but only {balance.remaining} remain for {balance.year}"
        )

    from_carryover = min(days, balance.carryover_remaining)
    return balance.model_copy(update={
        "carryover_remaining": balance.carryover_remaining - from_carryover,
        "used_days": balance.used_days + (days - from_carryover),
    })


def credit(balance: BalanceState, days: int) -> BalanceState:
    """
    Give days back after a prior debit (rejection follow-up, HR correction).

    Reverses debit order: consumed carry-over is restored first, then used_days
    is reduced.

    Raises:
        InvalidAdjustmentError: days exceed what was ever debited
    """
    _require_positive(days)
    if days > balance.carryover_used + balance.used_days:
        raise InvalidAdjustmentError(
            f"Cannot credit {days} days: only {balance.used_days} used "
            f"and {balance.carryover_used} carry-over days consumed"
        )

    to_carryover = min(days, balance.carryover_used)
    return balance.model_copy(update={
        "carryover_remaining": balance.carryover_remaining + to_carryover,
        "used_days": balance.used_days - (days - to_carryover),
    })


def grant(balance: BalanceState, days: int) -> BalanceState:
    """Add bonus days to the year's entitlement."""
    _require_positive(days)
    return balance.model_copy(update={"total_days": balance.total_days + days})


def carry_over(
    balance: BalanceState,
    from_year: int,
    days: int,
    next_total_days: int
) -> BalanceState:
    """
    Open next year's balance with ``days`` carried over from ``from_year``.

    Raises:
        InvalidAdjustmentError: wrong source year, negative days, or more days
            than the source balance has left
    """
    if from_year != balance.year:
        raise InvalidAdjustmentError(
            f"Balance belongs to {balance.year}, cannot carry over from {from_year}"
        )
    if days < 0:
        raise InvalidAdjustmentError("Carry-over days must not be negative")
    if days > balance.remaining:
        raise InvalidAdjustmentError(
            f"Cannot carry over {days} days: only {balance.remaining} remain in {from_year}"
        )

    return BalanceState(
        employee_id=balance.employee_id,
        year=from_year + 1,
        total_days=next_total_days,
        used_days=0,
        carryover_initial=days,
        carryover_remaining=days,
        carryover_from_year=from_year,
    )
