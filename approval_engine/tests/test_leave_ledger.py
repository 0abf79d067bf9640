"""
Tests for leave ledger arithmetic
"""
import pytest
from approval_engine.core.exceptions import InsufficientBalanceError, InvalidAdjustmentError
from approval_engine.services import leave_ledger as ledger
from approval_engine.services.leave_ledger import BalanceState


def _balance(**overrides) -> BalanceState:
    values = {"employee_id": 1, "year": 2030, "total_days": 21, "used_days": 5}
    values.update(overrides)
    return BalanceState(**values)


def test_debit_reduces_remaining():
    after = ledger.debit(_balance(), 3)

    assert after.used_days == 8
    assert after.remaining == 13


def test_debit_exactly_remaining_leaves_zero():
    after = ledger.debit(_balance(), 16)

    assert after.remaining == 0


def test_debit_more_than_remaining_fails():
    balance = _balance()

    with pytest.raises(InsufficientBalanceError):
        ledger.debit(balance, 17)
    assert balance.remaining == 16


def test_debit_consumes_carryover_first():
    balance = _balance(used_days=0, carryover_initial=4, carryover_remaining=4)

    after = ledger.debit(balance, 6)

    assert after.carryover_remaining == 0
    assert after.used_days == 2
    assert after.remaining == balance.remaining - 6


@pytest.mark.parametrize("days", [0, -2])
def test_non_positive_days_rejected(days):
    with pytest.raises(InvalidAdjustmentError):
        ledger.debit(_balance(), days)
    with pytest.raises(InvalidAdjustmentError):
        ledger.credit(_balance(), days)


def test_credit_restores_carryover_before_used_days():
    balance = _balance(used_days=2, carryover_initial=4, carryover_remaining=0)

    after = ledger.credit(balance, 5)

    assert after.carryover_remaining == 4
    assert after.used_days == 1
    assert after.remaining == balance.remaining + 5


def test_credit_beyond_debited_days_fails():
    with pytest.raises(InvalidAdjustmentError):
        ledger.credit(_balance(used_days=2), 3)


def test_debit_then_credit_is_identity():
    balance = _balance(carryover_initial=3, carryover_remaining=3)

    assert ledger.credit(ledger.debit(balance, 7), 7) == balance


def test_grant_adds_to_total():
    after = ledger.grant(_balance(), 2)

    assert after.total_days == 23
    assert after.remaining == 18


def test_invariant_over_mixed_sequence():
    balance = _balance(carryover_initial=5, carryover_remaining=5)
    for operation, days in [
        (ledger.debit, 4), (ledger.debit, 6), (ledger.credit, 3),
        (ledger.grant, 1), (ledger.debit, 10), (ledger.credit, 2),
    ]:
        balance = operation(balance, days)
        assert balance.remaining == balance.total_days + balance.carryover_remaining - balance.used_days
        assert balance.remaining >= 0
        assert 0 <= balance.carryover_remaining <= balance.carryover_initial


def test_carry_over_opens_next_year():
    opened = ledger.carry_over(_balance(), 2030, 10, 21)

    assert opened.year == 2031
    assert opened.carryover_initial == 10
    assert opened.carryover_remaining == 10
    assert opened.carryover_from_year == 2030
    assert opened.used_days == 0
    assert opened.remaining == 31


def test_carry_over_more_than_remaining_fails():
    with pytest.raises(InvalidAdjustmentError):
        ledger.carry_over(_balance(), 2030, 17, 21)


def test_carry_over_from_wrong_year_fails():
    with pytest.raises(InvalidAdjustmentError):
        ledger.carry_over(_balance(), 2029, 1, 21)


def test_balance_state_is_immutable():
    balance = _balance()

    with pytest.raises(Exception):
        balance.used_days = 0
