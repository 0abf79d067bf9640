"""
Leave balance models
"""
from sqlalchemy import (
    Column,
    Integer,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import text
import enum
from approval_engine.db.base import Base


class LeaveTransactionAction(str, enum.Enum):
    APPROVE_DEBIT = "APPROVE_DEBIT"
    MANUAL_DEBIT = "MANUAL_DEBIT"
    MANUAL_CREDIT = "MANUAL_CREDIT"
    GRANT = "GRANT"
    CARRYOVER = "CARRYOVER"


class LeaveBalance(Base):
    """
    One row per (employee_id, year).
    remaining = total_days + carryover_remaining - used_days, never negative.
    """
    __tablename__ = "leave_balances"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)
    total_days = Column(Integer, nullable=False, default=0)
    used_days = Column(Integer, nullable=False, default=0)
    carryover_initial = Column(Integer, nullable=False, default=0)
    carryover_remaining = Column(Integer, nullable=False, default=0)
    carryover_from_year = Column(Integer, nullable=True)
    version_id = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    employee = relationship("Employee", backref="leave_balances")

    # Optimistic lock: a stale UPDATE matches no row and raises StaleDataError
    __mapper_args__ = {"version_id_col": version_id}

    __table_args__ = (
        UniqueConstraint("employee_id", "year", name="uq_leave_balances_employee_year"),
        CheckConstraint("used_days >= 0", name="check_used_days_non_negative"),
        CheckConstraint(
            "carryover_remaining >= 0 AND carryover_remaining <= carryover_initial",
            name="check_carryover_remaining_bounds",
        ),
        CheckConstraint(
            "total_days + carryover_remaining - used_days >= 0",
            name="check_remaining_non_negative",
        ),
    )

    @property
    def remaining_days(self) -> int:
        return (self.total_days or 0) + (self.carryover_remaining or 0) - (self.used_days or 0)


class LeaveTransaction(Base):
    """Ledger trail: approval debits, manual adjustments, grants, carry-over."""
    __tablename__ = "leave_transactions"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    request_id = Column(Integer, ForeignKey("requests.id", ondelete="SET NULL"), nullable=True, index=True)
    year = Column(Integer, nullable=False, index=True)
    delta_days = Column(Integer, nullable=False)  # + for credit, - for debit
    action = Column(String(30), nullable=False)
    remarks = Column(Text, nullable=True)
    action_by_employee_id = Column(Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True, index=True)
    action_at = Column(DateTime(timezone=True), nullable=False)

    employee = relationship("Employee", foreign_keys=[employee_id])
    action_by = relationship("Employee", foreign_keys=[action_by_employee_id])
