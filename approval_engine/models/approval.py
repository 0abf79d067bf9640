"""
Approval routing models: stage assignments and delegations
"""
from sqlalchemy import (
    Column,
    Integer,
    Date,
    DateTime,
    ForeignKey,
    String,
    Boolean,
    Enum as SQLEnum,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from approval_engine.db.base import Base
from approval_engine.models.request import RequestStatus


class ApprovalAssignment(Base):
    """
    Who approves a stage for one employee (individual mapping) or for a whole
    department. delegation_start/delegation_end time-box the assignment; both
    NULL means open-ended.
    """
    __tablename__ = "approval_assignments"

    id = Column(Integer, primary_key=True, index=True)
    stage = Column(SQLEnum(RequestStatus), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=True, index=True)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=True, index=True)
    approver_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    delegation_start = Column(Date, nullable=True)
    delegation_end = Column(Date, nullable=True)
    delegation_id = Column(Integer, ForeignKey("approval_delegations.id", ondelete="CASCADE"), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    employee = relationship("Employee", foreign_keys=[employee_id])
    department = relationship("Department")
    approver = relationship("Employee", foreign_keys=[approver_id])
    delegation = relationship("ApprovalDelegation", back_populates="assignments")

    __table_args__ = (
        CheckConstraint(
            "(employee_id IS NULL) <> (department_id IS NULL)",
            name="check_assignment_single_target",
        ),
        CheckConstraint(
            "delegation_start IS NULL OR delegation_end IS NULL OR delegation_start <= delegation_end",
            name="check_assignment_window",
        ),
    )


class ApprovalDelegation(Base):
    """An approver hands their authority to a colleague for a date window."""
    __tablename__ = "approval_delegations"

    id = Column(Integer, primary_key=True, index=True)
    delegator_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    delegate_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(String(255), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    delegator = relationship("Employee", foreign_keys=[delegator_id])
    delegate = relationship("Employee", foreign_keys=[delegate_id])
    assignments = relationship("ApprovalAssignment", back_populates="delegation", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="check_delegation_window"),
    )
