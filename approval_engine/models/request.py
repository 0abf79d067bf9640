"""
Request models: one tagged table for leave, procurement and HR document requests
"""
from sqlalchemy import (
    Column,
    Integer,
    Date,
    DateTime,
    ForeignKey,
    String,
    Text,
    Numeric,
    JSON,
    Enum as SQLEnum,
    UniqueConstraint,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import text
import enum
from approval_engine.db.base import Base


class RequestVariant(str, enum.Enum):
    LEAVE = "LEAVE"
    PROCUREMENT = "PROCUREMENT"
    HR_DOCUMENT = "HR_DOCUMENT"


class RequestStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING_DEPARTMENT_HEAD = "pending_department_head"
    PENDING_PROCUREMENT = "pending_procurement"
    PENDING_CFP = "pending_cfp"
    PENDING_DIRECTOR = "pending_director"
    APPROVED = "approved"
    REJECTED = "rejected"


TERMINAL_STATUSES = frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED})


class SignatureRole(str, enum.Enum):
    REQUESTER = "REQUESTER"
    DEPARTMENT_HEAD = "DEPARTMENT_HEAD"
    PROCUREMENT = "PROCUREMENT"
    CFP = "CFP"
    DIRECTOR = "DIRECTOR"


class ApprovalAction(str, enum.Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"


class Request(Base):
    __tablename__ = "requests"

    id = Column(Integer, primary_key=True, index=True)
    request_number = Column(String(32), nullable=False, unique=True, index=True)
    variant = Column(SQLEnum(RequestVariant), nullable=False, index=True)
    requester_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    status = Column(SQLEnum(RequestStatus), nullable=False, default=RequestStatus.DRAFT, index=True)
    title = Column(String(255), nullable=True)
    details = Column(JSON, nullable=False, default=dict)

    # LEAVE
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    working_days = Column(Integer, nullable=True)
    replacement_name = Column(String(255), nullable=True)

    # PROCUREMENT
    category = Column(String(50), nullable=True)
    urgency = Column(String(30), nullable=True)
    estimated_value = Column(Numeric(12, 2), nullable=True)
    currency = Column(String(3), nullable=True)

    rejection_reason = Column(Text, nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    decided_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    requester = relationship("Employee", foreign_keys=[requester_id])
    items = relationship(
        "ProcurementItem",
        back_populates="request",
        cascade="all, delete-orphan",
        order_by="ProcurementItem.position",
    )
    signatures = relationship("RequestSignature", back_populates="request", cascade="all, delete-orphan")
    approvals = relationship(
        "RequestApproval",
        back_populates="request",
        cascade="all, delete-orphan",
        order_by="RequestApproval.id",
    )
    notes = relationship(
        "RequestNote",
        back_populates="request",
        cascade="all, delete-orphan",
        order_by="RequestNote.id",
    )

    __table_args__ = (
        Index("ix_requests_requester_dates", "requester_id", "start_date", "end_date"),
        CheckConstraint(
            "start_date IS NULL OR end_date IS NULL OR start_date <= end_date",
            name="check_request_start_le_end",
        ),
    )

    def signature_for(self, role: SignatureRole):
        for signature in self.signatures:
            if signature.role == role:
                return signature
        return None


class ProcurementItem(Base):
    __tablename__ = "procurement_items"

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(Integer, ForeignKey("requests.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit = Column(String(20), nullable=False, default="buc")
    unit_price = Column(Numeric(12, 2), nullable=False)
    specifications = Column(Text, nullable=True)

    request = relationship("Request", back_populates="items")


class RequestSignature(Base):
    __tablename__ = "request_signatures"

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(Integer, ForeignKey("requests.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(SQLEnum(SignatureRole), nullable=False)
    signer_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    signed_at = Column(DateTime(timezone=True), nullable=False)
    blob_ref = Column(String(500), nullable=True)  # storage path of the signature image

    request = relationship("Request", back_populates="signatures")
    signer = relationship("Employee", foreign_keys=[signer_id])

    __table_args__ = (
        UniqueConstraint("request_id", "role", name="uq_request_signature_role"),
    )


class RequestApproval(Base):
    """One row per decide() call: which stage, who, what, why."""
    __tablename__ = "request_approvals"

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(Integer, ForeignKey("requests.id", ondelete="CASCADE"), nullable=False, index=True)
    stage = Column(SQLEnum(RequestStatus), nullable=False)
    action = Column(SQLEnum(ApprovalAction), nullable=False)
    action_by = Column(Integer, ForeignKey("employees.id"), nullable=False)
    remarks = Column(Text, nullable=True)
    action_at = Column(DateTime(timezone=True), nullable=False)

    request = relationship("Request", back_populates="approvals")
    approver = relationship("Employee", foreign_keys=[action_by])


class RequestNote(Base):
    """Append-only notes; the only thing that may still change on a terminal request."""
    __tablename__ = "request_notes"

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(Integer, ForeignKey("requests.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    body = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    request = relationship("Request", back_populates="notes")
    author = relationship("Employee", foreign_keys=[author_id])
