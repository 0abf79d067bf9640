"""
In-app notification model
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Text, Boolean, Enum as SQLEnum
import enum
from approval_engine.db.base import Base


class NotificationKind(str, enum.Enum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    AWAITING_APPROVAL = "AWAITING_APPROVAL"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    kind = Column(SQLEnum(NotificationKind), nullable=False)
    request_id = Column(Integer, ForeignKey("requests.id", ondelete="SET NULL"), nullable=True, index=True)
    message = Column(Text, nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
