"""
Holiday calendar model
"""
from sqlalchemy import Column, Integer, Date, DateTime, String, Boolean, Enum as SQLEnum
from sqlalchemy.sql import func
import enum
from approval_engine.db.base import Base


class HolidayKind(str, enum.Enum):
    PUBLIC = "PUBLIC"
    CUSTOM = "CUSTOM"  # institution-specific day off


class Holiday(Base):
    __tablename__ = "holidays"

    id = Column(Integer, primary_key=True, index=True)
    year = Column(Integer, nullable=False, index=True)
    date = Column(Date, nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    kind = Column(SQLEnum(HolidayKind), nullable=False, default=HolidayKind.CUSTOM)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
