"""
Holiday calendar schemas
"""
from datetime import date as date_type, datetime
from typing import Optional, List
from pydantic import BaseModel, Field, field_serializer, ConfigDict
from approval_engine.models.holiday import HolidayKind


class HolidayCreate(BaseModel):
    """Schema for creating a holiday"""
    date: date_type = Field(..., description="Holiday date")
    name: str = Field(..., min_length=1, description="Holiday name")
    kind: HolidayKind = Field(HolidayKind.CUSTOM, description="PUBLIC or CUSTOM (institution specific)")
    active: bool = Field(True, description="Whether the holiday is active")


class HolidayUpdate(BaseModel):
    """Schema for updating a holiday"""
    name: Optional[str] = Field(None, description="Holiday name")
    active: Optional[bool] = Field(None, description="Whether the holiday is active")


class HolidayOut(BaseModel):
    """Schema for holiday output. Datetimes in the institution's timezone."""
    id: int
    year: int
    date: date_type
    name: str
    kind: HolidayKind
    active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        from approval_engine.utils.datetime_utils import iso_local
        return iso_local(dt) if dt is not None else None


class HolidaySeedResponse(BaseModel):
    year: int
    created: int


class WorkingDaysResponse(BaseModel):
    start: date_type
    end: date_type
    working_days: int
    holidays: List[date_type]
