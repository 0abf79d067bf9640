"""
Request schemas (leave, procurement, HR documents)
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict, field_serializer
from approval_engine.models.request import (
    ApprovalAction,
    RequestStatus,
    RequestVariant,
    SignatureRole,
)
from approval_engine.services.request_state_machine import Decision


def _iso(dt):
    from approval_engine.utils.datetime_utils import iso_local
    return iso_local(dt) if dt is not None else None


class ProcurementItemIn(BaseModel):
    name: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    unit: str = Field("buc", max_length=20)
    unit_price: Decimal = Field(..., ge=0)
    specifications: Optional[str] = None


class RequestFields(BaseModel):
    """Fields a requester fills in; which ones matter depends on the variant"""
    title: Optional[str] = Field(None, max_length=255)
    start_date: Optional[date] = Field(None, description="LEAVE: first day")
    end_date: Optional[date] = Field(None, description="LEAVE: last day (inclusive)")
    replacement_name: Optional[str] = Field(None, max_length=255, description="LEAVE: colleague covering")
    category: Optional[str] = Field(None, description="PROCUREMENT category")
    urgency: Optional[str] = Field(None, description="PROCUREMENT urgency")
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    items: Optional[List[ProcurementItemIn]] = Field(None, description="PROCUREMENT line items")
    details: Optional[Dict[str, Any]] = Field(None, description="Variant payload, e.g. document_type")

    def changes(self) -> Dict[str, Any]:
        """Only the fields the client actually sent."""
        data = self.model_dump(exclude_unset=True)
        if self.items is not None:
            data["items"] = [item.model_dump() for item in self.items]
        return data


class RequestCreate(RequestFields):
    variant: RequestVariant
    signature_blob: Optional[str] = Field(None, description="Requester signature reference; signs the draft")
    submit: bool = Field(False, description="Submit right after creating the draft")


class RequestUpdate(RequestFields):
    pass


class DecisionRequest(BaseModel):
    decision: Decision
    signature_blob: Optional[str] = Field(None, description="Stage signature reference")
    reason: Optional[str] = Field(None, description="Mandatory when rejecting")


class SignatureCreate(BaseModel):
    role: SignatureRole
    blob_ref: Optional[str] = Field(None, max_length=500)


class NoteCreate(BaseModel):
    body: str = Field(..., min_length=1)


class ProcurementItemOut(BaseModel):
    id: int
    position: int
    name: str
    quantity: int
    unit: str
    unit_price: Decimal
    specifications: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SignatureOut(BaseModel):
    id: int
    role: SignatureRole
    signer_id: int
    signed_at: datetime
    blob_ref: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("signed_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        return _iso(dt)


class ApprovalOut(BaseModel):
    id: int
    stage: RequestStatus
    action: ApprovalAction
    action_by: int
    remarks: Optional[str] = None
    action_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("action_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        return _iso(dt)


class NoteOut(BaseModel):
    id: int
    author_id: int
    body: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        return _iso(dt)


class RequestListItemOut(BaseModel):
    id: int
    request_number: str
    variant: RequestVariant
    requester_id: int
    status: RequestStatus
    title: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    working_days: Optional[int] = None
    estimated_value: Optional[Decimal] = None
    submitted_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("submitted_at", "created_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        return _iso(dt)


class RequestOut(RequestListItemOut):
    details: Dict[str, Any] = {}
    replacement_name: Optional[str] = None
    category: Optional[str] = None
    urgency: Optional[str] = None
    currency: Optional[str] = None
    rejection_reason: Optional[str] = None
    decided_at: Optional[datetime] = None
    items: List[ProcurementItemOut] = []
    signatures: List[SignatureOut] = []
    approvals: List[ApprovalOut] = []
    notes: List[NoteOut] = []

    @field_serializer("decided_at", when_used="always")
    @classmethod
    def _ser_decided_at(cls, dt):
        return _iso(dt)


class RequestListResponse(BaseModel):
    items: List[RequestListItemOut]
    total: int


class ChainStageOut(BaseModel):
    stage: RequestStatus
    approver_id: Optional[int] = None
    error: Optional[str] = None
    current: bool


class ApprovalChainOut(BaseModel):
    request_id: int
    request_number: str
    status: RequestStatus
    stages: List[ChainStageOut]
    history: List[ApprovalOut]
