"""
Request endpoints: drafts, submission, decisions, documents
"""
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from approval_engine.core.deps import get_db, get_current_user, require_roles
from approval_engine.models.employee import Employee, Role
from approval_engine.models.request import RequestStatus, RequestVariant
from approval_engine.schemas.request import (
    ApprovalChainOut,
    DecisionRequest,
    NoteCreate,
    NoteOut,
    RequestCreate,
    RequestListItemOut,
    RequestListResponse,
    RequestOut,
    RequestUpdate,
    SignatureCreate,
    SignatureOut,
)
from approval_engine.services import request_service
from approval_engine.services.document_service import PdfDocumentRenderer, render_request_document

router = APIRouter()


@router.post("", response_model=RequestOut, status_code=201)
async def create_request_endpoint(
    payload: RequestCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    """
    Create a draft for the current user.

    - `signature_blob` signs the draft as requester
    - `submit=true` submits it in the same call
    """
    return request_service.create_request(
        db=db,
        requester_id=current_user.id,
        variant=payload.variant,
        fields=payload.changes(),
        signature_blob=payload.signature_blob,
        submit=payload.submit,
    )


@router.get("", response_model=RequestListResponse)
async def list_requests_endpoint(
    variant: Optional[RequestVariant] = Query(None),
    status: Optional[RequestStatus] = Query(None),
    department_id: Optional[int] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.HR, Role.DIRECTOR))
):
    """
    All requests, newest first (HR and director).

    - `date_from` / `date_to` match the leave period for leave requests
      and the creation date otherwise
    """
    items, total = request_service.list_requests(
        db,
        variant=variant,
        status=status,
        department_id=department_id,
        date_from=date_from,
        date_to=date_to,
        offset=offset,
        limit=limit,
    )
    return RequestListResponse(
        items=[RequestListItemOut.model_validate(r) for r in items],
        total=total,
    )


@router.get("/my", response_model=RequestListResponse)
async def my_requests(
    variant: Optional[RequestVariant] = Query(None),
    status: Optional[RequestStatus] = Query(None),
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    """Requests created by the current user, newest first"""
    items, total = request_service.list_my_requests(
        db, current_user.id, variant=variant, status=status, offset=offset, limit=limit
    )
    return RequestListResponse(
        items=[RequestListItemOut.model_validate(r) for r in items],
        total=total,
    )


@router.get("/pending", response_model=List[RequestListItemOut])
async def pending_requests(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    """Requests currently waiting on the current user"""
    return request_service.list_pending_for_approver(db, current_user.id)


@router.get("/{request_id}", response_model=RequestOut)
async def get_request_endpoint(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    return request_service.get_request_for_user(db, request_id, current_user)


@router.patch("/{request_id}", response_model=RequestOut)
async def update_request_endpoint(
    request_id: int,
    payload: RequestUpdate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    """Edit a draft (owner only)"""
    return request_service.update_draft(db, request_id, current_user.id, payload.changes())


@router.delete("/{request_id}", status_code=204)
async def delete_request_endpoint(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    """Delete a draft (owner only)"""
    request_service.delete_draft(db, request_id, current_user.id)


@router.post("/{request_id}/submit", response_model=RequestOut)
async def submit_request_endpoint(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    return request_service.submit_request(db, request_id, current_user.id)


@router.post("/{request_id}/decide", response_model=RequestOut)
async def decide_endpoint(
    request_id: int,
    payload: DecisionRequest,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    """
    Approve or reject the current stage.

    Only the approver resolved for the stage may decide. Rejections need a reason.
    """
    return request_service.decide(
        db=db,
        request_id=request_id,
        approver_id=current_user.id,
        decision=payload.decision,
        signature_blob=payload.signature_blob,
        reason=payload.reason,
    )


@router.post("/{request_id}/signatures", response_model=SignatureOut, status_code=201)
async def sign_request_endpoint(
    request_id: int,
    payload: SignatureCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    return request_service.attach_signature(
        db, request_id, current_user.id, payload.role, payload.blob_ref
    )


@router.post("/{request_id}/notes", response_model=NoteOut, status_code=201)
async def add_note_endpoint(
    request_id: int,
    payload: NoteCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    return request_service.add_note(db, request_id, current_user, payload.body)


@router.get("/{request_id}/chain", response_model=ApprovalChainOut)
async def approval_chain_endpoint(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    """Every stage with the approver that currently resolves for it"""
    request_service.get_request_for_user(db, request_id, current_user)
    return request_service.get_approval_chain(db, request_id)


@router.get("/{request_id}/document")
async def request_document_endpoint(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    """Printable snapshot of an approved or rejected request"""
    request = request_service.get_request_for_user(db, request_id, current_user)
    renderer = PdfDocumentRenderer()
    content = render_request_document(renderer, request)
    return Response(
        content=content,
        media_type=renderer.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{request.request_number}.{renderer.extension}"'
        },
    )
