"""
Tests for procurement and HR document requests
"""
import pytest
from decimal import Decimal
from approval_engine.core.exceptions import (
    InvalidRequestError,
    MissingSignatureError,
    NoApproverConfiguredError,
    RequestLockedError,
)
from approval_engine.models.leave import LeaveTransaction
from approval_engine.models.request import RequestStatus, RequestVariant, SignatureRole
from approval_engine.services import request_service
from approval_engine.services.request_state_machine import Decision

ITEMS = [
    {"name": "Pipete automate", "quantity": 4, "unit": "buc", "unit_price": "125.50"},
    {"name": "Eprubete", "quantity": 200, "unit": "buc", "unit_price": "0.75"},
]


def _procurement_draft(db, requester, **overrides):
    fields = {
        "title": "Consumabile laborator T2",
        "category": "consumabile_laborator",
        "urgency": "normal",
        "items": ITEMS,
    }
    fields.update(overrides)
    return request_service.create_request(db, requester.id, RequestVariant.PROCUREMENT, fields=fields)


def test_estimated_value_is_sum_of_items(db, requester):
    draft = _procurement_draft(db, requester)

    assert draft.request_number.startswith("REF-")
    assert draft.currency == "RON"
    assert Decimal(str(draft.estimated_value)) == Decimal("652.00")
    assert [item.position for item in draft.items] == [1, 2]


def test_item_edit_recomputes_estimated_value(db, requester):
    draft = _procurement_draft(db, requester)

    updated = request_service.update_draft(
        db, draft.id, requester.id,
        {"items": [{"name": "Balanta analitica", "quantity": 1, "unit_price": "4300"}]},
    )

    assert Decimal(str(updated.estimated_value)) == Decimal("4300.00")
    assert len(updated.items) == 1


def test_signed_draft_items_are_locked(db, requester):
    draft = _procurement_draft(db, requester)
    request_service.attach_signature(db, draft.id, requester.id, SignatureRole.REQUESTER, "sig.png")

    with pytest.raises(RequestLockedError):
        request_service.update_draft(db, draft.id, requester.id, {"items": ITEMS[:1]})


@pytest.mark.parametrize("overrides", [
    {"category": "jucarii"},
    {"urgency": "imediat"},
    {"items": [{"name": "", "quantity": 1, "unit_price": "1"}]},
    {"items": [{"name": "Hartie", "quantity": 0, "unit_price": "1"}]},
    {"items": [{"name": "Hartie", "quantity": 1, "unit_price": "-1"}]},
])
def test_invalid_procurement_fields_rejected(db, requester, overrides):
    with pytest.raises(InvalidRequestError):
        _procurement_draft(db, requester, **overrides)


def test_submit_requires_items(db, requester, routing):
    draft = _procurement_draft(db, requester, items=[])

    with pytest.raises(InvalidRequestError):
        request_service.submit_request(db, draft.id, requester.id)


def test_procurement_walks_all_four_stages(
    db, requester, dept_head, director, procurement_officer, cfp_officer, routing
):
    request = request_service.submit_request(db, _procurement_draft(db, requester).id, requester.id)
    assert request.status == RequestStatus.PENDING_DEPARTMENT_HEAD

    request = request_service.decide(db, request.id, dept_head.id, Decision.APPROVE, signature_blob="sef.png")
    assert request.status == RequestStatus.PENDING_PROCUREMENT

    # procurement and CFP stages sign by approving
    request = request_service.decide(db, request.id, procurement_officer.id, Decision.APPROVE)
    assert request.status == RequestStatus.PENDING_CFP

    request = request_service.decide(db, request.id, cfp_officer.id, Decision.APPROVE)
    assert request.status == RequestStatus.PENDING_DIRECTOR

    with pytest.raises(MissingSignatureError):
        request_service.decide(db, request.id, director.id, Decision.APPROVE)
    request = request_service.decide(db, request.id, director.id, Decision.APPROVE, signature_blob="dir.png")
    assert request.status == RequestStatus.APPROVED

    assert {s.role for s in request.signatures} == {
        SignatureRole.DEPARTMENT_HEAD, SignatureRole.PROCUREMENT, SignatureRole.CFP, SignatureRole.DIRECTOR,
    }
    assert db.query(LeaveTransaction).count() == 0


def test_cfp_rejection_ends_procurement(db, requester, dept_head, procurement_officer, cfp_officer, routing):
    request = request_service.submit_request(db, _procurement_draft(db, requester).id, requester.id)
    request_service.decide(db, request.id, dept_head.id, Decision.APPROVE, signature_blob="sef.png")
    request_service.decide(db, request.id, procurement_officer.id, Decision.APPROVE)

    request = request_service.decide(db, request.id, cfp_officer.id, Decision.REJECT, reason="Fara buget")

    assert request.status == RequestStatus.REJECTED
    assert request.decided_at is not None


def test_submit_fails_when_no_approver_configured(db, requester):
    draft = _procurement_draft(db, requester)

    with pytest.raises(NoApproverConfiguredError):
        request_service.submit_request(db, draft.id, requester.id)

    db.expire_all()
    assert request_service.get_request(db, draft.id).status == RequestStatus.DRAFT


def test_hr_document_single_stage(db, requester, dept_head, routing):
    draft = request_service.create_request(
        db, requester.id, RequestVariant.HR_DOCUMENT,
        fields={"details": {"document_type": "adeverinta", "purpose": "banca"}},
        signature_blob="sig.png",
    )
    assert draft.request_number.startswith("HR-")

    request = request_service.submit_request(db, draft.id, requester.id)
    request = request_service.decide(db, request.id, dept_head.id, Decision.APPROVE, signature_blob="sef.png")

    assert request.status == RequestStatus.APPROVED


def test_hr_document_type_validated(db, requester):
    with pytest.raises(InvalidRequestError):
        request_service.create_request(
            db, requester.id, RequestVariant.HR_DOCUMENT,
            fields={"details": {"document_type": "pasaport"}},
        )


def test_create_and_submit_in_one_call(db, requester, dept_head, routing):
    request = request_service.create_request(
        db, requester.id, RequestVariant.HR_DOCUMENT,
        fields={"details": {"document_type": "delegatie"}},
        signature_blob="sig.png",
        submit=True,
    )

    assert request.status == RequestStatus.PENDING_DEPARTMENT_HEAD
    assert request.submitted_at is not None
