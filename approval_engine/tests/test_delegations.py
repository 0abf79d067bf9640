"""
Tests for approval assignments and delegations
"""
import pytest
from datetime import date, datetime, timedelta
from approval_engine.core.exceptions import InvalidRangeError, InvalidRequestError
from approval_engine.models import ApprovalAssignment, RequestStatus, Role
from approval_engine.models.request import RequestVariant
from approval_engine.services import approval_service, request_service
from approval_engine.services.approval_chain import resolve_stage_approver
from approval_engine.services.request_state_machine import Decision
from approval_engine.utils.datetime_utils import LOCAL_TZ, now_utc, today_local


@pytest.fixture
def deputy(make_employee):
    return make_employee("SEF002", Role.DEPARTMENT_HEAD)


def _window(days_before=1, days_after=7):
    today = today_local()
    return today - timedelta(days=days_before), today + timedelta(days=days_after)


def test_delegate_approves_inside_window(db, requester, dept_head, deputy, routing, hr_user):
    start, end = _window()
    delegation = approval_service.create_delegation(db, dept_head.id, deputy.id, start, end, actor_id=dept_head.id)

    assert len(delegation.assignments) == 1
    copy = delegation.assignments[0]
    assert copy.approver_id == deputy.id
    assert (copy.delegation_start, copy.delegation_end) == (start, end)

    stage = RequestStatus.PENDING_DEPARTMENT_HEAD
    assert resolve_stage_approver(db, requester, stage, today_local()) == deputy.id
    assert resolve_stage_approver(db, requester, stage, end + timedelta(days=1)) == dept_head.id


def test_delegate_decides_request(db, requester, dept_head, deputy, routing):
    start, end = _window()
    approval_service.create_delegation(db, dept_head.id, deputy.id, start, end, actor_id=dept_head.id)
    request = request_service.create_request(
        db, requester.id, RequestVariant.HR_DOCUMENT,
        fields={"details": {"document_type": "adeverinta"}},
        signature_blob="sig.png",
        submit=True,
    )

    request = request_service.decide(db, request.id, deputy.id, Decision.APPROVE, signature_blob="dep.png")

    assert request.status == RequestStatus.APPROVED
    assert request.approvals[0].action_by == deputy.id


def test_revoke_restores_original_approver(db, requester, dept_head, deputy, routing):
    start, end = _window()
    delegation = approval_service.create_delegation(db, dept_head.id, deputy.id, start, end, actor_id=dept_head.id)

    revoked = approval_service.revoke_delegation(db, delegation.id, dept_head.id)

    assert revoked.active is False
    assert all(not a.active for a in revoked.assignments)
    assert resolve_stage_approver(db, requester, RequestStatus.PENDING_DEPARTMENT_HEAD, today_local()) == dept_head.id


def test_cannot_delegate_to_self(db, dept_head):
    start, end = _window()
    with pytest.raises(InvalidRequestError):
        approval_service.validate_delegation(db, dept_head.id, dept_head.id, start, end)


def test_reversed_window_rejected(db, dept_head, deputy):
    start, end = _window()
    with pytest.raises(InvalidRangeError):
        approval_service.validate_delegation(db, dept_head.id, deputy.id, end, start)


def test_window_in_the_past_rejected(db, dept_head, deputy):
    with pytest.raises(InvalidRangeError):
        approval_service.validate_delegation(
            db, dept_head.id, deputy.id,
            today_local() - timedelta(days=10), today_local() - timedelta(days=3),
        )


def test_overlapping_delegation_rejected(db, dept_head, deputy, make_employee, routing):
    other = make_employee("SEF003", Role.DEPARTMENT_HEAD)
    start, end = _window()
    approval_service.create_delegation(db, dept_head.id, deputy.id, start, end, actor_id=dept_head.id)

    with pytest.raises(InvalidRequestError):
        approval_service.create_delegation(
            db, dept_head.id, other.id, end, end + timedelta(days=3), actor_id=dept_head.id
        )


def test_delegate_never_routes_own_requests(db, dept_head, deputy, department):
    # individual mapping for the deputy's own requests
    db.add(ApprovalAssignment(
        stage=RequestStatus.PENDING_DEPARTMENT_HEAD,
        employee_id=deputy.id,
        approver_id=dept_head.id,
        active=True,
        created_at=now_utc(),
    ))
    db.commit()
    start, end = _window()

    delegation = approval_service.create_delegation(db, dept_head.id, deputy.id, start, end, actor_id=dept_head.id)

    assert delegation.assignments == []


def test_assignment_endpoints(client, db, department, dept_head, hr_user, requester, auth_headers):
    payload = {
        "stage": RequestStatus.PENDING_DEPARTMENT_HEAD.value,
        "approver_id": dept_head.id,
        "department_id": department.id,
    }

    denied = client.post("/api/v1/approvals/assignments", json=payload, headers=auth_headers(requester))
    assert denied.status_code == 403

    created = client.post("/api/v1/approvals/assignments", json=payload, headers=auth_headers(hr_user))
    assert created.status_code == 201
    assignment_id = created.json()["id"]

    listed = client.get("/api/v1/approvals/assignments", headers=auth_headers(hr_user))
    assert [a["id"] for a in listed.json()] == [assignment_id]

    deleted = client.delete(f"/api/v1/approvals/assignments/{assignment_id}", headers=auth_headers(hr_user))
    assert deleted.status_code == 204


def test_assignment_needs_single_target(client, department, dept_head, requester, hr_user, auth_headers):
    response = client.post(
        "/api/v1/approvals/assignments",
        json={
            "stage": RequestStatus.PENDING_DEPARTMENT_HEAD.value,
            "approver_id": dept_head.id,
            "department_id": department.id,
            "employee_id": requester.id,
        },
        headers=auth_headers(hr_user),
    )
    assert response.status_code == 422


def test_delegation_endpoints(client, dept_head, deputy, requester, routing, auth_headers):
    start, end = _window()
    created = client.post(
        "/api/v1/approvals/delegations",
        json={"delegate_id": deputy.id, "start_date": start.isoformat(), "end_date": end.isoformat(), "reason": "Concediu"},
        headers=auth_headers(dept_head),
    )
    assert created.status_code == 201
    delegation_id = created.json()["id"]
    assert created.json()["delegator_id"] == dept_head.id

    on_behalf = client.post(
        "/api/v1/approvals/delegations",
        json={"delegate_id": requester.id, "start_date": start.isoformat(), "end_date": end.isoformat(),
              "delegator_id": deputy.id},
        headers=auth_headers(dept_head),
    )
    assert on_behalf.status_code == 403

    seen = client.get("/api/v1/approvals/delegations", headers=auth_headers(deputy))
    assert [d["id"] for d in seen.json()] == [delegation_id]

    stranger = client.post(f"/api/v1/approvals/delegations/{delegation_id}/revoke", headers=auth_headers(requester))
    assert stranger.status_code == 403

    revoked = client.post(f"/api/v1/approvals/delegations/{delegation_id}/revoke", headers=auth_headers(dept_head))
    assert revoked.status_code == 200
    assert revoked.json()["active"] is False


def test_delegate_decides_just_after_local_midnight(db, requester, dept_head, deputy, routing):
    db.add(ApprovalAssignment(
        stage=RequestStatus.PENDING_DEPARTMENT_HEAD,
        employee_id=requester.id,
        approver_id=deputy.id,
        delegation_start=date(2030, 3, 7),
        delegation_end=date(2030, 3, 9),
        active=True,
        created_at=now_utc(),
    ))
    db.commit()
    # 01:30 local on the first day of the window is still the 6th in UTC
    first_day = datetime(2030, 3, 7, 1, 30, tzinfo=LOCAL_TZ)
    request = request_service.create_request(
        db, requester.id, RequestVariant.HR_DOCUMENT,
        fields={"details": {"document_type": "adeverinta"}},
        signature_blob="sig.png",
        submit=True,
        now=first_day,
    )

    request = request_service.decide(
        db, request.id, deputy.id, Decision.APPROVE, signature_blob="dep.png", now=first_day
    )

    assert request.status == RequestStatus.APPROVED
    assert request.approvals[0].action_by == deputy.id
