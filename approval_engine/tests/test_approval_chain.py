"""
Tests for approver resolution
"""
import pytest
from datetime import date, datetime
from approval_engine.core.exceptions import NoApproverConfiguredError
from approval_engine.models.approval import ApprovalAssignment
from approval_engine.models.employee import Role
from approval_engine.models.request import RequestStatus
from approval_engine.services.approval_chain import (
    ApprovalSubject,
    load_override_principals,
    resolve_approver,
    resolve_stage_approver,
)
from approval_engine.utils.datetime_utils import LOCAL_TZ, UTC, now_utc

STAGE = RequestStatus.PENDING_DEPARTMENT_HEAD
TODAY = date(2030, 3, 7)


def _assignment(id, approver_id, employee_id=None, department_id=None, start=None, end=None,
                stage=STAGE, active=True):
    return ApprovalAssignment(
        id=id,
        stage=stage,
        employee_id=employee_id,
        department_id=department_id,
        approver_id=approver_id,
        delegation_start=start,
        delegation_end=end,
        active=active,
    )


SUBJECT = ApprovalSubject(requester_id=10, department_id=3, stage=STAGE)


def test_individual_assignment_beats_department():
    assignments = [
        _assignment(1, approver_id=20, department_id=3),
        _assignment(2, approver_id=21, employee_id=10),
    ]

    assert resolve_approver(SUBJECT, TODAY, assignments, [99]) == 21


def test_department_assignment_beats_fallback():
    assignments = [_assignment(1, approver_id=20, department_id=3)]

    assert resolve_approver(SUBJECT, TODAY, assignments, [99]) == 20


def test_fallback_used_when_nothing_matches():
    assignments = [_assignment(1, approver_id=20, department_id=4)]

    assert resolve_approver(SUBJECT, TODAY, assignments, [99, 98]) == 99


def test_nothing_configured_raises():
    with pytest.raises(NoApproverConfiguredError):
        resolve_approver(SUBJECT, TODAY, [], [])


def test_other_stage_assignments_ignored():
    assignments = [_assignment(1, approver_id=20, department_id=3, stage=RequestStatus.PENDING_DIRECTOR)]

    assert resolve_approver(SUBJECT, TODAY, assignments, [99]) == 99


def test_delegation_window_is_inclusive():
    delegated = _assignment(2, approver_id=30, department_id=3, start=TODAY, end=date(2030, 3, 9))
    assignments = [_assignment(1, approver_id=20, department_id=3), delegated]

    assert resolve_approver(SUBJECT, date(2030, 3, 7), assignments) == 30
    assert resolve_approver(SUBJECT, date(2030, 3, 9), assignments) == 30
    assert resolve_approver(SUBJECT, date(2030, 3, 10), assignments) == 20
    assert resolve_approver(SUBJECT, date(2030, 3, 6), assignments) == 20


def test_expired_delegation_falls_back_to_next_level():
    assignments = [_assignment(1, approver_id=30, employee_id=10, start=date(2030, 1, 1), end=date(2030, 1, 31))]

    assert resolve_approver(SUBJECT, TODAY, assignments, [99]) == 99


def test_inactive_assignment_ignored():
    assignments = [_assignment(1, approver_id=20, department_id=3, active=False)]

    assert resolve_approver(SUBJECT, TODAY, assignments, [99]) == 99


def test_latest_delegation_wins_within_level():
    assignments = [
        _assignment(1, approver_id=30, department_id=3, start=date(2030, 3, 1), end=date(2030, 3, 31)),
        _assignment(2, approver_id=31, department_id=3, start=date(2030, 3, 5), end=date(2030, 3, 8)),
    ]

    assert resolve_approver(SUBJECT, TODAY, assignments) == 31


def test_newest_row_wins_on_full_tie():
    assignments = [
        _assignment(1, approver_id=20, department_id=3),
        _assignment(2, approver_id=21, department_id=3),
    ]

    assert resolve_approver(SUBJECT, TODAY, assignments) == 21


def test_requester_never_approves_own_request():
    assignments = [_assignment(1, approver_id=10, department_id=3)]

    assert resolve_approver(SUBJECT, TODAY, assignments, [10, 99]) == 99
    with pytest.raises(NoApproverConfiguredError):
        resolve_approver(SUBJECT, TODAY, assignments, [10])


def test_datetime_now_is_compared_by_local_date():
    assignments = [_assignment(1, approver_id=30, department_id=3, start=TODAY, end=TODAY)]

    assert resolve_approver(SUBJECT, datetime(2030, 3, 7, 23, 59, tzinfo=LOCAL_TZ), assignments, [99]) == 30
    # 2030-03-06 23:30 UTC is already the 7th in the institution's timezone
    assert resolve_approver(SUBJECT, datetime(2030, 3, 6, 23, 30, tzinfo=UTC), assignments, [99]) == 30
    # naive values are UTC
    assert resolve_approver(SUBJECT, datetime(2030, 3, 7, 22, 30), assignments, [99]) == 99


def test_delegation_expires_at_local_midnight():
    assignments = [_assignment(1, approver_id=30, employee_id=10, start=date(2030, 3, 7), end=date(2030, 3, 9))]

    assert resolve_approver(SUBJECT, datetime(2030, 3, 9, 23, 30, tzinfo=LOCAL_TZ), assignments, [99]) == 30
    assert resolve_approver(SUBJECT, datetime(2030, 3, 10, 0, 30, tzinfo=LOCAL_TZ), assignments, [99]) == 99


def test_override_principals_follow_role_order(db, make_employee):
    admin = make_employee("ADM001", Role.ADMIN)
    director_b = make_employee("DIR002", Role.DIRECTOR)
    director_a = make_employee("DIR003", Role.DIRECTOR)
    make_employee("DIR004", Role.DIRECTOR, active=False)

    principals = load_override_principals(db, RequestStatus.PENDING_DIRECTOR)

    assert principals == [director_b.id, director_a.id, admin.id]


def test_store_backed_resolution(db, department, requester, dept_head, routing):
    assert resolve_stage_approver(db, requester, STAGE) == dept_head.id


def test_store_backed_skips_inactive_approver(db, department, requester, dept_head, routing, make_employee):
    admin = make_employee("ADM001", Role.ADMIN)
    dept_head.active = False
    db.commit()

    assert resolve_stage_approver(db, requester, STAGE) == admin.id


def test_store_backed_individual_mapping(db, requester, routing, make_employee):
    deputy = make_employee("SEF002", Role.DEPARTMENT_HEAD)
    db.add(ApprovalAssignment(
        stage=STAGE, employee_id=requester.id, approver_id=deputy.id, active=True, created_at=now_utc(),
    ))
    db.commit()

    assert resolve_stage_approver(db, requester, STAGE) == deputy.id


def test_store_backed_no_approver(db, requester):
    with pytest.raises(NoApproverConfiguredError):
        resolve_stage_approver(db, requester, STAGE)
