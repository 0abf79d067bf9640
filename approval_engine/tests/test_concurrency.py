"""
Two sessions racing on the same rows: the loser gets ConcurrentModificationError
"""
import pytest
from datetime import date
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from approval_engine.core.exceptions import ConcurrentModificationError
from approval_engine.db.base import Base
from approval_engine.models import (
    ApprovalAssignment,
    Department,
    Employee,
    LeaveBalance,
    LeaveTransaction,
    LeaveTransactionAction,
    RequestStatus,
    Role,
)
from approval_engine.models.request import RequestVariant, SignatureRole
from approval_engine.services import leave_balance_service, request_service
from approval_engine.services.leave_balance_service import AdjustmentKind
from approval_engine.services.request_state_machine import Decision
from approval_engine.utils.datetime_utils import now_utc


@pytest.fixture
def sessions(tmp_path):
    """Two independent sessions over one file database, seeded with a routed requester"""
    engine = create_engine(f"sqlite:///{tmp_path / 'race.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    seed = Session()
    dept = Department(name="Laborator Fizica", active=True)
    seed.add(dept)
    seed.flush()
    people = {}
    for code, role in [("EMP001", Role.EMPLOYEE), ("SEF001", Role.DEPARTMENT_HEAD), ("DIR001", Role.DIRECTOR)]:
        people[code] = Employee(
            emp_code=code, name=code, email=f"{code.lower()}@example.org",
            role=role.value, department_id=dept.id, active=True,
        )
        seed.add(people[code])
    seed.flush()
    seed.add(ApprovalAssignment(
        stage=RequestStatus.PENDING_DEPARTMENT_HEAD,
        department_id=dept.id,
        approver_id=people["SEF001"].id,
        active=True,
        created_at=now_utc(),
    ))
    seed.add(LeaveBalance(
        employee_id=people["EMP001"].id, year=2030, total_days=21, used_days=5,
        carryover_initial=0, carryover_remaining=0,
    ))
    seed.commit()
    ids = {code: employee.id for code, employee in people.items()}
    seed.close()

    a, b = Session(), Session()
    try:
        yield a, b, ids
    finally:
        a.close()
        b.close()
        engine.dispose()


def _submitted_leave(db, ids):
    draft = request_service.create_request(
        db, ids["EMP001"], RequestVariant.LEAVE,
        fields={"start_date": date(2030, 3, 7), "end_date": date(2030, 3, 11)},
        signature_blob="sig.png",
    )
    return request_service.submit_request(db, draft.id, ids["EMP001"])


def test_second_decision_on_same_stage_loses(sessions):
    a, b, ids = sessions
    request_id = _submitted_leave(b, ids).id

    # A reads the pending request before B decides
    stale = request_service.get_request(a, request_id)
    assert stale.status == RequestStatus.PENDING_DEPARTMENT_HEAD
    assert stale.signature_for(SignatureRole.DEPARTMENT_HEAD) is None

    request_service.decide(b, request_id, ids["SEF001"], Decision.APPROVE, signature_blob="b.png")

    with pytest.raises(ConcurrentModificationError):
        request_service.decide(a, request_id, ids["SEF001"], Decision.REJECT, reason="Prea tarziu")

    a.expire_all()
    fresh = request_service.get_request(a, request_id)
    assert fresh.status == RequestStatus.PENDING_DIRECTOR
    assert len(fresh.approvals) == 1


def test_stale_balance_debit_loses(sessions):
    a, b, ids = sessions

    # A holds version 1 of the balance
    stale = leave_balance_service.find_balance(a, ids["EMP001"], 2030)
    assert stale.used_days == 5

    leave_balance_service.adjust_balance(
        b, ids["EMP001"], 2030, AdjustmentKind.DEBIT, 2, "Corectie pontaj", ids["DIR001"]
    )

    with pytest.raises(ConcurrentModificationError):
        leave_balance_service.debit_for_request(
            a, ids["EMP001"], 2030, 3, request_id=None, actor_id=ids["DIR001"]
        )
    a.rollback()

    fresh = leave_balance_service.find_balance(a, ids["EMP001"], 2030)
    assert fresh.used_days == 7
    assert fresh.remaining_days == 14


def test_racing_final_approval_debits_once(sessions):
    a, b, ids = sessions
    request_id = _submitted_leave(b, ids).id
    request_service.decide(b, request_id, ids["SEF001"], Decision.APPROVE, signature_blob="sef.png")

    # A reads the request at the director stage before B's director decides
    stale = request_service.get_request(a, request_id)
    assert stale.status == RequestStatus.PENDING_DIRECTOR

    approved = request_service.decide(b, request_id, ids["DIR001"], Decision.APPROVE, signature_blob="b.png")
    assert approved.status == RequestStatus.APPROVED

    with pytest.raises(ConcurrentModificationError):
        request_service.decide(a, request_id, ids["DIR001"], Decision.APPROVE, signature_blob="a.png")
    a.rollback()
    a.expire_all()

    balance = leave_balance_service.find_balance(a, ids["EMP001"], 2030)
    assert balance.used_days == 8
    assert balance.remaining_days == 13
    debits = a.query(LeaveTransaction).filter(
        LeaveTransaction.request_id == request_id,
        LeaveTransaction.action == LeaveTransactionAction.APPROVE_DEBIT.value,
    ).all()
    assert len(debits) == 1
    assert len(request_service.get_request(a, request_id).approvals) == 2
