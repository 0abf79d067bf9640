"""
Pytest configuration and fixtures
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-the-approval-engine")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.engine import Engine
from approval_engine.main import app
from approval_engine.db.base import Base
from approval_engine.core.deps import get_db
from approval_engine.core.security import create_access_token
from approval_engine.models import (
    ApprovalAssignment,
    Department,
    Employee,
    LeaveBalance,
    RequestStatus,
    Role,
)
from approval_engine.utils.datetime_utils import now_utc


# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Enable foreign keys for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Test client fixture with database override"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """auth_headers(employee) -> Authorization header with a freshly minted token"""
    def _headers(employee: Employee) -> dict:
        token = create_access_token({"sub": str(employee.id)})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def department(db):
    dept = Department(name="Laborator Chimie", active=True)
    db.add(dept)
    db.commit()
    db.refresh(dept)
    return dept


@pytest.fixture
def make_employee(db, department):
    """Factory: make_employee("EMP001", Role.EMPLOYEE)"""
    def _make(emp_code: str, role: Role = Role.EMPLOYEE, department_id=None, active: bool = True) -> Employee:
        employee = Employee(
            emp_code=emp_code,
            name=f"Employee {emp_code}",
            email=f"{emp_code.lower()}@example.org",
            role=role.value,
            department_id=department_id or department.id,
            active=active,
        )
        db.add(employee)
        db.commit()
        db.refresh(employee)
        return employee
    return _make


@pytest.fixture
def requester(make_employee):
    return make_employee("EMP001", Role.EMPLOYEE)


@pytest.fixture
def dept_head(make_employee):
    return make_employee("SEF001", Role.DEPARTMENT_HEAD)


@pytest.fixture
def director(make_employee):
    return make_employee("DIR001", Role.DIRECTOR)


@pytest.fixture
def hr_user(make_employee):
    return make_employee("HR001", Role.HR)


@pytest.fixture
def procurement_officer(make_employee):
    return make_employee("ACH001", Role.PROCUREMENT)


@pytest.fixture
def cfp_officer(make_employee):
    return make_employee("CFP001", Role.CFP)


@pytest.fixture
def routing(db, department, dept_head, director):
    """
    Department head stage routed through a department assignment; the
    director stage resolves through the DIRECTOR override role.
    """
    assignment = ApprovalAssignment(
        stage=RequestStatus.PENDING_DEPARTMENT_HEAD,
        department_id=department.id,
        approver_id=dept_head.id,
        active=True,
        created_at=now_utc(),
    )
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return assignment


@pytest.fixture
def leave_balance(db, requester):
    """total 21, used 5, remaining 16 for 2030"""
    balance = LeaveBalance(
        employee_id=requester.id,
        year=2030,
        total_days=21,
        used_days=5,
        carryover_initial=0,
        carryover_remaining=0,
    )
    db.add(balance)
    db.commit()
    db.refresh(balance)
    return balance

