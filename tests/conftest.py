import pytest
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from app.database import Base, get_db
from app.main import app
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Fresh schema per test. Services commit for real, so tables are
    recreated rather than rolled back.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def annual_leave(db_session):
    from app.models.leave_type import LeaveType

    leave_type = LeaveType(name="Annual Leave", code="AL", requires_approval=True, sort_order=1)
    db_session.add(leave_type)
    db_session.commit()
    return leave_type


@pytest.fixture(scope="function")
def personal_leave(db_session):
    """Capped at three days per request."""
    from app.models.leave_type import LeaveType

    leave_type = LeaveType(
        name="Personal Leave", code="PL", requires_approval=True,
        max_days_per_request=3, sort_order=3,
    )
    db_session.add(leave_type)
    db_session.commit()
    return leave_type


@pytest.fixture(scope="function")
def make_balance(db_session):
    """Helper fixture to create a balance row."""
    from app.models.leave_balance import LeaveBalance

    def _make_balance(employee_id, leave_type, year=2026, entitlement=20.0, used=0.0, pending=0.0, carry_over=0.0):
        balance = LeaveBalance(
            employee_id=employee_id,
            leave_type_id=leave_type.id,
            year=year,
            entitlement=entitlement,
            used=used,
            pending=pending,
            carry_over=carry_over,
        )
        db_session.add(balance)
        db_session.commit()
        return balance
    return _make_balance


@pytest.fixture(scope="function")
def make_employee(db_session):
    from app.models.employee import Employee

    def _make_employee(employee_id, team_id="team-a", display_name=None, region=None):
        employee = Employee(
            employee_id=employee_id,
            display_name=display_name or employee_id.title(),
            email=f"{employee_id}@example.com",
            team_id=team_id,
            region=region,
            is_active=True,
        )
        db_session.add(employee)
        db_session.commit()
        return employee
    return _make_employee


@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens the way the identity provider would."""
    from app.services.auth import create_access_token

    def _get_token(employee_id, roles=("employee",), team_id="team-a", name=None):
        return create_access_token(data={
            "sub": employee_id,
            "name": name or employee_id.title(),
            "email": f"{employee_id}@example.com",
            "team_id": team_id,
            "roles": list(roles),
            "type": "access"
        })
    return _get_token


@pytest.fixture(scope="function")
def auth_header(get_token):
    def _auth_header(employee_id, roles=("employee",), team_id="team-a"):
        return {"Authorization": f"Bearer {get_token(employee_id, roles=roles, team_id=team_id)}"}
    return _auth_header


@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
