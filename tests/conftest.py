import os
import uuid
from datetime import date, datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RESEND_API_KEY"] = ""

from fastapi.testclient import TestClient

from dayflow.core import datetime_utils
from dayflow.core.context import RequestContext
from dayflow.database import Base, get_db
from dayflow.main import app
from dayflow.models.company import Company
from dayflow.models.leave_allocation import LeaveAllocation
from dayflow.models.profile import AttendanceStatus, Profile, UserRole

# SQLite in-memory database shared by every connection
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TODAY = date(2024, 6, 11)


@pytest.fixture(scope="function")
def db_session():
    """Fresh schema per test; services commit for real."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def frozen_clock(monkeypatch):
    """Pin "today" so leave coverage and attendance dates are deterministic."""
    now = datetime(TODAY.year, TODAY.month, TODAY.day, 9, 30, tzinfo=timezone.utc)
    monkeypatch.setattr(datetime_utils, "utc_now", lambda: now)
    monkeypatch.setattr(datetime_utils, "utc_today", lambda: TODAY)
    return now


def _make_profile(db, company, first_name, last_name, role=UserRole.EMPLOYEE):
    profile = Profile(
        id=str(uuid.uuid4()),
        company_id=company.id,
        first_name=first_name,
        last_name=last_name,
        email=f"{first_name.lower()}.{uuid.uuid4().hex[:8]}@example.com",
        role=role.value,
        attendance_status=AttendanceStatus.ABSENT.value,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


@pytest.fixture(scope="function")
def company(db_session):
    company = Company(name="Acme Corp", code="AC")
    db_session.add(company)
    db_session.commit()
    return company


@pytest.fixture(scope="function")
def other_company(db_session):
    company = Company(name="Globex", code="GL")
    db_session.add(company)
    db_session.commit()
    return company


@pytest.fixture(scope="function")
def admin(db_session, company):
    return _make_profile(db_session, company, "Alice", "Admin", UserRole.ADMIN)


@pytest.fixture(scope="function")
def employee(db_session, company):
    return _make_profile(db_session, company, "John", "Doe")


@pytest.fixture(scope="function")
def colleague(db_session, company):
    return _make_profile(db_session, company, "Mary", "Major")


@pytest.fixture(scope="function")
def outsider(db_session, other_company):
    return _make_profile(db_session, other_company, "Otto", "Outsider")


@pytest.fixture(scope="function")
def other_admin(db_session, other_company):
    return _make_profile(db_session, other_company, "Greta", "Globex", UserRole.ADMIN)


@pytest.fixture(scope="function")
def ctx_for():
    def _ctx_for(profile):
        return RequestContext.from_profile(profile)
    return _ctx_for


@pytest.fixture(scope="function")
def allocate(db_session):
    """Helper to grant a leave allocation."""
    def _allocate(profile, leave_type, total_days, used_days=0.0, year=TODAY.year):
        allocation = LeaveAllocation(
            profile_id=profile.id,
            leave_type=leave_type.value,
            year=year,
            total_days=total_days,
            used_days=used_days,
        )
        db_session.add(allocation)
        db_session.commit()
        return allocation
    return _allocate


@pytest.fixture(scope="function")
def auth_headers():
    def _auth_headers(profile):
        return {"X-User-ID": profile.id}
    return _auth_headers


@pytest.fixture(scope="function")
def client(db_session):
    """TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
