"""
Shared fixtures: in-memory SQLite database, API client with overridden
dependencies, and an authenticated admin.
"""
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.db.models  # noqa: F401
from app.main import app
from app.api.deps import get_today
from app.core.rate_limit import reset_rate_limits
from app.core.security import hash_password, create_access_token
from app.db.base import Base
from app.db.models.admin_user import AdminUser
from app.db.models.member import Member
from app.db.models.subscription import Subscription
from app.db.session import get_db
from app.services.subscription_store import SubscriptionStore


# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

TODAY = date(2024, 1, 10)
ADMIN_EMAIL = "admin@gym.example"
ADMIN_PASSWORD = "frontdesk123"


def override_get_db():
    """Override get_db dependency for testing."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function", autouse=True)
def setup_db():
    """Create and drop tables for each test."""
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db():
    """Provide a database session for tests."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db):
    return SubscriptionStore(db)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def client(today):
    """API client pinned to the test database and a fixed accounting date."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: today
    reset_rate_limits()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    reset_rate_limits()


@pytest.fixture
def admin(db):
    """Create an admin account."""
    admin = AdminUser(
        full_name="Front Desk",
        email=ADMIN_EMAIL,
        password_hash=hash_password(ADMIN_PASSWORD),
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


@pytest.fixture
def auth_headers(admin):
    token = create_access_token({"sub": admin.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_member(db):
    """Factory for members with sequential member numbers."""
    counter = {"n": 0}

    def _make(name="Test Member", status=True, phone="01000000000", **values):
        counter["n"] += 1
        member = Member(
            member_number=counter["n"],
            name=name,
            phone=phone,
            status=status,
            **values,
        )
        db.add(member)
        db.commit()
        db.refresh(member)
        return member

    return _make


@pytest.fixture
def make_subscription(db):
    """
    Factory for subscription rows.

    Defaults to a 30-day term paid on 2024-01-01 and accounted up to the
    payment date.
    """
    def _make(member, payment_date=date(2024, 1, 1), total_days=30, **values):
        values.setdefault("expiration_date", payment_date + timedelta(days=total_days))
        values.setdefault("last_active_date", payment_date)
        subscription = Subscription(
            member_id=member.id,
            payment_date=payment_date,
            total_days=total_days,
            **values,
        )
        db.add(subscription)
        db.commit()
        db.refresh(subscription)
        return subscription

    return _make


@pytest.fixture
def admin_credentials(admin):
    """Login form for the admin fixture."""
    return {"username": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
