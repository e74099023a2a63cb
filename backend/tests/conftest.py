# backend/tests/conftest.py
"""
Pytest configuration for the TuitionTime backend.

Tests run against an in-memory SQLite database that is rebuilt for every
test. Environment overrides must be in place BEFORE any tuitiontime import.
"""

import os

# CRITICAL: Set test configuration BEFORE any app imports!
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["IS_TESTING"] = "true"
os.environ["ENVIRONMENT"] = "development"
os.environ["SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["OTP_FIXED_CODE"] = "123456"
os.environ["EMAIL_PROVIDER"] = "console"
os.environ["SMS_ENABLED"] = "false"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["RAZORPAY_KEY_ID"] = ""
os.environ["RAZORPAY_KEY_SECRET"] = ""
os.environ["RAZORPAY_WEBHOOK_SECRET"] = "test-webhook-secret"
os.environ["ADMIN_USERNAME"] = "admin"

from decimal import Decimal
from typing import Dict, Optional

from fastapi.testclient import TestClient
from pydantic import SecretStr
import pytest
from sqlalchemy.orm import Session

from tuitiontime.api.dependencies.services import get_payment_gateway
from tuitiontime.auth import get_password_hash
from tuitiontime.core.config import settings
from tuitiontime.core.enums import KycStatus, TutorStatus, UserRole, UserStatus
from tuitiontime.database import Base, SessionLocal, engine, get_db
from tuitiontime.integrations.razorpay_client import FakeRazorpayClient
from tuitiontime.main import app
from tuitiontime.models.availability import AvailabilitySlot
from tuitiontime.models.profiles import StudentProfile, TutorProfile
from tuitiontime.models.user import User

from tests.helpers.builders import (
    ADMIN_PASSWORD,
    auth_headers,
    future_dates,
    make_slot,
    next_hour,
)

settings.admin_password_hash = SecretStr(get_password_hash(ADMIN_PASSWORD))


# ============================================================================
# Database
# ============================================================================


@pytest.fixture
def db() -> Session:
    """Fresh schema per test; every session shares the single in-memory connection."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def gateway() -> FakeRazorpayClient:
    return FakeRazorpayClient()


@pytest.fixture
def client(db: Session, gateway: FakeRazorpayClient) -> TestClient:
    """Test client sharing the test's session and fake gateway."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============================================================================
# Users
# ============================================================================


def _create_user(
    db: Session, role: UserRole, phone: Optional[str] = None, username: Optional[str] = None
) -> User:
    user = User(
        phone=phone,
        username=username,
        role=role.value,
        status=UserStatus.ACTIVE.value,
        is_profile_complete=role != UserRole.ADMIN,
    )
    db.add(user)
    db.flush()
    return user


@pytest.fixture
def student(db: Session) -> User:
    user = _create_user(db, UserRole.STUDENT, phone="9000000001")
    db.add(
        StudentProfile(
            user_id=user.id,
            name="Asha Student",
            email="asha@example.com",
            city="Pune",
            board="CBSE",
            class_level="10",
            subjects=["Maths", "Science"],
            availability=["Mon evening"],
        )
    )
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def other_student(db: Session) -> User:
    user = _create_user(db, UserRole.STUDENT, phone="9000000002")
    db.add(
        StudentProfile(
            user_id=user.id,
            name="Ravi Student",
            email="ravi@example.com",
            city="Mumbai",
            subjects=["English"],
        )
    )
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def tutor(db: Session) -> User:
    user = _create_user(db, UserRole.TUTOR, phone="9000000010")
    db.add(
        TutorProfile(
            user_id=user.id,
            name="Meera Tutor",
            email="meera@example.com",
            gender="female",
            qualification="M.Sc Mathematics",
            experience=6,
            teaching_mode="Online",
            subjects=["Maths", "Physics"],
            class_levels=["10", "12"],
            boards=["CBSE"],
            hourly_rate=Decimal("500.00"),
            monthly_rate=Decimal("4000.00"),
            availability=future_dates(),
            bio="Patient maths tutor",
            city="Pune",
            kyc_status=KycStatus.APPROVED.value,
            status=TutorStatus.APPROVED.value,
            is_verified=True,
        )
    )
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def other_tutor(db: Session) -> User:
    user = _create_user(db, UserRole.TUTOR, phone="9000000011")
    db.add(
        TutorProfile(
            user_id=user.id,
            name="Kiran Tutor",
            email="kiran@example.com",
            gender="male",
            qualification="B.Tech",
            experience=2,
            subjects=["English"],
            hourly_rate=Decimal("300.00"),
            availability=future_dates(),
            city="Mumbai",
            is_verified=True,
        )
    )
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin(db: Session) -> User:
    user = _create_user(db, UserRole.ADMIN, username="admin")
    db.commit()
    return user


@pytest.fixture
def student_headers(student: User) -> Dict[str, str]:
    return auth_headers(student)


@pytest.fixture
def tutor_headers(tutor: User) -> Dict[str, str]:
    return auth_headers(tutor)


@pytest.fixture
def admin_headers(admin: User) -> Dict[str, str]:
    return auth_headers(admin)


# ============================================================================
# Availability
# ============================================================================


@pytest.fixture
def demo_slot(db: Session, tutor: User) -> AvailabilitySlot:
    return make_slot(db, tutor, next_hour(1, 10), minutes=30)
