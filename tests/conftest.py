import os

# Configure the application before anything under app/ is imported
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "warning")
os.environ.setdefault("VERIFY_EMAIL_ON_STARTUP", "false")

from typing import Generator, List, Optional, Tuple

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.models import (
    Base,
    ContactDetails,
    EligibilityOverallStatus,
    EligibilityStatus,
    Student,
    StudentStatus,
    User,
    UserRole,
    UserStatus,
)
from app.services.email_service import EmailNotifier


# Test database setup
TEST_DATABASE_URL = "sqlite://"

ORIGINAL_PASSWORD_HASH = "original-password-hash"


@pytest.fixture
def test_engine():
    """Create a fresh in-memory database for each test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(test_engine) -> Generator[Session, None, None]:
    """Create a database session for each test."""
    session_maker = sessionmaker(bind=test_engine, class_=Session)
    session = session_maker()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


class FakeNotifier(EmailNotifier):
    """Records every email instead of sending it; fail=True simulates delivery failure."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: List[Tuple[str, dict]] = []

    def _record(self, method: str, **kwargs) -> bool:
        self.calls.append((method, kwargs))
        return not self.fail

    async def send_login_credentials(
        self, to, student_name, login_id, temporary_password, app_url
    ):
        return self._record(
            "send_login_credentials",
            to=to,
            student_name=student_name,
            login_id=login_id,
            temporary_password=temporary_password,
            app_url=app_url,
        )

    async def send_eligibility_status_update(
        self, to, student_name, status, reason=None
    ):
        return self._record(
            "send_eligibility_status_update",
            to=to,
            student_name=student_name,
            status=status,
            reason=reason,
        )

    async def send_password_reset_otp(self, to, otp, expiry_minutes):
        return self._record(
            "send_password_reset_otp", to=to, otp=otp, expiry_minutes=expiry_minutes
        )

    def calls_to(self, method: str) -> List[dict]:
        return [kwargs for name, kwargs in self.calls if name == method]


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def failing_notifier() -> FakeNotifier:
    return FakeNotifier(fail=True)


def create_student(
    db_session: Session,
    student_id: int,
    overall_status: Optional[EligibilityOverallStatus] = EligibilityOverallStatus.ELIGIBLE,
    email: Optional[str] = None,
    user_id: Optional[int] = None,
    user_status: UserStatus = UserStatus.INACTIVE,
    student_status: StudentStatus = StudentStatus.ACTIVE,
    with_contact: bool = True,
) -> Student:
    """Create a student with optional contact, eligibility record and login account."""
    email = email or f"student{student_id}@example.com"
    student = Student(
        id=student_id,
        first_name="Student",
        last_name=str(student_id),
        status=student_status,
    )
    if with_contact:
        student.contact_details.append(ContactDetails(email=email, is_primary=True))
    if overall_status is not None:
        student.eligibility_statuses.append(
            EligibilityStatus(
                overall_status=overall_status,
                reason="Checklist reviewed",
            )
        )
    if user_id is not None:
        student.user = User(
            id=user_id,
            login_id=email,
            password=ORIGINAL_PASSWORD_HASH,
            role=UserRole.STUDENT,
            status=user_status,
        )
    db_session.add(student)
    db_session.commit()
    return student


@pytest.fixture
def student_not_eligible(db_session: Session) -> Student:
    """Student 7: eligibility not_eligible, inactive account."""
    return create_student(
        db_session, 7, EligibilityOverallStatus.NOT_ELIGIBLE, user_id=70
    )


@pytest.fixture
def student_eligible(db_session: Session) -> Student:
    """Student 8: eligible, email a@b.com, inactive user 50."""
    return create_student(
        db_session, 8, EligibilityOverallStatus.ELIGIBLE, email="a@b.com", user_id=50
    )


@pytest.fixture
def student_without_account(db_session: Session) -> Student:
    """Student 9: eligible but no login account."""
    return create_student(db_session, 9, EligibilityOverallStatus.ELIGIBLE)


@pytest.fixture
def student_without_email(db_session: Session) -> Student:
    """Student 10: no contact email."""
    return create_student(
        db_session,
        10,
        EligibilityOverallStatus.ELIGIBLE,
        user_id=100,
        with_contact=False,
    )


def reload_user(db_session: Session, user_id: int) -> User:
    db_session.expire_all()
    return db_session.get(User, user_id)


def reload_student(db_session: Session, student_id: int) -> Student:
    db_session.expire_all()
    return db_session.get(Student, student_id)


def fake_hasher(password: str) -> str:
    return f"hashed::{password}"
