from datetime import timedelta

import pytest
from sqlalchemy import func, select

from app.db.models import PasswordReset, UserStatus
from app.services.password_reset_service import PasswordResetService, generate_otp
from app.utils.datetime_utils import naive_utc_now
from app.utils.errors import AuthenticationError, NotFoundError, ValidationError
from app.utils.passwords import verify_password

from conftest import create_student, reload_user

LOGIN_ID = "reset.me@example.com"


@pytest.fixture
def active_user(db_session):
    student = create_student(
        db_session, 1, email=LOGIN_ID, user_id=10, user_status=UserStatus.ACTIVE
    )
    return student.user


@pytest.fixture
def reset_service(db_session, notifier) -> PasswordResetService:
    return PasswordResetService(db_session, notifier, expose_otp=True)


def _otp_count(db_session) -> int:
    return db_session.execute(select(func.count(PasswordReset.id))).scalar_one()


def test_generate_otp_is_six_digits():
    for _ in range(20):
        otp = generate_otp()
        assert len(otp) == 6
        assert otp.isdigit()


class TestRequestPasswordReset:
    @pytest.mark.asyncio
    async def test_issues_and_emails_otp(
        self, reset_service, db_session, notifier, active_user
    ):
        response = await reset_service.request_password_reset(LOGIN_ID)

        assert response.email_sent is True
        assert response.expires_in_minutes == 5
        assert len(response.otp) == 6

        sent = notifier.calls_to("send_password_reset_otp")
        assert sent == [{"to": LOGIN_ID, "otp": response.otp, "expiry_minutes": 5}]
        assert _otp_count(db_session) == 1

    @pytest.mark.asyncio
    async def test_new_request_replaces_previous_otp(
        self, reset_service, db_session, active_user
    ):
        await reset_service.request_password_reset(LOGIN_ID)
        await reset_service.request_password_reset(LOGIN_ID)

        assert _otp_count(db_session) == 1

    @pytest.mark.asyncio
    async def test_otp_hidden_in_production(self, db_session, notifier, active_user):
        service = PasswordResetService(db_session, notifier, expose_otp=False)

        response = await service.request_password_reset(LOGIN_ID)

        assert response.otp is None

    @pytest.mark.asyncio
    async def test_unknown_user(self, reset_service):
        with pytest.raises(NotFoundError):
            await reset_service.request_password_reset("nobody@example.com")

    @pytest.mark.asyncio
    async def test_inactive_user(self, reset_service, db_session, notifier):
        create_student(db_session, 2, email="inactive@example.com", user_id=20)

        with pytest.raises(ValidationError) as exc_info:
            await reset_service.request_password_reset("inactive@example.com")
        assert exc_info.value.error_code == "USER_NOT_ACTIVE"
        assert notifier.calls == []


class TestVerifyAndReset:
    @pytest.mark.asyncio
    async def test_verify_valid_otp(self, reset_service, active_user):
        response = await reset_service.request_password_reset(LOGIN_ID)

        user = await reset_service.verify_otp(LOGIN_ID, response.otp)

        assert user.id == 10

    @pytest.mark.asyncio
    async def test_verify_wrong_otp(self, reset_service, active_user):
        response = await reset_service.request_password_reset(LOGIN_ID)
        wrong_otp = "000000" if response.otp != "000000" else "111111"

        with pytest.raises(AuthenticationError):
            await reset_service.verify_otp(LOGIN_ID, wrong_otp)

    @pytest.mark.asyncio
    async def test_verify_expired_otp(self, reset_service, db_session, active_user):
        db_session.add(
            PasswordReset(
                user_id=10,
                otp="123456",
                expiry=naive_utc_now() - timedelta(minutes=1),
            )
        )
        db_session.commit()

        with pytest.raises(AuthenticationError):
            await reset_service.verify_otp(LOGIN_ID, "123456")

    @pytest.mark.asyncio
    async def test_verify_unknown_user(self, reset_service):
        with pytest.raises(AuthenticationError):
            await reset_service.verify_otp("nobody@example.com", "123456")

    @pytest.mark.asyncio
    async def test_reset_password(self, reset_service, db_session, active_user):
        response = await reset_service.request_password_reset(LOGIN_ID)

        await reset_service.reset_password(LOGIN_ID, response.otp, "N3w!Password")

        assert verify_password("N3w!Password", reload_user(db_session, 10).password)
        assert _otp_count(db_session) == 0

    @pytest.mark.asyncio
    async def test_reset_rejects_weak_password(
        self, reset_service, db_session, active_user
    ):
        response = await reset_service.request_password_reset(LOGIN_ID)

        with pytest.raises(ValidationError) as exc_info:
            await reset_service.reset_password(LOGIN_ID, response.otp, "weak")
        assert exc_info.value.error_code == "WEAK_PASSWORD"
        assert _otp_count(db_session) == 1

    @pytest.mark.asyncio
    async def test_otp_cannot_be_reused(self, reset_service, active_user):
        response = await reset_service.request_password_reset(LOGIN_ID)
        await reset_service.reset_password(LOGIN_ID, response.otp, "N3w!Password")

        with pytest.raises(AuthenticationError):
            await reset_service.reset_password(LOGIN_ID, response.otp, "An0ther!Pass")


class TestCleanupExpiredResets:
    @pytest.mark.asyncio
    async def test_only_expired_rows_are_removed(
        self, reset_service, db_session, active_user
    ):
        now = naive_utc_now()
        db_session.add_all(
            [
                PasswordReset(user_id=10, otp="111111", expiry=now - timedelta(hours=1)),
                PasswordReset(user_id=10, otp="222222", expiry=now - timedelta(minutes=1)),
                PasswordReset(user_id=10, otp="333333", expiry=now + timedelta(minutes=5)),
            ]
        )
        db_session.commit()

        deleted = await reset_service.cleanup_expired_resets()

        assert deleted == 2
        assert _otp_count(db_session) == 1
