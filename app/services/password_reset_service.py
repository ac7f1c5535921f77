import secrets
from datetime import datetime
from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from app.config.settings import settings
from app.db.models import User, UserStatus
from app.db.session import get_sync_session
from app.providers.password_reset_provider import PasswordResetProvider
from app.schemas.auth_schemas import PasswordResetRequestResponse
from app.services.email_service import EmailNotifier, get_email_notifier
from app.utils.datetime_utils import naive_utc_in, naive_utc_now
from app.utils.errors import AuthenticationError, NotFoundError, ValidationError
from app.utils.logging import get_logger
from app.utils.passwords import hash_password, validate_password_strength

logger = get_logger()

OTP_LENGTH = 6


def generate_otp(length: int = OTP_LENGTH) -> str:
    return "".join(secrets.choice("0123456789") for _ in range(length))


class PasswordResetService:
    """Password reset by emailed one-time password"""

    def __init__(
        self,
        db_session: Session,
        notifier: EmailNotifier,
        otp_expiry_minutes: int = settings.PASSWORD_RESET_OTP_EXPIRY_MINUTES,
        expose_otp: Optional[bool] = None,
    ):
        self.db = db_session
        self.provider = PasswordResetProvider(db_session)
        self.notifier = notifier
        self.otp_expiry_minutes = otp_expiry_minutes
        self.expose_otp = (
            settings.ENVIRONMENT != "production" if expose_otp is None else expose_otp
        )

    async def request_password_reset(
        self, login_id: str
    ) -> PasswordResetRequestResponse:
        """Issue a new OTP for an active user, replacing any previous one"""
        user = self.provider.find_user_by_login_id(login_id)
        if not user:
            raise NotFoundError("User not found", "USER_NOT_FOUND")
        if user.status != UserStatus.ACTIVE:
            raise ValidationError("User account is not active", "USER_NOT_ACTIVE")

        otp = generate_otp()
        try:
            self.provider.delete_resets_for_user(user.id)
            self.provider.create_reset(
                user.id, otp, naive_utc_in(self.otp_expiry_minutes)
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        email_sent = await self.notifier.send_password_reset_otp(
            user.login_id, otp, self.otp_expiry_minutes
        )
        if not email_sent:
            logger.warning(f"Password reset OTP email to user {user.id} failed")

        logger.info(f"Password reset OTP issued for user {user.id}")
        return PasswordResetRequestResponse(
            login_id=user.login_id,
            expires_in_minutes=self.otp_expiry_minutes,
            email_sent=email_sent,
            otp=otp if self.expose_otp else None,
        )

    async def verify_otp(self, login_id: str, otp: str) -> User:
        """Return the user when the OTP is the current, unexpired one"""
        user = self.provider.find_user_by_login_id(login_id)
        if not user:
            raise AuthenticationError("Invalid or expired OTP", "INVALID_OTP")

        reset = self.provider.find_latest_reset(user.id)
        if not reset or not reset.is_valid(otp, naive_utc_now()):
            raise AuthenticationError("Invalid or expired OTP", "INVALID_OTP")

        return user

    async def reset_password(self, login_id: str, otp: str, new_password: str) -> None:
        """Store a new password and invalidate every OTP of the user"""
        is_valid, message = validate_password_strength(new_password)
        if not is_valid:
            raise ValidationError(message, "WEAK_PASSWORD")

        user = await self.verify_otp(login_id, otp)
        try:
            user.password = hash_password(new_password)
            self.provider.delete_resets_for_user(user.id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Password reset completed for user {user.id}")

    async def cleanup_expired_resets(self, now: Optional[datetime] = None) -> int:
        """Delete expired OTP rows and return how many were removed"""
        try:
            deleted = self.provider.delete_expired_resets(now or naive_utc_now())
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Cleaned up {deleted} expired password reset OTPs")
        return deleted


def get_password_reset_service(
    db_session: Session = Depends(get_sync_session),
    notifier: EmailNotifier = Depends(get_email_notifier),
) -> PasswordResetService:
    return PasswordResetService(db_session, notifier)
