from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.db.models import PasswordReset, User


class PasswordResetProvider:
    """Persistence operations for password reset OTPs"""

    def __init__(self, db_session: Session):
        self.db = db_session

    def find_user_by_login_id(self, login_id: str) -> Optional[User]:
        result = self.db.execute(select(User).where(User.login_id == login_id))
        return result.scalar_one_or_none()

    def find_latest_reset(self, user_id: int) -> Optional[PasswordReset]:
        result = self.db.execute(
            select(PasswordReset)
            .where(PasswordReset.user_id == user_id)
            .order_by(PasswordReset.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    def create_reset(self, user_id: int, otp: str, expiry: datetime) -> PasswordReset:
        reset = PasswordReset(user_id=user_id, otp=otp, expiry=expiry)
        self.db.add(reset)
        self.db.flush()
        return reset

    def delete_resets_for_user(self, user_id: int) -> int:
        result = self.db.execute(
            delete(PasswordReset).where(PasswordReset.user_id == user_id)
        )
        return result.rowcount or 0

    def delete_expired_resets(self, now: datetime) -> int:
        result = self.db.execute(delete(PasswordReset).where(PasswordReset.expiry < now))
        return result.rowcount or 0
