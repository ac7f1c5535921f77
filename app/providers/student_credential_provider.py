from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.db.models import (
    EligibilityOverallStatus,
    EligibilityStatus,
    Student,
    StudentStatus,
    User,
)
from app.utils.errors import DatabaseError

ELIGIBLE_OVERALL_STATUSES = (
    EligibilityOverallStatus.ELIGIBLE,
    EligibilityOverallStatus.OVERRIDE,
)


class StudentCredentialProvider:
    """Persistence operations used by the credential distribution workflow"""

    def __init__(self, db_session: Session):
        self.db = db_session

    def find_student_with_relations(self, student_id: int) -> Optional[Student]:
        """Load a student together with contact details and eligibility records"""
        result = self.db.execute(
            select(Student)
            .options(
                selectinload(Student.contact_details),
                selectinload(Student.eligibility_statuses),
            )
            .where(Student.id == student_id)
        )
        return result.scalar_one_or_none()

    def find_user_by_student_id(
        self, student_id: int, lock: bool = False
    ) -> Optional[User]:
        """Load the login account of a student, optionally with a row lock"""
        query = select(User).where(User.student_id == student_id)
        if lock:
            query = query.with_for_update()
        return self.db.execute(query).scalar_one_or_none()

    def find_users_by_student_ids(self, student_ids: Iterable[int]) -> Dict[int, User]:
        ids = list(student_ids)
        if not ids:
            return {}
        result = self.db.execute(select(User).where(User.student_id.in_(ids)))
        return {user.student_id: user for user in result.scalars().all()}

    def find_eligible_students(self, limit: int) -> List[Student]:
        """
        Active students whose newest eligibility record is eligible or override,
        ordered by id and capped at limit.
        """
        latest = (
            select(
                EligibilityStatus.student_id,
                func.max(EligibilityStatus.id).label("latest_id"),
            )
            .group_by(EligibilityStatus.student_id)
            .subquery()
        )
        query = (
            select(Student)
            .join(latest, latest.c.student_id == Student.id)
            .join(EligibilityStatus, EligibilityStatus.id == latest.c.latest_id)
            .where(
                Student.status == StudentStatus.ACTIVE,
                EligibilityStatus.overall_status.in_(ELIGIBLE_OVERALL_STATUSES),
            )
            .order_by(Student.id)
            .limit(limit)
        )
        return list(self.db.execute(query).scalars().all())

    def save_user(self, user: User) -> User:
        self.db.add(user)
        self.db.flush()
        return user

    def save_student(self, student: Student) -> Student:
        self.db.add(student)
        self.db.flush()
        return student

    @contextmanager
    def unit_of_work(self) -> Iterator[Session]:
        """Commit everything written inside the block, or roll all of it back"""
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError(
                "Failed to save credential changes", "CREDENTIAL_UPDATE_FAILED"
            ) from e
        except Exception:
            self.db.rollback()
            raise

    def rollback(self) -> None:
        self.db.rollback()
