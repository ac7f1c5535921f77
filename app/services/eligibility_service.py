import enum
from typing import Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models import EligibilityOverallStatus, EligibilityStatus, Student
from app.db.session import get_sync_session
from app.schemas.staff.eligibility_schemas import (
    EligibilityResponse,
    UpdateEligibilityRequest,
)
from app.utils.errors import NotFoundError
from app.utils.logging import get_logger

logger = get_logger()

CHECKLIST_FIELDS = (
    "classes_completed",
    "fees_paid",
    "assignments_submitted",
    "documents_submitted",
    "trainer_consent",
    "override_requested",
    "manual_override",
    "manual_handling",
)


class EligibilityOutcome(enum.Enum):
    ELIGIBLE = "eligible"
    NOT_ELIGIBLE = "not_eligible"


def evaluate_eligibility(record: Optional[EligibilityStatus]) -> EligibilityOutcome:
    """
    Decide whether a student may receive login credentials.

    Only overall_status is consulted; the checklist booleans are informational.
    A missing record is not eligible.
    """
    if record is None:
        return EligibilityOutcome.NOT_ELIGIBLE
    if record.overall_status in (
        EligibilityOverallStatus.ELIGIBLE,
        EligibilityOverallStatus.OVERRIDE,
    ):
        return EligibilityOutcome.ELIGIBLE
    return EligibilityOutcome.NOT_ELIGIBLE


def derive_overall_status(record: EligibilityStatus) -> EligibilityOverallStatus:
    if record.manual_override:
        return EligibilityOverallStatus.OVERRIDE
    if record.is_complete():
        return EligibilityOverallStatus.ELIGIBLE
    if record.override_requested:
        return EligibilityOverallStatus.PENDING
    return EligibilityOverallStatus.NOT_ELIGIBLE


class EligibilityService:
    """Service provider for student eligibility records"""

    def __init__(self, db_session: Session):
        self.db = db_session

    async def get_eligibility(self, student_id: int) -> EligibilityResponse:
        """Newest eligibility record of a student"""
        await self._get_student(student_id)
        record = self._latest_record(student_id)
        if not record:
            raise NotFoundError(
                f"No eligibility status found for student {student_id}",
                "ELIGIBILITY_STATUS_NOT_FOUND",
            )
        return self._to_response(record)

    async def update_eligibility(
        self, student_id: int, data: UpdateEligibilityRequest
    ) -> EligibilityResponse:
        """Create or update the newest eligibility record of a student"""
        await self._get_student(student_id)

        record = self._latest_record(student_id)
        created = record is None
        if created:
            record = EligibilityStatus(student_id=student_id)
            for field in CHECKLIST_FIELDS:
                setattr(record, field, False)
            self.db.add(record)

        updates = data.model_dump(exclude_unset=True)
        overall_status = updates.pop("overall_status", None)
        for field, value in updates.items():
            if field in CHECKLIST_FIELDS and value is None:
                continue
            setattr(record, field, value)

        record.overall_status = overall_status or derive_overall_status(record)

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(record)

        logger.info(
            f"{'Created' if created else 'Updated'} eligibility for student "
            f"{student_id}: {record.overall_status.value}"
        )
        return self._to_response(record)

    async def _get_student(self, student_id: int) -> Student:
        student = self.db.get(Student, student_id)
        if not student:
            raise NotFoundError(
                f"Student with ID {student_id} not found", "STUDENT_NOT_FOUND"
            )
        return student

    def _latest_record(self, student_id: int) -> Optional[EligibilityStatus]:
        result = self.db.execute(
            select(EligibilityStatus)
            .where(EligibilityStatus.student_id == student_id)
            .order_by(EligibilityStatus.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    def _to_response(self, record: EligibilityStatus) -> EligibilityResponse:
        response = EligibilityResponse.model_validate(record)
        response.checklist_complete = bool(record.is_complete())
        return response


def get_eligibility_service(
    db_session: Session = Depends(get_sync_session),
) -> EligibilityService:
    return EligibilityService(db_session)
