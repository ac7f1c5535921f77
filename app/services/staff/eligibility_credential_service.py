from typing import Callable, Optional, Tuple

from fastapi import Depends
from sqlalchemy.orm import Session

from app.config.settings import settings
from app.db.models import EligibilityStatus, Student, StudentStatus, UserStatus
from app.db.session import get_sync_session
from app.providers.student_credential_provider import StudentCredentialProvider
from app.schemas.staff.eligibility_credential_schemas import (
    BatchItemDetail,
    BatchProcessResult,
    CredentialFailureResult,
    CredentialResult,
    CredentialsSentData,
    CredentialsSentResult,
    NotEligibleData,
    NotEligibleResult,
    NotificationSentData,
    NotificationSentResult,
)
from app.services.eligibility_service import EligibilityOutcome, evaluate_eligibility
from app.services.email_service import EmailNotifier, get_email_notifier
from app.utils.errors import NotFoundError, ValidationError
from app.utils.logging import get_logger
from app.utils.passwords import generate_temporary_password, hash_password

logger = get_logger()

EXISTING_CREDENTIALS_REASON = (
    "Your placement account is ready. Sign in with your existing credentials."
)


class EligibilityCredentialService:
    """
    Distributes login credentials to students based on their eligibility.

    An eligible student with an existing user account gets a new temporary
    password; the account is activated and the student moves to
    placement_initiated in a single commit, then the password is emailed.
    Email delivery is best effort and never undoes the stored changes.
    """

    def __init__(
        self,
        db_session: Session,
        notifier: EmailNotifier,
        password_hasher: Callable[[str], str] = hash_password,
        password_generator: Callable[[], str] = generate_temporary_password,
        app_url: str = settings.APP_URL,
    ):
        self.db = db_session
        self.provider = StudentCredentialProvider(db_session)
        self.notifier = notifier
        self.password_hasher = password_hasher
        self.password_generator = password_generator
        self.app_url = app_url

    async def send_credentials(
        self, student_id: int, skip_password_reset: bool = False
    ) -> CredentialResult:
        """Check eligibility of one student and send credentials when eligible"""
        try:
            return await self._send_credentials(student_id, skip_password_reset)
        except (NotFoundError, ValidationError) as e:
            logger.warning(f"Credential send for student {student_id} failed: {e.message}")
            return CredentialFailureResult(message=e.message, error_code=e.error_code)

    async def notify_eligibility_status(self, student_id: int) -> CredentialResult:
        """Email the current eligibility status without changing any stored data"""
        try:
            student, email, record = self._load_student_context(student_id)
        except (NotFoundError, ValidationError) as e:
            logger.warning(f"Eligibility notification for student {student_id} failed: {e.message}")
            return CredentialFailureResult(message=e.message, error_code=e.error_code)

        overall_status = record.overall_status.value
        email_sent = await self.notifier.send_eligibility_status_update(
            email, student.full_name, overall_status, record.reason or record.comments
        )
        if not email_sent:
            return CredentialFailureResult(
                message=f"Failed to send eligibility status email to {email}",
                error_code="EMAIL_DELIVERY_FAILED",
            )

        return NotificationSentResult(
            message="Eligibility status notification sent",
            data=NotificationSentData(
                student_id=student.id,
                email=email,
                overall_status=overall_status,
                email_sent=True,
            ),
        )

    async def batch_process(
        self,
        limit: int = 100,
        skip_existing_users: bool = True,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> BatchProcessResult:
        """
        Send credentials to eligible students one after another.

        Students whose account is already active are skipped when
        skip_existing_users is set. A failure for one student is rolled back
        and counted without stopping the batch. should_stop is checked before
        each student.
        """
        result = BatchProcessResult()
        students = self.provider.find_eligible_students(limit)
        existing_users = (
            self.provider.find_users_by_student_ids(s.id for s in students)
            if skip_existing_users
            else {}
        )
        logger.info(
            f"Batch credential distribution: {len(students)} eligible students found"
        )

        for student in students:
            if should_stop is not None and should_stop():
                logger.info("Batch credential distribution cancelled")
                result.cancelled = True
                break

            student_id = student.id
            student_name = student.full_name

            user = existing_users.get(student_id)
            if user is not None and user.status == UserStatus.ACTIVE:
                result.already_have_accounts += 1
                result.details.append(
                    BatchItemDetail(
                        student_id=student_id,
                        student_name=student_name,
                        status="already_has_account",
                        message="Account already active",
                    )
                )
                continue

            result.total_processed += 1
            try:
                outcome = await self.send_credentials(student_id)
            except Exception as e:
                self.provider.rollback()
                logger.error(f"Error processing student {student_id}: {e}")
                result.errors += 1
                result.details.append(
                    BatchItemDetail(
                        student_id=student_id,
                        student_name=student_name,
                        status="error",
                        message=str(e),
                    )
                )
                continue

            result.details.append(
                self._batch_detail(student_id, student_name, outcome)
            )
            if isinstance(outcome, CredentialsSentResult):
                result.credentials_sent += 1
            elif isinstance(outcome, NotEligibleResult):
                result.not_eligible += 1
            elif isinstance(outcome, CredentialFailureResult):
                result.errors += 1

        logger.info(
            f"Batch credential distribution finished: processed={result.total_processed}, "
            f"sent={result.credentials_sent}, skipped={result.already_have_accounts}, "
            f"not_eligible={result.not_eligible}, errors={result.errors}"
        )
        return result

    async def _send_credentials(
        self, student_id: int, skip_password_reset: bool
    ) -> CredentialResult:
        student, email, record = self._load_student_context(student_id)

        if evaluate_eligibility(record) is EligibilityOutcome.NOT_ELIGIBLE:
            overall_status = record.overall_status.value
            email_sent = await self.notifier.send_eligibility_status_update(
                email, student.full_name, overall_status, record.reason or record.comments
            )
            logger.info(f"Student {student_id} is not eligible ({overall_status})")
            return NotEligibleResult(
                message=f"Student is not eligible for credentials (status: {overall_status})",
                data=NotEligibleData(
                    student_id=student_id,
                    overall_status=overall_status,
                    email_sent=email_sent,
                ),
            )

        user = self.provider.find_user_by_student_id(student_id, lock=True)
        if user is None:
            raise ValidationError(
                "User account not found; create one first", "USER_ACCOUNT_NOT_FOUND"
            )

        if skip_password_reset:
            return await self._notify_existing_credentials(
                student, email, record, user.id
            )

        temporary_password = self.password_generator()
        hashed_password = self.password_hasher(temporary_password)

        with self.provider.unit_of_work():
            user.password = hashed_password
            user.status = UserStatus.ACTIVE
            student.status = StudentStatus.PLACEMENT_INITIATED
            self.provider.save_user(user)
            self.provider.save_student(student)

        logger.info(
            f"Activated user {user.id} and initiated placement for student {student_id}"
        )

        email_sent = await self.notifier.send_login_credentials(
            email, student.full_name, user.login_id, temporary_password, self.app_url
        )
        if not email_sent:
            logger.warning(
                f"Credentials for student {student_id} were reset but the email to {email} failed"
            )

        return CredentialsSentResult(
            message=(
                "Credentials sent successfully"
                if email_sent
                else "Credentials reset but email delivery failed"
            ),
            data=CredentialsSentData(
                student_id=student_id,
                user_id=user.id,
                login_id=user.login_id,
                email=email,
                user_status=user.status.value,
                student_status=student.status.value,
                password_reset=True,
                email_sent=email_sent,
            ),
        )

    async def _notify_existing_credentials(
        self, student: Student, email: str, record: EligibilityStatus, user_id: int
    ) -> NotificationSentResult:
        student_id = student.id
        student_name = student.full_name
        overall_status = record.overall_status.value
        # Release the row lock; nothing is written on this path
        self.provider.rollback()

        email_sent = await self.notifier.send_eligibility_status_update(
            email, student_name, overall_status, EXISTING_CREDENTIALS_REASON
        )
        return NotificationSentResult(
            message="Eligibility notification sent; existing credentials kept",
            data=NotificationSentData(
                student_id=student_id,
                email=email,
                overall_status=overall_status,
                email_sent=email_sent,
                user_id=user_id,
            ),
        )

    def _load_student_context(
        self, student_id: int
    ) -> Tuple[Student, str, EligibilityStatus]:
        student = self.provider.find_student_with_relations(student_id)
        if student is None:
            raise NotFoundError(
                f"Student with ID {student_id} not found", "STUDENT_NOT_FOUND"
            )

        email = student.primary_email
        if not email:
            raise ValidationError(
                f"Student email not found for student {student_id}",
                "STUDENT_EMAIL_NOT_FOUND",
            )

        record = student.current_eligibility
        if record is None:
            raise ValidationError(
                f"No eligibility status found for student {student_id}",
                "ELIGIBILITY_STATUS_NOT_FOUND",
            )

        return student, email, record

    @staticmethod
    def _batch_detail(
        student_id: int, student_name: str, outcome: CredentialResult
    ) -> BatchItemDetail:
        email_sent = getattr(getattr(outcome, "data", None), "email_sent", None)
        return BatchItemDetail(
            student_id=student_id,
            student_name=student_name,
            status=outcome.kind,
            message=outcome.message,
            email_sent=email_sent,
        )


def get_eligibility_credential_service(
    db_session: Session = Depends(get_sync_session),
    notifier: EmailNotifier = Depends(get_email_notifier),
) -> EligibilityCredentialService:
    return EligibilityCredentialService(db_session, notifier)
