import asyncio
from typing import Optional

from app.celery import celery
from app.config.settings import settings
from app.db.session import get_sync_session
from app.services.email_service import get_email_notifier
from app.services.staff.eligibility_credential_service import (
    EligibilityCredentialService,
)
from app.utils.logging import get_logger


@celery.task(bind=True, max_retries=3, default_retry_delay=60)
def eligibility_credential_distribution_task(
    self, request_id: str, limit: Optional[int] = None
):
    """
    Daily task that sends login credentials to newly eligible students.

    Students whose account is already active are skipped, so repeated runs
    only reach students that became eligible since the last run.

    Args:
        request_id: Request ID for tracking purposes
        limit: Maximum number of students, CREDENTIAL_BATCH_LIMIT when omitted
    """
    return asyncio.run(
        _async_eligibility_credential_distribution(
            request_id, limit or settings.CREDENTIAL_BATCH_LIMIT
        )
    )


async def _async_eligibility_credential_distribution(request_id: str, limit: int):
    logger = get_logger().bind(request_id=request_id)

    for db_session in get_sync_session():
        try:
            logger.info(f"Starting credential distribution (limit={limit})")

            credential_service = EligibilityCredentialService(
                db_session, get_email_notifier()
            )
            result = await credential_service.batch_process(
                limit=limit, skip_existing_users=True
            )

            if result.errors > 0:
                failed = [
                    detail.model_dump()
                    for detail in result.details
                    if detail.status in ("failed", "error")
                ]
                logger.warning(
                    f"Credential distribution finished with {result.errors} errors: {failed}"
                )
            else:
                logger.info(
                    f"Credential distribution finished: {result.credentials_sent} sent, "
                    f"{result.already_have_accounts} already active"
                )

            return {
                "success": True,
                "summary": result.model_dump(exclude={"details"}),
                "request_id": request_id,
            }
        except Exception as e:
            logger.exception(f"Credential distribution failed: {e}")
            return {"success": False, "error": str(e), "request_id": request_id}
