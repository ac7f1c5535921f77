import asyncio

from app.celery import celery
from app.db.session import get_sync_session
from app.services.email_service import get_email_notifier
from app.services.password_reset_service import PasswordResetService
from app.utils.logging import get_logger


@celery.task(bind=True, max_retries=3, default_retry_delay=60)
def password_reset_cleanup_task(self, request_id: str):
    """
    Hourly task that deletes expired password reset OTPs.

    Args:
        request_id: Request ID for tracking purposes
    """
    return asyncio.run(_async_password_reset_cleanup(request_id))


async def _async_password_reset_cleanup(request_id: str):
    logger = get_logger().bind(request_id=request_id)

    for db_session in get_sync_session():
        try:
            reset_service = PasswordResetService(db_session, get_email_notifier())
            deleted_count = await reset_service.cleanup_expired_resets()

            logger.info(f"Password reset cleanup removed {deleted_count} OTPs")
            return {
                "success": True,
                "deleted_count": deleted_count,
                "request_id": request_id,
            }
        except Exception as e:
            logger.exception(f"Password reset cleanup failed: {e}")
            return {"success": False, "error": str(e), "request_id": request_id}
