from .cron import *

__all__ = [
    # Scheduled/Cron Tasks
    "eligibility_credential_distribution_task",
    "password_reset_cleanup_task",
]
