from .eligibility_credential_distributor import eligibility_credential_distribution_task
from .password_reset_cleanup import password_reset_cleanup_task

__all__ = [
    "eligibility_credential_distribution_task",
    "password_reset_cleanup_task",
]
