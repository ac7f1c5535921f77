from celery.schedules import crontab
from .settings import settings

# Basic Celery Configuration
broker_url = f"redis://:{settings.REDIS_PASSWORD}@{settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}"
result_backend = f"redis://:{settings.REDIS_PASSWORD}@{settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}"

# Task Discovery
include = ["app.tasks"]

# Timezone Configuration
timezone = "UTC"
enable_utc = True

# Task Result Configuration
result_expires = 3600

# Task Serialization
task_serializer = "json"
accept_content = ["json"]
result_serializer = "json"

# Task Execution Configuration
task_track_started = True
task_time_limit = 30 * 60  # 30 minutes
task_soft_time_limit = 25 * 60  # 25 minutes

# Worker Configuration
worker_prefetch_multiplier = 1
worker_max_tasks_per_child = 1000

# Task Retry Configuration
task_acks_late = True
task_reject_on_worker_lost = True
task_default_retry_delay = 60  # 60 seconds
task_max_retries = 3

beat_schedule = {
    # Hourly maintenance - remove expired password reset OTPs
    "password-reset-cleanup": {
        "task": "app.tasks.cron.password_reset_cleanup.password_reset_cleanup_task",
        "schedule": crontab(minute=0),
        "args": ("password_reset_cleanup_cron",),
    },
}

# Daily credential distribution is opt-in
if settings.ENABLE_AUTO_CREDENTIAL_DISTRIBUTION:
    beat_schedule["eligibility-credential-distribution"] = {
        "task": "app.tasks.cron.eligibility_credential_distributor.eligibility_credential_distribution_task",
        "schedule": crontab(
            hour=settings.CREDENTIAL_DISTRIBUTION_HOUR,
            minute=settings.CREDENTIAL_DISTRIBUTION_MINUTE,
        ),
        "args": ("eligibility_credential_distribution_cron",),
    }

# Default Queue
task_default_queue = "placement_portal"

# Beat Scheduler Configuration
beat_schedule_filename = "tmp/celerybeat-schedule"
