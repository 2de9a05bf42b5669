"""Background jobs for userapi."""

from userapi.jobs.queue import JobQueue, SyncJobQueue, build_job_queue
from userapi.jobs.user_created import UserCreatedNotificationJob, format_user_created_message

__all__ = [
    "JobQueue",
    "SyncJobQueue",
    "build_job_queue",
    "UserCreatedNotificationJob",
    "format_user_created_message",
]
