from celery import Celery

from conducky.core.config import settings

celery_app = Celery(
    "conducky",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.autodiscover_tasks(["conducky.workers.tasks"])

celery_app.conf.beat_schedule = {
    "purge-audit-logs": {
        "task": "conducky.purge_audit_logs",
        "schedule": settings.AUDIT_RETENTION_CHECK_HOURS * 3600,
    },
}
celery_app.conf.timezone = "UTC"
