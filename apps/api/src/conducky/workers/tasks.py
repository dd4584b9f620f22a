from __future__ import annotations

import logging

from conducky.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="conducky.purge_audit_logs", acks_late=True)
def purge_audit_logs_task() -> dict:
    from conducky.core.config import settings
    from conducky.db.session import SessionLocal
    from conducky.services.audit_service import purge_audit_logs

    db = SessionLocal()
    try:
        result = purge_audit_logs(db, older_than_days=settings.AUDIT_RETENTION_DAYS)
        logger.info("purge_audit_logs: %s", result)
        return result
    except Exception:
        logger.exception("purge_audit_logs failed")
        raise
    finally:
        db.close()
