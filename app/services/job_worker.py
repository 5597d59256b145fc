"""Worker side of the job queue: runs handlers and records the outcome.

Each job type is registered as a Celery task of the same name. The task
body moves the row pending -> active -> completed/failed. A row that is
already finished (for example cancelled before the worker picked it up)
is left alone.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable

from sqlalchemy.orm import Session

from app.database import SessionLocal
from app.services import job_store
from app.services.material_enhancer import enhance_material
from app.services.state_machine import is_terminal
from app.utils.constants import JOB_TYPES

logger = logging.getLogger(__name__)

Handler = Callable[[dict, str], Any]


HANDLERS: dict[str, Handler] = {
    "MATERIAL_ENHANCE": enhance_material,
}


def handler_for(job_type: str) -> Handler | None:
    return HANDLERS.get(job_type)


def run_job(db: Session, job_id: Any, job_type: str, payload: dict, user_id: str, final_attempt: bool = True):
    job = job_store.get_job(db, job_id)
    if job is None:
        logger.warning("Job %s not found, dropping %s message", job_id, job_type)
        return None
    if is_terminal(job.status):
        logger.info("Job %s already %s, skipping", job.id, job.status)
        return None

    handler = handler_for(job_type)
    if handler is None:
        job_store.set_status(db, job, "failed", error=f"No handler for job type {job_type}")
        logger.error("Job %s failed: no handler for %s", job.id, job_type)
        return None

    # a retried attempt finds the row already active
    if job.status == "pending" and not job_store.set_status(db, job, "active"):
        logger.info("Job %s changed to %s before start, skipping", job.id, job.status)
        return None

    try:
        result = handler(payload, user_id)
    except Exception as e:
        db.rollback()
        db.refresh(job)
        if final_attempt and not is_terminal(job.status):
            job_store.set_status(db, job, "failed", error=str(e) or e.__class__.__name__)
            logger.error("Job %s failed: %s", job.id, e)
        raise

    db.refresh(job)
    if is_terminal(job.status):
        # cancelled while running; keep the cancel
        logger.info("Job %s finished after being %s, result dropped", job.id, job.status)
        return result

    job_store.set_status(db, job, "completed", result=result, error=None)
    logger.info("Job %s completed", job.id)
    return result


def _make_task(celery, job_type: str):
    @celery.task(name=job_type, bind=True)
    def _run(self, job_id: str, user_id: str, payload: dict, retry: dict | None = None):
        retry = retry or {}
        limit = int(retry.get("limit", 0))
        attempt = self.request.retries
        final = attempt >= limit

        db = SessionLocal()
        try:
            return run_job(db, uuid.UUID(job_id), job_type, payload, user_id, final_attempt=final)
        except Exception as exc:
            if final:
                raise
            delay = int(retry.get("delay", 0))
            if retry.get("backoff"):
                delay *= 2 ** attempt
            logger.warning("Job %s attempt %s failed, retrying in %ss", job_id, attempt + 1, delay)
            raise self.retry(exc=exc, countdown=delay, max_retries=limit)
        finally:
            db.close()

    return _run


def register_tasks(celery) -> dict[str, Any]:
    return {job_type: _make_task(celery, job_type) for job_type in sorted(JOB_TYPES)}
