"""Job service: the only way routes, scripts and tooling touch jobs.

Ownership is not checked here. Callers authorize first (routes compare the
job owner with the session user, admin tooling skips the check).
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.orm import Session

from app.models.job import Job
from app.services import job_store
from app.services.errors import AlreadyTerminal, JobNotFound, QueueUnavailable
from app.services.job_scheduling import resolve_profile
from app.services.queue_backend import get_queue
from app.services.state_machine import is_terminal
from app.services.tokens import utcnow_naive

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 100


def create_job(db: Session, user_id: uuid.UUID, job_type: str, payload: dict[str, Any], queue=None) -> Job:
    """Insert a pending row, then enqueue the work keyed by the job id.

    The two writes are not atomic. If the enqueue fails the row is marked
    failed before QueueUnavailable propagates. A crash between the writes
    leaves a pending row with no queue id; ``reconcile_orphans`` repairs it.
    """
    queue = queue or get_queue()
    job = job_store.insert_job(db, user_id, job_type, payload)

    message = {"job_id": str(job.id), "user_id": str(user_id), "payload": payload}
    try:
        queue_id = queue.enqueue(job_type, message, queue_id=str(job.id))
    except QueueUnavailable:
        logger.exception("Enqueue failed for job %s (%s)", job.id, job_type)
        job_store.set_status(db, job, "failed", error="Job queue unavailable, please retry")
        raise

    job.queue_id = queue_id
    db.commit()
    db.refresh(job)

    logger.info("Created job %s type=%s user=%s", job.id, job_type, user_id)
    return job


def get_job(db: Session, job_id: Any) -> Job:
    job = job_store.get_job(db, job_id)
    if job is None:
        raise JobNotFound(job_id)
    return job


def list_jobs(db: Session, user_id: uuid.UUID, limit: int = DEFAULT_LIST_LIMIT, cursor: str | None = None):
    limit = max(1, min(limit, MAX_LIST_LIMIT))
    return job_store.list_for_user(db, user_id, limit, cursor)


def cancel_job(db: Session, job_id: Any, queue=None) -> Job:
    """Best-effort cancel. A worker already running the job may still finish it."""
    queue = queue or get_queue()
    job = get_job(db, job_id)

    if is_terminal(job.status):
        raise AlreadyTerminal(job)

    queue.request_cancel(job.queue_id)

    if not job_store.set_status(db, job, "cancelled"):
        # finished while the revoke was in flight
        raise AlreadyTerminal(job)

    logger.info("Cancelled job %s", job.id)
    return job


def reconcile_orphans(db: Session, older_than: timedelta, queue=None, now: datetime | None = None) -> list[Job]:
    """Fail pending jobs whose queue entry never existed or is gone.

    Only rows pending for longer than ``older_than`` are looked at. A row is
    an orphan when it has no queue id, when the queue finished the entry as
    FAILURE/REVOKED without the worker recording it, or when the queue does
    not know the entry and the type's expiry has passed.
    """
    queue = queue or get_queue()
    now = now or utcnow_naive()
    repaired: list[Job] = []

    for job in job_store.stale_pending(db, now - older_than):
        reason = None
        if not job.queue_id:
            reason = "Job was never queued"
        else:
            try:
                state = queue.fetch_state(job.queue_id)
            except QueueUnavailable:
                logger.warning("Queue unavailable while checking job %s, skipping", job.id)
                continue

            expiry = timedelta(seconds=resolve_profile(job.type).expire_in_seconds)
            if state.state in ("FAILURE", "REVOKED"):
                reason = f"Queue entry ended as {state.state}"
            elif not state.is_known and job.created_at < now - expiry:
                reason = "Queue entry expired or missing"

        if reason and job_store.set_status(db, job, "failed", error=reason):
            logger.warning("Marked orphaned job %s as failed: %s", job.id, reason)
            repaired.append(job)

    return repaired
