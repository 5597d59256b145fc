"""Adapter over the Celery queue. Nothing else in the app talks to Celery directly."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from celery.result import AsyncResult
from kombu.exceptions import OperationalError
from sqlalchemy.exc import SQLAlchemyError

from app.celery_worker import celery
from app.config import JOBS_QUEUE_NAME
from app.services.errors import QueueUnavailable
from app.services.job_scheduling import resolve_profile

logger = logging.getLogger(__name__)

# broker down (kombu), socket errors, result backend database errors
QUEUE_ERRORS = (OperationalError, OSError, SQLAlchemyError)


@dataclass
class QueueState:
    state: str
    retry_count: int = 0
    finished_at: datetime | None = None

    @property
    def is_known(self) -> bool:
        # celery reports ids it has never seen as PENDING
        return self.state != "PENDING"


class CeleryQueueBackend:
    def __init__(self, app=None, queue_name: str = JOBS_QUEUE_NAME):
        self.app = app or celery
        self.queue_name = queue_name

    def enqueue(self, job_type: str, payload: dict[str, Any], queue_id: str | None = None) -> str:
        profile = resolve_profile(job_type)
        try:
            res = self.app.send_task(
                job_type,
                kwargs={**payload, "retry": profile.retry_options()},
                task_id=queue_id,
                queue=self.queue_name,
                priority=profile.celery_priority,
                expires=profile.expire_in_seconds,
            )
        except QUEUE_ERRORS as e:
            raise QueueUnavailable(f"Could not enqueue {job_type}") from e
        return res.id

    def fetch_state(self, queue_id: str) -> QueueState:
        res = AsyncResult(queue_id, app=self.app)
        try:
            return QueueState(
                state=res.state,
                retry_count=res.retries or 0,
                finished_at=res.date_done,
            )
        except QUEUE_ERRORS as e:
            raise QueueUnavailable(f"Could not read queue entry {queue_id}") from e

    def request_cancel(self, queue_id: str | None) -> bool:
        if not queue_id:
            return False
        try:
            self.app.control.revoke(queue_id)
        except QUEUE_ERRORS as e:
            raise QueueUnavailable(f"Could not revoke queue entry {queue_id}") from e
        return True


_backend: CeleryQueueBackend | None = None


def get_queue() -> CeleryQueueBackend:
    global _backend
    if _backend is None:
        _backend = CeleryQueueBackend()
    return _backend
