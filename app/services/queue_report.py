"""Read-only operational view of the queue, for the admin debug route.

Reads Celery's database result table (``celery_taskmeta``, written with
``result_extended`` so task names are present). Callers only see the typed
rows below, never the table layout.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.services.errors import QueueUnavailable


@dataclass
class QueueCount:
    type: str | None
    state: str
    count: int


@dataclass
class QueueEntry:
    id: str
    type: str | None
    state: str
    retries: int
    queue: str | None
    finished_at: datetime | None


class QueueReport:
    def __init__(self, db: Session):
        self.db = db

    def counts_by_type_and_state(self) -> list[QueueCount]:
        try:
            rows = self.db.execute(text("""
                SELECT name, status, COUNT(*) AS count
                FROM celery_taskmeta
                GROUP BY name, status
                ORDER BY name, status
            """)).mappings().all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise QueueUnavailable("Queue result table is not readable") from e

        return [QueueCount(type=r["name"], state=r["status"], count=int(r["count"])) for r in rows]

    def recent_entries(self, limit: int = 20) -> list[QueueEntry]:
        try:
            rows = self.db.execute(text("""
                SELECT task_id, name, status, retries, queue, date_done
                FROM celery_taskmeta
                ORDER BY date_done DESC
                LIMIT :limit
            """), {"limit": limit}).mappings().all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise QueueUnavailable("Queue result table is not readable") from e

        return [
            QueueEntry(
                id=r["task_id"],
                type=r["name"],
                state=r["status"],
                retries=int(r["retries"] or 0),
                queue=r["queue"],
                finished_at=r["date_done"],
            )
            for r in rows
        ]
