from __future__ import annotations

import base64
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import and_, desc, or_, select, update
from sqlalchemy.orm import Session

from app.models.job import Job
from app.services.state_machine import ensure_transition, sources_for
from app.services.tokens import utcnow_naive


def parse_job_id(job_id: Any) -> uuid.UUID | None:
    if isinstance(job_id, uuid.UUID):
        return job_id
    try:
        return uuid.UUID(str(job_id))
    except (TypeError, ValueError):
        return None


def insert_job(db: Session, user_id: uuid.UUID, job_type: str, payload: Any) -> Job:
    job = Job(user_id=user_id, type=job_type, status="pending", payload=payload)
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def get_job(db: Session, job_id: Any) -> Job | None:
    jid = parse_job_id(job_id)
    if jid is None:
        return None
    return db.get(Job, jid)


def set_status(db: Session, job: Job, target: str, **fields) -> bool:
    """Move ``job`` to ``target``.

    The UPDATE only matches rows still in a state that may move to
    ``target``, so a concurrent writer can never push a finished job
    backwards. Returns False when another writer got there first; ``job``
    is refreshed either way.
    """
    ensure_transition(job.status, target)
    values = {"status": target, "updated_at": utcnow_naive(), **fields}
    res = db.execute(
        update(Job)
        .where(Job.id == job.id)
        .where(Job.status.in_(sources_for(target)))
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(job)
    return res.rowcount == 1


def encode_cursor(job: Job) -> str:
    raw = f"{job.created_at.isoformat()}|{job.id}"
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> tuple[datetime, uuid.UUID] | None:
    try:
        raw = base64.urlsafe_b64decode(cursor.encode("ascii")).decode("utf-8")
        created, jid = raw.split("|", 1)
        return datetime.fromisoformat(created), uuid.UUID(jid)
    except ValueError:
        return None


def list_for_user(db: Session, user_id: uuid.UUID, limit: int, cursor: str | None = None):
    """Newest-created first, keyset paginated. Returns (jobs, next_cursor)."""
    q = select(Job).where(Job.user_id == user_id)

    after = decode_cursor(cursor) if cursor else None
    if after:
        created, jid = after
        q = q.where(
            or_(
                Job.created_at < created,
                and_(Job.created_at == created, Job.id < jid),
            )
        )

    q = q.order_by(desc(Job.created_at), desc(Job.id)).limit(limit + 1)
    rows = db.execute(q).scalars().all()

    if len(rows) > limit:
        rows = rows[:limit]
        return rows, encode_cursor(rows[-1])
    return rows, None


def recent_for_user(db: Session, user_id: uuid.UUID, limit: int):
    q = (
        select(Job)
        .where(Job.user_id == user_id)
        .order_by(desc(Job.updated_at), desc(Job.id))
        .limit(limit)
    )
    return db.execute(q).scalars().all()


def updated_since(db: Session, user_id: uuid.UUID, watermark: datetime | None, limit: int):
    # inclusive bound: rows sharing the watermark timestamp are filtered by the caller
    q = select(Job).where(Job.user_id == user_id)
    if watermark is not None:
        q = q.where(Job.updated_at >= watermark)
    q = q.order_by(desc(Job.updated_at), desc(Job.id)).limit(limit)
    return db.execute(q).scalars().all()


def stale_pending(db: Session, created_before: datetime, limit: int = 500):
    q = (
        select(Job)
        .where(Job.status == "pending")
        .where(Job.created_at < created_before)
        .order_by(Job.created_at)
        .limit(limit)
    )
    return db.execute(q).scalars().all()
