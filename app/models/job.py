import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.services.tokens import utcnow_naive

JsonColumn = JSON().with_variant(JSONB(), "postgresql")


class Job(Base):
    __tablename__ = "jobs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    type: Mapped[str] = mapped_column(String(50), nullable=False)
    # pending | active | completed | failed | cancelled
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)

    # opaque to the service; only the worker handler reads it
    payload: Mapped[Any] = mapped_column(JsonColumn, default=dict, nullable=False)
    result: Mapped[Any | None] = mapped_column(JsonColumn, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)

    # id of the entry in the queue backend (celery task id)
    queue_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow_naive, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow_naive, onupdate=utcnow_naive, nullable=False
    )


Index("ix_jobs_user_updated", Job.user_id, Job.updated_at)
Index("ix_jobs_user_created", Job.user_id, Job.created_at)
Index("ix_jobs_status_created", Job.status, Job.created_at)
