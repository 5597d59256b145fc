"""Server-sent events relay for one user's jobs.

One relay per open connection. It polls the jobs table on a fixed interval
and writes only rows that changed since the last emission. Consumers treat
each emitted job as an upsert keyed by id: a job that changes again is
emitted again.
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from datetime import datetime
from typing import Awaitable, Callable

from starlette.concurrency import run_in_threadpool

from app.config import JOBS_STREAM_HEARTBEAT, JOBS_STREAM_POLL_SECONDS
from app.schemas.job import JobOut
from app.services import job_store

logger = logging.getLogger(__name__)

INITIAL_LIMIT = 50
DELTA_LIMIT = 100
KEEPALIVE_FRAME = ": keepalive\n\n"


def sse_frame(event: str, data: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


class JobStreamRelay:
    def __init__(
        self,
        session_factory,
        user_id: uuid.UUID,
        is_disconnected: Callable[[], Awaitable[bool]] | None = None,
        poll_interval: float = JOBS_STREAM_POLL_SECONDS,
        initial_limit: int = INITIAL_LIMIT,
        delta_limit: int = DELTA_LIMIT,
        heartbeat: bool = JOBS_STREAM_HEARTBEAT,
    ):
        self.session_factory = session_factory
        self.user_id = user_id
        self.poll_interval = poll_interval
        self.initial_limit = initial_limit
        self.delta_limit = delta_limit
        self.heartbeat = heartbeat

        self._is_disconnected = is_disconnected
        self._stop = asyncio.Event()
        self._initial_sent = False

        # newest updated_at emitted so far, and the ids emitted at exactly that time
        self.watermark: datetime | None = None
        self._boundary_ids: set[uuid.UUID] = set()

    def stop(self) -> None:
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    async def aborted(self) -> bool:
        if self._stop.is_set():
            return True
        if self._is_disconnected is not None and await self._is_disconnected():
            self._stop.set()
        return self._stop.is_set()

    def _fetch(self, initial: bool) -> list[JobOut]:
        db = self.session_factory()
        try:
            if initial:
                rows = job_store.recent_for_user(db, self.user_id, self.initial_limit)
            else:
                rows = job_store.updated_since(
                    db,
                    self.user_id,
                    self.watermark,
                    self.delta_limit + len(self._boundary_ids),
                )
            return [JobOut.model_validate(r) for r in rows]
        finally:
            db.close()

    def _unseen(self, jobs: list[JobOut]) -> list[JobOut]:
        fresh = [
            j for j in jobs
            if not (j.updated_at == self.watermark and j.id in self._boundary_ids)
        ]
        return fresh[: self.delta_limit]

    def _advance(self, jobs: list[JobOut]) -> None:
        newest = jobs[0].updated_at
        if newest != self.watermark:
            self._boundary_ids = set()
        self.watermark = newest
        self._boundary_ids.update(j.id for j in jobs if j.updated_at == newest)

    async def next_frame(self) -> str | None:
        """Run one poll. Returns the frame to write, or None when there is nothing to send."""
        initial = not self._initial_sent
        try:
            jobs = await run_in_threadpool(self._fetch, initial)
        except Exception:
            logger.exception("Job stream poll failed for user %s", self.user_id)
            return None

        if not initial:
            jobs = self._unseen(jobs)
            if not jobs:
                return KEEPALIVE_FRAME if self.heartbeat else None

        if await self.aborted():
            return None

        if jobs:
            self._advance(jobs)
        self._initial_sent = True
        return sse_frame(
            "jobs",
            {"jobs": [j.model_dump(mode="json", by_alias=True) for j in jobs], "isInitial": initial},
        )

    async def _sleep(self) -> None:
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=self.poll_interval)
        except asyncio.TimeoutError:
            pass

    async def events(self):
        logger.info("Job stream opened for user %s", self.user_id)
        try:
            while True:
                frame = await self.next_frame()
                # checked again right before writing: no frames after abort
                if await self.aborted():
                    break
                if frame is not None:
                    yield frame
                await self._sleep()
                if self.stopped:
                    break
        finally:
            self.stop()
            logger.info("Job stream closed for user %s", self.user_id)
