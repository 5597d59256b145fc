from __future__ import annotations

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import StreamingResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.database import get_db, get_session_factory
from app.models.user import User
from app.schemas.job import JobCreateIn, JobEnvelope, JobListOut, JobOut
from app.schemas.job_inputs import validate_job_input
from app.services import jobs
from app.services.authz import current_user, ensure_owner
from app.services.job_stream import JobStreamRelay
from app.services.queue_backend import get_queue
from app.utils.constants import MAX_PAYLOAD_BYTES

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def payload_size(payload: dict) -> int:
    return len(json.dumps(payload, default=str).encode("utf-8"))


def nested_validation_error(exc: ValidationError, *prefix: str) -> RequestValidationError:
    return RequestValidationError(
        [{"loc": (*prefix, *e["loc"]), "msg": e["msg"], "type": e["type"]} for e in exc.errors()]
    )


@router.post("", response_model=JobEnvelope)
def create_job(
    body: JobCreateIn,
    user: User = Depends(current_user),
    db: Session = Depends(get_db),
    queue=Depends(get_queue),
):
    if payload_size(body.payload) > MAX_PAYLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Payload too large")

    try:
        validate_job_input(body.type, body.payload)
    except ValidationError as e:
        raise nested_validation_error(e, "body", "payload")

    payload = dict(body.payload)
    if body.provider_config_id:
        payload.setdefault("providerConfigId", body.provider_config_id)

    job = jobs.create_job(db, user.id, body.type, payload, queue=queue)
    return {"job": JobOut.model_validate(job)}


@router.get("", response_model=JobListOut)
def list_jobs(
    user: User = Depends(current_user),
    db: Session = Depends(get_db),
    limit: int = Query(jobs.DEFAULT_LIST_LIMIT),
    cursor: Optional[str] = None,
):
    rows, next_cursor = jobs.list_jobs(db, user.id, limit=limit, cursor=cursor)
    return JobListOut(
        jobs=[JobOut.model_validate(r) for r in rows],
        next_cursor=next_cursor,
        has_more=next_cursor is not None,
    )


# declared before /{job_id} so "stream" is not taken for an id
@router.get("/stream")
async def stream_jobs(
    request: Request,
    user: User = Depends(current_user),
    session_factory=Depends(get_session_factory),
):
    relay = JobStreamRelay(session_factory, user.id, is_disconnected=request.is_disconnected)
    return StreamingResponse(relay.events(), media_type="text/event-stream", headers=SSE_HEADERS)


@router.get("/{job_id}", response_model=JobEnvelope)
def get_job(job_id: str, user: User = Depends(current_user), db: Session = Depends(get_db)):
    job = jobs.get_job(db, job_id)
    ensure_owner(job, user)
    return {"job": JobOut.model_validate(job)}


@router.post("/{job_id}/cancel", response_model=JobEnvelope)
def cancel_job(
    job_id: str,
    user: User = Depends(current_user),
    db: Session = Depends(get_db),
    queue=Depends(get_queue),
):
    job = jobs.get_job(db, job_id)
    ensure_owner(job, user)
    job = jobs.cancel_job(db, job.id, queue=queue)
    return {"job": JobOut.model_validate(job)}
