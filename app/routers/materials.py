from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.job import JobEnvelope, JobOut
from app.schemas.job_inputs import MaterialEnhanceInput
from app.services import jobs
from app.services.authz import current_user
from app.services.queue_backend import get_queue

router = APIRouter(prefix="/materials", tags=["materials"])

ENHANCE_FIELDS = {"novel_id", "material_name", "material_type", "current_description", "current_attributes"}


@router.post("/enhance", response_model=JobEnvelope)
def enhance_material(
    payload: MaterialEnhanceInput,
    user: User = Depends(current_user),
    db: Session = Depends(get_db),
    queue=Depends(get_queue),
):
    """Queues a MATERIAL_ENHANCE job; the result lands on the job, not here."""
    data = payload.model_dump(by_alias=True, include=ENHANCE_FIELDS, exclude_none=True)
    job = jobs.create_job(db, user.id, "MATERIAL_ENHANCE", data, queue=queue)
    return {"job": JobOut.model_validate(job)}
