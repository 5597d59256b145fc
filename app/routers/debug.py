import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.services import jobs
from app.services.authz import require_admin
from app.services.errors import QueueUnavailable
from app.services.queue_report import QueueReport
from app.services.tokens import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/debug", tags=["debug"])


@router.get("/queue")
def queue_overview(user: User = Depends(require_admin), db: Session = Depends(get_db)):
    report = QueueReport(db)
    try:
        counts = report.counts_by_type_and_state()
        recent = report.recent_entries(limit=20)
    except QueueUnavailable:
        logger.exception("Queue debug query failed")
        raise HTTPException(status_code=500, detail="Debug query failed")

    own_jobs, _ = jobs.list_jobs(db, user.id, limit=10)

    return {
        "status": "ok",
        "queue": {
            "jobsByTypeAndState": [asdict(c) for c in counts],
            "recentJobs": [asdict(e) for e in recent],
        },
        "appJobs": [
            {"id": str(j.id), "type": j.type, "status": j.status, "createdAt": j.created_at.isoformat()}
            for j in own_jobs
        ],
        "timestamp": utcnow().isoformat(),
    }
