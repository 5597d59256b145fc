import argparse
import logging
from datetime import timedelta

from app.config import JOBS_ORPHAN_MINUTES
from app.database import SessionLocal
from app.services.jobs import reconcile_orphans

def main():
    parser = argparse.ArgumentParser(description="Fail pending jobs that have no live queue entry.")
    parser.add_argument("--older-than-minutes", type=int, default=JOBS_ORPHAN_MINUTES)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    db = SessionLocal()
    try:
        repaired = reconcile_orphans(db, timedelta(minutes=args.older_than_minutes))
        print({"repaired": len(repaired), "job_ids": [str(j.id) for j in repaired]})
    finally:
        db.close()

if __name__ == "__main__":
    main()
