import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./novel_jobs.db")

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
# the queue report reads celery_taskmeta, so results default to the app database
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", f"db+{DATABASE_URL}")
JOBS_QUEUE_NAME = os.getenv("JOBS_QUEUE_NAME", "jobs")

JOBS_STREAM_POLL_SECONDS = float(os.getenv("JOBS_STREAM_POLL_SECONDS", "5"))
JOBS_STREAM_HEARTBEAT = os.getenv("JOBS_STREAM_HEARTBEAT", "").strip().lower() in ("1", "true", "yes")
JOBS_ORPHAN_MINUTES = int(os.getenv("JOBS_ORPHAN_MINUTES", "30"))

OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if o.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
IS_PROD = os.getenv("ENV") == "production"
