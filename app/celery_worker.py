# app/celery_worker.py
import logging

from celery import Celery
from celery.signals import after_setup_logger

from app.config import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, JOBS_QUEUE_NAME, LOG_LEVEL

celery = Celery("novel_jobs")

celery.conf.update(
    broker_url=CELERY_BROKER_URL,
    result_backend=CELERY_RESULT_BACKEND,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    # name/args/retries are stored with results; the queue report reads them
    result_extended=True,
    task_track_started=True,
    task_acks_late=True,
    task_default_queue=JOBS_QUEUE_NAME,
    broker_connection_retry_on_startup=True,
)


@after_setup_logger.connect
def _set_level(logger, **kwargs):
    logger.setLevel(LOG_LEVEL)
    logging.getLogger("app").setLevel(LOG_LEVEL)


# Register tasks after the Celery instance has been configured
from app.services.job_worker import register_tasks  # noqa: E402

register_tasks(celery)
