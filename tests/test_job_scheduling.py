from app.services.job_scheduling import BASE_PROFILE, PROFILES, SchedulingProfile, resolve_profile
from app.utils.constants import JOB_TYPES


def test_every_profiled_type_is_a_known_job_type():
    assert set(PROFILES) <= JOB_TYPES


def test_unknown_type_gets_base_profile():
    assert resolve_profile("NOT_A_TYPE") is BASE_PROFILE


def test_chapter_generation_outranks_background_work():
    chapter = resolve_profile("CHAPTER_GENERATE")
    embeddings = resolve_profile("EMBEDDINGS_BUILD")
    assert chapter.priority > embeddings.priority
    assert chapter.celery_priority > embeddings.celery_priority


def test_celery_priority_is_clamped_to_broker_range():
    assert SchedulingProfile(priority=0).celery_priority == 0
    assert SchedulingProfile(priority=100).celery_priority == 9
    assert SchedulingProfile(priority=250).celery_priority == 9


def test_retry_options():
    profile = SchedulingProfile(retry_limit=3, retry_delay=30, retry_backoff=False)
    assert profile.retry_options() == {"limit": 3, "delay": 30, "backoff": False}
