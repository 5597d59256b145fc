"""Per job type queue settings: retries, expiry and priority."""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class SchedulingProfile:
    retry_limit: int = 2
    retry_delay: int = 20
    retry_backoff: bool = True
    expire_in_seconds: int = 1800
    # 0 (lowest) .. 100 (highest)
    priority: int = 60

    @property
    def celery_priority(self) -> int:
        return max(0, min(9, round(self.priority / 100 * 9)))

    def retry_options(self) -> dict:
        return {"limit": self.retry_limit, "delay": self.retry_delay, "backoff": self.retry_backoff}


BASE_PROFILE = SchedulingProfile()

HEAVY_GENERATION = replace(BASE_PROFILE, retry_limit=3, retry_delay=30, expire_in_seconds=7200, priority=70)
REVIEW = replace(BASE_PROFILE, retry_limit=3, retry_delay=20, expire_in_seconds=1800, priority=85)
UTILITY = replace(BASE_PROFILE, retry_limit=2, retry_delay=15, expire_in_seconds=1200, priority=75)
PIPELINE = replace(BASE_PROFILE, retry_limit=4, retry_delay=20, expire_in_seconds=10800, priority=92)
BACKGROUND = replace(BASE_PROFILE, retry_limit=1, retry_delay=60, expire_in_seconds=900, priority=40)

PROFILES = {
    "NOVEL_SEED": HEAVY_GENERATION,
    "OUTLINE_GENERATE": HEAVY_GENERATION,
    "OUTLINE_ROUGH": HEAVY_GENERATION,
    "OUTLINE_DETAILED": HEAVY_GENERATION,
    "OUTLINE_CHAPTERS": HEAVY_GENERATION,
    "CHAPTER_GENERATE": replace(HEAVY_GENERATION, priority=95),
    "CHAPTER_GENERATE_BRANCHES": replace(HEAVY_GENERATION, priority=90),
    "PIPELINE_EXECUTE": PIPELINE,

    "REVIEW_SCORE": REVIEW,
    "REVIEW_SCORE_5DIM": replace(REVIEW, priority=90),
    "CONSISTENCY_CHECK": REVIEW,
    "CANON_CHECK": REVIEW,
    "OUTLINE_ADHERENCE_CHECK": REVIEW,

    "MEMORY_EXTRACT": UTILITY,
    "HOOKS_EXTRACT": UTILITY,
    "PENDING_ENTITY_EXTRACT": UTILITY,
    "CHAPTER_SUMMARY_GENERATE": UTILITY,
    "DEAI_REWRITE": replace(HEAVY_GENERATION, priority=80),
    "CONTEXT_ASSEMBLE": UTILITY,
    "SCENE_BREAKDOWN": UTILITY,
    "ACT_SUMMARY_GENERATE": UTILITY,
    "PLOT_SIMULATE": UTILITY,
    "PLOT_BRANCH_GENERATE": UTILITY,
    "MATERIAL_ENHANCE": UTILITY,
    "MATERIAL_DEDUPLICATE": UTILITY,
    "MATERIAL_SEARCH": replace(UTILITY, priority=65),
    "TEMPLATE_RENDER": UTILITY,
    "GIT_BACKUP": replace(UTILITY, priority=55),

    "WIZARD_WORLD_BUILDING": HEAVY_GENERATION,
    "WIZARD_CHARACTERS": HEAVY_GENERATION,
    "WIZARD_INSPIRATION": replace(HEAVY_GENERATION, priority=75),
    "WIZARD_SYNOPSIS": HEAVY_GENERATION,
    "WIZARD_GOLDEN_FINGER": HEAVY_GENERATION,
    "CHARACTER_BIOS": HEAVY_GENERATION,
    "CHARACTER_CHAT": replace(UTILITY, priority=70),

    "EMBEDDINGS_BUILD": BACKGROUND,
    "IMAGE_GENERATE": BACKGROUND,
    "ARTICLE_ANALYZE": BACKGROUND,
    "BATCH_ARTICLE_ANALYZE": BACKGROUND,
}


def resolve_profile(job_type: str) -> SchedulingProfile:
    return PROFILES.get(job_type, BASE_PROFILE)
