ROLES = {"member", "admin"}

JOB_TYPES = {
    "OUTLINE_GENERATE",
    "NOVEL_SEED",
    "OUTLINE_ROUGH",
    "OUTLINE_DETAILED",
    "OUTLINE_CHAPTERS",
    "CHARACTER_BIOS",
    "CHAPTER_GENERATE",
    "CHAPTER_GENERATE_BRANCHES",
    "REVIEW_SCORE",
    "REVIEW_SCORE_5DIM",
    "DEAI_REWRITE",
    "MEMORY_EXTRACT",
    "CONSISTENCY_CHECK",
    "CANON_CHECK",
    "EMBEDDINGS_BUILD",
    "IMAGE_GENERATE",
    "GIT_BACKUP",
    "CHARACTER_CHAT",
    "ARTICLE_ANALYZE",
    "BATCH_ARTICLE_ANALYZE",
    "MATERIAL_SEARCH",
    "MATERIAL_ENHANCE",
    "MATERIAL_DEDUPLICATE",
    "TEMPLATE_RENDER",
    "WIZARD_WORLD_BUILDING",
    "WIZARD_CHARACTERS",
    "WIZARD_INSPIRATION",
    "WIZARD_SYNOPSIS",
    "WIZARD_GOLDEN_FINGER",
    "CONTEXT_ASSEMBLE",
    "HOOKS_EXTRACT",
    "CHAPTER_SUMMARY_GENERATE",
    "OUTLINE_ADHERENCE_CHECK",
    "PENDING_ENTITY_EXTRACT",
    "SCENE_BREAKDOWN",
    "ACT_SUMMARY_GENERATE",
    "PLOT_SIMULATE",
    "PLOT_BRANCH_GENERATE",
    "PIPELINE_EXECUTE",
}

JOB_STATUSES = {
    "pending",
    "active",
    "completed",
    "failed",
    "cancelled",
}

MAX_PAYLOAD_BYTES = 100 * 1024
MAX_FIELD_LENGTH = 5000
