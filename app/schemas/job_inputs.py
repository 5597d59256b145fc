"""Payload schemas for job types whose input is checked before queueing.

Types without an entry here are queued with whatever payload they carry.
Unknown keys are allowed; the stored payload is always the raw one.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.utils.constants import MAX_FIELD_LENGTH


class _Input(BaseModel):
    model_config = ConfigDict(extra="allow")

    agent_id: Optional[str] = Field(default=None, alias="agentId")


class OutlineInput(_Input):
    novel_id: Optional[str] = Field(default=None, alias="novelId")
    keywords: Optional[str] = Field(default=None, max_length=MAX_FIELD_LENGTH)
    theme: Optional[str] = Field(default=None, max_length=MAX_FIELD_LENGTH)
    genre: Optional[str] = Field(default=None, max_length=200)
    target_words: Optional[float] = Field(default=None, alias="targetWords", ge=1, le=1000)
    chapter_count: Optional[int] = Field(default=None, alias="chapterCount", ge=1, le=2000)
    protagonist: Optional[str] = Field(default=None, max_length=MAX_FIELD_LENGTH)
    world_setting: Optional[str] = Field(default=None, alias="worldSetting", max_length=MAX_FIELD_LENGTH)
    special_requirements: Optional[str] = Field(default=None, alias="specialRequirements", max_length=MAX_FIELD_LENGTH)


class NovelSeedInput(_Input):
    novel_id: str = Field(alias="novelId")
    title: Optional[str] = Field(default=None, max_length=200)
    theme: Optional[str] = Field(default=None, max_length=MAX_FIELD_LENGTH)
    genre: Optional[str] = Field(default=None, max_length=200)
    keywords: Optional[str] = Field(default=None, max_length=MAX_FIELD_LENGTH)
    protagonist: Optional[str] = Field(default=None, max_length=MAX_FIELD_LENGTH)


class ChapterInput(_Input):
    chapter_id: str = Field(alias="chapterId")
    outline: Optional[str] = Field(default=None, max_length=MAX_FIELD_LENGTH)
    enable_web_search: Optional[bool] = Field(default=None, alias="enableWebSearch")


class ChapterBranchesInput(ChapterInput):
    branch_count: Optional[int] = Field(default=None, alias="branchCount", ge=1, le=5)
    feedback: Optional[str] = Field(default=None, max_length=MAX_FIELD_LENGTH)
    iteration_round: Optional[int] = Field(default=None, alias="iterationRound", ge=1, le=10)


class ChapterRefInput(_Input):
    chapter_id: str = Field(alias="chapterId")


class ReviewerModel(BaseModel):
    model: str = Field(min_length=1, max_length=100)
    provider_config_id: Optional[str] = Field(default=None, alias="providerConfigId")
    persona: Optional[str] = Field(default=None, max_length=200)


class MultiReviewInput(ChapterRefInput):
    reviewer_models: Optional[List[ReviewerModel]] = Field(default=None, alias="reviewerModels", min_length=1, max_length=5)


class CharacterBrief(BaseModel):
    name: str = Field(max_length=100)
    role: Optional[str] = Field(default=None, max_length=200)
    brief: Optional[str] = Field(default=None, max_length=MAX_FIELD_LENGTH)


class CharacterBiosInput(_Input):
    novel_id: str = Field(alias="novelId")
    characters: List[CharacterBrief] = Field(min_length=1)
    outline_context: Optional[str] = Field(default=None, alias="outlineContext", max_length=MAX_FIELD_LENGTH * 4)


class CharacterChatInput(_Input):
    novel_id: str = Field(alias="novelId")
    character_id: str = Field(alias="characterId")
    user_message: str = Field(alias="userMessage", max_length=MAX_FIELD_LENGTH)
    conversation_history: Optional[str] = Field(default=None, alias="conversationHistory", max_length=MAX_FIELD_LENGTH * 4)


class ArticleInput(BaseModel):
    title: str = Field(max_length=500)
    content: str = Field(max_length=MAX_FIELD_LENGTH * 20)
    genre: Optional[str] = Field(default=None, max_length=100)


class ArticleAnalyzeInput(_Input, ArticleInput):
    analysis_focus: Optional[str] = Field(default=None, alias="analysisFocus", max_length=MAX_FIELD_LENGTH)
    save_to_materials: Optional[bool] = Field(default=None, alias="saveToMaterials")
    novel_id: Optional[str] = Field(default=None, alias="novelId")
    template_id: Optional[str] = Field(default=None, alias="templateId")


class BatchArticleAnalyzeInput(_Input):
    articles: List[ArticleInput] = Field(min_length=1, max_length=10)
    analysis_focus: Optional[str] = Field(default=None, alias="analysisFocus", max_length=MAX_FIELD_LENGTH)
    novel_id: Optional[str] = Field(default=None, alias="novelId")
    template_id: Optional[str] = Field(default=None, alias="templateId")


class WizardInspirationInput(_Input):
    genre: str = Field(max_length=200)
    target_words: float = Field(alias="targetWords", ge=10, le=1000)
    target_audience: Optional[str] = Field(default=None, alias="targetAudience", max_length=500)
    keywords: Optional[str] = Field(default=None, max_length=MAX_FIELD_LENGTH)
    count: Optional[int] = Field(default=None, ge=1, le=10)


class WizardNovelInput(_Input):
    novel_id: str = Field(alias="novelId")
    theme: Optional[str] = Field(default=None, max_length=MAX_FIELD_LENGTH)
    genre: Optional[str] = Field(default=None, max_length=200)
    protagonist: Optional[str] = Field(default=None, max_length=MAX_FIELD_LENGTH)
    world_setting: Optional[str] = Field(default=None, alias="worldSetting", max_length=MAX_FIELD_LENGTH)


class WizardCharactersInput(WizardNovelInput):
    character_count: Optional[int] = Field(default=None, alias="characterCount", ge=1, le=20)


class MaterialEnhanceInput(_Input):
    novel_id: str = Field(alias="novelId", min_length=1)
    material_name: str = Field(alias="materialName", min_length=1, max_length=200)
    material_type: Optional[str] = Field(default=None, alias="materialType")
    current_description: Optional[str] = Field(default=None, alias="currentDescription", max_length=MAX_FIELD_LENGTH * 4)
    current_attributes: Optional[dict[str, Any]] = Field(default=None, alias="currentAttributes")


class TemplateRenderInput(_Input):
    template_id: str = Field(alias="templateId")
    variables: dict[str, Any] = Field(default_factory=dict)
    novel_id: Optional[str] = Field(default=None, alias="novelId")


JOB_INPUT_SCHEMAS: dict[str, type[BaseModel]] = {
    "OUTLINE_GENERATE": OutlineInput,
    "OUTLINE_ROUGH": OutlineInput,
    "NOVEL_SEED": NovelSeedInput,
    "CHARACTER_BIOS": CharacterBiosInput,
    "CHAPTER_GENERATE": ChapterInput,
    "CHAPTER_GENERATE_BRANCHES": ChapterBranchesInput,
    "REVIEW_SCORE": MultiReviewInput,
    "DEAI_REWRITE": ChapterRefInput,
    "MEMORY_EXTRACT": ChapterRefInput,
    "CONSISTENCY_CHECK": ChapterRefInput,
    "CHARACTER_CHAT": CharacterChatInput,
    "ARTICLE_ANALYZE": ArticleAnalyzeInput,
    "BATCH_ARTICLE_ANALYZE": BatchArticleAnalyzeInput,
    "WIZARD_WORLD_BUILDING": WizardNovelInput,
    "WIZARD_CHARACTERS": WizardCharactersInput,
    "WIZARD_INSPIRATION": WizardInspirationInput,
    "MATERIAL_ENHANCE": MaterialEnhanceInput,
    "TEMPLATE_RENDER": TemplateRenderInput,
}


def validate_job_input(job_type: str, payload: dict[str, Any]) -> None:
    """Raises pydantic.ValidationError when the payload does not fit the type."""
    schema = JOB_INPUT_SCHEMAS.get(job_type)
    if schema is not None:
        schema.model_validate(payload)
