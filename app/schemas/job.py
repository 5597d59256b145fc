from datetime import datetime
from typing import Any, List, Optional
import uuid

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from app.utils.constants import JOB_TYPES


class JobOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    type: str
    status: str
    payload: Any = None
    result: Any = None
    error: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class JobCreateIn(BaseModel):
    type: str
    # older clients send the payload as "input"
    payload: dict[str, Any] = Field(default_factory=dict, validation_alias=AliasChoices("payload", "input"))
    provider_config_id: Optional[str] = Field(default=None, alias="providerConfigId")

    @field_validator("type")
    @classmethod
    def known_type(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in JOB_TYPES:
            raise ValueError(f"Unknown job type: {v}")
        return v


class JobEnvelope(BaseModel):
    job: JobOut


class JobListOut(BaseModel):
    jobs: List[JobOut]
    next_cursor: Optional[str] = Field(default=None, serialization_alias="nextCursor")
    has_more: bool = Field(serialization_alias="hasMore")


def dump_job(job) -> dict[str, Any]:
    return JobOut.model_validate(job).model_dump(mode="json", by_alias=True)
