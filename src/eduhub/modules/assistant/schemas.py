"""Assistant Schemas."""

from pydantic import BaseModel, Field

from eduhub.modules.eligibility.schemas import SubjectMark


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)
    marks: list[SubjectMark] = Field(default_factory=list)


class RecommendRequest(BaseModel):
    institution_ids: list[str] = Field(..., min_length=1)
    marks: list[SubjectMark] = Field(default_factory=list)


class AssistantReply(BaseModel):
    reply: str
