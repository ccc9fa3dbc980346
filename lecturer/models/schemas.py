"""
Pydantic request / response schemas for the API.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List

from lecturer.services.answer_service import AnswerKind, AnswerMode


# ── Ask ──────────────────────────────────────────────────
class AskRequest(BaseModel):
    question: str = Field(max_length=4000)
    mode: Optional[AnswerMode] = None  # defaults to settings.DEFAULT_MODE
    speak: bool = False

    @field_validator("question")
    @classmethod
    def question_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("question must not be blank")
        return v


class AskResponse(BaseModel):
    question: str
    mode: AnswerMode
    kind: AnswerKind
    answer: str
    notice: Optional[str] = None
    messages: List[str]
    sections: List[str] = []
    audio_base64: Optional[str] = None


class SpokenAskResponse(AskResponse):
    transcript: str


# ── Knowledge Base ───────────────────────────────────────
class KnowledgeStatus(BaseModel):
    loaded: bool
    sections: int
    source: str
    message: str
    error: Optional[str] = None


class KnowledgeSearchRequest(BaseModel):
    query: str
    top_k: int = Field(default=3, ge=1, le=50)


class ScoredSectionResponse(BaseModel):
    index: int
    score: int
    text: str


class KnowledgeSearchResponse(BaseModel):
    query: str
    results: List[ScoredSectionResponse]


# ── Speech ───────────────────────────────────────────────
class SynthesizeRequest(BaseModel):
    text: str = Field(min_length=1, max_length=5000)
    voice_id: Optional[str] = None
