"""
Answer selection: knowledge-base extract or hybrid completion with fallback.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from loguru import logger

from lecturer.config import settings
from lecturer.services.ai_service import (
    CompletionError,
    build_context_block,
    chat_completion,
    has_api_key,
)
from lecturer.services.retrieval_service import retrieve

OUT_OF_SCOPE = "هذا السؤال خارج نطاق المادة المعتمدة لهذه الدورة."
EMPTY_COMPLETION_NOTICE = "تعذر الحصول على استجابة من GPT — تم التحويل لوضع قاعدة المعرفة."
COMPLETION_ERROR_NOTICE = "حدث خطأ في الاتصال بـ GPT — تم التحويل لوضع قاعدة المعرفة."


class AnswerMode(str, Enum):
    KB = "kb"
    HYBRID = "hybrid"


class AnswerKind(str, Enum):
    EXTRACTIVE = "extractive"
    GENERATED = "generated"
    SCOPED_OUT = "scoped_out"


@dataclass
class AnswerResult:
    kind: AnswerKind
    text: str
    sections: List[str] = field(default_factory=list)
    notice: Optional[str] = None

    @property
    def fell_back(self) -> bool:
        return self.notice is not None

    @property
    def messages(self) -> List[str]:
        """Bot messages in display order."""
        if self.notice:
            return [self.notice, self.text]
        return [self.text]


def extract_answer(sections: List[str], max_lines: Optional[int] = None) -> str:
    """First lines of the best section, verbatim."""
    if max_lines is None:
        max_lines = settings.EXTRACT_MAX_LINES
    lines = sections[0].split("\n")[:max_lines]
    return "\n".join(lines).strip()


def knowledge_answer(sections: List[str], notice: Optional[str] = None) -> AnswerResult:
    if not sections:
        return AnswerResult(AnswerKind.SCOPED_OUT, OUT_OF_SCOPE, sections, notice)
    return AnswerResult(AnswerKind.EXTRACTIVE, extract_answer(sections), sections, notice)


async def answer_question(
    question: str,
    mode: AnswerMode = AnswerMode.HYBRID,
    sections: Optional[List[str]] = None,
) -> AnswerResult:
    """
    Answer a learner's question.

    Retrieval always runs first. Knowledge-base mode, or a missing API key,
    answers from the retrieved sections only. Hybrid mode asks the completion
    endpoint and falls back to the knowledge-base answer, with a notice, when
    the call fails or returns nothing.
    """
    question = question.strip()
    if not question:
        raise ValueError("question must not be blank")

    retrieved = retrieve(question, sections, top_k=settings.RETRIEVAL_TOP_K)

    if mode == AnswerMode.KB or not has_api_key():
        result = knowledge_answer(retrieved)
        logger.info(f"KB answer [{result.kind.value}] for '{question[:50]}'")
        return result

    try:
        text = await chat_completion(question, build_context_block(retrieved))
    except CompletionError:
        logger.warning("Completion failed, falling back to knowledge base")
        return knowledge_answer(retrieved, notice=COMPLETION_ERROR_NOTICE)

    if not text:
        logger.warning("Completion returned no content, falling back to knowledge base")
        return knowledge_answer(retrieved, notice=EMPTY_COMPLETION_NOTICE)

    logger.info(f"Generated answer for '{question[:50]}' -> '{text[:50]}'")
    return AnswerResult(AnswerKind.GENERATED, text, retrieved)
