"""
Question answering endpoint.
"""

from fastapi import APIRouter
from loguru import logger

from lecturer.config import settings
from lecturer.models.schemas import AskRequest, AskResponse
from lecturer.services.answer_service import AnswerMode, AnswerResult, answer_question
from lecturer.services.tts_service import synthesize_speech_base64

router = APIRouter(prefix="/api", tags=["ask"])


def default_mode() -> AnswerMode:
    try:
        return AnswerMode(settings.DEFAULT_MODE)
    except ValueError:
        logger.warning(f"Unknown DEFAULT_MODE '{settings.DEFAULT_MODE}', using hybrid")
        return AnswerMode.HYBRID


async def render_answer(
    question: str, mode: AnswerMode, result: AnswerResult, speak: bool
) -> dict:
    audio_b64 = await synthesize_speech_base64(result.text) if speak else None
    return {
        "question": question,
        "mode": mode,
        "kind": result.kind,
        "answer": result.text,
        "notice": result.notice,
        "messages": result.messages,
        "sections": result.sections,
        "audio_base64": audio_b64 or None,
    }


@router.post("/ask", response_model=AskResponse)
async def ask(req: AskRequest):
    mode = req.mode or default_mode()
    result = await answer_question(req.question, mode)
    return AskResponse(**await render_answer(req.question, mode, result, req.speak))
