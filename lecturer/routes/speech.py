"""
Speech endpoints: read text aloud and answer spoken questions.
"""

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from typing import Optional
from loguru import logger

from lecturer.models.schemas import SpokenAskResponse, SynthesizeRequest
from lecturer.routes.ask import default_mode, render_answer
from lecturer.services.answer_service import AnswerMode, answer_question
from lecturer.services.speech_errors import SpeechError, SpeechUnavailableError
from lecturer.services.stt_service import transcribe_audio
from lecturer.services.tts_service import synthesize_speech

router = APIRouter(prefix="/api/speech", tags=["speech"])


@router.post("/synthesize")
async def synthesize(req: SynthesizeRequest):
    try:
        audio = await synthesize_speech(req.text, req.voice_id)
    except SpeechUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except SpeechError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return Response(content=audio, media_type="audio/mpeg")


@router.post("/ask", response_model=SpokenAskResponse)
async def spoken_ask(
    audio: UploadFile = File(...),
    mode: Optional[AnswerMode] = Form(None),
    speak: bool = Form(False),
):
    """
    Transcribe an uploaded recording and answer it like a typed question.
    """
    data = await audio.read()
    logger.info(f"Received {len(data)} bytes of audio")

    try:
        transcript = await transcribe_audio(data, filename=audio.filename or "audio.webm")
    except SpeechUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except SpeechError as e:
        raise HTTPException(status_code=502, detail=str(e))

    mode = mode or default_mode()
    result = await answer_question(transcript, mode)
    body = await render_answer(transcript, mode, result, speak)
    return SpokenAskResponse(transcript=transcript, **body)
