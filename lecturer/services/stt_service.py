"""
Whisper-based speech-to-text service for spoken questions.
"""

import io
import openai
from loguru import logger

from lecturer.config import settings
from lecturer.services.ai_service import has_api_key
from lecturer.services.speech_errors import SpeechError, SpeechUnavailableError

UNSUPPORTED_MESSAGE = "الميكروفون غير مدعوم"
RETRY_MESSAGE = "حاول مرة أخرى"


def stt_available() -> bool:
    return has_api_key()


async def transcribe_audio(
    audio_bytes: bytes, filename: str = "audio.webm", language: str = None
) -> str:
    """
    Transcribe raw audio bytes using OpenAI Whisper.
    Raises SpeechUnavailableError without an API key and SpeechError when
    nothing usable comes back.
    """
    if not stt_available():
        raise SpeechUnavailableError(UNSUPPORTED_MESSAGE)

    language = language or settings.SPEECH_LANGUAGE
    audio_file = io.BytesIO(audio_bytes)
    audio_file.name = filename

    kwargs = {"model": settings.WHISPER_MODEL, "file": audio_file}
    if language and language != "auto":
        kwargs["language"] = language

    client = openai.AsyncOpenAI(
        api_key=settings.OPENAI_API_KEY,
        base_url=settings.OPENAI_BASE_URL,
        timeout=settings.OPENAI_TIMEOUT,
        max_retries=0,
    )
    try:
        transcript = await client.audio.transcriptions.create(**kwargs)
    except openai.OpenAIError as e:
        logger.error(f"STT error: {e}")
        raise SpeechError(RETRY_MESSAGE) from e
    finally:
        await client.close()

    text = (transcript.text or "").strip()
    if not text:
        raise SpeechError(RETRY_MESSAGE)

    logger.info(f"STT transcription: '{text[:80]}'")
    return text
