"""
Text-to-speech service using ElevenLabs API.
Reads answers aloud; the multilingual model handles Arabic text.
"""

import httpx
import base64
from typing import Optional
from loguru import logger

from lecturer.config import settings
from lecturer.services.speech_errors import SpeechError, SpeechUnavailableError

UNSUPPORTED_MESSAGE = "القراءة الصوتية غير مدعومة"
ELEVENLABS_URL = "https://api.elevenlabs.io/v1/text-to-speech/{voice_id}"


def tts_available() -> bool:
    return bool(settings.ELEVENLABS_API_KEY)


async def synthesize_speech(text: str, voice_id: Optional[str] = None) -> bytes:
    """
    Convert text to speech audio bytes using ElevenLabs.
    Returns MP3 audio bytes.
    """
    voice_id = voice_id or settings.ELEVENLABS_VOICE_ID

    if not tts_available():
        raise SpeechUnavailableError(UNSUPPORTED_MESSAGE)

    headers = {
        "xi-api-key": settings.ELEVENLABS_API_KEY,
        "Content-Type": "application/json",
        "Accept": "audio/mpeg",
    }

    payload = {
        "text": text,
        "model_id": "eleven_multilingual_v2",
        "voice_settings": {
            "stability": 0.5,
            "similarity_boost": 0.75,
        },
    }

    try:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(
                ELEVENLABS_URL.format(voice_id=voice_id), headers=headers, json=payload
            )
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"TTS error: {e}")
        raise SpeechError(str(e)) from e

    logger.info(f"TTS synthesized {len(response.content)} bytes")
    return response.content


async def synthesize_speech_base64(text: str, voice_id: Optional[str] = None) -> str:
    """Return TTS audio as base64, or an empty string when speech is off or failed."""
    try:
        audio_bytes = await synthesize_speech(text, voice_id)
    except (SpeechUnavailableError, SpeechError):
        return ""
    return base64.b64encode(audio_bytes).decode("utf-8")
