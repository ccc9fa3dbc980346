"""
Application configuration: reads all settings from environment variables.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ──────────────────────────────────────────────
    APP_NAME: str = "Electronic Lecturer"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: str = "*"

    # ── OpenAI ───────────────────────────────────────────
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-5"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_TEMPERATURE: float = 0.3
    OPENAI_TIMEOUT: float = 60.0
    WHISPER_MODEL: str = "whisper-1"

    # ── ElevenLabs TTS ───────────────────────────────────
    ELEVENLABS_API_KEY: str = ""
    ELEVENLABS_VOICE_ID: str = "21m00Tcm4TlvDq8ikWAM"
    SPEECH_LANGUAGE: str = "ar"

    # ── Knowledge base ───────────────────────────────────
    KNOWLEDGE_PATH: str = "./data/knowledge.txt"
    RETRIEVAL_TOP_K: int = 4
    EXTRACT_MAX_LINES: int = 12
    DEFAULT_MODE: str = "hybrid"  # kb / hybrid

    # ── Rate Limiting ────────────────────────────────────
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_ENABLED: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
