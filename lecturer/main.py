"""
Electronic Lecturer: FastAPI entry point.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from loguru import logger

from lecturer.config import settings
from lecturer.services.knowledge_service import KnowledgeLoadError, load_knowledge, reset_knowledge
from lecturer.middleware.error_handler import global_exception_handler
from lecturer.middleware.logging_middleware import logging_middleware

# ── Routes ───────────────────────────────────────────────
from lecturer.routes.ask import router as ask_router
from lecturer.routes.knowledge import router as knowledge_router
from lecturer.routes.speech import router as speech_router


# ── Lifespan ─────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    try:
        kb = await load_knowledge(settings.KNOWLEDGE_PATH)
        logger.info(kb.status_message)
    except KnowledgeLoadError:
        # The service still answers; every question is scoped out until a reload
        logger.warning("Starting without a knowledge base")
    yield
    reset_knowledge()
    logger.info("Shutting down")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Course question-answering assistant over a static knowledge base",
        lifespan=lifespan,
    )

    # ── Rate Limiter ─────────────────────────────────────
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
        enabled=settings.RATE_LIMIT_ENABLED,
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # ── CORS ─────────────────────────────────────────────
    origins = settings.CORS_ORIGINS.split(",") if settings.CORS_ORIGINS != "*" else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Custom Middleware ────────────────────────────────
    app.middleware("http")(global_exception_handler)
    app.middleware("http")(logging_middleware)

    # ── Register Routers ─────────────────────────────────
    app.include_router(ask_router)
    app.include_router(knowledge_router)
    app.include_router(speech_router)

    # ── Health Check ─────────────────────────────────────
    @app.get("/api/health", tags=["health"])
    async def health():
        return {
            "status": "ok",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
        }

    return app


app = create_app()


# ── Run ──────────────────────────────────────────────────
def run():
    import uvicorn
    uvicorn.run(
        "lecturer.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info",
    )


if __name__ == "__main__":
    run()
