"""
Knowledge base status, reload and search endpoints.
"""

from fastapi import APIRouter

from lecturer.models.schemas import (
    KnowledgeSearchRequest,
    KnowledgeSearchResponse,
    KnowledgeStatus,
    ScoredSectionResponse,
)
from lecturer.services.knowledge_service import (
    KnowledgeBase,
    KnowledgeLoadError,
    get_knowledge,
    load_knowledge,
)
from lecturer.services.retrieval_service import rank_sections

router = APIRouter(prefix="/api/knowledge", tags=["knowledge"])


def _status(kb: KnowledgeBase) -> KnowledgeStatus:
    return KnowledgeStatus(
        loaded=kb.loaded,
        sections=len(kb.sections),
        source=kb.source,
        message=kb.status_message,
        error=kb.error,
    )


@router.get("/status", response_model=KnowledgeStatus)
async def status():
    return _status(get_knowledge())


@router.post("/reload", response_model=KnowledgeStatus)
async def reload():
    # A failed reload is reported through the status message, not as an error
    try:
        await load_knowledge()
    except KnowledgeLoadError:
        pass
    return _status(get_knowledge())


@router.post("/search", response_model=KnowledgeSearchResponse)
async def search(req: KnowledgeSearchRequest):
    ranked = rank_sections(req.query, top_k=req.top_k)
    return KnowledgeSearchResponse(
        query=req.query,
        results=[ScoredSectionResponse(index=s.index, score=s.score, text=s.text) for s in ranked],
    )
