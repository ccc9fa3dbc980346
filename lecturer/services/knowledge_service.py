"""
Course knowledge base: loads the heading-delimited knowledge text and keeps
the sections in memory for the lifetime of the process.
"""

import asyncio
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import httpx
from loguru import logger

from lecturer.config import settings

# A section starts at every line beginning with "## "
_SECTION_SPLIT = re.compile(r"\n(?=##\s)")

LOADED_STATUS = "تم التحميل: {count} قسم معرفي"
FAILED_STATUS = "فشل تحميل قاعدة المعرفة — تأكد من وجود الملف."
NOT_LOADED_STATUS = "لم يتم تحميل قاعدة المعرفة بعد."


class KnowledgeLoadError(Exception):
    """Raised when the knowledge text cannot be read."""


@dataclass
class KnowledgeBase:
    sections: List[str] = field(default_factory=list)
    source: str = ""
    loaded: bool = False
    error: Optional[str] = None

    @property
    def status_message(self) -> str:
        if self.loaded:
            return LOADED_STATUS.format(count=len(self.sections))
        if self.error:
            return FAILED_STATUS
        return NOT_LOADED_STATUS


# Replaced wholesale on every (re)load
_knowledge = KnowledgeBase()


def split_sections(raw: str) -> List[str]:
    """Split raw knowledge text into trimmed, non-empty sections."""
    return [s.strip() for s in _SECTION_SPLIT.split(raw) if s.strip()]


async def _read_source(source: str) -> str:
    if source.startswith(("http://", "https://")):
        try:
            async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as client:
                response = await client.get(source, headers={"Cache-Control": "no-store"})
        except httpx.HTTPError as e:
            raise KnowledgeLoadError(str(e)) from e
        if not response.is_success:
            raise KnowledgeLoadError(f"HTTP {response.status_code}")
        return response.text

    path = Path(source)
    try:
        return await asyncio.to_thread(path.read_text, encoding="utf-8")
    except OSError as e:
        raise KnowledgeLoadError(f"{path}: {e.strerror or e}") from e


async def load_knowledge(source: Optional[str] = None) -> KnowledgeBase:
    """
    Load the knowledge text from a file path or URL and install it as the
    current knowledge base.

    On failure the current knowledge base is replaced by an empty one that
    records the error, and KnowledgeLoadError is re-raised for the caller.
    """
    global _knowledge

    source = source or settings.KNOWLEDGE_PATH

    try:
        raw = await _read_source(source)
    except KnowledgeLoadError as e:
        logger.error(f"Knowledge load failed from '{source}': {e}")
        _knowledge = KnowledgeBase(source=source, error=str(e))
        raise

    _knowledge = KnowledgeBase(sections=split_sections(raw), source=source, loaded=True)
    logger.info(f"Loaded knowledge base from '{source}': {len(_knowledge.sections)} sections")
    return _knowledge


def get_knowledge() -> KnowledgeBase:
    return _knowledge


def get_sections() -> List[str]:
    return _knowledge.sections


def reset_knowledge():
    global _knowledge
    _knowledge = KnowledgeBase()
