"""
Keyword retrieval over the knowledge sections.

Each section is scored by how many query tokens occur in it as substrings.
There is no stemming and no term weighting; ties keep corpus order.
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from loguru import logger

from lecturer.services.knowledge_service import get_sections

# Keep Arabic letters, word characters and whitespace; everything else splits tokens
_NON_TOKEN = re.compile(r"[^\u0600-\u06FF\w\s]")


@dataclass
class ScoredSection:
    index: int
    text: str
    score: int


def tokenize(query: str) -> List[str]:
    normalized = _NON_TOKEN.sub(" ", query.lower())
    return normalized.split()


def score_sections(query: str, sections: List[str]) -> List[ScoredSection]:
    """Score every section and return them best first (stable on ties)."""
    tokens = tokenize(query)
    scored = []
    for idx, sec in enumerate(sections):
        low = sec.lower()
        score = sum(1 for t in tokens if t in low)
        scored.append(ScoredSection(index=idx, text=sec, score=score))
    return sorted(scored, key=lambda s: s.score, reverse=True)


def rank_sections(
    query: str, sections: Optional[List[str]] = None, top_k: int = 3
) -> List[ScoredSection]:
    """Top-k sections with a non-zero score."""
    if sections is None:
        sections = get_sections()
    if not sections:
        return []
    ranked = [s for s in score_sections(query, sections)[:top_k] if s.score > 0]
    logger.debug(f"Retrieved {len(ranked)} section(s) for '{query[:50]}'")
    return ranked


def retrieve(query: str, sections: Optional[List[str]] = None, top_k: int = 3) -> List[str]:
    return [s.text for s in rank_sections(query, sections, top_k)]
