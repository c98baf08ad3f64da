from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence

from .models import FaqEntry, KnowledgeDocument

ELLIPSIS = "…"


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def select_faq(
    query: str,
    faqs: Sequence[FaqEntry],
    max_count: int = 5,
    max_answer_chars: int = 400,
) -> List[FaqEntry]:
    """
    Picks up to max_count FAQ entries for a query.

    Matching is a plain case-insensitive substring test on question or answer,
    in source order. If nothing matches (or the query is empty) the whole set is
    the candidate list, so a non-empty FAQ always yields entries.
    Answers longer than max_answer_chars are cut and get a single ellipsis.
    """
    q = (query or "").lower()
    candidates: Sequence[FaqEntry] = faqs
    if q.strip():
        hits = [f for f in faqs if q in f.question.lower() or q in f.answer.lower()]
        if hits:
            candidates = hits

    return [
        f.model_copy(update={"answer": truncate(f.answer, max_answer_chars)})
        for f in candidates[:max_count]
    ]


def build_compact_context(
    doc: Optional[KnowledgeDocument],
    query: str,
    max_count: int = 5,
    max_answer_chars: int = 400,
) -> Optional[Dict[str, Any]]:
    """
    Request-scoped {brand, selected_faq} blob, or None when there is nothing to say.
    """
    if doc is None or not doc.faq:
        return None
    selected = select_faq(query, doc.faq, max_count=max_count, max_answer_chars=max_answer_chars)
    if not selected:
        return None
    brand = doc.brand.model_dump(exclude_none=True) if doc.brand else None
    return {
        "brand": brand,
        "selected_faq": [f.to_wire() for f in selected],
    }
