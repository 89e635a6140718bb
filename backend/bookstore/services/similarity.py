from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence


@dataclass(frozen=True)
class Candidate:
    book_id: int
    vector: Optional[Sequence[float]]
    title: Optional[str] = None


@dataclass(frozen=True)
class ScoredBook:
    book_id: int
    score: float
    title: Optional[str] = None

    def to_dict(self) -> dict:
        return {"book_id": self.book_id, "score": self.score, "title": self.title}


def cosine_similarity(a: Optional[Sequence[float]], b: Optional[Sequence[float]]) -> float:
    """
    Cosine similarity of two dense vectors.

    Degenerate pairs (missing vector, length mismatch, zero norm) score 0.0
    instead of raising, so one bad row can't sink a whole ranking.
    """
    if a is None or b is None or len(a) != len(b) or len(a) == 0:
        return 0.0
    dot = na = nb = 0.0
    for va, vb in zip(a, b):
        va, vb = float(va), float(vb)
        dot += va * vb
        na += va * va
        nb += vb * vb
    if na == 0 or nb == 0:
        return 0.0
    return dot / (math.sqrt(na) * math.sqrt(nb))


def rank(query: Sequence[float], candidates: Iterable[Candidate], limit: int) -> List[ScoredBook]:
    """
    Score every candidate against ``query`` and return the top ``limit``,
    highest first. Ties keep candidate order (sorted() is stable).
    """
    if limit <= 0:
        return []
    scored = [ScoredBook(c.book_id, cosine_similarity(query, c.vector), c.title) for c in candidates]
    scored.sort(key=lambda s: s.score, reverse=True)
    return scored[:limit]
