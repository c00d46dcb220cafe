"""Vector arithmetic used for ranking embeddings."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

Vector = Sequence[float]


@dataclass(frozen=True)
class ScoredItem:
    """Position of a vector in a list together with its similarity score."""

    index: int
    score: float


def cosine_similarity(a: Vector, b: Vector) -> float:
    """Cosine of the angle between two vectors, or 0.0 when it is undefined."""
    if len(a) != len(b) or not a:
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = sum(x * x for x in a)
    norm_b = sum(y * y for y in b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


def dot_product(a: Vector, b: Vector) -> float:
    """Dot product of two vectors; 0.0 when their lengths differ."""
    if len(a) != len(b):
        return 0.0
    return float(sum(x * y for x, y in zip(a, b)))


def magnitude(v: Vector) -> float:
    """Euclidean (L2) norm of a vector."""
    return math.sqrt(sum(x * x for x in v))


def normalize(v: Vector) -> list[float]:
    """Unit vector in the direction of ``v``; a zero vector is returned as is."""
    mag = magnitude(v)
    if mag == 0:
        return list(v)
    return [x / mag for x in v]


def euclidean_distance(a: Vector, b: Vector) -> float:
    """Euclidean distance between two points; 0.0 when their lengths differ."""
    if len(a) != len(b):
        return 0.0
    return math.sqrt(sum((x - y) ** 2 for x, y in zip(a, b)))


def top_k_by_cosine_similarity(
    query: Vector, vectors: Sequence[Vector], k: int
) -> list[ScoredItem]:
    """The ``k`` vectors most similar to ``query``, highest score first."""
    if k <= 0 or not vectors:
        return []
    scored = [
        ScoredItem(index=i, score=cosine_similarity(query, v))
        for i, v in enumerate(vectors)
    ]
    scored.sort(key=lambda item: item.score, reverse=True)
    return scored[:k]