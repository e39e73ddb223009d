"""Vector similarity math for brute-force ranking."""

from __future__ import annotations

import math
from collections.abc import Sequence


def cosine_similarity(vec_a: Sequence[float] | None, vec_b: Sequence[float] | None) -> float:
    """Return ``dot(a, b) / (|a| * |b|)``, clamped to ``[-1.0, 1.0]``.

    Returns ``0.0`` instead of raising when either vector is missing or
    empty, when the dimensions differ, when either norm is zero, or when
    the inputs contain non-finite values.
    """
    if not vec_a or not vec_b or len(vec_a) != len(vec_b):
        return 0.0

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for a, b in zip(vec_a, vec_b):
        dot += a * b
        norm_a += a * a
        norm_b += b * b

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    score = dot / (math.sqrt(norm_a) * math.sqrt(norm_b))
    if not math.isfinite(score):
        return 0.0
    # Floating-point error can push identical vectors slightly past 1.0.
    return max(-1.0, min(1.0, score))
