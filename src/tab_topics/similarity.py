"""
Text and vector similarity helpers.

Pure functions shared by the matching, clustering and consolidation stages.
None of them raise on degenerate input; they return a defined neutral value
instead (0.0 similarity, empty vector, ``None`` for an unnormalizable vector).
"""

from numbers import Number
from typing import Optional, Sequence

import numpy as np


def edit_distance(a: str, b: str) -> int:
    """
    Levenshtein distance between two strings, ignoring case.

    Insertions, deletions and substitutions all cost 1.

    Args:
        a: First string
        b: Second string

    Returns:
        Minimum number of single-character edits turning ``a`` into ``b``
    """
    a = (a or "").lower()
    b = (b or "").lower()
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + cost,
            ))
        previous = current
    return previous[-1]


def title_similarity(a: str, b: str) -> float:
    """
    Normalized edit similarity of two titles in [0, 1].

    Returns 0.0 when both titles are empty.
    """
    longest = max(len(a or ""), len(b or ""))
    if longest == 0:
        return 0.0
    return 1.0 - edit_distance(a, b) / longest


def cosine_similarity(vec1: Sequence[float], vec2: Sequence[float]) -> float:
    """
    Calculate cosine similarity between two vectors.

    Args:
        vec1: First embedding vector
        vec2: Second embedding vector

    Returns:
        Cosine similarity (-1 to 1). 0.0 if the dimensions differ or either
        vector is empty or has zero norm.
    """
    if vec1 is None or vec2 is None or len(vec1) != len(vec2) or len(vec1) == 0:
        return 0.0

    a = np.asarray(vec1, dtype=float)
    b = np.asarray(vec2, dtype=float)

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(a, b) / (norm_a * norm_b))


def average_vector(vectors) -> list[float]:
    """
    Elementwise mean of a collection of vectors.

    A single flat vector is returned unchanged, so callers holding either a
    pooled embedding or per-token embeddings can pass them through.
    """
    if vectors is None or len(vectors) == 0:
        return []
    if isinstance(vectors[0], Number):
        return list(vectors)
    return np.mean(np.asarray(vectors, dtype=float), axis=0).tolist()


def l2_normalize(vector: Sequence[float]) -> Optional[list[float]]:
    """Scale a vector to unit length. Returns None for an empty or zero vector."""
    if vector is None or len(vector) == 0:
        return None
    arr = np.asarray(vector, dtype=float)
    norm = np.linalg.norm(arr)
    if norm == 0 or not np.isfinite(norm):
        return None
    return (arr / norm).tolist()


def to_title_case(text: str) -> str:
    """
    Lower-case a string, then capitalize the first letter of each word.

    Words are split on single spaces, so apostrophes and hyphens are left
    alone (``"don't"`` stays ``"Don't"``, unlike ``str.title``).
    """
    if not text:
        return ""
    return " ".join(word[:1].upper() + word[1:] for word in text.lower().split(" "))
