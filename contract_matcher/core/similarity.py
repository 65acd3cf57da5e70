"""String similarity scoring for normalized names."""

from dataclasses import dataclass
from typing import Iterable, Optional
from functools import lru_cache
import Levenshtein

from contract_matcher.core.normalizer import normalize_name

DEFAULT_THRESHOLD = 0.8

@dataclass(frozen=True)
class BestMatch:
    """Best scoring candidate for a target name."""
    candidate: str
    score: float

def levenshtein_distance(s1: str, s2: str) -> int:
    """Unit-cost edit distance between two strings."""
    return Levenshtein.distance(s1, s2)

@lru_cache(maxsize=10000)
def _normalized_similarity(n1: str, n2: str) -> float:
    if not n1 or not n2:
        return 0.0
    if n1 == n2:
        return 1.0
    return 1 - (levenshtein_distance(n1, n2) / max(len(n1), len(n2)))

def similarity(s1: str, s2: str) -> float:
    """
    Calculate similarity between two names.

    Both names are normalized first. The score is one minus the edit
    distance divided by the length of the longer normalized name.

    Args:
        s1: First name
        s2: Second name

    Returns:
        float: Similarity score between 0 and 1
    """
    return _normalized_similarity(normalize_name(s1), normalize_name(s2))

def find_best_match(
    target: str,
    candidates: Iterable[str],
    threshold: float = DEFAULT_THRESHOLD
) -> Optional[BestMatch]:
    """
    Find the candidate most similar to the target.

    A candidate replaces the current best only with a strictly higher
    score, so on ties the first candidate seen wins.

    Args:
        target: Name to match
        candidates: Names to search
        threshold: Minimum similarity a match must reach

    Returns:
        Optional[BestMatch]: Best candidate and its score, or None
    """
    best_match = None
    best_score = 0.0

    for candidate in candidates:
        score = similarity(target, candidate)
        if score > best_score and score >= threshold:
            best_score = score
            best_match = BestMatch(candidate=candidate, score=score)

    return best_match
