"""Use case similarity matching.

Two use cases describe the same opportunity when their titles (or titles plus
descriptions) overlap strongly after normalization. Scores are in [0, 1].

Strategies:
1. Exact match after normalization
2. Token set ratio on titles (rapidfuzz), handles reordering and subsets
3. Token sort ratio on title + description (rapidfuzz)
"""
import re
from dataclasses import dataclass
from typing import Optional

from rapidfuzz import fuzz

from app.models.use_case import UseCaseFields

DEFAULT_MATCH_THRESHOLD = 0.8


def normalize_text(text: str) -> str:
    """Lowercase, drop punctuation and collapse whitespace."""
    if not text:
        return ""
    text = text.lower()
    text = re.sub(r"[^\w\s]", " ", text)
    return " ".join(text.split())


def compute_similarity(a: UseCaseFields, b: UseCaseFields) -> float:
    """Similarity of two use cases in [0, 1]."""
    title_a = normalize_text(a.title)
    title_b = normalize_text(b.title)
    if not title_a or not title_b:
        return 0.0
    if title_a == title_b:
        return 1.0

    title_score = fuzz.token_set_ratio(title_a, title_b) / 100.0

    full_a = normalize_text(f"{a.title} {a.description}")
    full_b = normalize_text(f"{b.title} {b.description}")
    full_score = fuzz.token_sort_ratio(full_a, full_b) / 100.0

    return max(title_score, full_score)


@dataclass
class MatchResult:
    """Best match for a candidate within a corpus."""
    index: Optional[int]
    score: float

    @property
    def is_match(self) -> bool:
        return self.index is not None


class SimilarityMatcher:
    """Finds the best-matching use case above a threshold."""

    def __init__(self, threshold: float = DEFAULT_MATCH_THRESHOLD):
        if not 0.0 < threshold <= 1.0:
            raise ValueError("threshold must be in (0, 1]")
        self.threshold = threshold

    def matches(self, a: UseCaseFields, b: UseCaseFields) -> bool:
        return compute_similarity(a, b) >= self.threshold

    def find_best_match(
        self,
        candidate: UseCaseFields,
        corpus: list[UseCaseFields],
        exclude: Optional[set[int]] = None,
    ) -> MatchResult:
        """Index of the most similar corpus entry at or above the threshold.

        Ties keep the earliest entry so results follow insertion order.
        """
        best_index: Optional[int] = None
        best_score = 0.0
        for i, item in enumerate(corpus):
            if exclude and i in exclude:
                continue
            score = compute_similarity(candidate, item)
            if score >= self.threshold and score > best_score:
                best_index, best_score = i, score
        return MatchResult(index=best_index, score=best_score)
