# src/allocheck/validator/matcher.py
from __future__ import annotations

from collections.abc import Iterable


def levenshtein(s1: str, s2: str) -> int:
    """
    Calculate Levenshtein edit distance between two strings.

    Insertions, deletions and substitutions all cost 1. Only two rows of
    the DP table are kept.
    """
    if len(s1) < len(s2):
        return levenshtein(s2, s1)

    if len(s2) == 0:
        return len(s1)

    previous_row: list[int] = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current_row: list[int] = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


def best_suggestion(invalid: str, candidates: Iterable[str]) -> str | None:
    """
    @brief
    Pick the candidate most likely meant by a mistyped value.

    @details
    Distance is computed case-insensitively. A candidate is accepted only
    when its distance is strictly below `len(invalid) // 2 + 1`, so short
    values tolerate fewer edits than long ones. On equal distance a
    candidate that extends the invalid value (a truncated ID such as
    "T9" for "T91") is preferred; remaining ties go to the first
    candidate in iteration order.

    @params
        invalid : str
            Value that failed to resolve.
        candidates : Iterable[str]
            Valid values, in a deterministic order.

    @returns
        The closest candidate, or None if nothing is close enough.
    """
    best: str | None = None
    best_rank: tuple[int, bool] | None = None
    threshold = len(invalid) // 2 + 1
    needle = invalid.lower()

    for option in candidates:
        lowered = option.lower()
        distance = levenshtein(needle, lowered)
        if distance >= threshold:
            continue
        rank = (distance, not lowered.startswith(needle))
        if best_rank is None or rank < best_rank:
            best_rank = rank
            best = option
    return best


__all__ = ["levenshtein", "best_suggestion"]
