"""
Prioritization scores.

Pure functions, no I/O. Idea-level helpers take the 1-5 idea scores, return
None when an input is missing and round to one decimal.
"""

from __future__ import annotations

DEFAULT_TIME_CRITICALITY = 3
SCORE_SCALE_MAX = 5


def rice(reach: float, impact: float, confidence: float, effort: float) -> float:
    """(reach * impact * confidence) / effort, 0 when effort is 0."""
    if effort == 0:
        return 0.0
    return reach * impact * confidence / effort


def ice(impact: float, confidence: float, ease: float) -> float:
    return impact * confidence * ease


def wsjf(business_value: float, job_size: float) -> float:
    """Weighted shortest job first: cost of delay over job size, 0 for empty jobs."""
    if job_size == 0:
        return 0.0
    return business_value / job_size


# ---------------------------------------------------------------------------
# Idea scores
# ---------------------------------------------------------------------------

def idea_rice(
    reach: int | None, impact: int | None, confidence: int | None, effort: int | None
) -> float | None:
    if None in (reach, impact, confidence, effort):
        return None
    return round(rice(reach, impact, confidence, effort), 1)


def idea_ice(impact: int | None, confidence: int | None, effort: int | None) -> float | None:
    # ease is the inverse of effort on the same 1-5 scale
    if None in (impact, confidence, effort):
        return None
    return round(ice(impact, confidence, SCORE_SCALE_MAX + 1 - effort), 1)


def idea_wsjf(
    impact: int | None,
    effort: int | None,
    time_criticality: int = DEFAULT_TIME_CRITICALITY,
) -> float | None:
    if impact is None or effort is None:
        return None
    return round(wsjf(impact + time_criticality, effort), 1)
