"""Severity normalisation for advisory records.

The CVSS vector handling below is a coarse heuristic: it looks for a handful
of confidentiality/integrity/availability impact markers and maps them to a
representative score. It is not a CVSS calculator and its scores will not
match one. If exact base scores are ever needed, replace this module rather
than extending the marker table.
"""

import re
from typing import Iterable, Optional

NUMERIC_SCORE = re.compile(r"^(\d+\.?\d*)$")
CVSS_VECTOR_PREFIX = "CVSS:"

# First matching marker wins, so order matters
VECTOR_MARKERS = (
    ("/C:H/I:H/A:H", 9.8),
    ("/C:H/I:H", 8.5),
    ("/C:H", 7.5),
    ("/C:L", 4.0),
)
VECTOR_DEFAULT_SCORE = 5.0

CRITICAL = "CRITICAL"
HIGH = "HIGH"
MEDIUM = "MEDIUM"
LOW = "LOW"
NONE = "NONE"
UNKNOWN = "UNKNOWN"

# Most severe first
SEVERITY_ORDER = (CRITICAL, HIGH, MEDIUM, LOW, NONE, UNKNOWN)


def score_from_raw(raw: str) -> Optional[float]:
    """Convert a raw severity value to a numeric score.

    Args:
        raw: A bare decimal score (``"9.8"``) or a CVSS vector string

    Returns:
        Score, or None if the value is in neither form
    """
    if not isinstance(raw, str):
        return None

    raw = raw.strip()
    match = NUMERIC_SCORE.match(raw)
    if match:
        return float(match.group(1))

    if raw.startswith(CVSS_VECTOR_PREFIX):
        for marker, score in VECTOR_MARKERS:
            if marker in raw:
                return score
        return VECTOR_DEFAULT_SCORE

    return None


def label_from_score(score: Optional[float]) -> Optional[str]:
    if score is None:
        return None
    if score >= 9.0:
        return CRITICAL
    if score >= 7.0:
        return HIGH
    if score >= 4.0:
        return MEDIUM
    if score > 0:
        return LOW
    return NONE


def highest_score(raw_values: Iterable[str]) -> Optional[float]:
    """Return the highest resolvable score among raw severity values."""
    best: Optional[float] = None
    for raw in raw_values:
        score = score_from_raw(raw)
        if score is not None and (best is None or score > best):
            best = score
    return best


def highest_label(labels: Iterable[Optional[str]]) -> str:
    """Return the most severe label present, or UNKNOWN.

    Labels are compared case-insensitively; unrecognised labels are ignored.
    """
    present = {label.upper() for label in labels if isinstance(label, str)}
    for level in SEVERITY_ORDER[:-1]:
        if level in present:
            return level
    return UNKNOWN
