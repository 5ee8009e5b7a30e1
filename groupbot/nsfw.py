"""Verdicts on image classifier scores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

THRESHOLD = 0.3
NEUTRAL_VERDICT = "普通哦"


@dataclass(frozen=True)
class Scores:
    """Class probabilities of one picture."""

    drawings: float = 0.0
    hentai: float = 0.0
    neutral: float = 0.0
    porn: float = 0.0
    sexy: float = 0.0


def _tags(scores: Scores) -> list[str]:
    tags = []
    if scores.hentai > THRESHOLD:
        tags.append(" hentai")
    if scores.porn > THRESHOLD:
        tags.append(" porn")
    if scores.sexy > THRESHOLD:
        tags.append(" hso")
    return tags


def judge(scores: Scores) -> str:
    """Describe a picture on request."""
    if scores.neutral > THRESHOLD:
        return NEUTRAL_VERDICT
    if scores.drawings > THRESHOLD or scores.neutral < THRESHOLD:
        kind = "二次元"
    else:
        kind = "三次元"
    return kind + "".join(_tags(scores))


def auto_judge(scores: Scores) -> Optional[str]:
    """Describe a picture worth remarking on unprompted, or return None."""
    if scores.neutral > THRESHOLD:
        return None
    tags = _tags(scores)
    if not tags:
        return None
    kind = "二次元" if scores.drawings > THRESHOLD else "三次元"
    return kind + "".join(tags)