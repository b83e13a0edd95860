"""Verdicts on image classification scores."""

from __future__ import annotations

from dataclasses import dataclass

THRESHOLD = 0.3
HSO_IMAGE = "https://gchat.qpic.cn/gchatpic_new//--4234EDEC5F147A4C319A41149D7E0EA9/0"


@dataclass(frozen=True)
class Scores:
    """Class probabilities of a picture."""

    drawings: float = 0.0
    hentai: float = 0.0
    neutral: float = 0.0
    porn: float = 0.0
    sexy: float = 0.0


def _labels(scores: Scores) -> list[str]:
    return [
        label
        for label, value in (("hentai", scores.hentai), ("porn", scores.porn), ("hso", scores.sexy))
        if value > THRESHOLD
    ]


def judge(scores: Scores) -> str:
    """Verdict for an explicitly requested rating."""
    if scores.neutral > THRESHOLD:
        return "普通哦"
    kind = "二次元" if scores.drawings > THRESHOLD or scores.neutral < THRESHOLD else "三次元"
    return kind + "".join(f" {label}" for label in _labels(scores))


def auto_judge(scores: Scores) -> str | None:
    """Verdict for automatic rating, or None when there is nothing to say."""
    if scores.neutral > THRESHOLD:
        return None
    labels = _labels(scores)
    if not labels:
        return None
    kind = "二次元" if scores.drawings > THRESHOLD else "三次元"
    return kind + "".join(f" {label}" for label in labels)