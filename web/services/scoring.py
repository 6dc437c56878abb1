"""Score aggregation for teacher evaluations.

The summary is never persisted. Every place that shows an average (API
responses, single reports, batch reports) goes through :func:`summarize` so
the numbers always agree.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence, Tuple

from web.services.records import PERFORMANCE_KEYS, TeacherEvaluation

LEVEL_VALUES: Mapping[str, int] = MappingProxyType({"I": 1, "II": 2, "III": 3, "IV": 4})

PERFORMANCE_COUNT = len(PERFORMANCE_KEYS)

# (lower bound, level, band), checked top to bottom
BAND_THRESHOLDS: Tuple[Tuple[float, str, str], ...] = (
    (3.5, "IV", "Destacado"),
    (2.5, "III", "Satisfactorio"),
    (1.5, "II", "En proceso"),
)
LOWEST_BAND = ("I", "Inicio")


@dataclass(frozen=True)
class ScoreSummary:
    """Average rating and the band it falls in."""
    average: float
    level: str
    band: str

    @property
    def label(self) -> str:
        return f"{self.level} - {self.band}"

    @property
    def formatted_average(self) -> str:
        return f"{self.average:.2f}"

    def to_dict(self):
        return {
            "average": self.average,
            "level": self.level,
            "band": self.band,
            "label": self.label,
        }


def level_value(level: str) -> int:
    """Ordinal value of a rating; unrecognized ratings count as 0."""
    return LEVEL_VALUES.get(level, 0)


def calculate_average(levels: Sequence[str]) -> float:
    """Mean of the six rating values.

    Invalid entries are not excluded: they contribute 0 and still count
    towards the denominator.
    """
    if len(levels) != PERFORMANCE_COUNT:
        raise ValueError(f"Expected {PERFORMANCE_COUNT} ratings, got {len(levels)}")
    return sum(level_value(level) for level in levels) / PERFORMANCE_COUNT


def band_for_average(average: float) -> Tuple[str, str]:
    """Return ``(level, band)`` for an average; boundaries go to the higher band."""
    for lower_bound, level, band in BAND_THRESHOLDS:
        if average >= lower_bound:
            return level, band
    return LOWEST_BAND


def summarize_levels(levels: Sequence[str]) -> ScoreSummary:
    average = calculate_average(levels)
    level, band = band_for_average(average)
    return ScoreSummary(average=average, level=level, band=band)


def summarize(evaluation: TeacherEvaluation) -> ScoreSummary:
    """Compute the derived summary of an evaluation."""
    return summarize_levels(evaluation.performance_levels())
