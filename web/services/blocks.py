"""
Structural blocks of an evaluation report.

The composer produces an ordered list of these blocks; the docx renderer walks
the list and writes each one with python-docx. Keeping the two steps apart lets
the layout be inspected and tested without opening a Word file.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from web.services.scoring import ScoreSummary


class Align(str, Enum):
    LEFT = "left"
    CENTER = "center"


BRAND_BLUE = "1565C0"
DARK_BLUE = "0D47A1"
LABEL_FILL = "E3F2FD"
MUTED_GRAY = "666666"
ERROR_RED = "FF0000"


@dataclass(frozen=True)
class TextRun:
    text: str
    size: Optional[float] = None  # points
    bold: bool = False
    italic: bool = False
    color: Optional[str] = None


@dataclass(frozen=True)
class Paragraph:
    """A paragraph made of one or more runs."""
    runs: Tuple[TextRun, ...]
    align: Align = Align.LEFT
    space_before: float = 0  # points
    space_after: float = 0
    role: str = "body"

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)


@dataclass(frozen=True)
class KeyValueCell:
    label: str
    value: str
    bold_value: bool = False


@dataclass(frozen=True)
class KeyValueTable:
    """Label/value table; each row holds one or more label/value pairs."""
    rows: Tuple[Tuple[KeyValueCell, ...], ...]
    label_width: float = 0.25  # fraction of the text width per label column
    role: str = "info"

    @property
    def column_count(self) -> int:
        return 2 * max((len(row) for row in self.rows), default=0)


@dataclass(frozen=True)
class PerformanceRow:
    title: str
    level: str
    color: str
    description: str


@dataclass(frozen=True)
class PerformanceTable:
    """Header row, one row per performance slot and the average row last."""
    rows: Tuple[PerformanceRow, ...]
    summary: ScoreSummary
    headers: Tuple[str, str, str] = ("DESEMPEÑO", "NIVEL", "DESCRIPCIÓN")
    column_widths: Tuple[float, float, float] = (0.50, 0.15, 0.35)
    summary_title: str = "PROMEDIO GENERAL"
    summary_fill: str = DARK_BLUE


@dataclass(frozen=True)
class ImageBlock:
    data: bytes = field(repr=False)
    width: int
    height: int
    space_after: float = 10


@dataclass(frozen=True)
class PageBreak:
    pass


Block = Union[Paragraph, KeyValueTable, PerformanceTable, ImageBlock, PageBreak]


def text(
    value: str,
    *,
    size: Optional[float] = None,
    bold: bool = False,
    italic: bool = False,
    color: Optional[str] = None,
    align: Align = Align.LEFT,
    space_before: float = 0,
    space_after: float = 0,
    role: str = "body",
) -> Paragraph:
    """Shortcut for a single-run paragraph."""
    return Paragraph(
        runs=(TextRun(value, size=size, bold=bold, italic=italic, color=color),),
        align=align,
        space_before=space_before,
        space_after=space_after,
        role=role,
    )
