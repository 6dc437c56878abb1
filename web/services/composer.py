"""
Evaluation report composition.

Turns (teacher, evaluation) pairs into the ordered block list rendered by
:mod:`web.services.docx_report`. Composition is a pure transformation apart
from reading the evidence image's pixel size.
"""
from __future__ import annotations

import logging
from datetime import date as date_type
from typing import List, Optional, Sequence, Tuple

from PIL import Image

from web.services import blocks as b
from web.services.blocks import Align, Block
from web.services.evidence import (
    DEFAULT_MAX_HEIGHT,
    DEFAULT_MAX_WIDTH,
    DecodedImage,
    decode_data_url,
    fit_image,
)
from web.services.records import PERFORMANCE_KEYS, Teacher, TeacherEvaluation
from web.services.rubric import PERFORMANCE_TITLES, level_color, performance_description
from web.services.scoring import summarize

logger = logging.getLogger(__name__)

ReportPair = Tuple[Teacher, TeacherEvaluation]

REPORT_TITLE_LINES = (
    # (text, size, color, space_after)
    ("CEPRUNSA - CENTRO DE ESTUDIOS PREUNIVERSITARIOS", 14, None, 10),
    ("UNIVERSIDAD NACIONAL DE SAN AGUSTÍN DE AREQUIPA", 12, None, 20),
    ("FICHA DE EVALUACIÓN DOCENTE", 16, b.BRAND_BLUE, 30),
)

# (label, evaluation attribute, text used when the field is empty)
COMMENTARY_SECTIONS = (
    ("Observaciones Generales:", "observations", "No se registraron observaciones."),
    ("Fortalezas Identificadas:", "strengths", "No se registraron fortalezas."),
    ("Áreas de Mejora:", "improvement_areas", "No se registraron áreas de mejora."),
    ("Compromisos:", "commitments", "No se registraron compromisos."),
)

COMMENTARY_HEADING = "OBSERVACIONES Y COMENTARIOS"
EVIDENCE_HEADING = "EVIDENCIA FOTOGRÁFICA"
NO_EVIDENCE_TEXT = "No se adjuntó imagen de evidencia para esta evaluación"
EVIDENCE_ERROR_TEXT = "Error al cargar la imagen de evidencia"

SPANISH_MONTHS = (
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
)


def format_date(value: Optional[str]) -> str:
    """Format an ISO date as ``15 de marzo de 2024``."""
    if not value:
        return ""
    try:
        parsed = date_type.fromisoformat(value[:10])
    except ValueError:
        return value
    return f"{parsed.day} de {SPANISH_MONTHS[parsed.month - 1]} de {parsed.year}"


def format_date_time(value: Optional[str], time: Optional[str] = None) -> str:
    formatted = format_date(value)
    if time:
        return f"{formatted} a las {time}"
    return formatted


class EvaluationComposer:
    """
    Builds report block lists.

    Single reports contain the full evaluation: identity table, the six
    performance ratings with their rubric descriptions, the average row,
    commentary and photographic evidence. Batch reports contain one condensed
    section per evaluation separated by page breaks.
    """

    def __init__(
        self,
        max_image_width: float = DEFAULT_MAX_WIDTH,
        max_image_height: float = DEFAULT_MAX_HEIGHT,
    ):
        self.max_image_width = max_image_width
        self.max_image_height = max_image_height

    def compose(self, teacher: Teacher, evaluation: TeacherEvaluation) -> List[Block]:
        """
        Compose the blocks of a single evaluation report.

        Raises:
            DecodeError: If the evidence payload is not valid base64. This is
                checked before any block is built.
        """
        evidence = decode_data_url(evaluation.evidence_image_base64)

        content: List[Block] = []
        content.extend(self._title_blocks())
        content.append(self._info_table(teacher, evaluation))
        content.append(b.text("", space_after=20, role="spacer"))
        content.append(self._performance_table(evaluation))
        content.extend(self._commentary_blocks(evaluation))
        content.extend(self._evidence_blocks(evidence))
        return content

    def compose_batch(self, pairs: Sequence[ReportPair]) -> List[Block]:
        """Compose one condensed section per pair, in the given order."""
        content: List[Block] = []
        last_index = len(pairs) - 1
        for index, (teacher, evaluation) in enumerate(pairs):
            content.append(b.text(
                f"EVALUACIÓN {index + 1} - {teacher.full_name}",
                size=12,
                bold=True,
                color=b.BRAND_BLUE,
                align=Align.CENTER,
                space_before=30 if index > 0 else 0,
                space_after=20,
                role="heading",
            ))
            content.append(self._batch_table(teacher, evaluation))
            if index < last_index:
                content.append(b.PageBreak())
        return content

    def _title_blocks(self) -> List[Block]:
        return [
            b.text(line, size=size, bold=True, color=color, align=Align.CENTER,
                   space_after=space_after, role="title")
            for line, size, color, space_after in REPORT_TITLE_LINES
        ]

    def _info_table(self, teacher: Teacher, evaluation: TeacherEvaluation) -> b.KeyValueTable:
        rows = (
            ("Docente:", teacher.full_name),
            ("DNI:", teacher.dni),
            ("Curso:", teacher.curso.upper()),
            ("Evaluador:", evaluation.evaluator_name),
            ("Fecha:", format_date_time(evaluation.date, evaluation.time)),
        )
        return b.KeyValueTable(
            rows=tuple((b.KeyValueCell(label, value),) for label, value in rows),
            label_width=0.25,
        )

    def _performance_table(self, evaluation: TeacherEvaluation) -> b.PerformanceTable:
        rows = []
        for key in PERFORMANCE_KEYS:
            level = getattr(evaluation, key)
            rows.append(b.PerformanceRow(
                title=PERFORMANCE_TITLES[key],
                level=level,
                color=level_color(level),
                description=performance_description(key, level),
            ))
        return b.PerformanceTable(rows=tuple(rows), summary=summarize(evaluation))

    def _commentary_blocks(self, evaluation: TeacherEvaluation) -> List[Block]:
        content: List[Block] = [
            b.text(COMMENTARY_HEADING, size=14, bold=True, color=b.BRAND_BLUE,
                   align=Align.CENTER, space_before=20, space_after=10, role="heading"),
        ]
        last_index = len(COMMENTARY_SECTIONS) - 1
        for index, (label, attribute, fallback) in enumerate(COMMENTARY_SECTIONS):
            content.append(b.text(label, size=12, bold=True,
                                  space_before=10 if index == 0 else 0,
                                  space_after=5, role="label"))
            value = getattr(evaluation, attribute) or fallback
            content.append(b.text(value, size=11,
                                  space_after=20 if index == last_index else 10))
        return content

    def _evidence_blocks(self, evidence: Optional[DecodedImage]) -> List[Block]:
        content: List[Block] = [
            b.text(EVIDENCE_HEADING, size=14, bold=True, color=b.BRAND_BLUE,
                   align=Align.CENTER, space_before=20, space_after=10, role="heading"),
        ]
        if evidence is None:
            content.append(b.text(NO_EVIDENCE_TEXT, size=11, italic=True, color=b.MUTED_GRAY,
                                  align=Align.CENTER, space_after=20, role="notice"))
            return content

        # A broken photo must not lose the rest of the report
        try:
            fitted = fit_image(evidence, self.max_image_width, self.max_image_height)
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            logger.warning(f"Could not process evidence image: {exc}")
            content.append(b.text(EVIDENCE_ERROR_TEXT, size=11, color=b.ERROR_RED,
                                  align=Align.CENTER, space_after=20, role="error"))
            return content

        content.append(b.ImageBlock(data=fitted.data, width=fitted.width, height=fitted.height))
        content.append(b.text(fitted.caption, size=10, italic=True, align=Align.CENTER,
                              space_after=20, role="caption"))
        return content

    def _batch_table(self, teacher: Teacher, evaluation: TeacherEvaluation) -> b.KeyValueTable:
        summary = summarize(evaluation)
        return b.KeyValueTable(
            rows=(
                (b.KeyValueCell("Curso:", teacher.curso.upper()),
                 b.KeyValueCell("Evaluador:", evaluation.evaluator_name)),
                (b.KeyValueCell("Fecha:", format_date(evaluation.date)),
                 b.KeyValueCell("Promedio:", f"{summary.formatted_average} - {summary.label}",
                                bold_value=True)),
            ),
            label_width=0.2,
            role="summary",
        )
