"""
DocX Evaluation Report Generation Service.

Word document generator for teacher evaluations, built directly on python-docx.
Supports two flows: a full single-evaluation report and a condensed batch report
with one page per evaluation.
"""
from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_BREAK
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Emu, Inches, Pt, RGBColor

from web.config import Settings, get_settings
from web.exceptions import DecodeError, DocumentGenerationError, RenderError
from web.services import blocks as b
from web.services.blocks import Block
from web.services.composer import EvaluationComposer, ReportPair
from web.services.records import Teacher, TeacherEvaluation

logger = logging.getLogger(__name__)

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# python-docx works in EMU; image sizes are given in CSS pixels (96 dpi)
EMU_PER_PIXEL = 9525

RULE_LINE = "_" * 79

ALIGNMENTS = {
    b.Align.LEFT: WD_ALIGN_PARAGRAPH.LEFT,
    b.Align.CENTER: WD_ALIGN_PARAGRAPH.CENTER,
}

_WHITESPACE_RE = re.compile(r"\s+")
_UNSAFE_FILENAME_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


class FlowType(str, Enum):
    """Enum for report generation flow types."""
    SINGLE = "single"
    BATCH = "batch"


@dataclass(frozen=True)
class PageLayout:
    """Page margins in inches."""
    top: float
    bottom: float
    left: float
    right: float


LAYOUTS: Dict[FlowType, PageLayout] = {
    FlowType.SINGLE: PageLayout(top=1, bottom=1, left=1, right=1),
    FlowType.BATCH: PageLayout(top=1.5, bottom=1.2, left=1, right=1),
}


@dataclass(frozen=True)
class GeneratedDocument:
    """A serialized report ready to be delivered."""
    filename: str
    content: bytes
    media_type: str = DOCX_MEDIA_TYPE


def sanitize_filename_component(value: str) -> str:
    """Replace whitespace runs and filesystem-hostile characters with underscores."""
    return _UNSAFE_FILENAME_RE.sub("_", _WHITESPACE_RE.sub("_", value.strip()))


def report_filename(teacher: Teacher, evaluation: TeacherEvaluation) -> str:
    """``Evaluacion_<apellidos>_<nombres>_<YYYYMMDD>.docx``"""
    apellidos = sanitize_filename_component(teacher.apellidos)
    nombres = sanitize_filename_component(teacher.nombres)
    evaluation_date = sanitize_filename_component(evaluation.date.replace("-", ""))
    return f"Evaluacion_{apellidos}_{nombres}_{evaluation_date}.docx"


def batch_filename(generated_on: Optional[date] = None) -> str:
    """``Reporte_Evaluaciones_<YYYYMMDD>.docx`` for the generation date."""
    generated_on = generated_on or date.today()
    return f"Reporte_Evaluaciones_{generated_on.strftime('%Y%m%d')}.docx"


class EvaluationDocumentGenerator:
    """
    Word document report generator.

    Composition is delegated to :class:`EvaluationComposer`; this class owns the
    page geometry, the running header and footer, and serialization.

    Every page carries a centered two-line header (product label and subtitle,
    then a rule) and a footer with a rule, the organization name and live
    ``Página X de Y`` numbering.

    Failures are reported as :class:`DocumentGenerationError` subclasses whose
    message starts with ``"No se pudo generar el documento: "``. The one
    tolerated failure is an unreadable evidence photo, which the composer
    replaces with an inline notice.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        composer: Optional[EvaluationComposer] = None,
    ):
        self.settings = settings or get_settings()
        self.composer = composer or EvaluationComposer(
            max_image_width=self.settings.EVIDENCE_MAX_WIDTH,
            max_image_height=self.settings.EVIDENCE_MAX_HEIGHT,
        )
        self._renderers: Dict[type, Callable] = {
            b.Paragraph: self._render_paragraph,
            b.KeyValueTable: self._render_key_value_table,
            b.PerformanceTable: self._render_performance_table,
            b.ImageBlock: self._render_image,
            b.PageBreak: self._render_page_break,
        }

    def generate_report(self, teacher: Teacher, evaluation: TeacherEvaluation) -> io.BytesIO:
        """
        Generate the full report of one evaluation.

        Returns:
            BytesIO buffer containing the generated .docx file

        Raises:
            DecodeError: If the evidence payload is malformed
            RenderError: If the document cannot be serialized
            DocumentGenerationError: For any other composition failure
        """
        logger.info(f"Generating evaluation report for {teacher.full_name} ({evaluation.date})")
        try:
            content = self.composer.compose(teacher, evaluation)
        except DecodeError:
            logger.error(f"Evidence image of evaluation {evaluation.id} could not be decoded")
            raise
        except Exception as exc:
            logger.exception("Evaluation report composition failed")
            raise DocumentGenerationError.wrap(exc) from exc

        return self.render(content, FlowType.SINGLE)

    def generate_report_bytes(self, teacher: Teacher, evaluation: TeacherEvaluation) -> bytes:
        """Convenience wrapper around generate_report()."""
        return self.generate_report(teacher, evaluation).getvalue()

    def generate_batch_report(self, pairs: Sequence[ReportPair]) -> io.BytesIO:
        """
        Generate one document summarizing several evaluations.

        Args:
            pairs: (teacher, evaluation) pairs, rendered in the given order

        Returns:
            BytesIO buffer containing the generated .docx file
        """
        if not pairs:
            raise DocumentGenerationError("no hay evaluaciones para exportar")

        logger.info(f"Generating batch report for {len(pairs)} evaluations")
        try:
            content = self.composer.compose_batch(pairs)
        except Exception as exc:
            logger.exception("Batch report composition failed")
            raise DocumentGenerationError.wrap(exc) from exc

        return self.render(content, FlowType.BATCH)

    def export_report(self, teacher: Teacher, evaluation: TeacherEvaluation) -> GeneratedDocument:
        """Generate a single report together with its download filename."""
        content = self.generate_report_bytes(teacher, evaluation)
        return GeneratedDocument(filename=report_filename(teacher, evaluation), content=content)

    def export_batch_report(
        self,
        pairs: Sequence[ReportPair],
        generated_on: Optional[date] = None,
    ) -> GeneratedDocument:
        """Generate a batch report together with its download filename."""
        content = self.generate_batch_report(pairs).getvalue()
        return GeneratedDocument(filename=batch_filename(generated_on), content=content)

    def render(self, content: List[Block], flow: FlowType) -> io.BytesIO:
        """Serialize composed blocks into a .docx buffer."""
        try:
            document = self.build_document(content, flow)
            output_buffer = io.BytesIO()
            document.save(output_buffer)
        except Exception as exc:
            logger.exception(f"Rendering of {flow.value} report failed")
            raise RenderError.wrap(exc, operation="document rendering") from exc

        output_buffer.seek(0)
        logger.info(f"Rendered {flow.value} report ({len(content)} blocks)")
        return output_buffer

    def build_document(self, content: List[Block], flow: FlowType):
        """Create the python-docx Document for ``content``."""
        document = Document()
        section = document.sections[0]
        self._apply_layout(section, LAYOUTS[flow])
        self._write_header(section)
        self._write_footer(section)

        text_width = section.page_width - section.left_margin - section.right_margin
        for block in content:
            renderer = self._renderers.get(type(block))
            if renderer is None:
                raise TypeError(f"Unsupported report block: {type(block).__name__}")
            renderer(document, block, text_width)
        return document

    # -- page decoration -------------------------------------------------

    def _apply_layout(self, section, layout: PageLayout) -> None:
        section.top_margin = Inches(layout.top)
        section.bottom_margin = Inches(layout.bottom)
        section.left_margin = Inches(layout.left)
        section.right_margin = Inches(layout.right)

    def _write_header(self, section) -> None:
        header = section.header
        header.is_linked_to_previous = False

        title = header.paragraphs[0]
        title.alignment = WD_ALIGN_PARAGRAPH.CENTER
        title.paragraph_format.space_after = Pt(5)
        self._add_run(title, b.TextRun(self.settings.PRODUCT_LABEL, size=10, bold=True, color=b.BRAND_BLUE))
        self._add_run(title, b.TextRun(" | ", size=10, color=b.MUTED_GRAY))
        self._add_run(title, b.TextRun(self.settings.PRODUCT_SUBTITLE, size=9, color=b.MUTED_GRAY))

        rule = header.add_paragraph()
        rule.alignment = WD_ALIGN_PARAGRAPH.CENTER
        self._add_run(rule, b.TextRun(RULE_LINE, size=8, color=b.BRAND_BLUE))

    def _write_footer(self, section) -> None:
        footer = section.footer
        footer.is_linked_to_previous = False

        rule = footer.paragraphs[0]
        rule.alignment = WD_ALIGN_PARAGRAPH.CENTER
        rule.paragraph_format.space_before = Pt(5)
        self._add_run(rule, b.TextRun(RULE_LINE, size=8, color=b.BRAND_BLUE))

        style = b.TextRun("", size=8, color=b.MUTED_GRAY)
        page_line = footer.add_paragraph()
        page_line.alignment = WD_ALIGN_PARAGRAPH.CENTER
        page_line.paragraph_format.space_after = Pt(5)
        self._add_run(page_line, b.TextRun(self.settings.ORGANIZATION_NAME, size=8, color=b.MUTED_GRAY))
        self._add_run(page_line, b.TextRun(" | Página ", size=8, color=b.MUTED_GRAY))
        self._add_field(page_line, "PAGE", style)
        self._add_run(page_line, b.TextRun(" de ", size=8, color=b.MUTED_GRAY))
        self._add_field(page_line, "NUMPAGES", style)

    # -- block renderers -------------------------------------------------

    def _render_paragraph(self, document, block: b.Paragraph, text_width: int) -> None:
        paragraph = document.add_paragraph()
        self._format_paragraph(paragraph, block.align, block.space_before, block.space_after)
        for run in block.runs:
            self._add_run(paragraph, run)

    def _render_key_value_table(self, document, block: b.KeyValueTable, text_width: int) -> None:
        table = self._new_table(document, len(block.rows), block.column_count)
        pairs_per_row = block.column_count // 2
        label_width = int(text_width * block.label_width)
        value_width = int(text_width / pairs_per_row) - label_width

        for row_index, row in enumerate(block.rows):
            for pair_index, item in enumerate(row):
                label_cell = table.cell(row_index, 2 * pair_index)
                value_cell = table.cell(row_index, 2 * pair_index + 1)
                self._write_cell(label_cell, b.TextRun(item.label, bold=True), fill=b.LABEL_FILL)
                self._write_cell(value_cell, b.TextRun(item.value, bold=item.bold_value))
                label_cell.width = Emu(label_width)
                value_cell.width = Emu(value_width)

    def _render_performance_table(self, document, block: b.PerformanceTable, text_width: int) -> None:
        table = self._new_table(document, len(block.rows) + 2, 3)
        widths = [Emu(int(text_width * fraction)) for fraction in block.column_widths]

        header_cells = table.rows[0].cells
        for cell, title in zip(header_cells, block.headers):
            self._write_cell(cell, b.TextRun(title, size=11, bold=True, color="FFFFFF"),
                             fill=b.BRAND_BLUE, align=b.Align.CENTER)

        for row_index, row in enumerate(block.rows, start=1):
            title_cell, level_cell, description_cell = table.rows[row_index].cells
            self._write_cell(title_cell, b.TextRun(row.title, size=10))
            self._write_cell(level_cell, b.TextRun(f"Nivel {row.level}", size=10, bold=True, color="FFFFFF"),
                             fill=row.color, align=b.Align.CENTER)
            self._write_cell(description_cell, b.TextRun(row.description, size=10))

        summary = block.summary
        summary_values = (block.summary_title, summary.formatted_average, summary.label)
        for cell, value in zip(table.rows[-1].cells, summary_values):
            self._write_cell(cell, b.TextRun(value, size=11, bold=True, color="FFFFFF"),
                             fill=block.summary_fill, align=b.Align.CENTER)

        for row in table.rows:
            for cell, width in zip(row.cells, widths):
                cell.width = width

    def _render_image(self, document, block: b.ImageBlock, text_width: int) -> None:
        paragraph = document.add_paragraph()
        self._format_paragraph(paragraph, b.Align.CENTER, 0, block.space_after)
        paragraph.add_run().add_picture(
            io.BytesIO(block.data),
            width=Emu(block.width * EMU_PER_PIXEL),
            height=Emu(block.height * EMU_PER_PIXEL),
        )

    def _render_page_break(self, document, block: b.PageBreak, text_width: int) -> None:
        document.add_paragraph().add_run().add_break(WD_BREAK.PAGE)

    # -- python-docx helpers ---------------------------------------------

    def _new_table(self, document, rows: int, cols: int):
        table = document.add_table(rows=rows, cols=cols)
        table.style = "Table Grid"
        self._set_table_borders(table, b.BRAND_BLUE)
        # Disable autofit so Word keeps the column widths set per cell
        table.autofit = False
        return table

    @staticmethod
    def _set_table_borders(table, color: str) -> None:
        tbl_pr = table._tbl.tblPr
        borders = OxmlElement("w:tblBorders")
        for edge in ("top", "left", "bottom", "right", "insideH", "insideV"):
            element = OxmlElement(f"w:{edge}")
            element.set(qn("w:val"), "single")
            element.set(qn("w:sz"), "4")
            element.set(qn("w:space"), "0")
            element.set(qn("w:color"), color)
            borders.append(element)
        tbl_look = tbl_pr.find(qn("w:tblLook"))
        if tbl_look is not None:
            tbl_look.addprevious(borders)
        else:
            tbl_pr.append(borders)

    @staticmethod
    def _shade_cell(cell, fill: str) -> None:
        shading = OxmlElement("w:shd")
        shading.set(qn("w:val"), "clear")
        shading.set(qn("w:color"), "auto")
        shading.set(qn("w:fill"), fill)
        cell._tc.get_or_add_tcPr().append(shading)

    def _write_cell(
        self,
        cell,
        run: b.TextRun,
        fill: Optional[str] = None,
        align: b.Align = b.Align.LEFT,
    ) -> None:
        paragraph = cell.paragraphs[0]
        paragraph.alignment = ALIGNMENTS[align]
        self._add_run(paragraph, run)
        if fill:
            self._shade_cell(cell, fill)

    @staticmethod
    def _format_paragraph(paragraph, align: b.Align, space_before: float, space_after: float) -> None:
        paragraph.alignment = ALIGNMENTS[align]
        paragraph.paragraph_format.space_before = Pt(space_before)
        paragraph.paragraph_format.space_after = Pt(space_after)

    @staticmethod
    def _add_run(paragraph, text_run: b.TextRun):
        run = paragraph.add_run(text_run.text)
        if text_run.bold:
            run.bold = True
        if text_run.italic:
            run.italic = True
        if text_run.size is not None:
            run.font.size = Pt(text_run.size)
        if text_run.color:
            run.font.color.rgb = RGBColor.from_string(text_run.color)
        return run

    def _add_field(self, paragraph, instruction: str, style: b.TextRun) -> None:
        """Append a live Word field (PAGE, NUMPAGES) rendered with ``style``."""
        begin = self._add_run(paragraph, style)
        begin._r.append(self._field_char("begin"))

        code = self._add_run(paragraph, style)
        instr_text = OxmlElement("w:instrText")
        instr_text.set(qn("xml:space"), "preserve")
        instr_text.text = f" {instruction} "
        code._r.append(instr_text)

        separate = self._add_run(paragraph, style)
        separate._r.append(self._field_char("separate"))

        # Placeholder shown until Word updates the field
        self._add_run(paragraph, b.TextRun("1", size=style.size, color=style.color))

        end = self._add_run(paragraph, style)
        end._r.append(self._field_char("end"))

    @staticmethod
    def _field_char(kind: str):
        element = OxmlElement("w:fldChar")
        element.set(qn("w:fldCharType"), kind)
        return element
