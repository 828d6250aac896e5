"""Styled PDF rendering of validated reports."""
import logging
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Protocol, Tuple, Union
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from stockllm.services.report_sections import HEADER_PATTERN, ReportFormat
from stockllm.services.section_scanner import normalize_line_endings

logger = logging.getLogger(__name__)

HEADER_FONT = "Helvetica-Bold"
BODY_FONT = "Helvetica"
HEADER_FONT_SIZE = 16
BODY_FONT_SIZE = 12
BODY_LINE_GAP = 4
BODY_COLOR = "#000000"
DEFAULT_MARGIN = 50


@dataclass(frozen=True)
class BlockStyle:
    color: str
    bold: bool
    font_size: int
    underline: bool
    line_gap: int = 0


@dataclass(frozen=True)
class StyledBlock:
    kind: str  # "header" or "body"
    text: str
    style: BlockStyle
    section_index: Optional[int] = None

    @property
    def is_header(self) -> bool:
        return self.kind == "header"


RenderedDocument = Tuple[StyledBlock, ...]

BODY_STYLE = BlockStyle(
    color=BODY_COLOR,
    bold=False,
    font_size=BODY_FONT_SIZE,
    underline=False,
    line_gap=BODY_LINE_GAP,
)


class PageSink(Protocol):
    def write(self, block: StyledBlock) -> None: ...

    def finish(self) -> None: ...


class DocumentRenderer:
    """Turns report text into header and body blocks.

    Lines of the form ``N. *Title*`` become headers coloured by section
    number; every other line is plain body text.
    """

    def __init__(self, report_format: ReportFormat):
        self.report_format = report_format

    def header_style(self, index: int) -> BlockStyle:
        return BlockStyle(
            color=self.report_format.color_for(index),
            bold=True,
            font_size=HEADER_FONT_SIZE,
            underline=True,
        )

    def render(self, validated_text: str) -> RenderedDocument:
        blocks: List[StyledBlock] = []
        for line in normalize_line_endings(validated_text).split("\n"):
            match = HEADER_PATTERN.match(line)
            if match:
                index = int(match.group(1))
                title = match.group(2).strip()
                blocks.append(
                    StyledBlock(
                        kind="header",
                        text=f"{index}. {title}",
                        style=self.header_style(index),
                        section_index=index,
                    )
                )
            else:
                blocks.append(StyledBlock(kind="body", text=line, style=BODY_STYLE))
        return tuple(blocks)

    def render_to_sink(self, validated_text: str, sink: PageSink) -> RenderedDocument:
        """Render and stream every block to ``sink``, then close it."""
        document = self.render(validated_text)
        for block in document:
            sink.write(block)
        sink.finish()
        return document


class RecordingSink:
    """Collects blocks in memory."""

    def __init__(self):
        self.blocks: List[StyledBlock] = []
        self.finished = False

    def write(self, block: StyledBlock) -> None:
        self.blocks.append(block)

    def finish(self) -> None:
        self.finished = True


class PdfPageSink:
    """
    Lays styled blocks out on Letter pages with fixed margins.

    Blocks are buffered as reportlab flowables and the document is built
    (and the destination flushed) on ``finish``; page breaks are left to
    reportlab.
    """

    def __init__(self, destination: Union[str, BinaryIO], margin: float = DEFAULT_MARGIN):
        self.destination = destination
        self.doc = SimpleDocTemplate(
            destination,
            pagesize=letter,
            leftMargin=margin,
            rightMargin=margin,
            topMargin=margin,
            bottomMargin=margin,
        )
        self.story = []

    @staticmethod
    def _paragraph_style(block: StyledBlock) -> ParagraphStyle:
        style = block.style
        return ParagraphStyle(
            name=f"{block.kind}-{style.color}",
            fontName=HEADER_FONT if style.bold else BODY_FONT,
            fontSize=style.font_size,
            leading=style.font_size + style.line_gap + 2,
            textColor=colors.HexColor(style.color),
            spaceBefore=BODY_FONT_SIZE if block.is_header else 0,
            spaceAfter=BODY_FONT_SIZE / 2 if block.is_header else 0,
        )

    def write(self, block: StyledBlock) -> None:
        if not block.text.strip():
            self.story.append(Spacer(1, block.style.font_size + block.style.line_gap))
            return
        markup = escape(block.text)
        if block.style.underline:
            markup = f"<u>{markup}</u>"
        self.story.append(Paragraph(markup, self._paragraph_style(block)))

    def finish(self) -> None:
        if not self.story:
            self.story.append(Spacer(1, 1))
        self.doc.build(self.story)


def render_report_pdf(
    validated_text: str,
    destination: Union[str, BinaryIO],
    report_format: ReportFormat,
    margin: float = DEFAULT_MARGIN,
) -> RenderedDocument:
    """Render ``validated_text`` into a PDF written to ``destination``."""
    sink = PdfPageSink(destination, margin=margin)
    document = DocumentRenderer(report_format).render_to_sink(validated_text, sink)
    logger.info(
        "Rendered report with %s section headers to %s",
        sum(1 for block in document if block.is_header),
        destination if isinstance(destination, str) else "stream",
    )
    return document
