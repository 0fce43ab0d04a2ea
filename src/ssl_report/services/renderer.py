"""PDF rendering of completed SSL Labs assessments."""

from __future__ import annotations

from datetime import datetime, timezone
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfgen.canvas import Canvas
from reportlab.platypus import Flowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from reportlab.platypus.doctemplate import BaseDocTemplate

from ssl_report.core.errors import RenderError
from ssl_report.models import Report
from ssl_report.schemas.assessment import Assessment, AssessmentStatus, Endpoint
from ssl_report.services.hosts import host_slug

PAGE_SIZE = A4
PAGE_MARGIN = 7 * mm
REPORT_TITLE = "SSL Labs Assessment Report"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S UTC"
IDENTIFIER_PREFIX = "ssl_report_"
FOOTER_Y = 7 * mm

TABLE_COLUMNS: tuple[tuple[str, float], ...] = (
    ("IP Address", 40 * mm),
    ("Server Name", 35 * mm),
    ("Status Message", 40 * mm),
    ("Grade", 15 * mm),
    ("Grade Trust Ignored", 20 * mm),
    ("Has Warnings", 20 * mm),
    ("Is Exceptional", 20 * mm),
)
TABLE_HEADERS = tuple(name for name, _ in TABLE_COLUMNS)
COLUMN_WIDTHS = [width for _, width in TABLE_COLUMNS]
HEADER_BACKGROUND = colors.Color(240 / 255, 240 / 255, 240 / 255)


def report_identifier(host: str) -> str:
    """Deterministic file name for the report of ``host``.

    The same host always maps to the same name, so a new report replaces the
    previous one for that host.
    """
    return f"{IDENTIFIER_PREFIX}{host_slug(host)}.pdf"


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def endpoint_row(endpoint: Endpoint) -> list[str]:
    """Table cells for one endpoint, in column order."""
    return [
        endpoint.ip_address,
        endpoint.server_name,
        endpoint.status_message,
        endpoint.grade,
        endpoint.grade_trust_ignored,
        format_bool(endpoint.has_warnings),
        format_bool(endpoint.is_exceptional),
    ]


def table_rows(assessment: Assessment) -> list[list[str]]:
    """Header row followed by one row per endpoint in assessment order.

    Raises:
        RenderError: If the assessment is not a complete READY result
    """
    if assessment.status is not AssessmentStatus.READY:
        raise RenderError(
            f"Cannot render assessment of {assessment.host} in status {assessment.status.value}"
        )
    if not assessment.endpoints:
        raise RenderError(f"Cannot render assessment of {assessment.host} without endpoints")
    if not assessment.is_complete:
        raise RenderError(
            f"Cannot render assessment of {assessment.host} with "
            f"{assessment.pending_endpoints} unresolved endpoint(s)"
        )
    return [list(TABLE_HEADERS)] + [endpoint_row(endpoint) for endpoint in assessment.endpoints]


def _draw_page_number(canvas: Canvas, doc: BaseDocTemplate) -> None:
    canvas.saveState()
    canvas.setFont("Helvetica", 8)
    canvas.drawRightString(PAGE_SIZE[0] - PAGE_MARGIN, FOOTER_Y, f"Page {doc.page}")
    canvas.restoreState()


def _build_story(assessment: Assessment, rows: list[list[str]], generated_at: datetime) -> list[Flowable]:
    styles = getSampleStyleSheet()
    cell_style = ParagraphStyle("Cell", parent=styles["Normal"], fontSize=8, leading=10)
    header_style = ParagraphStyle(
        "HeaderCell",
        parent=cell_style,
        fontName="Helvetica-Bold",
        alignment=TA_CENTER,
    )

    elements: list[Flowable] = []
    elements.append(Paragraph(f"<b>{REPORT_TITLE}</b>", styles["Title"]))
    elements.append(Spacer(1, 4 * mm))
    elements.append(Paragraph(f"Host: {escape(assessment.host)}", styles["Normal"]))
    elements.append(Spacer(1, 2 * mm))
    elements.append(
        Paragraph(f"Timestamp: {generated_at.strftime(TIMESTAMP_FORMAT)}", styles["Normal"])
    )
    elements.append(Spacer(1, 6 * mm))

    header, *data = rows
    table_data = [[Paragraph(escape(cell), header_style) for cell in header]]
    for row in data:
        table_data.append([Paragraph(escape(cell), cell_style) for cell in row])

    # Header row repeats on every page when the table splits
    table = Table(table_data, colWidths=COLUMN_WIDTHS, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_BACKGROUND),
        ("VALIGN", (0, 0), (-1, 0), "MIDDLE"),
        ("VALIGN", (0, 1), (-1, -1), "TOP"),
        ("GRID", (0, 0), (-1, -1), 0.3, colors.black),
        ("TOPPADDING", (0, 0), (-1, -1), 2),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 2),
    ]))
    elements.append(table)
    return elements


def render(assessment: Assessment, generated_at: datetime | None = None) -> Report:
    """Render a completed assessment to a PDF report.

    Output depends only on ``assessment`` and ``generated_at``: the document
    is built in reportlab invariant mode, so equal inputs give equal bytes.

    Args:
        assessment: READY assessment with resolved endpoints
        generated_at: Timestamp printed in the report; defaults to now (UTC)

    Returns:
        Report with the PDF bytes and its identifier

    Raises:
        RenderError: If the assessment is not renderable
    """
    rows = table_rows(assessment)
    if generated_at is None:
        generated_at = datetime.now(timezone.utc)
    elif generated_at.tzinfo is None:
        generated_at = generated_at.replace(tzinfo=timezone.utc)
    else:
        generated_at = generated_at.astimezone(timezone.utc)

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=PAGE_SIZE,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=f"{REPORT_TITLE}: {assessment.host}",
        author="ssl-report",
        invariant=1,
    )
    story = _build_story(assessment, rows, generated_at)
    doc.build(story, onFirstPage=_draw_page_number, onLaterPages=_draw_page_number)

    content = buffer.getvalue()
    buffer.close()

    return Report(
        assessment=assessment,
        generated_at=generated_at,
        content=content,
        identifier=report_identifier(assessment.host),
    )
