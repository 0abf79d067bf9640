"""
Request documents - a printable snapshot of a decided request.

Documents are rendered on demand from the stored request and never persisted.
"""
import logging
from io import BytesIO
from typing import Any, List, Protocol, Sequence, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from approval_engine.core.exceptions import DocumentRenderingError, InvalidTransitionError
from approval_engine.models.request import Request, RequestSignature, RequestVariant, TERMINAL_STATUSES
from approval_engine.utils.datetime_utils import iso_local, now_utc

logger = logging.getLogger(__name__)


class DocumentRenderer(Protocol):
    media_type: str
    extension: str

    def render(self, request: Request, signatures: Sequence[RequestSignature]) -> bytes:
        ...


def _employee_label(employee) -> str:
    if employee is None:
        return "-"
    return f"{employee.name} ({employee.emp_code})"


class PdfDocumentRenderer:
    """A4 PDF: header, requester, variant body, approval history, signatures."""
    media_type = "application/pdf"
    extension = "pdf"

    def render(self, request: Request, signatures: Sequence[RequestSignature]) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=40,
            leftMargin=40,
            topMargin=50,
            bottomMargin=40,
            title=request.request_number,
        )
        styles = getSampleStyleSheet()
        styles.add(ParagraphStyle(name="Header", fontSize=14, leading=18, alignment=1, spaceAfter=20))
        styles.add(ParagraphStyle(name="Small", fontSize=9, textColor=colors.grey))

        elements = [Paragraph(escape(request.request_number), styles["Header"])]
        header = [
            ("Type", request.variant.value),
            ("Status", request.status.value),
            ("Requester", _employee_label(request.requester)),
            ("Title", request.title),
            ("Created", iso_local(request.created_at)),
            ("Submitted", iso_local(request.submitted_at)),
        ]
        for label, value in header + self._body(request):
            if value is not None:
                elements.append(_field(label, value, styles))
        if request.rejection_reason:
            elements.append(_field("Rejection reason", request.rejection_reason, styles))

        if request.variant == RequestVariant.PROCUREMENT and request.items:
            elements.append(Spacer(1, 12))
            rows = [["#", "Item", "Qty", "Unit", f"Unit price ({request.currency})"]]
            for item in request.items:
                rows.append([item.position, item.name, item.quantity, item.unit, item.unit_price])
            elements.append(_table(rows, [30, 200, 50, 60, 110]))

        elements.append(Spacer(1, 20))
        elements.append(Paragraph("<b>Approval history</b>", styles["Heading2"]))
        if request.approvals:
            rows = [["Stage", "Action", "By", "At", "Remarks"]]
            for approval in request.approvals:
                rows.append([
                    approval.stage.value,
                    approval.action.value,
                    _employee_label(approval.approver),
                    iso_local(approval.action_at),
                    approval.remarks or "",
                ])
            elements.append(_table(rows, [90, 60, 120, 130, 90]))
        else:
            elements.append(Paragraph("No decisions recorded.", styles["Normal"]))

        elements.append(Spacer(1, 20))
        elements.append(Paragraph("<b>Signatures</b>", styles["Heading2"]))
        if signatures:
            rows = [["Role", "Signer", "Signed at"]]
            for signature in signatures:
                rows.append([signature.role.value, _employee_label(signature.signer), iso_local(signature.signed_at)])
            elements.append(_table(rows, [110, 200, 180]))
        else:
            elements.append(Paragraph("No signatures.", styles["Normal"]))

        elements.append(Spacer(1, 20))
        elements.append(Paragraph(f"Generated at {iso_local(now_utc())}", styles["Small"]))

        doc.build(elements)
        return buffer.getvalue()

    def _body(self, request: Request) -> List[Tuple[str, Any]]:
        details = request.details or {}
        if request.variant == RequestVariant.LEAVE:
            return [
                ("Period", f"{request.start_date} - {request.end_date}"),
                ("Working days", request.working_days),
                ("Replacement", request.replacement_name),
            ]

        if request.variant == RequestVariant.PROCUREMENT:
            return [
                ("Category", request.category),
                ("Urgency", request.urgency),
                ("Estimated value", f"{request.estimated_value} {request.currency}"),
            ]

        return [
            ("Document type", details.get("document_type", "-")),
            ("Purpose", details.get("purpose")),
        ]


def _field(label: str, value: Any, styles) -> Paragraph:
    return Paragraph(f"<b>{label}:</b> {escape(str(value))}", styles["Normal"])


def _table(rows: List[list], col_widths: List[int]) -> Table:
    # wrap cells so long names break instead of overflowing the column
    cell_style = getSampleStyleSheet()["BodyText"]
    body = [rows[0]] + [[Paragraph(escape(str(cell)), cell_style) for cell in row] for row in rows[1:]]
    return Table(
        body,
        colWidths=col_widths,
        style=TableStyle([
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]),
    )


def render_request_document(renderer: DocumentRenderer, request: Request) -> bytes:
    """
    Render a decided request.

    Raises:
        InvalidTransitionError: request is not approved or rejected yet
        DocumentRenderingError: the renderer failed
    """
    if request.status not in TERMINAL_STATUSES:
        raise InvalidTransitionError("Documents are available once the request is approved or rejected")
    try:
        return renderer.render(request, list(request.signatures))
    except Exception:
        logger.exception("document rendering failed: request_id=%s", request.id)
        raise DocumentRenderingError()
