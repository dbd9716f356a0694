"""ID card PDF rendering."""

from __future__ import annotations

from io import BytesIO
from typing import TYPE_CHECKING

from reportlab.lib import colors
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Table, TableStyle

if TYPE_CHECKING:
    from hr_payroll.models.id_card import IdCard

# ISO/IEC 7810 ID-1 (credit card) size
CARD_SIZE = (85.6 * mm, 54 * mm)
CARD_MARGIN = 3 * mm


def render_card_pdf(card: IdCard) -> bytes:
    """Render one ID card as a single-page PDF in the card's theme."""
    employee = card.employee
    background = colors.HexColor(card.background_color)
    text_color = colors.HexColor(card.text_color)
    accent = colors.HexColor(card.accent_color)
    border = colors.HexColor(card.border_color)

    styles = getSampleStyleSheet()
    heading = ParagraphStyle(
        "CardHeading",
        parent=styles["Normal"],
        fontName="Helvetica-Bold",
        fontSize=9,
        leading=10,
        textColor=colors.white,
        alignment=1,
    )
    name_style = ParagraphStyle(
        "CardName",
        parent=styles["Normal"],
        fontName="Helvetica-Bold",
        fontSize=10,
        leading=12,
        textColor=text_color,
    )
    body = ParagraphStyle(
        "CardBody",
        parent=styles["Normal"],
        fontSize=7,
        leading=8.5,
        textColor=text_color,
    )

    rows = [
        [Paragraph(card.company_name or "", heading)],
        [Paragraph(employee.full_name, name_style)],
        [Paragraph(employee.position or "", body)],
        [Paragraph(employee.department or "", body)],
        [Paragraph(f"ID: {employee.employee_code}", body)],
        [Paragraph(f"Card No: {card.card_number}", body)],
        [Paragraph(f"Valid until: {card.expiry_date.isoformat()}", body)],
    ]
    if card.company_address:
        rows.append([Paragraph(card.company_address, body)])

    width = CARD_SIZE[0] - 2 * CARD_MARGIN
    table = Table(rows, colWidths=[width])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), accent),
                ("BACKGROUND", (0, 1), (-1, -1), background),
                ("BOX", (0, 0), (-1, -1), 1, border),
                ("TOPPADDING", (0, 0), (-1, -1), 1),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 1),
            ]
        )
    )

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=CARD_SIZE,
        leftMargin=CARD_MARGIN,
        rightMargin=CARD_MARGIN,
        topMargin=CARD_MARGIN,
        bottomMargin=CARD_MARGIN,
        title=f"ID Card {card.card_number}",
    )
    doc.build([table])
    return buffer.getvalue()
