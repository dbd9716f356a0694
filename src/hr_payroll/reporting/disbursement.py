"""Disbursement result reports (CSV and PDF)."""

from __future__ import annotations

import re
from io import BytesIO
from typing import Any, Mapping, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

CSV_HEADER = ("Employee", "Email", "Amount", "Status", "Reference/Error")
BOM = "\ufeff"
PAGE_MARGIN = 20

_COMMA = re.compile(r",\s*")


def report_filename(month: str, year: int, fmt: str) -> str:
    """File name for a report, e.g. disbursement_March_2024.csv."""
    return f"disbursement_{month}_{year}.{fmt}"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _strip_commas(value: Any) -> str:
    return _COMMA.sub(" ", _text(value))


def report_rows(results: Sequence[Mapping[str, Any]]) -> list[list[str]]:
    """Table rows for the results, without the header."""
    rows = []
    for result in results:
        detail = result.get("reference") or result.get("error") or "-"
        amount = result.get("amount")
        rows.append(
            [
                _strip_commas(result.get("employee_name")),
                _strip_commas(result.get("employee_email")),
                "0" if amount is None else str(amount),
                _text(result.get("status")),
                _strip_commas(detail),
            ]
        )
    return rows


def render_csv(results: Sequence[Mapping[str, Any]]) -> str:
    """Render results as CSV text.

    Free-text fields have commas replaced by spaces instead of being quoted.
    The text starts with a UTF-8 byte order mark so spreadsheet tools pick
    the right encoding.
    """
    lines = [",".join(CSV_HEADER)]
    lines.extend(",".join(row) for row in report_rows(results))
    return BOM + "\n".join(lines)


def render_pdf(
    results: Sequence[Mapping[str, Any]],
    month: str,
    year: int,
    summary: Mapping[str, int] | None = None,
) -> bytes:
    """Render results as an A4 PDF with a repeated header row."""
    if summary is None:
        paid = sum(1 for r in results if r.get("status") == "Success")
        summary = {"total": len(results), "paid": paid, "failed": len(results) - paid}

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN,
        bottomMargin=PAGE_MARGIN,
        title=f"Disbursement Results - {month} {year}",
    )
    styles = getSampleStyleSheet()

    elements = [
        Paragraph(f"Disbursement Results - {month} {year}", styles["Heading1"]),
        Paragraph(
            f"Total: {summary['total']}  •  Paid: {summary['paid']}  "
            f"•  Failed: {summary['failed']}",
            styles["Normal"],
        ),
        Spacer(1, 12),
    ]

    table_data = [list(CSV_HEADER)] + report_rows(results)
    table = Table(table_data, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.black),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("ALIGN", (2, 1), (2, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.whitesmoke]),
            ]
        )
    )
    elements.append(table)

    doc.build(elements)
    return buffer.getvalue()
