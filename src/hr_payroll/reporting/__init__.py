"""Report rendering (CSV and PDF)."""

from hr_payroll.reporting.disbursement import render_csv, render_pdf, report_filename
from hr_payroll.reporting.id_card import render_card_pdf

__all__ = ["render_csv", "render_pdf", "report_filename", "render_card_pdf"]
