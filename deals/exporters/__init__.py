"""Export modules for deal logs and period summaries."""

from .excel_exporter import build_excel_bytes, deals_to_frame, export_deals_to_excel, summary_rows
from .print_exporter import export_to_print, generate_print_html, print_sections

__all__ = [
    "build_excel_bytes",
    "deals_to_frame",
    "export_deals_to_excel",
    "summary_rows",
    "export_to_print",
    "generate_print_html",
    "print_sections",
]
