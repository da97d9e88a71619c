"""Export helpers for the pattern summary and the printable booklet."""

from .json_exporter import build_summary, export_json
from .pdf_exporter import export_pdf

__all__ = [
    "build_summary",
    "export_json",
    "export_pdf",
]
