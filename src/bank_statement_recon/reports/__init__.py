"""Excel review reports."""

from .excel_generator import ReviewReportGenerator

__all__ = ["ReviewReportGenerator"]
