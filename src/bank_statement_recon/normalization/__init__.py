"""Counterparty name normalization helpers."""

from .text import extract_tax_id, sanitize_name, title_case, to_comparable_form

__all__ = ["extract_tax_id", "sanitize_name", "title_case", "to_comparable_form"]
