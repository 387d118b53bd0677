"""Utility modules."""

from .exceptions import (
    StatementImportError,
    StatementParseError,
    ConfigurationError,
    ReconciliationError,
    AliasStoreError,
    ReportGenerationError,
)
from .logging_config import setup_logging, get_logger

__all__ = [
    "StatementImportError",
    "StatementParseError",
    "ConfigurationError",
    "ReconciliationError",
    "AliasStoreError",
    "ReportGenerationError",
    "setup_logging",
    "get_logger",
]
