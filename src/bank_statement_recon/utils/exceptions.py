"""Custom exceptions for the statement import application."""


class StatementImportError(Exception):
    """Base exception for statement import errors."""

    pass


class StatementParseError(StatementImportError):
    """Error reading or decoding a bank statement file."""

    pass


class ConfigurationError(StatementImportError):
    """Error in configuration."""

    pass


class ReconciliationError(StatementImportError):
    """Reconciliation matcher invoked with inconsistent input."""

    pass


class AliasStoreError(StatementImportError):
    """Error reading or writing the counterparty alias store."""

    pass


class ReportGenerationError(StatementImportError):
    """Error generating Excel review report."""

    pass
