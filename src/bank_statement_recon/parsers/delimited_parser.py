"""
Delimited (CSV) and spreadsheet statement parser.

Bank CSV and Excel exports have no fixed layout, so logical columns are
located by keywords in the header row. Only incoming (credit) payments are
imported.
"""

from datetime import date, datetime
from io import BytesIO, StringIO
from pathlib import Path
from typing import Any, Optional
import csv
import logging
import math

import pandas as pd

from ..config import ImportConfig
from ..models.transaction import (
    DropReason,
    ParseDiagnostics,
    RawTransaction,
    StatementFormat,
    StatementRow,
)
from ..utils.exceptions import StatementParseError
from .encoding import decode_statement
from .fields import (
    convert_to_base_currency,
    detect_payment_type,
    parse_amount,
    parse_date,
    parse_date_strict,
)

logger = logging.getLogger(__name__)

TEXT_COLUMNS = (
    "date",
    "name",
    "credit",
    "debit",
    "amount",
    "description",
    "purpose_code",
    "tax_id",
)
# Spreadsheet exports also carry currency and document number columns
WORKBOOK_COLUMNS = TEXT_COLUMNS + ("currency", "document_number")


class DelimitedParser:
    """
    Parser for CSV and spreadsheet bank exports.

    Rows are dropped when the date is empty, when only the debit column has
    a value, or when no positive amount can be read.
    """

    def __init__(self, config: ImportConfig):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config
        self.keywords = config.delimited

    def parse_file(self, file_path: Path) -> tuple[list[RawTransaction], ParseDiagnostics]:
        """
        Parse a CSV or spreadsheet export from disk.

        Raises:
            StatementParseError: If the file cannot be read
        """
        logger.info(f"Parsing delimited statement file: {file_path}")
        try:
            data = file_path.read_bytes()
        except OSError as e:
            raise StatementParseError(f"Failed to read statement file: {e}") from e

        extension = file_path.suffix.lower().lstrip(".")
        if extension in self.config.input.workbook_extensions:
            return self.parse_workbook(data)
        return self.parse_text(decode_statement(data, self.config.input))

    def parse_text(
        self, content: str, today: Optional[date] = None
    ) -> tuple[list[RawTransaction], ParseDiagnostics]:
        """
        Parse decoded CSV content.

        The delimiter is ";" when the header line contains one, "," otherwise.
        Each line is one record: quote characters are stripped from cells
        and never group delimiters or lines together.

        Returns:
            Tuple of (transactions, diagnostics)
        """
        diagnostics = ParseDiagnostics(format=StatementFormat.DELIMITED)

        lines = [line.strip() for line in content.splitlines() if line.strip()]
        if len(lines) < 2:
            logger.info("Delimited content has no data rows")
            return [], diagnostics

        delimiter = ";" if ";" in lines[0] else ","
        widths = [line.count(delimiter) + 1 for line in lines]

        try:
            df = pd.read_csv(
                StringIO("\n".join(lines)),
                sep=delimiter,
                header=None,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                quoting=csv.QUOTE_NONE,
                engine="python",
                # Rows wider than the header keep their leading cells
                on_bad_lines=lambda bad_line: bad_line[: widths[0]],
            )
        except (pd.errors.ParserError, ValueError) as e:
            raise StatementParseError(f"Failed to read delimited content: {e}") from e

        rows = [[_clean_cell(v) for v in row] for row in df.itertuples(index=False, name=None)]
        transactions = self._process_rows(
            rows, header_index=0, columns=TEXT_COLUMNS, diagnostics=diagnostics,
            convert_currency=False, today=today, widths=widths,
        )
        logger.info(f"Extracted {len(transactions)} transactions from delimited content")
        return transactions, diagnostics

    def parse_workbook(
        self, data: bytes, today: Optional[date] = None
    ) -> tuple[list[RawTransaction], ParseDiagnostics]:
        """
        Parse the first sheet of an .xlsx/.xls export.

        The header row is the first of the leading rows that mentions a date
        or an amount; exports often put the account details above it.

        Raises:
            StatementParseError: If the workbook cannot be opened
        """
        diagnostics = ParseDiagnostics(format=StatementFormat.DELIMITED)

        try:
            df = pd.read_excel(BytesIO(data), sheet_name=0, header=None, dtype=object)
        except (ValueError, ImportError, OSError) as e:
            raise StatementParseError(f"Failed to read workbook: {e}") from e

        rows = [[_workbook_cell(v) for v in row] for row in df.itertuples(index=False, name=None)]
        if len(rows) < 2:
            return [], diagnostics

        header_index = self._find_header_row(rows)
        transactions = self._process_rows(
            rows, header_index=header_index, columns=WORKBOOK_COLUMNS,
            diagnostics=diagnostics, convert_currency=True, today=today,
        )
        logger.info(f"Extracted {len(transactions)} transactions from workbook")
        return transactions, diagnostics

    def _find_header_row(self, rows: list[list[str]]) -> int:
        for i, row in enumerate(rows[: self.keywords.header_scan_rows]):
            joined = " ".join(row).lower()
            if any(marker in joined for marker in self.keywords.header_markers):
                return i
        return 0

    def _process_rows(
        self,
        rows: list[list[str]],
        header_index: int,
        columns: tuple[str, ...],
        diagnostics: ParseDiagnostics,
        convert_currency: bool,
        today: Optional[date],
        widths: Optional[list[int]] = None,
    ) -> list[RawTransaction]:
        """
        Convert the rows below the header into transactions.

        ``widths`` holds the field count of each source line; without it the
        width of a row ends at its last non-empty cell.
        """
        headers = [h.lower() for h in rows[header_index]]
        column_map = self.map_columns(headers, columns)
        logger.debug(f"Column mapping: {column_map}")

        transactions: list[RawTransaction] = []
        for index in range(header_index + 1, len(rows)):
            cells = rows[index]
            row_number = index + 1
            diagnostics.records_seen += 1
            width = widths[index] if widths else _filled_width(cells)
            if width < self.keywords.min_cells:
                diagnostics.record_drop(DropReason.TOO_FEW_CELLS)
                continue

            row = self._build_row(row_number, cells, column_map)
            txn = self._row_to_transaction(row, diagnostics, convert_currency, today)
            if txn:
                transactions.append(txn)

        diagnostics.records_parsed = len(transactions)
        return transactions

    def map_columns(self, headers: list[str], columns: tuple[str, ...] = TEXT_COLUMNS) -> dict[str, int]:
        """
        Locate logical columns by header keywords.

        For each logical column the keywords are tried in order and the first
        header containing the keyword wins. Unmatched columns are absent
        from the result.
        """
        mapping: dict[str, int] = {}
        for column in columns:
            for keyword in getattr(self.keywords, column):
                index = next((i for i, h in enumerate(headers) if keyword in h), -1)
                if index >= 0:
                    mapping[column] = index
                    break
        return mapping

    def _build_row(
        self, row_number: int, cells: list[str], column_map: dict[str, int]
    ) -> StatementRow:
        def cell(column: str) -> str:
            index = column_map.get(column, -1)
            if index < 0 or index >= len(cells):
                return ""
            return cells[index]

        return StatementRow(
            row_number=row_number,
            date_text=cell("date"),
            name=cell("name"),
            credit_text=cell("credit"),
            debit_text=cell("debit"),
            amount_text=cell("amount"),
            description=cell("description"),
            purpose_code=cell("purpose_code"),
            tax_id=cell("tax_id"),
            currency=cell("currency"),
            document_number=cell("document_number"),
        )

    def _row_to_transaction(
        self,
        row: StatementRow,
        diagnostics: ParseDiagnostics,
        convert_currency: bool,
        today: Optional[date],
    ) -> Optional[RawTransaction]:
        """Validate a row and convert it to a RawTransaction."""
        if not row.date_text or row.date_text == "0":
            logger.debug(f"Row {row.row_number}: empty date, skipping")
            diagnostics.record_drop(DropReason.MISSING_DATE)
            return None

        # Credit column wins over a generic amount column
        if row.credit_text:
            amount_original = parse_amount(row.credit_text)
        elif row.amount_text:
            amount_original = parse_amount(row.amount_text)
        else:
            amount_original = parse_amount("")

        if amount_original <= 0:
            if row.debit_text:
                logger.debug(f"Row {row.row_number}: outgoing payment, skipping")
                diagnostics.record_drop(DropReason.DEBIT_ONLY)
            elif not (row.credit_text or row.amount_text):
                diagnostics.record_drop(DropReason.MISSING_AMOUNT)
            else:
                logger.debug(f"Row {row.row_number}: non-positive amount, skipping")
                diagnostics.record_drop(DropReason.NON_POSITIVE_AMOUNT)
            return None

        if parse_date_strict(row.date_text) is None:
            diagnostics.date_fallbacks += 1
            logger.warning(f"Row {row.row_number}: unrecognized date {row.date_text!r}, using today")

        base_currency = self.config.input.base_currency
        currency = (row.currency or base_currency).upper()
        if convert_currency:
            amount, rate = convert_to_base_currency(
                amount_original, currency, row.description, base_currency
            )
        else:
            amount, rate = amount_original, None

        if amount <= 0:
            logger.debug(f"Row {row.row_number}: converted amount {amount} is not positive, skipping")
            diagnostics.record_drop(DropReason.NON_POSITIVE_AMOUNT)
            return None

        return RawTransaction(
            date=date.fromisoformat(parse_date(row.date_text, today)),
            amount=amount,
            amount_original=amount_original,
            currency=currency,
            exchange_rate=rate,
            counterparty_name_raw=row.name,
            counterparty_tax_id=row.tax_id,
            description=row.description,
            document_number=row.document_number,
            purpose_code=row.purpose_code,
            payment_type=detect_payment_type(row.description, self.config.payment_types),
        )


def _clean_cell(value: Any) -> str:
    # Short rows are padded with NaN
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    return str(value).replace('"', "").strip()


def _workbook_cell(value: Any) -> str:
    """Render a spreadsheet cell the way a text export would show it."""
    if value is None or value is pd.NaT:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, (pd.Timestamp, datetime, date)):
        return value.strftime("%d.%m.%Y")
    return str(value).strip()


def _filled_width(cells: list[str]) -> int:
    """Number of cells up to and including the last non-empty one."""
    width = len(cells)
    while width and not cells[width - 1]:
        width -= 1
    return width
