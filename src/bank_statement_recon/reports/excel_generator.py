"""
Excel review report for statement imports.

One workbook per imported statement: a summary, the full classified list,
and filtered sheets for the rows a person has to look at.
"""

from datetime import datetime
from pathlib import Path
from typing import Callable, Optional
import logging

from openpyxl import Workbook
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..config import ImportConfig, SheetConfig
from ..models.counterparty import MatchSource
from ..models.result import ClassifiedTransaction, ImportResult
from ..models.transaction import Classification
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
VERIFIED_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
DISCREPANCY_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
DUPLICATE_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
UNRESOLVED_FILL = PatternFill(start_color="D9D9D9", end_color="D9D9D9", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

CLASSIFICATION_FILLS = {
    Classification.VERIFIED: VERIFIED_FILL,
    Classification.DISCREPANCY: DISCREPANCY_FILL,
    Classification.DUPLICATE: DUPLICATE_FILL,
}

TRANSACTION_HEADERS = [
    "Date",
    "Amount",
    "Original Amount",
    "Currency",
    "Exchange Rate",
    "Payer",
    "Payer Tax ID",
    "Document No.",
    "Purpose Code",
    "Payment Type",
    "Description",
    "Counterparty",
    "Counterparty ID",
    "Match Source",
    "Classification",
    "Ledger Transaction",
    "Reason",
]


class ReviewReportGenerator:
    """Generates the Excel review workbook for one import."""

    def __init__(self, config: ImportConfig):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config
        self.sheet_config = config.output.sheets

    def default_output_path(self, now: Optional[datetime] = None) -> Path:
        """File name from the configured template, stamped with the current time."""
        now = now or datetime.now()
        return Path(
            self.config.output.excel.filename_template.format(
                date=now.strftime("%Y%m%d"), time=now.strftime("%H%M%S")
            )
        )

    def generate_report(self, result: ImportResult, output_path: Path) -> Path:
        """
        Generate the review workbook.

        Args:
            result: Import result to report on
            output_path: Path for output file

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        logger.info(f"Generating review report: {output_path}")

        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        sheets = self.sheet_config
        if sheets.summary.enabled:
            self._create_summary_sheet(wb, result)
        if sheets.transactions.enabled:
            self._create_transaction_sheet(wb, sheets.transactions, result.transactions)
        if sheets.needs_review.enabled:
            self._create_transaction_sheet(
                wb,
                sheets.needs_review,
                _select(result, lambda t: t.needs_review),
            )
        if sheets.discrepancies.enabled:
            self._create_transaction_sheet(
                wb,
                sheets.discrepancies,
                _select(result, lambda t: t.classification is Classification.DISCREPANCY),
            )
        if sheets.duplicates.enabled:
            self._create_transaction_sheet(
                wb,
                sheets.duplicates,
                _select(result, lambda t: t.classification is Classification.DUPLICATE),
            )
        if sheets.diagnostics.enabled:
            self._create_diagnostics_sheet(wb, result)

        # openpyxl refuses to save a workbook without sheets
        if not wb.worksheets:
            wb.create_sheet("Report")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to write report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_summary_sheet(self, wb: Workbook, result: ImportResult) -> None:
        """Create the summary sheet with key counts."""
        ws = wb.create_sheet(self.sheet_config.summary.name)

        ws["A1"] = "Bank Statement Import Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        ws["A3"] = "File Information"
        ws["A3"].font = Font(bold=True)

        file_info = [
            ("Statement File:", result.file_name),
            ("Format:", result.format.value),
            ("Imported At:", result.imported_at.strftime("%Y-%m-%d %H:%M:%S")),
            ("Config File:", self.config.config_file_path or "Default"),
            ("Processing Time:", f"{result.processing_time_seconds:.2f} seconds"),
        ]
        row = 4
        for label, value in file_info:
            ws[f"A{row}"] = label
            ws[f"B{row}"] = str(value)
            row += 1

        row += 1
        ws[f"A{row}"] = "Classification"
        ws[f"A{row}"].font = Font(bold=True)
        row += 1
        ws[f"A{row}"] = "Parsed Transactions:"
        ws[f"B{row}"] = len(result.transactions)
        row += 1
        for classification, count in result.count_by_classification().items():
            ws[f"A{row}"] = f"{classification.value.capitalize()}:"
            ws[f"B{row}"] = count
            fill = CLASSIFICATION_FILLS.get(classification)
            if fill:
                ws[f"A{row}"].fill = fill
            row += 1
        ws[f"A{row}"] = "Total Amount:"
        ws[f"B{row}"] = f"{result.total_amount:,.2f} {self.config.input.base_currency}"
        row += 2

        ws[f"A{row}"] = "Counterparty Resolution"
        ws[f"A{row}"].font = Font(bold=True)
        row += 1
        for source, count in result.count_by_match_source().items():
            label = "Unresolved" if source is MatchSource.NONE else source.value
            ws[f"A{row}"] = f"{label}:"
            ws[f"B{row}"] = count
            row += 1

        if result.tax_id_updates:
            row += 1
            ws[f"A{row}"] = "Discovered Tax IDs"
            ws[f"A{row}"].font = Font(bold=True)
            row += 1
            for update in result.tax_id_updates:
                ws[f"A{row}"] = f"Client {update.client_id}:"
                ws[f"B{row}"] = update.tax_id
                row += 1

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 40

    def _create_transaction_sheet(
        self,
        wb: Workbook,
        sheet: SheetConfig,
        transactions: list[ClassifiedTransaction],
    ) -> None:
        """Create a sheet listing classified transactions."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(ws, TRANSACTION_HEADERS)

        for row_num, item in enumerate(transactions, start=2):
            txn = item.transaction
            counterparty = item.counterparty
            reconciliation = item.reconciliation

            row_data = [
                txn.date,
                float(txn.amount),
                float(txn.amount_original),
                txn.currency,
                float(txn.exchange_rate) if txn.exchange_rate is not None else "",
                txn.counterparty_name_raw,
                txn.counterparty_tax_id,
                txn.document_number,
                txn.purpose_code,
                txn.payment_type.value,
                txn.description,
                counterparty.kind.value,
                counterparty.entity_id or "",
                counterparty.match_source.value,
                reconciliation.classification.value,
                reconciliation.matched_transaction_id or "",
                reconciliation.reason,
            ]

            if not counterparty.is_resolved:
                fill = UNRESOLVED_FILL
            else:
                fill = CLASSIFICATION_FILLS.get(reconciliation.classification)

            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                if fill:
                    cell.fill = fill

        self._auto_fit_columns(ws)

    def _create_diagnostics_sheet(self, wb: Workbook, result: ImportResult) -> None:
        """Create the parse diagnostics sheet."""
        ws = wb.create_sheet(self.sheet_config.diagnostics.name)
        diagnostics = result.diagnostics

        ws["A1"] = "Parse Diagnostics"
        ws["A1"].font = Font(size=14, bold=True)

        info = [
            ("Format:", diagnostics.format.value),
            ("Records Seen:", diagnostics.records_seen),
            ("Records Parsed:", diagnostics.records_parsed),
            ("Records Dropped:", diagnostics.total_dropped),
            ("Dates Defaulted To Import Day:", diagnostics.date_fallbacks),
        ]
        row = 3
        for label, value in info:
            ws[f"A{row}"] = label
            ws[f"B{row}"] = value
            row += 1

        row += 1
        self._write_headers(ws, ["Drop Reason", "Count"], row=row)
        for reason, count in sorted(diagnostics.dropped.items(), key=lambda kv: kv[0].value):
            row += 1
            ws.cell(row=row, column=1, value=reason.value).border = THIN_BORDER
            ws.cell(row=row, column=2, value=count).border = THIN_BORDER

        self._auto_fit_columns(ws)

    def _write_headers(self, ws: Worksheet, headers: list[str], row: int = 1) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            max_length = 0
            column = column_cells[0].column_letter

            for cell in column_cells:
                if cell.value is not None:
                    max_length = max(max_length, len(str(cell.value)))

            ws.column_dimensions[column].width = min(max_length + 2, 50)


def _select(
    result: ImportResult, predicate: Callable[[ClassifiedTransaction], bool]
) -> list[ClassifiedTransaction]:
    return [t for t in result.transactions if predicate(t)]
