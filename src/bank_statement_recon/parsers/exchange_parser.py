"""
1C client-bank exchange format parser.

The file is a list of Key=Value lines. Payments are grouped into document
sections that open with "СекцияДокумент=<kind>" and close with
"КонецДокумента"; everything before the first section is the file header.
"""

from datetime import date
from pathlib import Path
from typing import Iterator, Optional
import logging
import re

from ..config import ImportConfig
from ..models.transaction import (
    DropReason,
    ExchangeSection,
    ParseDiagnostics,
    RawTransaction,
    StatementFormat,
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

HEADER_FIELDS = {
    "format_version": "ВерсияФормата",
    "sender": "Отправитель",
    "created_on": "ДатаСоздания",
    "period_start": "ДатаНачала",
    "period_end": "ДатаКонца",
    "account": "РасчСчет",
}


class ExchangeFormatParser:
    """
    Parser for 1C client-bank exchange statements.

    Each complete document section becomes at most one RawTransaction;
    incomplete sections and sections without a date or a positive amount are
    dropped and counted in the diagnostics.
    """

    def __init__(self, config: ImportConfig):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config
        self.fields = config.exchange
        self._patterns: dict[str, tuple[re.Pattern, re.Pattern]] = {}

    def parse_file(self, file_path: Path) -> tuple[list[RawTransaction], ParseDiagnostics]:
        """
        Read, decode and parse an exchange file.

        Raises:
            StatementParseError: If the file cannot be read
        """
        logger.info(f"Parsing 1C exchange file: {file_path}")
        try:
            data = file_path.read_bytes()
        except OSError as e:
            raise StatementParseError(f"Failed to read statement file: {e}") from e

        return self.parse_text(decode_statement(data, self.config.input))

    def parse_text(
        self, content: str, today: Optional[date] = None
    ) -> tuple[list[RawTransaction], ParseDiagnostics]:
        """
        Parse decoded exchange content.

        Args:
            content: Decoded file text
            today: Date used when a section date is unrecognized

        Returns:
            Tuple of (transactions, diagnostics)
        """
        diagnostics = ParseDiagnostics(format=StatementFormat.PROPRIETARY)
        transactions: list[RawTransaction] = []

        for section in self._iter_sections(content, diagnostics):
            txn = self._section_to_transaction(section, diagnostics, today)
            if txn:
                transactions.append(txn)

        diagnostics.records_parsed = len(transactions)
        logger.info(
            f"Extracted {len(transactions)} transactions from "
            f"{diagnostics.records_seen} exchange sections"
        )
        return transactions, diagnostics

    def _iter_sections(
        self, content: str, diagnostics: ParseDiagnostics
    ) -> Iterator[ExchangeSection]:
        """Split content into document sections and read their fields."""
        chunks = content.split(self.fields.section_start)[1:]

        for index, chunk in enumerate(chunks, start=1):
            diagnostics.records_seen += 1

            if self.fields.section_end not in chunk:
                logger.debug(f"Section {index}: no {self.fields.section_end}, skipping")
                diagnostics.record_drop(DropReason.INCOMPLETE_SECTION)
                continue

            # Fields of this section only, not the header of the next one
            body = chunk.split(self.fields.section_end, 1)[0]
            yield self._read_section(index, body)

    def _read_section(self, index: int, body: str) -> ExchangeSection:
        return ExchangeSection(
            index=index,
            date_text=self._first_field(body, self.fields.date_fields),
            amount_text=self._first_field(body, self.fields.amount_fields),
            document_number=self._first_field(body, self.fields.document_number_fields),
            payer_name=self._first_field(body, self.fields.payer_name_fields),
            payer_tax_id=self._first_field(body, self.fields.payer_tax_id_fields),
            description=self._first_field(body, self.fields.description_fields),
            purpose_code=self._first_field(body, self.fields.purpose_code_fields),
            currency=self._first_field(body, self.fields.currency_fields),
        )

    def _section_to_transaction(
        self,
        section: ExchangeSection,
        diagnostics: ParseDiagnostics,
        today: Optional[date],
    ) -> Optional[RawTransaction]:
        """Validate a section and convert it to a RawTransaction."""
        if not section.date_text:
            logger.debug(f"Section {section.index}: no document date, skipping")
            diagnostics.record_drop(DropReason.MISSING_DATE)
            return None
        if not section.amount_text:
            logger.debug(f"Section {section.index}: no amount, skipping")
            diagnostics.record_drop(DropReason.MISSING_AMOUNT)
            return None

        amount_original = parse_amount(section.amount_text)
        if amount_original <= 0:
            logger.debug(
                f"Section {section.index}: non-positive amount {section.amount_text!r}, skipping"
            )
            diagnostics.record_drop(DropReason.NON_POSITIVE_AMOUNT)
            return None

        if parse_date_strict(section.date_text) is None:
            diagnostics.date_fallbacks += 1
            logger.warning(
                f"Section {section.index}: unrecognized date {section.date_text!r}, using today"
            )

        base_currency = self.config.input.base_currency
        currency = (section.currency or base_currency).upper()
        amount, rate = convert_to_base_currency(
            amount_original, currency, section.description, base_currency
        )
        if amount <= 0:
            logger.debug(
                f"Section {section.index}: converted amount {amount} at rate {rate} is not positive, skipping"
            )
            diagnostics.record_drop(DropReason.NON_POSITIVE_AMOUNT)
            return None

        return RawTransaction(
            date=date.fromisoformat(parse_date(section.date_text, today)),
            amount=amount,
            amount_original=amount_original,
            currency=currency,
            exchange_rate=rate,
            counterparty_name_raw=section.payer_name,
            counterparty_tax_id=section.payer_tax_id,
            description=section.description,
            document_number=section.document_number,
            purpose_code=section.purpose_code,
            payment_type=detect_payment_type(section.description, self.config.payment_types),
        )

    def _first_field(self, body: str, names: list[str]) -> str:
        """Value of the first listed field present in the section."""
        for name in names:
            value = self._get_field(body, name)
            if value:
                return value
        return ""

    def _get_field(self, body: str, name: str) -> str:
        """
        Read "Name=value" from a section.

        A match at the start of a line is preferred; a loose match anywhere in
        the section is the fallback for exports that indent their fields.
        """
        if name not in self._patterns:
            escaped = re.escape(name)
            self._patterns[name] = (
                re.compile(rf"^{escaped}=(.*)$", re.IGNORECASE | re.MULTILINE),
                re.compile(rf"{escaped}=(.*)", re.IGNORECASE),
            )

        for pattern in self._patterns[name]:
            match = pattern.search(body)
            if match:
                return match.group(1).strip()
        return ""

    def get_file_summary(self, content: str) -> dict:
        """
        Read the file header (everything before the first document section).

        Args:
            content: Decoded file text

        Returns:
            Dictionary with header values and the section count
        """
        header, _, _ = content.partition(self.fields.section_start)
        summary = {key: self._get_field(header, name) for key, name in HEADER_FIELDS.items()}
        summary["section_count"] = content.count(self.fields.section_start)
        return summary
