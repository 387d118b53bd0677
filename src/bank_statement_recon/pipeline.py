"""
Statement import pipeline.

Wires format detection, parsing, counterparty resolution and reconciliation
into one job: statement in, ordered list of classified transactions out.
"""

from datetime import date, datetime
from pathlib import Path
from typing import Optional
import logging
import time

from .config import ImportConfig
from .matching.engine import ReconciliationMatcher
from .models.counterparty import (
    Client,
    CounterpartyAlias,
    Employee,
    MatchSource,
    ResolvedCounterparty,
)
from .models.result import ClassifiedTransaction, ClientTaxIdUpdate, ImportResult
from .models.transaction import (
    LedgerTransaction,
    ParseDiagnostics,
    RawTransaction,
    StatementFormat,
)
from .normalization.text import extract_tax_id, sanitize_name
from .parsers.delimited_parser import DelimitedParser
from .parsers.detector import detect_format, file_extension
from .parsers.encoding import decode_statement
from .parsers.exchange_parser import ExchangeFormatParser
from .resolver.resolver import CounterpartyResolver
from .stores.base import ClientTaxIdSink
from .utils.exceptions import StatementParseError

logger = logging.getLogger(__name__)

# Resolution sources that prove the client without matching its tax ID
TAX_ID_DISCOVERY_SOURCES = (MatchSource.ALIAS, MatchSource.NAME_FUZZY)


class StatementImporter:
    """
    Runs one statement import job.

    Reference data (clients, aliases, employees, ledger) is passed per call
    and read once per job; the importer itself holds only configuration.
    """

    def __init__(
        self,
        config: Optional[ImportConfig] = None,
        tax_id_sink: Optional[ClientTaxIdSink] = None,
    ):
        """
        Initialize the importer.

        Args:
            config: Application configuration object
            tax_id_sink: Receives tax IDs discovered for clients without one
        """
        self.config = config or ImportConfig()
        self.tax_id_sink = tax_id_sink
        self.exchange_parser = ExchangeFormatParser(self.config)
        self.delimited_parser = DelimitedParser(self.config)
        self.matcher = ReconciliationMatcher(self.config.matching)

    def import_file(
        self,
        file_path: Path,
        clients: list[Client],
        aliases: list[CounterpartyAlias],
        ledger: list[LedgerTransaction],
        employees: Optional[list[Employee]] = None,
    ) -> ImportResult:
        """
        Read a statement from disk and import it.

        Raises:
            StatementParseError: If the file cannot be read
        """
        logger.info(f"Importing statement file: {file_path}")
        try:
            data = file_path.read_bytes()
        except OSError as e:
            raise StatementParseError(f"Failed to read statement file: {e}") from e

        return self.import_bytes(data, file_path.name, clients, aliases, ledger, employees)

    def import_bytes(
        self,
        data: bytes,
        file_name: str,
        clients: list[Client],
        aliases: list[CounterpartyAlias],
        ledger: list[LedgerTransaction],
        employees: Optional[list[Employee]] = None,
    ) -> ImportResult:
        """Import raw file bytes; spreadsheets are parsed without decoding."""
        if file_extension(file_name) in self.config.input.workbook_extensions:
            start_time = time.time()
            transactions, diagnostics = self.delimited_parser.parse_workbook(data)
            return self._reconcile(
                file_name, transactions, diagnostics, clients, aliases, ledger,
                employees, start_time,
            )

        content = decode_statement(data, self.config.input)
        return self.import_text(content, file_name, clients, aliases, ledger, employees)

    def import_text(
        self,
        content: str,
        file_name: str,
        clients: list[Client],
        aliases: list[CounterpartyAlias],
        ledger: list[LedgerTransaction],
        employees: Optional[list[Employee]] = None,
        today: Optional[date] = None,
    ) -> ImportResult:
        """
        Import decoded statement text.

        Args:
            content: Decoded statement text
            file_name: Original file name, used for format detection
            clients: Clients of the organization
            aliases: Confirmed aliases of the organization
            ledger: Existing ledger transactions of the organization
            employees: Employees of the organization (optional)
            today: Date substituted for unrecognized statement dates

        Returns:
            ImportResult with transactions in statement order
        """
        start_time = time.time()
        statement_format = detect_format(content, file_name, self.config.input)
        logger.info(f"Detected format {statement_format.value} for {file_name or '<text>'}")

        if statement_format is StatementFormat.PROPRIETARY:
            transactions, diagnostics = self.exchange_parser.parse_text(content, today)
        elif statement_format is StatementFormat.DELIMITED:
            transactions, diagnostics = self.delimited_parser.parse_text(content, today)
        else:
            logger.warning(f"Unrecognized statement format: {file_name or '<text>'}")
            transactions, diagnostics = [], ParseDiagnostics(format=StatementFormat.UNKNOWN)

        return self._reconcile(
            file_name, transactions, diagnostics, clients, aliases, ledger,
            employees, start_time,
        )

    def _reconcile(
        self,
        file_name: str,
        transactions: list[RawTransaction],
        diagnostics: ParseDiagnostics,
        clients: list[Client],
        aliases: list[CounterpartyAlias],
        ledger: list[LedgerTransaction],
        employees: Optional[list[Employee]],
        start_time: float,
    ) -> ImportResult:
        resolver = CounterpartyResolver(clients, aliases, employees, self.config.resolver)
        clients_by_id = {c.id: c for c in clients}

        classified: list[ClassifiedTransaction] = []
        tax_id_updates: dict[str, ClientTaxIdUpdate] = {}

        for txn in transactions:
            counterparty = resolver.resolve(txn.counterparty_name_raw, txn.counterparty_tax_id)
            reconciliation = self.matcher.match(txn, counterparty, ledger)
            classified.append(ClassifiedTransaction(txn, counterparty, reconciliation))

            update = self._discover_tax_id(txn, counterparty, clients_by_id)
            if update and update.client_id not in tax_id_updates:
                tax_id_updates[update.client_id] = update

        for update in tax_id_updates.values():
            logger.info(f"Discovered tax ID {update.tax_id} for client {update.client_id}")
            if self.tax_id_sink is not None:
                self.tax_id_sink.update_client_tax_id(update.client_id, update.tax_id)

        result = ImportResult(
            file_name=file_name,
            format=diagnostics.format,
            transactions=classified,
            diagnostics=diagnostics,
            tax_id_updates=list(tax_id_updates.values()),
            imported_at=datetime.now(),
            processing_time_seconds=time.time() - start_time,
        )

        summary = result.summary()
        logger.info(
            f"Imported {file_name or '<text>'}: "
            + ", ".join(f"{key}={value}" for key, value in summary.items())
        )
        return result

    @staticmethod
    def _discover_tax_id(
        txn: RawTransaction,
        counterparty: ResolvedCounterparty,
        clients_by_id: dict[str, Client],
    ) -> Optional[ClientTaxIdUpdate]:
        """A tax ID update for a client matched without one, if any."""
        if counterparty.match_source not in TAX_ID_DISCOVERY_SOURCES:
            return None

        tax_id = txn.counterparty_tax_id.strip() or extract_tax_id(
            sanitize_name(txn.counterparty_name_raw)
        )
        if not tax_id:
            return None

        client = clients_by_id.get(counterparty.client_id or "")
        if client is None or client.tax_id:
            return None
        return ClientTaxIdUpdate(client_id=client.id, tax_id=tax_id)


def import_statement(
    content: str,
    file_name: str,
    clients: list[Client],
    aliases: list[CounterpartyAlias],
    ledger: list[LedgerTransaction],
    employees: Optional[list[Employee]] = None,
    config: Optional[ImportConfig] = None,
    tax_id_sink: Optional[ClientTaxIdSink] = None,
) -> ImportResult:
    """Import decoded statement text with a one-off StatementImporter."""
    importer = StatementImporter(config, tax_id_sink)
    return importer.import_text(content, file_name, clients, aliases, ledger, employees)
