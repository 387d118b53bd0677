"""
Command-line interface for the bank statement import tool.
"""

from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .config import generate_default_config, load_config
from .models.counterparty import MatchSource
from .models.result import ImportResult
from .models.transaction import Classification, StatementFormat
from .parsers.delimited_parser import DelimitedParser
from .parsers.detector import detect_format, file_extension
from .parsers.encoding import decode_statement
from .parsers.exchange_parser import ExchangeFormatParser
from .pipeline import StatementImporter
from .reports.excel_generator import ReviewReportGenerator
from .resolver.aliases import AliasCache, AliasRegistry
from .stores.memory import RecordingTaxIdSink
from .stores.yaml_store import YamlAliasStore, load_clients, load_employees, load_ledger
from .utils.exceptions import StatementImportError
from .utils.logging_config import setup_logging

console = Console()

PREVIEW_ROWS = 20

CLASSIFICATION_STYLES = {
    Classification.NEW: "white",
    Classification.VERIFIED: "green",
    Classification.DISCREPANCY: "yellow",
    Classification.DUPLICATE: "red",
}


@click.group()
@click.version_option(version="0.1.0")
def main():
    """Bank Statement Import and Reconciliation Tool."""
    pass


@main.command("import")
@click.argument("statement_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--clients",
    "clients_file",
    required=True,
    type=click.Path(exists=True, path_type=Path),
    help="Clients file (YAML/JSON list)",
)
@click.option(
    "--aliases",
    "aliases_file",
    type=click.Path(path_type=Path),
    help="Confirmed aliases file (YAML list)",
)
@click.option(
    "--employees",
    "employees_file",
    type=click.Path(exists=True, path_type=Path),
    help="Employees file (YAML/JSON list)",
)
@click.option(
    "--ledger",
    "ledger_file",
    type=click.Path(exists=True, path_type=Path),
    help="Existing ledger transactions (YAML/JSON list)",
)
@click.option("--org", "organization_id", default="default", help="Organization ID")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output Excel file path")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "--dry-run", is_flag=True, help="Import and show summary without generating report"
)
def import_command(
    statement_file: Path,
    clients_file: Path,
    aliases_file: Optional[Path],
    employees_file: Optional[Path],
    ledger_file: Optional[Path],
    organization_id: str,
    config: Optional[Path],
    output: Optional[Path],
    verbose: bool,
    dry_run: bool,
):
    """
    Import a bank statement and classify it against the ledger.

    STATEMENT_FILE: 1C exchange (.txt), CSV or spreadsheet export
    """
    try:
        import_config = load_config(config)
        setup_logging(
            logging.DEBUG if verbose else import_config.logging.level,
            log_format=import_config.logging.format,
        )

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Loading reference data...", total=None)
            clients = load_clients(clients_file)
            employees = load_employees(employees_file) if employees_file else []
            ledger = load_ledger(ledger_file) if ledger_file else []
            aliases = []
            if aliases_file:
                registry = AliasRegistry(
                    YamlAliasStore(aliases_file), AliasCache.from_config(import_config.alias_cache)
                )
                aliases = registry.get_aliases(organization_id)
            progress.update(task, completed=True)

            task = progress.add_task("Importing statement...", total=None)
            sink = RecordingTaxIdSink()
            importer = StatementImporter(import_config, tax_id_sink=sink)
            result = importer.import_file(statement_file, clients, aliases, ledger, employees)
            progress.update(task, completed=True)

        _display_summary(result)

        if dry_run:
            console.print("\n[yellow]Dry run - no report generated[/yellow]")
            return

        report_generator = ReviewReportGenerator(import_config)
        if output is None:
            output = report_generator.default_output_path()
        report_path = report_generator.generate_report(result, output)

        console.print(f"\n[green]Report generated: {report_path}[/green]")

    except StatementImportError as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command("parse")
@click.argument("statement_file", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def parse_statement(statement_file: Path, config: Optional[Path]):
    """
    Parse a bank statement and display its transactions.

    STATEMENT_FILE: 1C exchange (.txt), CSV or spreadsheet export
    """
    try:
        import_config = load_config(config)
        data = statement_file.read_bytes()

        if file_extension(statement_file.name) in import_config.input.workbook_extensions:
            transactions, diagnostics = DelimitedParser(import_config).parse_workbook(data)
        else:
            content = decode_statement(data, import_config.input)
            statement_format = detect_format(content, statement_file.name, import_config.input)
            if statement_format is StatementFormat.PROPRIETARY:
                exchange_parser = ExchangeFormatParser(import_config)
                _display_file_summary(exchange_parser.get_file_summary(content))
                transactions, diagnostics = exchange_parser.parse_text(content)
            elif statement_format is StatementFormat.DELIMITED:
                transactions, diagnostics = DelimitedParser(import_config).parse_text(content)
            else:
                console.print(f"[yellow]Unrecognized statement format: {statement_file.name}[/yellow]")
                return

        table = Table(title=f"Statement Transactions: {statement_file.name} ({diagnostics.format.value})")
        table.add_column("Date")
        table.add_column("Doc No.")
        table.add_column("Amount", justify="right")
        table.add_column("Currency")
        table.add_column("Payer")
        table.add_column("Type")
        table.add_column("Description")

        for txn in transactions[:PREVIEW_ROWS]:
            table.add_row(
                str(txn.date),
                txn.document_number or "-",
                f"{txn.amount:,.2f}",
                txn.currency,
                txn.counterparty_name_raw or "-",
                txn.payment_type.value,
                (
                    txn.description[:40] + "..."
                    if len(txn.description) > 40
                    else txn.description
                ),
            )

        console.print(table)

        if len(transactions) > PREVIEW_ROWS:
            console.print(f"\n... and {len(transactions) - PREVIEW_ROWS} more transactions")

        console.print(f"\nTotal transactions: {len(transactions)}")
        if diagnostics.total_dropped or diagnostics.date_fallbacks:
            _display_diagnostics(diagnostics)

    except (StatementImportError, OSError) as e:
        console.print(f"[red]Error parsing file: {e}[/red]")
        sys.exit(1)


@main.command("confirm-alias")
@click.argument("aliases_file", type=click.Path(path_type=Path))
@click.option("--org", "organization_id", default="default", help="Organization ID")
@click.option("--name", "bank_name", required=True, help="Payer name as shown by the bank")
@click.option("--tax-id", default="", help="Payer tax ID as shown by the bank")
@click.option("--client-id", required=True, help="Client the payer belongs to")
def confirm_alias(
    aliases_file: Path, organization_id: str, bank_name: str, tax_id: str, client_id: str
):
    """
    Record a confirmed payer-to-client match.

    ALIASES_FILE: YAML alias store (created if missing)
    """
    try:
        registry = AliasRegistry(YamlAliasStore(aliases_file))
        registry.save_alias(organization_id, bank_name, tax_id, client_id)
    except StatementImportError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    console.print(f"[green]Alias saved: {bank_name} -> {client_id}[/green]")


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _display_summary(result: ImportResult) -> None:
    """Display import summary in console."""
    table = Table(title=f"Import Summary: {result.file_name}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    counts = result.count_by_classification()
    sources = result.count_by_match_source()

    table.add_row("Format", result.format.value)
    table.add_row("Parsed Transactions", str(len(result.transactions)))
    for classification, count in counts.items():
        style = CLASSIFICATION_STYLES[classification]
        table.add_row(f"[{style}]{classification.value.capitalize()}[/{style}]", str(count))
    table.add_row("Resolved Payers", str(len(result.transactions) - sources[MatchSource.NONE]))
    table.add_row("Unresolved Payers", str(sources[MatchSource.NONE]))
    table.add_row("Dropped Records", str(result.diagnostics.total_dropped))
    table.add_row("Discovered Tax IDs", str(len(result.tax_id_updates)))
    table.add_row("Total Amount", f"{result.total_amount:,.2f}")
    table.add_row("Processing Time", f"{result.processing_time_seconds:.2f}s")

    console.print(table)


def _display_file_summary(summary: dict) -> None:
    """Display the header values of a 1C exchange file."""
    table = Table(title="File Header")
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    for key, value in summary.items():
        table.add_row(key.replace("_", " ").capitalize(), str(value) if value != "" else "-")

    console.print(table)


def _display_diagnostics(diagnostics) -> None:
    """Display dropped record counts."""
    table = Table(title="Parse Diagnostics")
    table.add_column("Drop Reason", style="cyan")
    table.add_column("Count", justify="right")

    for reason, count in diagnostics.dropped.items():
        table.add_row(reason.value, str(count))
    if diagnostics.date_fallbacks:
        table.add_row("date defaulted to today", str(diagnostics.date_fallbacks))

    console.print(table)


if __name__ == "__main__":
    main()
