"""Configuration loader and validation for statement import settings."""

from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class InputConfig(BaseModel):
    """Configuration for reading and decoding statement files."""

    primary_encoding: str = "cp1251"
    fallback_encoding: str = "utf-8"
    base_currency: str = "KZT"
    # Any of these in the text identifies the 1C client-bank exchange format
    exchange_markers: list[str] = Field(
        default_factory=lambda: ["1CClientBankExchange", "СекцияДокумент"]
    )
    # Text decoded with the wrong code page will lack all of these
    expected_tokens: list[str] = Field(
        default_factory=lambda: ["СекцияДокумент", "Дата"]
    )
    tabular_extensions: list[str] = Field(default_factory=lambda: ["csv", "xls", "xlsx"])
    workbook_extensions: list[str] = Field(default_factory=lambda: ["xls", "xlsx"])


class ExchangeFormatConfig(BaseModel):
    """Section markers and field names of the 1C client-bank exchange format."""

    section_start: str = "СекцияДокумент"
    section_end: str = "КонецДокумента"
    date_fields: list[str] = Field(default_factory=lambda: ["ДатаДокумента", "ДатаОперации"])
    amount_fields: list[str] = Field(default_factory=lambda: ["Сумма"])
    document_number_fields: list[str] = Field(default_factory=lambda: ["НомерДокумента"])
    payer_name_fields: list[str] = Field(
        default_factory=lambda: ["ПлательщикНаименование", "Плательщик"]
    )
    payer_tax_id_fields: list[str] = Field(
        default_factory=lambda: ["Плательщик_ИНН", "Плательщик_БИН", "ПлательщикИНН"]
    )
    description_fields: list[str] = Field(default_factory=lambda: ["НазначениеПлатежа"])
    purpose_code_fields: list[str] = Field(default_factory=lambda: ["КодНазначенияПлатежа"])
    currency_fields: list[str] = Field(default_factory=lambda: ["Валюта"])


class DelimitedConfig(BaseModel):
    """Header keywords used to locate logical columns in tabular exports."""

    date: list[str] = Field(default_factory=lambda: ["дата", "date"])
    name: list[str] = Field(
        default_factory=lambda: ["наименование", "фио", "контрагент", "плательщик", "name"]
    )
    credit: list[str] = Field(
        default_factory=lambda: ["зачислен", "приход", "credit", "кредит"]
    )
    debit: list[str] = Field(default_factory=lambda: ["списан", "расход", "debit", "дебет"])
    amount: list[str] = Field(default_factory=lambda: ["сумма", "amount"])
    description: list[str] = Field(
        default_factory=lambda: ["назначение", "описание", "description", "purpose"]
    )
    purpose_code: list[str] = Field(default_factory=lambda: ["кнп", "knp", "код"])
    tax_id: list[str] = Field(
        default_factory=lambda: ["бин", "иин", "bin", "iin", "инн", "inn"]
    )
    # Workbook exports only
    currency: list[str] = Field(default_factory=lambda: ["валюта", "currency"])
    document_number: list[str] = Field(
        default_factory=lambda: ["номер", "документ", "doc", "number"]
    )
    header_scan_rows: int = 10
    header_markers: list[str] = Field(default_factory=lambda: ["дата", "date", "сумма"])
    min_cells: int = 3


class PaymentTypeConfig(BaseModel):
    """Keyword groups for payment type classification, checked in this order."""

    prepayment: list[str] = Field(default_factory=lambda: ["предоплат", "аванс"])
    refund: list[str] = Field(default_factory=lambda: ["возврат", "refund"])
    retainer: list[str] = Field(default_factory=lambda: ["абон", "ретейнер", "ежемес"])
    # All keywords must be present
    full: list[str] = Field(default_factory=lambda: ["полн", "оплат"])


class ResolverConfig(BaseModel):
    """Thresholds for the partial name match rule."""

    min_name_length: int = 5
    min_length_ratio: float = 0.4
    containment_ratio: float = 0.6
    min_word_length: int = 3
    min_employee_tax_id_digits: int = 10


class MatchingConfig(BaseModel):
    """Configuration for the reconciliation matcher."""

    document_tag_template: str = "[DOC:{number}]"
    date_window_days: int = 3
    amount_tolerance: float = 0.01
    close_amount_percent: float = 5.0


class AliasCacheConfig(BaseModel):
    """Capacity and expiry of the per-organization alias cache."""

    capacity: int = 64
    ttl_seconds: float = 300.0


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all review report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    transactions: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Transactions")
    )
    needs_review: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Needs Review")
    )
    discrepancies: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Discrepancies")
    )
    duplicates: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Duplicates"))
    diagnostics: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Parse Diagnostics")
    )


class ExcelOutputConfig(BaseModel):
    """Configuration for Excel output."""

    filename_template: str = "statement_review_{date}_{time}.xlsx"


class OutputConfig(BaseModel):
    """Configuration for output."""

    excel: ExcelOutputConfig = Field(default_factory=ExcelOutputConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ImportConfig(BaseModel):
    """Main configuration model for statement import."""

    input: InputConfig = Field(default_factory=InputConfig)
    exchange: ExchangeFormatConfig = Field(default_factory=ExchangeFormatConfig)
    delimited: DelimitedConfig = Field(default_factory=DelimitedConfig)
    payment_types: PaymentTypeConfig = Field(default_factory=PaymentTypeConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    alias_cache: AliasCacheConfig = Field(default_factory=AliasCacheConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    defaults = ImportConfig().model_dump(mode="json")
    defaults.pop("config_file_path", None)
    return defaults


def load_config(config_path: Optional[Path] = None) -> ImportConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ImportConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return ImportConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    yaml_content = """# Bank statement import configuration
# Generated configuration file - customize as needed

"""
    yaml_content += yaml.safe_dump(
        get_default_config(),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
