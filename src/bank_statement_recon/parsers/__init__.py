"""Parsers for 1C exchange, CSV and spreadsheet bank statements."""

from .delimited_parser import DelimitedParser
from .detector import detect_format
from .encoding import decode_statement
from .exchange_parser import ExchangeFormatParser
from .fields import (
    detect_payment_type,
    parse_amount,
    parse_date,
    parse_exchange_rate,
)

__all__ = [
    "DelimitedParser",
    "ExchangeFormatParser",
    "decode_statement",
    "detect_format",
    "detect_payment_type",
    "parse_amount",
    "parse_date",
    "parse_exchange_rate",
]
