"""
Field-level parsing shared by all statement formats.

Bank exports are irregular: amounts use locale decimal separators and
thousands spaces, dates come in two layouts, and foreign-currency payments
only carry their exchange rate inside the free-text payment description.
"""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional
import re

from ..config import PaymentTypeConfig
from ..models.transaction import PaymentType

ZERO = Decimal("0")
CENTS = Decimal("0.01")

_WHITESPACE = re.compile(r"\s+")
_DMY = re.compile(r"^(\d{2})\.(\d{2})\.(\d{4})$")
_YMD = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

# Tried in order; the first one found in the description wins
EXCHANGE_RATE_PATTERNS = (
    re.compile(r"курс\s+сделки\s+(\d+[.,]\d+)", re.IGNORECASE),
    re.compile(r"курс\s+(\d+[.,]\d+)", re.IGNORECASE),
)


def parse_amount(text: Optional[str]) -> Decimal:
    """
    Parse a statement amount such as "1 500,50" or "100000.00".

    Unparseable input yields zero, which makes the caller drop the record.
    """
    if not text:
        return ZERO

    cleaned = _WHITESPACE.sub("", str(text)).replace(",", ".")
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return ZERO

    if not value.is_finite():
        return ZERO
    return value


def parse_date_strict(text: Optional[str]) -> Optional[str]:
    """Return the ISO form of a DD.MM.YYYY or YYYY-MM-DD date, or None."""
    if not text:
        return None

    cleaned = text.strip()
    match = _DMY.match(cleaned)
    if match:
        day, month, year = match.groups()
        iso = f"{year}-{month}-{day}"
    elif _YMD.match(cleaned):
        iso = cleaned
    else:
        return None

    try:
        datetime.strptime(iso, "%Y-%m-%d")
    except ValueError:
        return None
    return iso


def parse_date(text: Optional[str], today: Optional[date] = None) -> str:
    """
    Parse a statement date to ISO YYYY-MM-DD.

    Unrecognized formats fall back to today's date. This is lossy; callers
    that care use parse_date_strict and count the fallback.
    """
    iso = parse_date_strict(text)
    if iso is not None:
        return iso
    return (today or date.today()).isoformat()


def parse_exchange_rate(description: Optional[str]) -> Optional[Decimal]:
    """Find the deal rate quoted in a payment description ("курс сделки 450,25")."""
    if not description:
        return None

    for pattern in EXCHANGE_RATE_PATTERNS:
        match = pattern.search(description)
        if match:
            return Decimal(match.group(1).replace(",", "."))
    return None


def convert_to_base_currency(
    amount_original: Decimal,
    currency: str,
    description: str,
    base_currency: str,
) -> tuple[Decimal, Optional[Decimal]]:
    """
    Express an amount in the base currency.

    Only foreign-currency amounts are converted, and only when the rate can
    be found in the description; otherwise the amount is used as printed.

    Returns:
        Tuple of (amount, exchange_rate or None)
    """
    if currency.upper() == base_currency.upper():
        return amount_original, None

    rate = parse_exchange_rate(description)
    if rate is None:
        return amount_original, None

    converted = (amount_original * rate).quantize(CENTS, rounding=ROUND_HALF_UP)
    return converted, rate


def detect_payment_type(
    description: Optional[str],
    keywords: Optional[PaymentTypeConfig] = None,
) -> PaymentType:
    """
    Classify the payment purpose from its description.

    Groups are checked in precedence order prepayment, refund, retainer,
    full payment; the full-payment group needs all of its keywords.
    Anything unrecognized is treated as a prepayment.
    """
    keywords = keywords or PaymentTypeConfig()
    lower = (description or "").lower()

    if any(k in lower for k in keywords.prepayment):
        return PaymentType.PREPAYMENT
    if any(k in lower for k in keywords.refund):
        return PaymentType.REFUND
    if any(k in lower for k in keywords.retainer):
        return PaymentType.RETAINER
    if keywords.full and all(k in lower for k in keywords.full):
        return PaymentType.FULL
    return PaymentType.PREPAYMENT
