"""
Counterparty name normalization.

Bank exports wrap long payer names at fixed widths, sometimes splitting
legal-form words in the middle. These helpers undo the damage for display
(sanitize_name, title_case) and reduce names to a form that can be compared
for equality (to_comparable_form).
"""

import re

# Legal-form words that banks are known to split when wrapping lines
WRAP_POINTS: tuple[tuple[str, str], ...] = (
    ("Товарище", "ство"),
    ("Обще", "ство"),
    ("Предприя", "тие"),
    ("Учрежде", "ние"),
    ("Акционер", "ное"),
    ("ответствен", "ностью"),
    ("ограничен", "ной"),
)

# Legal-form abbreviations kept upper-case at the start of a display name
LEGAL_FORM_ABBREVIATIONS: tuple[str, ...] = (
    "ТОО",
    "ИП",
    "АО",
    "ЖШС",
    "ОАО",
    "ЗАО",
    "ПАО",
    "НАО",
    "КТ",
    "КХ",
    "ПК",
    "РГП",
    "ГКП",
    "КГП",
    "ГУ",
    "РГУ",
)

# Prefixes ignored when comparing names (lower-case, whole words)
COMPARISON_STRIP_PREFIXES: tuple[str, ...] = ("тоо", "ип", "ао")

TAX_ID_LENGTH = 12

_LINE_BREAKS = re.compile(r"\r\n?")
_WRAP_CHARS = re.compile(r"[\n/]+")
_WHITESPACE = re.compile(r"\s+")
_WRAP_PATTERNS = [
    re.compile(rf"({head})\s+({tail})", re.IGNORECASE) for head, tail in WRAP_POINTS
]
_TAX_ID = re.compile(rf"(?<![0-9])([0-9]{{{TAX_ID_LENGTH}}})(?![0-9])")
_QUOTES = re.compile("[«»\"“”„‟]")
_STRIP_PREFIXES = re.compile(
    r"\b(?:" + "|".join(COMPARISON_STRIP_PREFIXES) + r")\b"
)
_NON_ALNUM = re.compile(r"[^\w\s]|_")
_ACRONYM_MAX_LENGTH = 5


def sanitize_name(raw: str) -> str:
    """
    Undo bank line-wrapping in a counterparty name.

    Line breaks and slashes become single spaces, whitespace runs collapse,
    and legal-form words split at a known wrap point are re-joined with their
    original casing. Idempotent.
    """
    if not raw:
        return ""

    result = _LINE_BREAKS.sub("\n", raw)
    result = _WRAP_CHARS.sub(" ", result)
    result = _WHITESPACE.sub(" ", result).strip()

    for pattern in _WRAP_PATTERNS:
        result = pattern.sub(r"\1\2", result)

    return result


def extract_tax_id(text: str) -> str:
    """Return the first standalone 12-digit run in text, or an empty string."""
    if not text:
        return ""
    match = _TAX_ID.search(text)
    return match.group(1) if match else ""


def to_comparable_form(value: str) -> str:
    """
    Reduce a name to the form used for equality and similarity checks.

    Never use the result for display: legal-form prefixes, quotes and
    punctuation are gone and everything is lower-case.
    """
    if not value:
        return ""

    result = sanitize_name(value).lower()
    result = _QUOTES.sub("", result)
    result = result.replace("ё", "е")
    result = _STRIP_PREFIXES.sub(" ", result)
    result = _NON_ALNUM.sub("", result)
    return _WHITESPACE.sub(" ", result).strip()


def title_case(raw: str) -> str:
    """
    Human-readable form of a bank-displayed name.

    "ТОО ЗЕЛЕНАЯ ДОЛИНА" -> "ТОО Зеленая Долина". A leading legal-form
    abbreviation stays upper-case; quoted words, words starting with a digit
    and short all-caps acronyms are kept as they are.
    """
    if not raw or not raw.strip():
        return raw

    sanitized = sanitize_name(raw)

    if _starts_with_legal_form(sanitized):
        prefix, _, rest = sanitized.partition(" ")
        if not rest:
            return sanitized
        return prefix.upper() + " " + " ".join(_format_word(w) for w in rest.split(" "))

    return " ".join(_format_word(w) for w in sanitized.split(" "))


def _starts_with_legal_form(name: str) -> bool:
    upper = name.upper()
    return any(
        upper.startswith(abbr + " ") or upper.startswith('"' + abbr + " ")
        for abbr in LEGAL_FORM_ABBREVIATIONS
    )


def _format_word(word: str) -> str:
    if not word or word[0] in "\"«" or word[0].isdigit():
        return word
    if word.isalpha() and word.isupper() and len(word) <= _ACRONYM_MAX_LENGTH:
        return word
    return _capitalize(word)


def _capitalize(word: str) -> str:
    lowered = word.lower()
    for i, char in enumerate(lowered):
        if char.isalpha():
            return lowered[:i] + char.upper() + lowered[i + 1 :]
    return lowered
