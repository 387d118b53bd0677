"""Statement format detection."""

from typing import Optional

from ..config import InputConfig
from ..models.transaction import StatementFormat

DELIMITED_SNIFF_CHAR = ";"
DELIMITED_MIN_FIELDS = 3


def file_extension(file_name: str) -> str:
    """Lower-case extension without the dot, or an empty string."""
    if not file_name or "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[1].lower()


def detect_format(
    content: str,
    file_name: str = "",
    config: Optional[InputConfig] = None,
) -> StatementFormat:
    """
    Classify decoded statement text.

    The 1C exchange markers win over everything else. A tabular file
    extension, or a first line with more than three ";"-separated fields
    followed by at least one more line, means a delimited export.
    """
    config = config or InputConfig()

    if any(marker in content for marker in config.exchange_markers):
        return StatementFormat.PROPRIETARY

    if file_extension(file_name) in config.tabular_extensions:
        return StatementFormat.DELIMITED

    if DELIMITED_SNIFF_CHAR in content and "\n" in content:
        lines = content.strip().split("\n")
        if len(lines) > 1 and len(lines[0].split(DELIMITED_SNIFF_CHAR)) > DELIMITED_MIN_FIELDS:
            return StatementFormat.DELIMITED

    return StatementFormat.UNKNOWN
