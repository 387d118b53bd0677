"""Decoding of statement bytes with code-page fallback."""

from typing import Optional
import logging

from ..config import InputConfig

logger = logging.getLogger(__name__)

REPLACEMENT_CHAR = "\ufffd"


def needs_fallback(text: str, config: InputConfig) -> bool:
    """True when text looks like it was decoded with the wrong code page."""
    if REPLACEMENT_CHAR in text:
        return True
    return not any(token in text for token in config.expected_tokens)


def decode_statement(data: bytes, config: Optional[InputConfig] = None) -> str:
    """
    Decode a statement file.

    Kazakh and Russian banks mostly export windows-1251, so that is tried
    first; if the result contains replacement characters or none of the
    expected tokens, the bytes are decoded again with the fallback encoding.
    """
    config = config or InputConfig()

    text = data.decode(config.primary_encoding, errors="replace")
    if not needs_fallback(text, config):
        return text

    logger.debug(
        f"Decoding with {config.primary_encoding} looks wrong, "
        f"retrying with {config.fallback_encoding}"
    )
    return data.decode(config.fallback_encoding, errors="replace")
