"""
Decoding of registry extract files.

Some extracts are produced by a legacy export where Norwegian letters are
written as single bytes in the 0x80-0x9F range (DOS code page style) inside
otherwise Latin-1/UTF-8 text. Those bytes survive decoding as C1 control
characters, which are remapped here before any text processing.

The table is reverse-engineered from the observed corpus, not taken from a
documented encoding. Callers with a different source can pass their own.
"""

import logging
from typing import Optional, Union

logger = logging.getLogger(__name__)


# Code point -> letter. Mostly matches CP865; 0x8D, 0x8E and 0x9A were
# inferred from context in the observed files.
LEGACY_CHAR_MAP: dict[int, str] = {
    0x86: "å",
    0x8F: "Å",
    0x8D: "å",
    0x91: "æ",
    0x8E: "Æ",
    0x9B: "ø",
    0x9D: "Ø",
    0x9A: "Ø",
}

BYTE_ORDER_MARK = "\ufeff"


def build_translation(char_map: dict[int, str]) -> dict[int, str]:
    """Validate a byte map and turn it into a str.translate table."""
    table = {}
    for code, letter in char_map.items():
        if not 0 <= code <= 0xFF:
            raise ValueError(f"Legacy map key out of byte range: {code:#x}")
        table[code] = letter
    return table


def remap_legacy_chars(text: str, char_map: Optional[dict[int, str]] = None) -> str:
    """Replace legacy single-byte letters in already decoded text."""
    table = build_translation(LEGACY_CHAR_MAP if char_map is None else char_map)
    return text.translate(table)


def decode_extract(
    content: Union[bytes, str],
    char_map: Optional[dict[int, str]] = None,
    remap: bool = True,
) -> str:
    """
    Decode raw extract content to text.

    Strict UTF-8 is tried first; anything else is read byte-for-byte as
    Latin-1 so every byte keeps its literal code point. The legacy map is
    then applied to both cases.

    Args:
        content: Raw file bytes (or text that was already decoded)
        char_map: Override for the legacy byte -> letter table
        remap: Apply the legacy table at all

    Returns:
        Decoded text with a leading byte-order mark removed
    """
    if isinstance(content, bytes):
        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("Extract is not valid UTF-8, decoding as Latin-1")
            text = content.decode("latin-1")
    else:
        text = content

    if text.startswith(BYTE_ORDER_MARK):
        text = text[1:]

    if remap:
        text = remap_legacy_chars(text, char_map)

    return text
