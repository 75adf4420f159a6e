"""
Registry extract reading.

Turns raw semicolon-delimited extract files into column-mapped rows:
- Legacy single-byte letter remapping (å, ø, æ)
- Quote-aware field splitting
- Extract year from the filename
"""

from lokalradar.registry.encoding import (
    LEGACY_CHAR_MAP,
    decode_extract,
    remap_legacy_chars,
)
from lokalradar.registry.parser import (
    COL_ADDRESS,
    COL_EMPLOYEES,
    COL_FOUNDED,
    COL_NAME,
    COL_ORG_FORM,
    COL_ORGNR,
    COL_POSTAL_CODE,
    COL_POSTAL_PLACE,
    REQUIRED_COLUMNS,
    ParsedExtract,
    RawRow,
    extract_year,
    parse_extract,
    split_line,
)

__all__ = [
    # Encoding
    "LEGACY_CHAR_MAP",
    "decode_extract",
    "remap_legacy_chars",
    # Parsing
    "ParsedExtract",
    "RawRow",
    "extract_year",
    "parse_extract",
    "split_line",
    # Columns
    "COL_ORGNR",
    "COL_NAME",
    "COL_ADDRESS",
    "COL_POSTAL_CODE",
    "COL_POSTAL_PLACE",
    "COL_EMPLOYEES",
    "COL_FOUNDED",
    "COL_ORG_FORM",
    "REQUIRED_COLUMNS",
]
