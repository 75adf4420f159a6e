"""
Row parser for yearly registry extracts.

Extract layout:
- line 1: column names
- line 2: separator/units row (always discarded)
- line 3+: one company per line, semicolon-delimited, double-quote escaped

The year an extract represents is taken from its filename.
"""

import csv
import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Union

from lokalradar.registry.encoding import decode_extract

logger = logging.getLogger(__name__)


DELIMITER = ";"
QUOTE_CHAR = '"'

# Column names in the Brønnøysund extract
COL_ORGNR = "Orgnr"
COL_NAME = "Navn"
COL_ADDRESS = "Forretningsadresse"
COL_POSTAL_CODE = "Fadr postnr"
COL_POSTAL_PLACE = "Fadr poststed"
COL_EMPLOYEES = "Antall ansatte"
COL_FOUNDED = "Stiftelsesdato"
COL_ORG_FORM = "Organisasjonsform"

REQUIRED_COLUMNS = (
    COL_ORGNR,
    COL_NAME,
    COL_ADDRESS,
    COL_POSTAL_CODE,
    COL_POSTAL_PLACE,
    COL_EMPLOYEES,
)
OPTIONAL_COLUMNS = (COL_FOUNDED, COL_ORG_FORM)

# First four consecutive digits, also the leading four of a longer run
YEAR_PATTERN = re.compile(r"(\d{4})")

MIN_LINES = 3


@dataclass
class RawRow:
    """One data line mapped by column name, tagged with its extract year."""

    fields: dict[str, str]
    year: Optional[int]

    def get(self, column: str) -> str:
        return self.fields.get(column, "")


@dataclass
class ParsedExtract:
    """Result of parsing one extract file."""

    filename: str
    year: Optional[int]
    rows: list[RawRow] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)

    @property
    def is_usable(self) -> bool:
        """Rows can only be placed on a timeline when the year is known."""
        return self.year is not None and bool(self.rows)

    @property
    def missing_columns(self) -> list[str]:
        return [c for c in REQUIRED_COLUMNS if c not in self.columns]


def extract_year(filename: str) -> Optional[int]:
    """
    Get the extract year from a filename.

    Examples:
    - "enheter_2015.csv" -> 2015
    - "brreg-2023-01.csv" -> 2023
    - "enheter.csv" -> None
    - "export_20230101.csv" -> 2023
    """
    match = YEAR_PATTERN.search(filename or "")
    return int(match.group(1)) if match else None


def split_line(line: str) -> list[str]:
    """
    Split one extract line into trimmed fields.

    A delimiter inside a double-quoted span is literal and a doubled quote
    inside a quoted span is an escaped quote.
    """
    reader = csv.reader(
        [line],
        delimiter=DELIMITER,
        quotechar=QUOTE_CHAR,
        doublequote=True,
        skipinitialspace=True,
        strict=False,
    )
    values = next(reader, [])
    return [v.strip() for v in values]


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def parse_extract(
    content: Union[bytes, str],
    filename: str,
    char_map: Optional[dict[int, str]] = None,
    remap: bool = True,
) -> ParsedExtract:
    """
    Parse one registry extract.

    Short files and blank lines are not errors: a file with fewer than three
    non-blank lines yields no rows, and lines whose fields are all empty are
    dropped.

    Args:
        content: Raw file content
        filename: Original filename, used for the year
        char_map: Override for the legacy byte -> letter table
        remap: Apply the legacy byte table

    Returns:
        ParsedExtract with rows and year (None if the filename has no year)
    """
    year = extract_year(filename)
    text = normalize_newlines(decode_extract(content, char_map=char_map, remap=remap))

    lines = [line for line in text.split("\n") if line.strip()]
    if len(lines) < MIN_LINES:
        logger.info(f"Skipping {filename}: only {len(lines)} non-blank lines")
        return ParsedExtract(filename=filename, year=year)

    columns = split_line(lines[0])
    rows = []
    dropped = 0

    for line in lines[2:]:
        values = split_line(line)
        if not any(values):
            dropped += 1
            continue

        fields = {
            column: values[index] if index < len(values) else ""
            for index, column in enumerate(columns)
        }
        rows.append(RawRow(fields=fields, year=year))

    parsed = ParsedExtract(filename=filename, year=year, rows=rows, columns=columns)

    if parsed.missing_columns:
        logger.warning(f"{filename} is missing columns: {', '.join(parsed.missing_columns)}")
    if year is None:
        logger.warning(f"No year token in filename {filename}, its rows will be ignored")

    logger.debug(f"Parsed {filename}: {len(rows)} rows, {dropped} empty lines dropped")
    return parsed
