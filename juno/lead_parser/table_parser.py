"""
Delimited-text parser for job lead spreadsheets.

Handles quoted fields containing delimiters or line breaks, doubled-quote
escapes, CRLF/LF/CR line endings and auto-detection of the delimiter
(comma, semicolon or tab).
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from ..utils import get_logger

logger = get_logger(__name__)

COMMA = ","
SEMICOLON = ";"
TAB = "\t"

EMAIL_HEADER = "emails"
PHONE_HEADER = "phone numbers"
DESCRIPTION_HEADER = "description"

_LINE_BREAK = re.compile(r"\r\n|\n|\r")


class SchemaError(ValueError):
    """Raised when the header row lacks the required columns."""

    def __init__(self, headers: Sequence[str]):
        self.headers = list(headers)
        super().__init__(
            "CSV must contain 'Emails' and 'Description' columns. Found: " + ", ".join(self.headers)
        )


@dataclass(frozen=True)
class RawRecord:
    """One job lead row from the input table."""
    email: str
    phone: str
    description: str


def detect_delimiter(text: str) -> str:
    """Pick the delimiter that dominates the first line, defaulting to comma."""
    first_line = _LINE_BREAK.split(text, maxsplit=1)[0]
    commas = first_line.count(COMMA)
    semicolons = first_line.count(SEMICOLON)
    tabs = first_line.count(TAB)

    if semicolons > commas and semicolons > tabs:
        return SEMICOLON
    if tabs > commas and tabs > semicolons:
        return TAB
    return COMMA


def tokenize(text: str, delimiter: str = COMMA) -> List[List[str]]:
    """
    Split text into rows of raw (untrimmed) cells.

    Quotes only open a quoted section outside of one; inside, a doubled quote
    is a literal quote and a single quote closes the section.
    """
    rows: List[List[str]] = []
    row: List[str] = []
    field: List[str] = []
    in_quotes = False
    i = 0
    length = len(text)

    while i < length:
        char = text[i]
        next_char = text[i + 1] if i + 1 < length else ""

        if in_quotes:
            if char == '"' and next_char == '"':
                field.append('"')
                i += 1
            elif char == '"':
                in_quotes = False
            else:
                field.append(char)
        elif char == '"':
            in_quotes = True
        elif char == delimiter:
            row.append("".join(field))
            field = []
        elif char == "\n" or char == "\r":
            row.append("".join(field))
            rows.append(row)
            row = []
            field = []
            if char == "\r" and next_char == "\n":
                i += 1
        else:
            field.append(char)
        i += 1

    # Input without a trailing line break
    if row or field:
        row.append("".join(field))
        rows.append(row)

    return rows


def _cell(row: Sequence[str], index: int) -> str:
    if index < 0 or index >= len(row):
        return ""
    return row[index].strip()


def parse_table(text: str) -> List[RawRecord]:
    """
    Parse a lead spreadsheet into RawRecords.

    Args:
        text: Full file contents

    Returns:
        One record per non-blank data row, in input order

    Raises:
        SchemaError: If the 'Emails' or 'Description' column is missing
    """
    if not text.strip():
        return []

    delimiter = detect_delimiter(text)
    rows = tokenize(text, delimiter)

    header_row = rows[0] if rows else []
    headers = [h.strip().lower() for h in header_row]

    if EMAIL_HEADER not in headers or DESCRIPTION_HEADER not in headers:
        logger.error("Lead file is missing required columns", headers=header_row)
        raise SchemaError(header_row)

    email_index = headers.index(EMAIL_HEADER)
    description_index = headers.index(DESCRIPTION_HEADER)
    phone_index = headers.index(PHONE_HEADER) if PHONE_HEADER in headers else -1

    records = []
    for row in rows[1:]:
        if len(row) == 1 and row[0] == "":
            continue
        records.append(RawRecord(
            email=_cell(row, email_index),
            phone=_cell(row, phone_index),
            description=_cell(row, description_index),
        ))

    logger.info(f"Parsed {len(records)} leads (delimiter={delimiter!r})")
    return records


def _quote(cell: str, delimiter: str) -> str:
    if any(c in cell for c in (delimiter, '"', "\n", "\r")):
        return '"' + cell.replace('"', '""') + '"'
    return cell


def format_table(rows: Iterable[Sequence[str]], delimiter: str = COMMA) -> str:
    """Serialize rows with the same quoting rules the tokenizer understands."""
    return "".join(
        delimiter.join(_quote(cell, delimiter) for cell in row) + "\n"
        for row in rows
    )
