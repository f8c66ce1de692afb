"""Reading and writing the single-sheet xlsx workbook that holds the upload ledger."""

import io
import logging
import zipfile
from typing import Dict, Iterable, List, Mapping, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils.exceptions import IllegalCharacterError, InvalidFileException

logger = logging.getLogger(__name__)

FILE_NAME_COLUMN = "File Name (ID)"
USER_NAME_COLUMN = "User Name"
DATE_COLUMN = "Date"
LEDGER_COLUMNS = (FILE_NAME_COLUMN, USER_NAME_COLUMN, DATE_COLUMN)

SHEET_NAME = "Uploads"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

Row = Dict[str, str]


class SpreadsheetError(Exception):
    """The workbook could not be read or written."""


def _columns_for(rows: Iterable[Mapping[str, str]], columns: Sequence[str]) -> List[str]:
    ordered = list(columns)
    for row in rows:
        for name in row:
            if name not in ordered:
                ordered.append(name)
    return ordered


def strip_illegal_characters(text: str) -> str:
    """Remove control characters that xlsx cells cannot hold."""
    return ILLEGAL_CHARACTERS_RE.sub("", text)


def _cell_text(value) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def encode_rows(
    rows: Sequence[Mapping[str, str]],
    columns: Sequence[str] = LEDGER_COLUMNS,
    sheet_name: str = SHEET_NAME,
) -> bytes:
    """Serialize `rows` into an xlsx workbook with one sheet.

    The first sheet row holds the column names; each mapping becomes one
    row below it, in order. Keys not listed in `columns` are appended as
    extra columns in order of first appearance.
    """
    header = _columns_for(rows, columns)
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = sheet_name
    buffer = io.BytesIO()
    try:
        worksheet.append(header)
        for row_index, row in enumerate(rows, start=2):
            for column_index, name in enumerate(header, start=1):
                value = row.get(name, "")
                cell = worksheet.cell(row=row_index, column=column_index, value=value)
                # keep user text such as "=cmd" a literal string
                if isinstance(value, str) and value.startswith("="):
                    cell.data_type = "s"
        workbook.save(buffer)
    except (IllegalCharacterError, OSError, ValueError) as e:
        raise SpreadsheetError(f"Failed to encode workbook: {e}") from e
    return buffer.getvalue()


def decode_rows(data: bytes) -> List[Row]:
    """Parse the first sheet of an xlsx workbook into row mappings keyed by the header row.

    Blank rows are skipped. Empty cells decode to "".
    """
    try:
        workbook = load_workbook(io.BytesIO(data))
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as e:
        raise SpreadsheetError(f"Failed to decode workbook: {e}") from e

    worksheet = workbook.worksheets[0]
    values = worksheet.iter_rows(values_only=True)
    header_row = next(values, None)
    if header_row is None:
        return []
    header = [_cell_text(name) for name in header_row]

    rows: List[Row] = []
    for raw in values:
        if all(value is None or value == "" for value in raw):
            continue
        rows.append({name: _cell_text(value) for name, value in zip(header, raw) if name})
    logger.debug(f"Decoded {len(rows)} rows from sheet {worksheet.title}")
    return rows
