"""The shared upload ledger: one spreadsheet object recording every upload as a row."""

import logging
import threading
from datetime import date
from typing import List, Optional

from upload_relay.errors import LedgerUpdateError, UploadRelayError
from upload_relay.spreadsheet import (
    DATE_COLUMN,
    FILE_NAME_COLUMN,
    USER_NAME_COLUMN,
    XLSX_CONTENT_TYPE,
    Row,
    SpreadsheetError,
    decode_rows,
    encode_rows,
    strip_illegal_characters,
)
from upload_relay.storage.base import ObjectStore
from upload_relay.utils.decorators import log_execution_time

logger = logging.getLogger(__name__)


def format_ledger_date(day: date) -> str:
    """Render a date as M/D/YYYY without zero padding."""
    return f"{day.month}/{day.day}/{day.year}"


def composite_label(original_name: str, stored_id: str) -> str:
    return f"{original_name} ({stored_id})"


def make_ledger_row(original_name: str, stored_id: str, uploader: str, day: Optional[date] = None) -> Row:
    return {
        FILE_NAME_COLUMN: strip_illegal_characters(composite_label(original_name, stored_id)),
        USER_NAME_COLUMN: strip_illegal_characters(uploader),
        DATE_COLUMN: format_ledger_date(day or date.today()),
    }


class AuditLedger:
    """Finds or creates the ledger object and appends rows to it.

    `append` is a read-modify-write of the whole workbook. Appends made
    through the same instance are serialized; writers in other processes
    are not coordinated and the last write wins.
    """

    def __init__(self, store: ObjectStore, ledger_name: str):
        self.store = store
        self.ledger_name = ledger_name
        self._lock = threading.Lock()

    @log_execution_time
    def find_or_create(self) -> str:
        """Return the key of the ledger object, creating a header-only workbook if none exists."""
        try:
            if self.ledger_name in self.store.list_objects(prefix=self.ledger_name):
                return self.ledger_name
            logger.info(f"Creating ledger {self.ledger_name}")
            self.store.put_object(
                self.ledger_name,
                encode_rows([]),
                content_type=XLSX_CONTENT_TYPE,
            )
        except (UploadRelayError, SpreadsheetError) as e:
            raise LedgerUpdateError(f"Failed to find or create ledger: {e}") from e
        return self.ledger_name

    @log_execution_time
    def append(self, row: Row) -> List[Row]:
        """Append `row` to the ledger and return the rows as written."""
        with self._lock:
            key = self.find_or_create()
            try:
                rows = decode_rows(self.store.get_object(key))
                rows.append(row)
                self.store.put_object(key, encode_rows(rows), content_type=XLSX_CONTENT_TYPE)
            except (UploadRelayError, SpreadsheetError) as e:
                raise LedgerUpdateError(f"Failed to update ledger: {e}") from e
        logger.info(f"Appended ledger row for {row.get(FILE_NAME_COLUMN)}")
        return rows

    def read_rows(self) -> List[Row]:
        try:
            return decode_rows(self.store.get_object(self.ledger_name))
        except (UploadRelayError, SpreadsheetError) as e:
            raise LedgerUpdateError(f"Failed to read ledger: {e}") from e
