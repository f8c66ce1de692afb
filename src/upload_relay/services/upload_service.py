"""
Upload handling: validate the payload, store it under a generated key and
record it in the shared ledger.
"""

import logging
import os
import random
import tempfile
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from upload_relay.errors import UploadValidationError
from upload_relay.ledger import AuditLedger, make_ledger_row
from upload_relay.schemas import PostUploadResponse
from upload_relay.storage.base import ObjectStore, StoredObject

logger = logging.getLogger(__name__)

ANONYMOUS_UPLOADER = "Anonymous"
CHUNK_SIZE = 1024 * 1024


def generate_storage_key(original_name: str, prefix: str = "") -> str:
    """Build `<prefix><epoch millis>-<random suffix><extension>`.

    Collisions between concurrent uploads are unlikely but not ruled out.
    """
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"{prefix}{unique_suffix}{Path(original_name).suffix}"


def clean_file_name(file_name: Optional[str]) -> str:
    """Strip any client-side directory components from an uploaded file name."""
    return os.path.basename((file_name or "").replace("\\", "/"))


def resolve_uploader(user_name: Optional[str]) -> str:
    return (user_name or "").strip() or ANONYMOUS_UPLOADER


def _format_size(max_bytes: int) -> str:
    if max_bytes % (1024 * 1024) == 0:
        return f"{max_bytes // (1024 * 1024)}MB"
    return f"{max_bytes} bytes"


class UploadService:
    """Relays one uploaded file to the object store and appends its ledger row.

    The store and ledger are built once at startup and shared by every
    request.
    """

    def __init__(
        self,
        store: ObjectStore,
        ledger: AuditLedger,
        max_upload_bytes: int,
        key_prefix: str = "",
        tmp_dir: str = "uploads",
        make_public: bool = False,
    ):
        self.store = store
        self.ledger = ledger
        self.max_upload_bytes = max_upload_bytes
        self.key_prefix = key_prefix
        self.tmp_dir = Path(tmp_dir)
        self.make_public = make_public

    async def spool_to_temp_file(self, upload: UploadFile) -> Path:
        """Copy the payload to a temporary file, rejecting it once it passes the size limit."""
        self.tmp_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.tmp_dir, suffix=Path(upload.filename or "").suffix)
        tmp_path = Path(tmp_name)
        size = 0
        try:
            with os.fdopen(fd, "wb") as tmp_file:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_upload_bytes:
                        raise UploadValidationError(
                            "File too large",
                            f"File size exceeds {_format_size(self.max_upload_bytes)} limit",
                        )
                    tmp_file.write(chunk)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        logger.debug(f"Spooled {size} bytes of {upload.filename} to {tmp_path}")
        return tmp_path

    def store_and_record(
        self,
        tmp_path: Path,
        original_name: str,
        content_type: Optional[str],
        uploader: str,
    ) -> StoredObject:
        key = generate_storage_key(original_name, self.key_prefix)
        metadata = {
            "originalName": original_name,
            "uploadedBy": uploader,
            "uploadDate": datetime.now(timezone.utc).isoformat(),
        }
        with open(tmp_path, "rb") as payload:
            stored = self.store.put_object(key, payload, content_type=content_type, metadata=metadata)
        if self.make_public:
            stored = self.store.make_public(stored)

        self.ledger.append(make_ledger_row(original_name, stored.object_id, uploader))
        return stored

    async def handle_upload(self, upload: Optional[UploadFile], user_name: Optional[str]) -> PostUploadResponse:
        if upload is None or not upload.filename:
            raise UploadValidationError("No file uploaded", "The request has no 'file' field.")

        original_name = clean_file_name(upload.filename)
        uploader = resolve_uploader(user_name)
        tmp_path = await self.spool_to_temp_file(upload)
        try:
            stored = await run_in_threadpool(
                self.store_and_record, tmp_path, original_name, upload.content_type, uploader
            )
        finally:
            tmp_path.unlink(missing_ok=True)

        logger.info(f"{uploader} uploaded {original_name} as {stored.key}")
        return PostUploadResponse(
            file_name=original_name,
            file_id=stored.object_id,
            storage_key=stored.key,
            public_url=stored.public_url,
        )
