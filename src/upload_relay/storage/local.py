"""Object store backed by a local directory, used for development and tests."""

import json
import logging
import shutil
from pathlib import Path
from typing import Dict, List, Optional

from upload_relay.errors import StorageError
from upload_relay.storage.base import DEFAULT_CONTENT_TYPE, Body, ObjectStore, StoredObject
from upload_relay.utils.decorators import log_execution_time

logger = logging.getLogger(__name__)

METADATA_SUFFIX = ".meta.json"


class LocalObjectStore(ObjectStore):
    """Keeps every object as a file under `root`, with its metadata in a sidecar JSON file."""

    name = "local"

    def __init__(self, root: str = "storage"):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info(f"Local object store initialized at: {self.root}")

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise StorageError(f"Invalid object key: {key}")
        return path

    @log_execution_time
    def put_object(
        self,
        key: str,
        body: Body,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> StoredObject:
        content_type = content_type or DEFAULT_CONTENT_TYPE
        dest_path = self._path(key)
        try:
            dest_path.parent.mkdir(parents=True, exist_ok=True)
            with open(dest_path, "wb") as dest:
                if isinstance(body, bytes):
                    dest.write(body)
                else:
                    shutil.copyfileobj(body, dest)
            sidecar = dest_path.with_name(dest_path.name + METADATA_SUFFIX)
            sidecar.write_text(json.dumps({"ContentType": content_type, "Metadata": metadata or {}}))
        except OSError as e:
            raise StorageError(f"Failed to write {key}: {e}") from e
        logger.info(f"Stored {key} in {self.root}")
        return StoredObject(key=key, object_id=key, content_type=content_type, metadata=dict(metadata or {}))

    def get_object(self, key: str) -> bytes:
        source_path = self._path(key)
        if not source_path.is_file():
            raise StorageError(f"Object not found: {key}")
        return source_path.read_bytes()

    def head_object(self, key: str) -> dict:
        """Return the content type and metadata recorded for `key`."""
        sidecar = self._path(key + METADATA_SUFFIX)
        if not sidecar.is_file():
            raise StorageError(f"Object not found: {key}")
        return json.loads(sidecar.read_text())

    def list_objects(self, prefix: str = "") -> List[str]:
        keys = []
        for path in self.root.rglob("*"):
            if not path.is_file() or path.name.endswith(METADATA_SUFFIX):
                continue
            key = path.relative_to(self.root).as_posix()
            if key.startswith(prefix):
                keys.append(key)
        return sorted(keys)
