"""Object store backed by a Google Drive folder, addressed by file name."""

import dataclasses
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from upload_relay.errors import StorageError
from upload_relay.storage.base import DEFAULT_CONTENT_TYPE, Body, ObjectStore, StoredObject
from upload_relay.utils.decorators import log_execution_time

logger = logging.getLogger(__name__)

DRIVE_API_BASE = "https://www.googleapis.com/drive/v3"
DRIVE_UPLOAD_BASE = "https://www.googleapis.com/upload/drive/v3"
DRIVE_FILES_ENDPOINT = "/files"


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


class DriveObjectStore(ObjectStore):
    """Stores objects as Drive files named after their key.

    Drive identifies files by id, so every key lookup is a files.list query
    on the name inside the configured folder.
    """

    name = "drive"

    def __init__(
        self,
        access_token: str,
        folder_id: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.folder_id = folder_id
        self.http_client = http_client or httpx.Client(timeout=30.0)
        self._headers = {"Authorization": f"Bearer {access_token}"}
        logger.info(f"Using Drive folder: {folder_id or 'root'}")

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = self.http_client.request(method, url, headers=self._headers, **kwargs)
        except httpx.HTTPError as e:
            raise StorageError(f"Google Drive request {method} {url} failed: {e}") from e
        if response.is_error:
            logger.error(f"Google Drive API {method} {url} failed: {response.text}")
            raise StorageError(f"Google Drive API returned {response.status_code} for {method} {url}")
        return response

    def _search(self, query: str) -> List[Dict[str, Any]]:
        clauses = [query, "trashed = false"]
        if self.folder_id:
            clauses.append(f"'{_escape(self.folder_id)}' in parents")
        files: List[Dict[str, Any]] = []
        page_token = None
        while True:
            params = {"q": " and ".join(clauses), "fields": "nextPageToken,files(id,name)", "spaces": "drive"}
            if page_token:
                params["pageToken"] = page_token
            data = self._request("GET", f"{DRIVE_API_BASE}{DRIVE_FILES_ENDPOINT}", params=params).json()
            files.extend(data.get("files", []))
            page_token = data.get("nextPageToken")
            if not page_token:
                return files

    def _find_file_id(self, key: str) -> Optional[str]:
        for found in self._search(f"name = '{_escape(key)}'"):
            if found.get("name") == key:
                return found["id"]
        return None

    @log_execution_time
    def put_object(
        self,
        key: str,
        body: Body,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> StoredObject:
        content_type = content_type or DEFAULT_CONTENT_TYPE
        content = body if isinstance(body, bytes) else body.read()
        file_metadata: Dict[str, Any] = {"name": key, "mimeType": content_type}
        if metadata:
            file_metadata["appProperties"] = metadata

        existing_id = self._find_file_id(key)
        if existing_id is None and self.folder_id:
            file_metadata["parents"] = [self.folder_id]
        files = {
            "metadata": ("metadata", json.dumps(file_metadata), "application/json; charset=UTF-8"),
            "file": (key, content, content_type),
        }

        if existing_id is None:
            response = self._request(
                "POST",
                f"{DRIVE_UPLOAD_BASE}{DRIVE_FILES_ENDPOINT}",
                params={"uploadType": "multipart", "fields": "id,name"},
                files=files,
            )
        else:
            response = self._request(
                "PATCH",
                f"{DRIVE_UPLOAD_BASE}{DRIVE_FILES_ENDPOINT}/{existing_id}",
                params={"uploadType": "multipart", "fields": "id,name"},
                files=files,
            )

        data = response.json()
        if "id" not in data:
            raise StorageError(f"Google Drive response for {key} is missing a file id")
        logger.info(f"Stored {key} in Drive as {data['id']}")
        return StoredObject(
            key=key,
            object_id=data["id"],
            content_type=content_type,
            metadata=dict(metadata or {}),
        )

    @log_execution_time
    def get_object(self, key: str) -> bytes:
        file_id = self._find_file_id(key)
        if file_id is None:
            raise StorageError(f"Object not found: {key}")
        response = self._request(
            "GET", f"{DRIVE_API_BASE}{DRIVE_FILES_ENDPOINT}/{file_id}", params={"alt": "media"}
        )
        return response.content

    def list_objects(self, prefix: str = "") -> List[str]:
        query = f"name contains '{_escape(prefix)}'" if prefix else "name != ''"
        return sorted(f["name"] for f in self._search(query) if f.get("name", "").startswith(prefix))

    def make_public(self, stored: StoredObject) -> StoredObject:
        self._request(
            "POST",
            f"{DRIVE_API_BASE}{DRIVE_FILES_ENDPOINT}/{stored.object_id}/permissions",
            json={"role": "reader", "type": "anyone"},
        )
        return dataclasses.replace(stored, public_url=f"https://drive.google.com/uc?id={stored.object_id}")
