"""
Client side of the relay: collects a file and an uploader name, submits
them to `POST /upload` and retries failed submissions.
"""

import asyncio
import logging
import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from upload_relay.config.settings import MAX_UPLOAD_BYTES

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 2.0
FILE_UNAVAILABLE_MESSAGE = "The selected file is no longer available"


class FormStatus(str, Enum):
    """States of the upload form"""
    IDLE = "idle"
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


ALLOWED_TRANSITIONS = {
    FormStatus.IDLE: {FormStatus.IDLE, FormStatus.UPLOADING, FormStatus.ERROR},
    FormStatus.UPLOADING: {FormStatus.SUCCESS, FormStatus.ERROR},
    FormStatus.SUCCESS: {FormStatus.IDLE},
    FormStatus.ERROR: {FormStatus.ERROR, FormStatus.UPLOADING, FormStatus.IDLE},
}


class FormStateError(Exception):
    """Exception raised for invalid state transitions"""
    pass


class UploadAttemptError(Exception):
    """One submission failed, either in transport or with a non-2xx response."""
    pass


@dataclass(frozen=True)
class UploadState:
    status: FormStatus = FormStatus.IDLE
    message: str = ""
    file_name: Optional[str] = None


class UploadForm:
    """Upload form with validation and bounded, fixed-delay retries.

    Every attempt is a fresh request started after the previous one has
    fully failed; nothing is persisted between runs.
    """

    def __init__(
        self,
        base_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        max_file_size: int = MAX_UPLOAD_BYTES,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delay: float = RETRY_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        on_success: Optional[Callable[[Dict[str, Any]], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
        upload_path: str = "/upload",
    ):
        self.upload_url = f"{base_url.rstrip('/')}{upload_path}"
        self.http_client = http_client
        self.max_file_size = max_file_size
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.sleep = sleep
        self.on_success = on_success
        self.on_error = on_error

        self.state = UploadState()
        self.history: List[UploadState] = [self.state]
        self.user_name = ""
        self.selected_file: Optional[Path] = None
        self.attempts = 0

    def _set_state(self, status: FormStatus, message: str = "", file_name: Optional[str] = None) -> None:
        if status not in ALLOWED_TRANSITIONS[self.state.status]:
            raise FormStateError(f"Invalid state transition from {self.state.status.value} to {status.value}")
        self.state = UploadState(status=status, message=message, file_name=file_name)
        self.history.append(self.state)
        logger.debug(f"Upload form is {status.value}: {message}")

    def _validate_size(self, path: Path) -> Optional[str]:
        try:
            size = path.stat().st_size
        except OSError:
            return FILE_UNAVAILABLE_MESSAGE
        if size > self.max_file_size:
            return f"File size exceeds {self.max_file_size // (1024 * 1024)}MB limit"
        return None

    def select_file(self, path: str | Path) -> bool:
        """Pick the file to upload. Returns False and enters `error` when it is too large."""
        path = Path(path)
        validation_error = self._validate_size(path)
        if validation_error:
            self._set_state(FormStatus.ERROR, validation_error)
            return False
        self.selected_file = path
        self.attempts = 0
        self._set_state(FormStatus.IDLE)
        return True

    def set_user_name(self, user_name: str) -> None:
        self.user_name = user_name

    def reset(self) -> None:
        self.selected_file = None
        self.user_name = ""
        self.attempts = 0
        self._set_state(FormStatus.IDLE)

    async def _post(self, client: httpx.AsyncClient, file_name: str, content: bytes, user_name: str) -> Dict[str, Any]:
        content_type = mimetypes.guess_type(file_name)[0] or "application/octet-stream"
        try:
            response = await client.post(
                self.upload_url,
                files={"file": (file_name, content, content_type)},
                data={"userName": user_name},
            )
        except httpx.HTTPError as e:
            raise UploadAttemptError(str(e) or type(e).__name__) from e

        if response.is_error:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {}
            message = error_data.get("message") if isinstance(error_data, dict) else None
            raise UploadAttemptError(message or f"Upload failed with status {response.status_code}")
        try:
            return response.json()
        except ValueError as e:
            raise UploadAttemptError(f"Invalid response from server (status {response.status_code})") from e

    async def _upload_with_retries(
        self, client: httpx.AsyncClient, user_name: str, content: bytes
    ) -> Optional[Dict[str, Any]]:
        file_name = self.selected_file.name

        for attempt in range(1, self.max_attempts + 1):
            self.attempts = attempt
            progress = f" (Attempt {attempt}/{self.max_attempts})" if attempt > 1 else ""
            self._set_state(FormStatus.UPLOADING, f"Uploading file...{progress}", file_name)
            try:
                result = await self._post(client, file_name, content, user_name)
            except UploadAttemptError as e:
                error_message = str(e)
                logger.warning(f"Upload attempt {attempt}/{self.max_attempts} failed: {error_message}")
                if attempt < self.max_attempts:
                    self._set_state(
                        FormStatus.ERROR,
                        f"Upload failed. Retrying in {self.retry_delay:g} seconds... ({attempt}/{self.max_attempts})",
                        file_name,
                    )
                    await self.sleep(self.retry_delay)
                    continue
                self._set_state(
                    FormStatus.ERROR,
                    f"Upload failed after {self.max_attempts} attempts: {error_message}",
                    file_name,
                )
                if self.on_error:
                    self.on_error(error_message)
                return None

            self._set_state(FormStatus.SUCCESS, "File uploaded successfully!", file_name)
            if self.on_success:
                self.on_success(result)
            return result
        return None

    async def submit(self) -> Optional[Dict[str, Any]]:
        """Validate the form and upload the selected file.

        Returns the server's JSON result on success and None when the form
        ends in the `error` state.
        """
        if self.state.status in (FormStatus.UPLOADING, FormStatus.SUCCESS):
            raise FormStateError(f"Cannot submit while the form is {self.state.status.value}")
        if self.selected_file is None:
            self._set_state(FormStatus.ERROR, "Please select a file first")
            return None
        user_name = self.user_name.strip()
        if not user_name:
            self._set_state(FormStatus.ERROR, "Please enter your name")
            return None
        validation_error = self._validate_size(self.selected_file)
        if validation_error:
            self._set_state(FormStatus.ERROR, validation_error)
            return None

        try:
            content = self.selected_file.read_bytes()
        except OSError:
            self._set_state(FormStatus.ERROR, FILE_UNAVAILABLE_MESSAGE)
            return None

        try:
            if self.http_client is not None:
                return await self._upload_with_retries(self.http_client, user_name, content)
            async with httpx.AsyncClient(timeout=60.0) as client:
                return await self._upload_with_retries(client, user_name, content)
        except Exception as e:
            # never leave the form stuck in `uploading`
            if self.state.status is FormStatus.UPLOADING:
                self._set_state(FormStatus.ERROR, f"Upload failed: {e}", self.selected_file.name)
                if self.on_error:
                    self.on_error(str(e))
            raise
