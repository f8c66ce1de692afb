"""Request-scoped services used by the API routers."""

from upload_relay.services.upload_service import ANONYMOUS_UPLOADER, UploadService

__all__ = ["ANONYMOUS_UPLOADER", "UploadService"]
