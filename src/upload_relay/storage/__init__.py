"""
Object store backends.

`ObjectStoreFactory.get_object_store` picks the backend named by
`Settings.storage_backend`; the application builds one store at startup and
shares it across requests.
"""

import logging
from pathlib import Path

from upload_relay.config.settings import Settings
from upload_relay.storage.base import ObjectStore, StoredObject
from upload_relay.storage.drive import DriveObjectStore
from upload_relay.storage.local import LocalObjectStore
from upload_relay.storage.s3 import S3ObjectStore

logger = logging.getLogger(__name__)


def _drive_access_token(settings: Settings) -> str:
    if settings.drive_access_token:
        return settings.drive_access_token
    if settings.drive_token_file:
        return Path(settings.drive_token_file).read_text().strip()
    raise ValueError("The drive backend needs GOOGLE_DRIVE_ACCESS_TOKEN or GOOGLE_DRIVE_TOKEN_FILE")


def _local_store(settings: Settings) -> ObjectStore:
    return LocalObjectStore(settings.storage_dir)


def _s3_store(settings: Settings) -> ObjectStore:
    return S3ObjectStore(
        bucket_name=settings.s3_bucket_name,
        region_name=settings.aws_region,
        endpoint_url=settings.aws_endpoint_url,
    )


def _drive_store(settings: Settings) -> ObjectStore:
    return DriveObjectStore(
        access_token=_drive_access_token(settings),
        folder_id=settings.drive_folder_id,
    )


class ObjectStoreFactory:
    """Factory to initialize the object store selected by configuration"""

    store_builders = {
        "local": _local_store,
        "s3": _s3_store,
        "drive": _drive_store,
    }

    @staticmethod
    def get_object_store(settings: Settings) -> ObjectStore:
        backend = settings.storage_backend
        if backend not in ObjectStoreFactory.store_builders:
            raise ValueError(
                f"Invalid storage_backend: {backend}. Choose from {list(ObjectStoreFactory.store_builders.keys())}"
            )
        logger.info(f"Creating {backend} object store")
        return ObjectStoreFactory.store_builders[backend](settings)


__all__ = [
    "DriveObjectStore",
    "LocalObjectStore",
    "ObjectStore",
    "ObjectStoreFactory",
    "S3ObjectStore",
    "StoredObject",
]
