"""Object store backed by an S3 bucket."""

import logging
from typing import Dict, List, Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from upload_relay.errors import StorageError
from upload_relay.storage.base import DEFAULT_CONTENT_TYPE, Body, ObjectStore, StoredObject
from upload_relay.utils.decorators import log_execution_time

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)


def _header_safe(metadata: Dict[str, str]) -> Dict[str, str]:
    """S3 user metadata travels in HTTP headers, so non-ASCII values are percent-encoded."""
    return {key: value if value.isascii() else quote(value) for key, value in metadata.items()}


class S3ObjectStore(ObjectStore):
    """Stores objects under their key in a single bucket."""

    name = "s3"

    def __init__(
        self,
        bucket_name: str,
        s3_client: Optional["S3Client"] = None,
        region_name: str = "us-east-1",
        endpoint_url: Optional[str] = None,
    ):
        self.bucket_name = bucket_name
        self.region_name = region_name
        self.endpoint_url = endpoint_url
        self.s3_client = s3_client or boto3.client(
            "s3",
            region_name=region_name,
            endpoint_url=endpoint_url,
        )
        logger.info(f"Using S3 bucket: {bucket_name}")

    @log_execution_time
    def put_object(
        self,
        key: str,
        body: Body,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> StoredObject:
        content_type = content_type or DEFAULT_CONTENT_TYPE
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=body,
                ContentType=content_type,
                Metadata=_header_safe(metadata or {}),
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to upload {key} to S3: {e}") from e
        logger.info(f"Uploaded {key} to bucket {self.bucket_name}")
        return StoredObject(
            key=key,
            object_id=key,
            content_type=content_type,
            metadata=dict(metadata or {}),
            public_url=self.public_url(key),
        )

    @log_execution_time
    def get_object(self, key: str) -> bytes:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
            return response["Body"].read()
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to download {key} from S3: {e}") from e

    def list_objects(self, prefix: str = "") -> List[str]:
        keys = []
        try:
            paginator = self.s3_client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to list objects under '{prefix}': {e}") from e
        return keys

    def make_public(self, stored: StoredObject) -> StoredObject:
        try:
            self.s3_client.put_object_acl(Bucket=self.bucket_name, Key=stored.key, ACL="public-read")
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to make {stored.key} public: {e}") from e
        return stored

    def public_url(self, key: str) -> Optional[str]:
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{key}"
        return f"https://{self.bucket_name}.s3.{self.region_name}.amazonaws.com/{key}"
