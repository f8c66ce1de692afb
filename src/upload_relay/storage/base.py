"""Object store interface shared by every storage backend."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, List, Optional, Union

Body = Union[bytes, BinaryIO]

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class StoredObject:
    """An object as written to the store.

    `key` is the name the object was stored under and `object_id` is the
    identifier the backend assigns to it. For key-addressed stores the two
    are the same.
    """
    key: str
    object_id: str
    content_type: str = DEFAULT_CONTENT_TYPE
    metadata: Dict[str, str] = field(default_factory=dict)
    public_url: Optional[str] = None


class ObjectStore(ABC):
    """Durable blob storage keyed by name."""

    name = "base"

    @abstractmethod
    def put_object(
        self,
        key: str,
        body: Body,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ) -> StoredObject:
        """Create the object, or overwrite it if `key` already exists."""

    @abstractmethod
    def get_object(self, key: str) -> bytes:
        """Download the full content of `key`."""

    @abstractmethod
    def list_objects(self, prefix: str = "") -> List[str]:
        """Return the keys that start with `prefix`."""

    def make_public(self, stored: StoredObject) -> StoredObject:
        """Make the object readable by anyone. Backends without a public visibility keep it private."""
        return stored

    def public_url(self, key: str) -> Optional[str]:
        return None
