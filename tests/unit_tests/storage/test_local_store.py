import io

import pytest

from upload_relay.errors import StorageError
from upload_relay.storage import LocalObjectStore


def test_put_and_get_bytes(local_store: LocalObjectStore):
    stored = local_store.put_object("uploads/a.txt", b"hello", content_type="text/plain", metadata={"uploadedBy": "Alice"})

    assert stored.key == stored.object_id == "uploads/a.txt"
    assert stored.public_url is None
    assert local_store.get_object("uploads/a.txt") == b"hello"
    assert local_store.head_object("uploads/a.txt") == {
        "ContentType": "text/plain",
        "Metadata": {"uploadedBy": "Alice"},
    }


def test_put_file_object_and_overwrite(local_store: LocalObjectStore):
    local_store.put_object("ledger.xlsx", io.BytesIO(b"v1"))
    local_store.put_object("ledger.xlsx", io.BytesIO(b"v2"))

    assert local_store.get_object("ledger.xlsx") == b"v2"
    assert local_store.head_object("ledger.xlsx")["ContentType"] == "application/octet-stream"


def test_list_objects_by_prefix(local_store: LocalObjectStore):
    for key in ("uploads/1.txt", "uploads/2.txt", "ledger.xlsx"):
        local_store.put_object(key, b"x")

    assert local_store.list_objects(prefix="uploads/") == ["uploads/1.txt", "uploads/2.txt"]
    assert local_store.list_objects() == ["ledger.xlsx", "uploads/1.txt", "uploads/2.txt"]


def test_get_missing_object(local_store: LocalObjectStore):
    with pytest.raises(StorageError, match="not found"):
        local_store.get_object("missing.txt")


def test_keys_cannot_escape_the_root(local_store: LocalObjectStore):
    with pytest.raises(StorageError, match="Invalid object key"):
        local_store.put_object("../outside.txt", b"x")


def test_make_public_is_a_no_op(local_store: LocalObjectStore):
    stored = local_store.put_object("uploads/a.txt", b"x")

    assert local_store.make_public(stored) == stored
