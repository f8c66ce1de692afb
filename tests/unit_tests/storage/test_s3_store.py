import io
from unittest.mock import Mock

import pytest

from upload_relay.errors import StorageError
from upload_relay.storage import S3ObjectStore
from tests.consts import TEST_BUCKET_NAME


@pytest.fixture
def s3_store(mocked_aws) -> S3ObjectStore:
    return S3ObjectStore(TEST_BUCKET_NAME, s3_client=mocked_aws)


def test_put_object(s3_store: S3ObjectStore, mocked_aws):
    stored = s3_store.put_object(
        "uploads/1-2.txt",
        io.BytesIO(b"hello"),
        content_type="text/plain",
        metadata={"originalName": "report.txt"},
    )

    assert stored.key == stored.object_id == "uploads/1-2.txt"
    assert stored.public_url == f"https://{TEST_BUCKET_NAME}.s3.us-east-1.amazonaws.com/uploads/1-2.txt"
    response = mocked_aws.get_object(Bucket=TEST_BUCKET_NAME, Key="uploads/1-2.txt")
    assert response["Body"].read() == b"hello"
    assert response["ContentType"] == "text/plain"


def test_non_ascii_metadata_is_percent_encoded(s3_store: S3ObjectStore, mocked_aws):
    s3_store.put_object("uploads/1.pdf", b"x", metadata={"originalName": "résumé.pdf"})

    response = mocked_aws.head_object(Bucket=TEST_BUCKET_NAME, Key="uploads/1.pdf")
    metadata = {key.lower(): value for key, value in response["Metadata"].items()}
    assert metadata["originalname"] == "r%C3%A9sum%C3%A9.pdf"


def test_get_object_and_overwrite(s3_store: S3ObjectStore):
    s3_store.put_object("ledger.xlsx", b"v1")
    s3_store.put_object("ledger.xlsx", b"v2")

    assert s3_store.get_object("ledger.xlsx") == b"v2"


def test_list_objects_by_prefix(s3_store: S3ObjectStore):
    for key in ("uploads/1.txt", "uploads/2.txt", "ledger.xlsx"):
        s3_store.put_object(key, b"x")

    assert sorted(s3_store.list_objects(prefix="uploads/")) == ["uploads/1.txt", "uploads/2.txt"]
    assert s3_store.list_objects(prefix="nothing/") == []


def test_get_missing_object(s3_store: S3ObjectStore):
    with pytest.raises(StorageError):
        s3_store.get_object("missing.txt")


def test_missing_bucket(mocked_aws):
    store = S3ObjectStore("no-such-bucket", s3_client=mocked_aws)

    with pytest.raises(StorageError):
        store.put_object("a.txt", b"x")


def test_make_public_sets_public_read_acl():
    s3_client = Mock()
    store = S3ObjectStore(TEST_BUCKET_NAME, s3_client=s3_client)

    stored = store.make_public(store.put_object("uploads/a.txt", b"x"))

    s3_client.put_object_acl.assert_called_once_with(Bucket=TEST_BUCKET_NAME, Key=stored.key, ACL="public-read")


def test_public_url_with_custom_endpoint(mocked_aws):
    store = S3ObjectStore(TEST_BUCKET_NAME, s3_client=mocked_aws, endpoint_url="http://localhost:5000/")

    assert store.public_url("uploads/a.txt") == f"http://localhost:5000/{TEST_BUCKET_NAME}/uploads/a.txt"
