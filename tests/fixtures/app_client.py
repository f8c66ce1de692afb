"""Application fixtures: settings pointed at temporary directories and a TestClient."""
import pytest
from fastapi.testclient import TestClient

from upload_relay.config.settings import Settings
from upload_relay.main import create_app
from upload_relay.storage import LocalObjectStore
from tests.consts import TEST_BUCKET_NAME, TEST_LEDGER_NAME


@pytest.fixture
def local_settings(tmp_path) -> Settings:
    return Settings(
        storage_backend="local",
        storage_dir=str(tmp_path / "storage"),
        upload_tmp_dir=str(tmp_path / "tmp"),
        ledger_file_name=TEST_LEDGER_NAME,
    )


@pytest.fixture
def local_store(local_settings) -> LocalObjectStore:
    return LocalObjectStore(local_settings.storage_dir)


@pytest.fixture
def client(local_settings, local_store) -> TestClient:
    app = create_app(settings=local_settings, store=local_store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def s3_settings(tmp_path) -> Settings:
    return Settings(
        storage_backend="s3",
        s3_bucket_name=TEST_BUCKET_NAME,
        aws_region="us-east-1",
        upload_tmp_dir=str(tmp_path / "tmp"),
        ledger_file_name=TEST_LEDGER_NAME,
    )


@pytest.fixture
def s3_client_app(mocked_aws, s3_settings) -> TestClient:
    app = create_app(settings=s3_settings)
    with TestClient(app) as test_client:
        yield test_client
