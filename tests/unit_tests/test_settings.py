import pydantic
import pytest

from upload_relay.config.settings import Settings
from upload_relay.storage import DriveObjectStore, LocalObjectStore, ObjectStoreFactory, S3ObjectStore
from tests.consts import TEST_BUCKET_NAME


def test_defaults(monkeypatch):
    monkeypatch.delenv("STORAGE_BACKEND", raising=False)
    settings = Settings(_env_file=None)

    assert settings.storage_backend == "local"
    assert settings.max_upload_bytes == 10 * 1024 * 1024
    assert settings.ledger_file_name == "file-uploads-tracker.xlsx"
    assert settings.key_prefix == "uploads/"


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "S3")
    monkeypatch.setenv("S3_BUCKET_NAME", "from-env")
    monkeypatch.setenv("FRONTEND_URL", "https://uploads.example.com")

    settings = Settings(_env_file=None)

    assert settings.storage_backend == "s3"
    assert settings.s3_bucket_name == "from-env"
    assert settings.frontend_url == "https://uploads.example.com"


@pytest.mark.parametrize("alias, backend", [("gcs", "s3"), ("google-drive", "drive"), ("filesystem", "local")])
def test_backend_aliases(alias, backend):
    assert Settings(storage_backend=alias, _env_file=None).storage_backend == backend


def test_invalid_backend():
    with pytest.raises(pydantic.ValidationError):
        Settings(storage_backend="ftp", _env_file=None)


def test_key_prefix_gets_trailing_slash():
    assert Settings(key_prefix="incoming", _env_file=None).key_prefix == "incoming/"


def test_factory_builds_local_store(local_settings):
    assert isinstance(ObjectStoreFactory.get_object_store(local_settings), LocalObjectStore)


def test_factory_builds_s3_store(mocked_aws):
    settings = Settings(storage_backend="s3", s3_bucket_name=TEST_BUCKET_NAME, _env_file=None)

    store = ObjectStoreFactory.get_object_store(settings)

    assert isinstance(store, S3ObjectStore)
    assert store.bucket_name == TEST_BUCKET_NAME


def test_factory_builds_drive_store_from_token_file(tmp_path, monkeypatch):
    monkeypatch.delenv("GOOGLE_DRIVE_ACCESS_TOKEN", raising=False)
    token_file = tmp_path / "drive-token"
    token_file.write_text("secret-token\n")
    settings = Settings(storage_backend="drive", drive_token_file=str(token_file), drive_folder_id="f1", _env_file=None)

    store = ObjectStoreFactory.get_object_store(settings)

    assert isinstance(store, DriveObjectStore)
    assert store.folder_id == "f1"
    assert store._headers == {"Authorization": "Bearer secret-token"}


def test_factory_rejects_drive_without_credentials(monkeypatch):
    monkeypatch.delenv("GOOGLE_DRIVE_ACCESS_TOKEN", raising=False)
    monkeypatch.delenv("GOOGLE_DRIVE_TOKEN_FILE", raising=False)

    with pytest.raises(ValueError, match="GOOGLE_DRIVE_ACCESS_TOKEN"):
        ObjectStoreFactory.get_object_store(Settings(storage_backend="drive", _env_file=None))
