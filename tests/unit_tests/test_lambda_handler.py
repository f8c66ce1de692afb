import importlib

from mangum import Mangum

from upload_relay.config.settings import get_settings


def test_lambda_handler_wraps_the_app(monkeypatch, tmp_path):
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    monkeypatch.setenv("STORAGE_DIR", str(tmp_path / "storage"))
    get_settings.cache_clear()

    lambda_handler = importlib.import_module("upload_relay.lambda_handler")

    get_settings.cache_clear()
    assert isinstance(lambda_handler.handler, Mangum)
    assert lambda_handler.lambda_handler is lambda_handler.handler
    assert lambda_handler.app.state.settings.storage_dir == str(tmp_path / "storage")
