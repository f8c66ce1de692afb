from click.testing import CliRunner

from upload_relay.cli import cli
from upload_relay.config.settings import get_settings


def test_show_config(monkeypatch, tmp_path):
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    monkeypatch.setenv("STORAGE_DIR", str(tmp_path))
    get_settings.cache_clear()

    result = CliRunner().invoke(cli, ["show-config"])

    get_settings.cache_clear()
    assert result.exit_code == 0
    assert "Storage Backend: local" in result.output
    assert f"Storage Dir: {tmp_path}" in result.output


def test_upload_rejects_oversized_file(tmp_path):
    big_file = tmp_path / "big.bin"
    big_file.write_bytes(b"\0" * (10 * 1024 * 1024 + 1))

    result = CliRunner().invoke(cli, ["upload", str(big_file), "--name", "Alice", "--url", "http://testserver"])

    assert result.exit_code == 1
    assert "File size exceeds 10MB limit" in result.output


def test_upload_requires_name(tmp_path):
    small_file = tmp_path / "a.txt"
    small_file.write_text("hello")

    result = CliRunner().invoke(cli, ["upload", str(small_file)])

    assert result.exit_code != 0
    assert "--name" in result.output
