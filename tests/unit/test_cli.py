"""
Unit Tests: CLI

Tests for the filevault operator commands and their exit codes.
"""

import json
import logging

import pytest

from filevault.cli import main
from filevault.config.settings import get_settings, reload_settings
from filevault.data.storage import FileCategory, SecureFileStorage


@pytest.fixture(autouse=True)
def restore_root_logger():
    """main() reconfigures logging; undo it after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def configured_env(monkeypatch, temp_storage_dir, test_key):
    monkeypatch.setenv("UPLOAD_DIR", str(temp_storage_dir))
    monkeypatch.setenv("FILE_ENCRYPTION_KEY", test_key.hex())
    reload_settings()


class TestCommands:
    """Test each subcommand."""

    def test_no_command(self, capsys):
        """Test running without a command prints help and fails."""
        assert main([]) == 1
        assert "filevault" in capsys.readouterr().out

    def test_init(self, configured_env, temp_storage_dir):
        """Test init creates category directories."""
        assert main(["init"]) == 0
        for category in FileCategory:
            assert (temp_storage_dir / category.value).is_dir()

    def test_stats_json(self, configured_env, capsys):
        """Test stats --json reports per-category counts."""
        storage = SecureFileStorage.from_settings(get_settings())
        storage.store_file(b"hello world!", "a.txt", FileCategory.DOCUMENT, "c1")

        assert main(["stats", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)

        assert data["total_files"] == 1
        assert data["total_size"] == 12
        assert data["per_category"]["document"] == {"files": 1, "size": 12}
        assert data["per_category"]["credential"] == {"files": 0, "size": 0}

    def test_stats_table(self, configured_env, capsys):
        """Test the text report lists every category."""
        assert main(["stats"]) == 0
        out = capsys.readouterr().out

        for category in FileCategory:
            assert category.value in out
        assert "total" in out

    def test_check_config_ok(self, configured_env, capsys):
        """Test a valid key passes."""
        assert main(["check-config", "--strict"]) == 0
        assert "Encryption key configured" in capsys.readouterr().out

    def test_check_config_missing_key(self, monkeypatch, temp_storage_dir, capsys):
        """Test a missing key warns, and fails only under --strict."""
        monkeypatch.setenv("UPLOAD_DIR", str(temp_storage_dir))
        reload_settings()

        assert main(["check-config"]) == 0
        assert "unreadable after a restart" in capsys.readouterr().out
        assert main(["check-config", "--strict"]) == 1

    def test_check_config_invalid_key(self, monkeypatch, temp_storage_dir, capsys):
        """Test a malformed key fails."""
        monkeypatch.setenv("UPLOAD_DIR", str(temp_storage_dir))
        monkeypatch.setenv("FILE_ENCRYPTION_KEY", "not-a-key")
        reload_settings()

        assert main(["check-config"]) == 1
        assert "invalid" in capsys.readouterr().out

    def test_invalid_key_fails_other_commands(self, monkeypatch, temp_storage_dir):
        """Test commands that need the crypto layer fail cleanly on a bad key."""
        monkeypatch.setenv("UPLOAD_DIR", str(temp_storage_dir))
        monkeypatch.setenv("FILE_ENCRYPTION_KEY", "abcd")
        reload_settings()

        assert main(["stats"]) == 1

    def test_verify(self, configured_env, capsys):
        """Test verify succeeds on a match and fails on a mismatch."""
        storage = SecureFileStorage.from_settings(get_settings())
        result = storage.store_file(b"hello world!", "api.key", FileCategory.CREDENTIAL, "c1")

        assert main(["verify", result.relative_path, result.content_hash, "--encrypted"]) == 0
        assert main(["verify", result.relative_path, "0" * 64, "--encrypted"]) == 1
        assert "mismatch" in capsys.readouterr().out

    def test_verify_missing_file(self, configured_env, capsys):
        """Test verify reports a missing file."""
        assert main(["verify", "document/missing.txt", "0" * 64]) == 1
        assert "Failed to retrieve file" in capsys.readouterr().out

    def test_verify_traversal(self, configured_env):
        """Test verify refuses paths outside the root."""
        assert main(["verify", "../../etc/passwd", "0" * 64]) == 1
