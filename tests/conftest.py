"""
Pytest Configuration and Shared Fixtures

Provides temporary storage roots, a deterministic encryption key and
settings isolation for unit and integration tests.
"""

import os
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Test environment setup
os.environ["FILEVAULT_ENVIRONMENT"] = "test"

from filevault.config.settings import reload_settings
from filevault.data.storage import SecureFileStorage
from filevault.security.crypto import FileEncryption


TEST_KEY_HEX = "000102030405060708090a0b0c0d0e0f101112131415161718191a1b1c1d1e1f"

CONFIG_ENV_VARS = (
    "UPLOAD_DIR",
    "STORAGE_MAX_FILE_SIZE_BYTES",
    "FILE_ENCRYPTION_KEY",
    "MONITORING_LOG_LEVEL",
    "MONITORING_LOG_FORMAT",
    "FILEVAULT_CONFIG",
)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that exercise storage on a real filesystem"
    )


# =============================================================================
# Settings Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def clean_config_env(monkeypatch, temp_dir: Path):
    """Isolate tests from the developer's environment and config file."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("FILEVAULT_CONFIG", str(temp_dir / "missing.toml"))
    reload_settings()
    yield
    reload_settings()


# =============================================================================
# Temporary Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_storage_dir(temp_dir: Path) -> Path:
    """Storage root path (not created; the storage layer creates it)."""
    return temp_dir / "uploads"


# =============================================================================
# Crypto & Storage Fixtures
# =============================================================================

@pytest.fixture
def test_key() -> bytes:
    """Deterministic 256-bit key."""
    return bytes.fromhex(TEST_KEY_HEX)


@pytest.fixture
def encryption(test_key: bytes) -> FileEncryption:
    """Crypto layer with the deterministic test key."""
    return FileEncryption(test_key)


@pytest.fixture
def storage(temp_storage_dir: Path, encryption: FileEncryption) -> SecureFileStorage:
    """Storage rooted in a temporary directory."""
    return SecureFileStorage(temp_storage_dir, encryption)
