"""
Settings Management

Pydantic-based settings schema with environment variable support.
Merges the optional TOML config file with environment overrides and provides
type-safe access to the storage root, encryption key and logging options.

@.architecture
Incoming: utils/config.py, Environment variables, filevault.toml --- {Dict from load_toml_config, str from os.getenv}
Processing: get_settings(), reload_settings(), build_settings(), field_validator() --- {4 jobs: configuration_loading, environment_variable_merging, schema_validation, caching}
Outgoing: security/crypto.py, data/storage/local.py, cli.py --- {Settings Pydantic model with typed config sections}
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from filevault.utils.config import get_section, load_config as load_toml_config


# =============================================================================
# Settings Schemas
# =============================================================================

class StorageSettings(BaseModel):
    """File storage settings."""
    model_config = ConfigDict(frozen=True)

    upload_dir: Path = Field(default_factory=lambda: Path("./uploads"))
    max_file_size_bytes: int = Field(default=10 * 1024 * 1024, gt=0)


class EncryptionSettings(BaseModel):
    """
    Symmetric encryption settings.

    key_hex is the hex-encoded 256-bit key. When it is None the crypto layer
    generates an in-memory key that does not survive a restart.
    """
    model_config = ConfigDict(frozen=True)

    key_hex: Optional[SecretStr] = None

    @field_validator('key_hex', mode='before')
    @classmethod
    def empty_key_is_missing(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        if isinstance(v, str):
            return v.strip()
        return v

    @property
    def is_configured(self) -> bool:
        return self.key_hex is not None


class MonitoringSettings(BaseModel):
    """Logging configuration."""
    model_config = ConfigDict(frozen=True)

    log_level: str = "INFO"
    log_format: str = "text"  # json|text

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in ('json', 'text'):
            raise ValueError("log_format must be 'json' or 'text'")
        return v


class Settings(BaseModel):
    """
    Main application settings.

    Loads configuration from:
    1. TOML config file (filevault.toml, or the path in FILEVAULT_CONFIG)
    2. Environment variables
    3. Defaults defined in schemas

    Priority: Environment variables > TOML config > Defaults
    """
    model_config = ConfigDict(frozen=True)

    app_name: str = "filevault"
    environment: str = "development"  # development|production|test

    storage: StorageSettings = Field(default_factory=StorageSettings)
    encryption: EncryptionSettings = Field(default_factory=EncryptionSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = ['development', 'production', 'test']
        if v not in allowed:
            raise ValueError(f"Environment must be one of {allowed}")
        return v


# =============================================================================
# Settings Loader
# =============================================================================

def build_settings(config_file: Optional[Path] = None) -> Settings:
    """
    Build settings from TOML config and the environment (uncached).

    Args:
        config_file: Optional explicit TOML path

    Returns:
        Settings: Complete application settings
    """
    toml_config = load_toml_config(config_file)

    storage_settings: Dict[str, Any] = dict(get_section(toml_config, "STORAGE"))
    encryption_settings: Dict[str, Any] = dict(get_section(toml_config, "ENCRYPTION"))
    monitoring_settings: Dict[str, Any] = dict(get_section(toml_config, "MONITORING"))

    # Environment overrides
    if upload_dir := os.getenv("UPLOAD_DIR"):
        storage_settings["upload_dir"] = upload_dir
    if max_size := os.getenv("STORAGE_MAX_FILE_SIZE_BYTES"):
        storage_settings["max_file_size_bytes"] = max_size
    if key_hex := os.getenv("FILE_ENCRYPTION_KEY"):
        encryption_settings["key_hex"] = key_hex
    if log_level := os.getenv("MONITORING_LOG_LEVEL"):
        monitoring_settings["log_level"] = log_level
    if log_format := os.getenv("MONITORING_LOG_FORMAT"):
        monitoring_settings["log_format"] = log_format

    return Settings(
        environment=os.getenv("FILEVAULT_ENVIRONMENT", "development"),
        storage=storage_settings,
        encryption=encryption_settings,
        monitoring=monitoring_settings,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Load and return application settings (cached).

    The configuration is read once per process; use reload_settings() to
    pick up changes.
    """
    return build_settings()


def reload_settings() -> Settings:
    """
    Reload settings (clears cache).

    Returns:
        Settings: Reloaded application settings
    """
    get_settings.cache_clear()
    return get_settings()
