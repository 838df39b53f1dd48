"""
Configuration Layer

Typed settings for the storage root, the encryption key and logging.
"""

from .settings import (
    Settings,
    StorageSettings,
    EncryptionSettings,
    MonitoringSettings,
    build_settings,
    get_settings,
    reload_settings,
)

__all__ = [
    'Settings',
    'StorageSettings',
    'EncryptionSettings',
    'MonitoringSettings',
    'build_settings',
    'get_settings',
    'reload_settings',
]
