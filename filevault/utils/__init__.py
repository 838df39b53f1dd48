"""
Utilities

TOML config loading shared by the settings layer.
"""

from .config import load_config, get_fallback_config, get_section

__all__ = [
    'load_config',
    'get_fallback_config',
    'get_section',
]
