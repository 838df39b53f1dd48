"""
Simple config loader for storage components.
Reads the optional TOML config file that sits next to the settings module.

@.architecture
Incoming: config/settings.py, FILEVAULT_CONFIG env var --- {Path config_file, load_config calls}
Processing: load_config(), get_fallback_config(), get_section() --- {3 jobs: config_loading, fallback_generation, section_extraction}
Outgoing: config/settings.py --- {Dict[str, Any] config data}
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import toml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path(__file__).parent.parent / "config" / "filevault.toml"


def resolve_config_file(config_file: Optional[Path] = None) -> Path:
    """Pick the TOML file: explicit argument, then FILEVAULT_CONFIG, then the bundled default."""
    if config_file is not None:
        return Path(config_file)
    if env_path := os.getenv("FILEVAULT_CONFIG"):
        return Path(env_path)
    return DEFAULT_CONFIG_FILE


def load_config(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from the TOML file, falling back to defaults."""
    path = resolve_config_file(config_file)
    try:
        with open(path, 'r') as f:
            return toml.load(f)
    except FileNotFoundError:
        logger.debug(f"No config file at {path}, using fallback config")
        return get_fallback_config()
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning(f"Failed to load config file {path}: {e}")
        return get_fallback_config()


def get_fallback_config() -> Dict[str, Any]:
    """Fallback configuration if TOML file can't be loaded."""
    return {
        "STORAGE": {
            "upload_dir": "./uploads",
            "max_file_size_bytes": 10 * 1024 * 1024,
        },
        "ENCRYPTION": {},
        "MONITORING": {
            "log_level": "INFO",
            "log_format": "text",
        },
    }


def get_section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Return a config section as a dict (empty if missing or malformed)."""
    section = config.get(name, {})
    return section if isinstance(section, dict) else {}
