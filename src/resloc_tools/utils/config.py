"""
Configuration management for the resource localization tools.

Settings live in a small JSON file (``resloc.json`` in the working directory
by default, or wherever ``RESLOC_CONFIG`` points).
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional
from dataclasses import dataclass, asdict, field

logger = logging.getLogger(__name__)

ERROR_POLICIES = ("strict", "tolerant")
TRANSLATION_FORMATS = ("csv", "txt")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _normalize_extensions(values: list[str]) -> list[str]:
    out = []
    for v in values:
        v = v.strip().lower()
        if not v:
            continue
        out.append(v if v.startswith(".") else f".{v}")
    return out


@dataclass
class LocalizeConfig:
    """Localization run settings."""

    # Error handling
    error_policy: str = "strict"

    # Translation table
    translation_format: str = "csv"

    # Locale of the source containers when it is not recorded in the bundle
    source_locale: Optional[str] = None

    # Container recognition
    leaf_extensions: list[str] = field(default_factory=lambda: [".baml"])
    flat_extensions: list[str] = field(default_factory=lambda: [".resources"])
    composite_extensions: list[str] = field(default_factory=lambda: [".dll", ".exe"])
    executable_extensions: list[str] = field(default_factory=lambda: [".exe"])
    satellite_suffix: str = ".resources.dll"
    comment_extension: str = ".loc"

    # Localizability attributes (JSON table for AttributeTableResolver)
    attributes_file: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None
    verbose: bool = False

    def __post_init__(self):
        """Validate field values after initialization."""
        if self.error_policy not in ERROR_POLICIES:
            logger.warning(f"error_policy must be one of {ERROR_POLICIES}, got {self.error_policy!r}, using 'strict'")
            self.error_policy = "strict"
        fmt = str(self.translation_format).lower().lstrip(".")
        if fmt not in TRANSLATION_FORMATS:
            logger.warning(f"translation_format must be one of {TRANSLATION_FORMATS}, got {self.translation_format!r}, using 'csv'")
            fmt = "csv"
        self.translation_format = fmt
        level = str(self.log_level).upper()
        if level not in LOG_LEVELS:
            logger.warning(f"log_level must be one of {LOG_LEVELS}, got {self.log_level!r}, using 'INFO'")
            level = "INFO"
        self.log_level = level

        self.leaf_extensions = _normalize_extensions(self.leaf_extensions)
        self.flat_extensions = _normalize_extensions(self.flat_extensions)
        self.composite_extensions = _normalize_extensions(self.composite_extensions)
        self.executable_extensions = _normalize_extensions(self.executable_extensions)
        if not self.comment_extension.startswith("."):
            self.comment_extension = f".{self.comment_extension}"
        if not self.satellite_suffix.startswith("."):
            self.satellite_suffix = f".{self.satellite_suffix}"

    @property
    def tolerates_partial_output(self) -> bool:
        return self.error_policy == "tolerant"


def _default_config_path() -> Path:
    """获取默认配置路径，支持环境变量覆盖"""
    p = os.environ.get("RESLOC_CONFIG")
    if p:
        return Path(p)
    return Path.cwd() / "resloc.json"


class ConfigManager:
    """Manage application configuration with save/load."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            config_path: Path to config file. Defaults to ./resloc.json or $RESLOC_CONFIG
        """
        self.config_path = Path(config_path) if config_path else _default_config_path()
        self.config = self.load()

    def load(self) -> LocalizeConfig:
        """Load configuration from file."""
        if not self.config_path.exists():
            return LocalizeConfig()

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)

            # Filter out unknown keys to avoid TypeError
            valid_fields = set(LocalizeConfig.__dataclass_fields__)
            filtered_data = {k: v for k, v in data.items() if k in valid_fields}

            return LocalizeConfig(**filtered_data)
        except (json.JSONDecodeError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load config: {e}, using defaults")
            return LocalizeConfig()
        except OSError as e:
            logger.warning(f"Config file I/O error: {e}, using defaults")
            return LocalizeConfig()

    def save(self) -> bool:
        """Save configuration to file."""
        try:
            data = asdict(self.config)
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            return True
        except OSError as e:
            logger.error(f"Failed to save config: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return getattr(self.config, key, default)

    def set(self, key: str, value: Any, auto_save: bool = False) -> bool:
        """Set configuration value (re-validated through the dataclass)."""
        if not hasattr(self.config, key):
            logger.warning(f"Unknown config key: {key}")
            return False

        data = asdict(self.config)
        data[key] = value
        self.config = LocalizeConfig(**data)

        if auto_save:
            return self.save()
        return True

    def reset_to_defaults(self) -> bool:
        """Reset configuration to default values."""
        self.config = LocalizeConfig()
        return self.save()


_config_manager: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """Get the process default config manager."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager
