# ============================================================================
# FILE: config.py
# RELPATH: bagkit/src/bagkit/core/config.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Configuration manager with legacy flat-key migration
# ============================================================================

"""
Configuration Manager for BagKit.

Handles loading, saving, validating, and migrating configuration files.
Older deployments configured bagging through three flat keys
(``bagit_hash``, ``bagit_workdir``, ``bagit_autoclean``); those files are
migrated to the nested schema on load. Unknown legacy keys are preserved
under the ``bag`` section.

Library code never reads the manager directly. It receives a frozen
``BagConfig`` built once from the manager and passed into each Bag,
Manifest and BagValidator.
"""

import json
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from bagkit.core.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigMigrationError,
    ConfigValidationError
)
from bagkit.core.hashing import is_supported

DEFAULT_CONFIG_FILE = "bagkit_config.json"


class ConfigManager:
    """
    Manages BagKit configuration with migration support.

    Supports both the legacy flat format and the nested v1.0 format.
    A missing file yields the defaults in memory; nothing is written until
    ``save()`` is called.
    """

    DEFAULT_CONFIG = {
        "bag": {
            "hash_algorithm": "md5",
            "work_dir": "",
            "autoclean": True
        },
        "parsing": {
            "strict": False
        },
        "logging": {
            "log_dir": "",
            "level": "WARNING"
        }
    }

    # Known legacy keys that map to specific nested locations
    LEGACY_KEY_MAPPING = {
        "bagit_hash": ("bag", "hash_algorithm"),
        "bagit_workdir": ("bag", "work_dir"),
        "bagit_autoclean": ("bag", "autoclean"),
    }

    VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

    def __init__(self, config_file: str = DEFAULT_CONFIG_FILE):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to configuration file
        """
        self.config_file = Path(config_file)
        self.config: Dict = {}
        self.version: str = "1.0"
        self._load_or_default()

    def _load_or_default(self) -> None:
        """Load existing config or start from defaults."""
        if self.config_file.exists():
            self.load()
        else:
            self.config = self._deep_copy(self.DEFAULT_CONFIG)

    def load(self) -> Dict:
        """
        Load configuration from file.

        Automatically detects the legacy flat format and migrates it.

        Returns:
            Loaded configuration dictionary

        Raises:
            ConfigLoadError: If file cannot be loaded or parsed
        """
        try:
            text = self.config_file.read_text(encoding='utf-8')
            data = json.loads(text)
        except FileNotFoundError:
            raise ConfigLoadError(str(self.config_file), "File not found")
        except json.JSONDecodeError as e:
            raise ConfigLoadError(str(self.config_file), f"Invalid JSON: {str(e)}")
        except OSError as e:
            raise ConfigLoadError(str(self.config_file), str(e))

        if not isinstance(data, dict):
            raise ConfigLoadError(str(self.config_file), "Top-level JSON value must be an object")

        if self._is_legacy_format(data):
            data = self._migrate_from_legacy(data)
        else:
            data = self._merge_defaults(data)

        self.config = data
        return self.config

    def save(self) -> None:
        """
        Save configuration to file.

        Raises:
            ConfigError: If file cannot be written
        """
        try:
            text = json.dumps(self.config, indent=2, ensure_ascii=False)
            self.config_file.write_text(text, encoding='utf-8')
        except (OSError, TypeError, ValueError) as e:
            raise ConfigError(f"Failed to save config: {str(e)}")

    def _is_legacy_format(self, data: Dict) -> bool:
        """Flat ``bagit_*`` keys and none of the nested sections."""
        legacy_keys = set(self.LEGACY_KEY_MAPPING)
        nested_keys = set(self.DEFAULT_CONFIG)

        has_legacy_keys = any(key in data for key in legacy_keys)
        has_nested_keys = any(key in data for key in nested_keys)
        return has_legacy_keys and not has_nested_keys

    def _migrate_from_legacy(self, old_config: Dict) -> Dict:
        """
        Migrate a legacy flat configuration to the nested format.

        Creates a backup before migration. String booleans ("true"/"false")
        are converted, since the legacy values were read as text.

        Raises:
            ConfigMigrationError: If migration fails
        """
        try:
            self._create_backup()

            new_config = self._deep_copy(self.DEFAULT_CONFIG)
            processed_keys = set()

            for legacy_key, nested_path in self.LEGACY_KEY_MAPPING.items():
                if legacy_key in old_config:
                    value = old_config[legacy_key]
                    if legacy_key == "bagit_autoclean":
                        value = self._coerce_bool(value)
                    self._set_nested_value(new_config, nested_path, value)
                    processed_keys.add(legacy_key)

            for key, value in old_config.items():
                if key not in processed_keys:
                    new_config["bag"][key] = value

            return new_config

        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigMigrationError("legacy", self.version, str(e))

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("true", "yes", "1", "on"):
                return True
            if lowered in ("false", "no", "0", "off"):
                return False
        raise ValueError(f"Cannot interpret {value!r} as a boolean")

    def _merge_defaults(self, data: Dict) -> Dict:
        """Fill in sections and keys missing from a nested config file."""
        merged = self._deep_copy(self.DEFAULT_CONFIG)
        for section, values in data.items():
            if isinstance(values, dict) and isinstance(merged.get(section), dict):
                merged[section].update(values)
            else:
                merged[section] = values
        return merged

    def _set_nested_value(self, config: Dict, path: tuple, value: Any) -> None:
        current = config
        for key in path[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]
        current[path[-1]] = value

    def _create_backup(self) -> None:
        """Create timestamped backup of configuration file."""
        if not self.config_file.exists():
            return

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup_path = self.config_file.parent / f"{self.config_file.stem}.{timestamp}.backup"

        try:
            shutil.copy2(self.config_file, backup_path)
        except OSError:
            # Backup failure is not critical
            pass

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot-notation path.

        Args:
            key_path: Dot-separated path (e.g., 'bag.hash_algorithm')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self.config
        for key in key_path.split('.'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot-notation path."""
        keys = key_path.split('.')
        target = self.config

        for key in keys[:-1]:
            if key not in target:
                target[key] = {}
            target = target[key]

        target[keys[-1]] = value

    def validate(self) -> bool:
        """
        Validate configuration against schema.

        Returns:
            True if valid

        Raises:
            ConfigValidationError: If validation fails
        """
        for section in ("bag", "parsing"):
            if not isinstance(self.config.get(section), dict):
                raise ConfigValidationError(
                    section,
                    None,
                    f"Required section '{section}' missing"
                )

        self._validate_hash_algorithm()
        self._validate_work_dir()
        self._validate_bool('bag.autoclean')
        self._validate_bool('parsing.strict')
        self._validate_log_level()

        return True

    def _validate_hash_algorithm(self) -> None:
        value = self.get('bag.hash_algorithm')
        if not isinstance(value, str) or not is_supported(value):
            raise ConfigValidationError(
                'bag.hash_algorithm',
                value,
                "Must be an algorithm supported by hashlib (e.g. md5, sha1, sha256, sha512)"
            )

    def _validate_work_dir(self) -> None:
        value = self.get('bag.work_dir', "")
        if value is not None and not isinstance(value, str):
            raise ConfigValidationError('bag.work_dir', value, "Must be a path string")

    def _validate_bool(self, key_path: str) -> None:
        value = self.get(key_path)
        if not isinstance(value, bool):
            raise ConfigValidationError(key_path, value, "Must be true or false")

    def _validate_log_level(self) -> None:
        value = self.get('logging.level', "WARNING")
        if str(value).upper() not in self.VALID_LOG_LEVELS:
            raise ConfigValidationError(
                'logging.level',
                value,
                f"Must be one of: {', '.join(self.VALID_LOG_LEVELS)}"
            )

    def _deep_copy(self, obj: Any) -> Any:
        if isinstance(obj, dict):
            return {k: self._deep_copy(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._deep_copy(item) for item in obj]
        else:
            return obj

    def reset_to_defaults(self) -> None:
        """Reset configuration to default values."""
        self.config = self._deep_copy(self.DEFAULT_CONFIG)
        self.save()

    def export_dict(self) -> Dict:
        """Return a deep copy of the configuration."""
        return self._deep_copy(self.config)


@dataclass(frozen=True)
class BagConfig:
    """
    Settings a bag operation needs, fixed for the lifetime of the operation.

    Attributes:
        hash_algorithm: Algorithm for manifests created from scratch
        work_dir: Root for working copies and unpacked archives; None means
                  "next to the source"
        autoclean: Delete the working copy when a ``with Bag(...)`` block exits
        strict_parsing: Fail on malformed manifest or bag-info lines instead
                        of logging and skipping them
    """
    hash_algorithm: str = "md5"
    work_dir: Optional[Path] = None
    autoclean: bool = True
    strict_parsing: bool = False

    @classmethod
    def from_manager(cls, manager: ConfigManager) -> "BagConfig":
        """Build a BagConfig from a validated ConfigManager."""
        manager.validate()
        work_dir = manager.get('bag.work_dir') or None
        return cls(
            hash_algorithm=manager.get('bag.hash_algorithm', "md5"),
            work_dir=Path(work_dir) if work_dir else None,
            autoclean=manager.get('bag.autoclean', True),
            strict_parsing=manager.get('parsing.strict', False),
        )

    @classmethod
    def load(cls, config_file: str = DEFAULT_CONFIG_FILE) -> "BagConfig":
        return cls.from_manager(ConfigManager(config_file))


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: exceptions.py, hashing.py
# TESTS: tests/unit/test_config.py
# ============================================================================
