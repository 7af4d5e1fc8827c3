"""
Configuration management using dataclasses for type safety and validation.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any
import yaml
import json
import os
import jsonschema
import logging

from icloud_media.auth.credentials import Credentials, coerce_bool, credentials_from_mapping

logger = logging.getLogger(__name__)

MAX_LIMIT = 5000
MEDIA_TYPES = ("all", "photo", "video")


def _env_flag(name: str) -> Optional[bool]:
    value = os.getenv(name)
    if value is None or value == '':
        return None
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class ICloudConfig:
    """iCloud credentials and authentication settings."""
    cookie: Optional[str] = None
    apple_id: Optional[str] = None
    password: Optional[str] = None
    mfa_code: Optional[str] = None
    trust_device: bool = False
    auth_timeout: float = 20.0

    def __post_init__(self):
        """Apply environment variable overrides and validate."""
        if not self.cookie:
            self.cookie = os.getenv('ICLOUD_COOKIE')
        if not self.apple_id:
            self.apple_id = os.getenv('ICLOUD_APPLE_ID')
        if not self.password:
            self.password = os.getenv('ICLOUD_PASSWORD')
        if not self.mfa_code:
            self.mfa_code = os.getenv('ICLOUD_2FA_CODE')
        if not self.trust_device:
            self.trust_device = bool(_env_flag('ICLOUD_TRUST_DEVICE'))
        if self.auth_timeout <= 0:
            raise ValueError("auth_timeout must be positive")

    def credentials(self) -> Credentials:
        """Build the credential variant implied by the populated fields."""
        return credentials_from_mapping({
            'cookie': self.cookie,
            'apple_id': self.apple_id,
            'password': self.password,
            'mfa_code': self.mfa_code,
            'trust_device': self.trust_device,
        })

    def __repr__(self) -> str:
        return (
            f"ICloudConfig(apple_id={self.apple_id!r}, cookie={'set' if self.cookie else 'unset'}, "
            f"trust_device={self.trust_device}, auth_timeout={self.auth_timeout})"
        )


@dataclass
class ListParameters:
    """Parameters of one listing invocation."""
    operation: str = "list"
    limit: int = 100
    media_type: str = "all"
    include_raw: bool = False

    def __post_init__(self):
        """Validate listing parameters."""
        if isinstance(self.limit, bool) or not isinstance(self.limit, int):
            raise ValueError(f"limit must be an integer, got {self.limit!r}")
        if not 0 <= self.limit <= MAX_LIMIT:
            raise ValueError(f"limit must be between 0 and {MAX_LIMIT}, got {self.limit}")
        if self.media_type not in MEDIA_TYPES:
            raise ValueError(f"Invalid media type: {self.media_type}. Must be one of {MEDIA_TYPES}")

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'ListParameters':
        """
        Create parameters from a mapping using snake_case or camelCase keys.

        Args:
            values: e.g. ``{"operation": "list", "limit": 10, "mediaType": "video"}``

        Returns:
            ListParameters instance
        """
        def pick(*keys, default=None):
            for key in keys:
                if key in values and values[key] is not None:
                    return values[key]
            return default

        return cls(
            operation=pick('operation', default='list'),
            limit=pick('limit', default=100),
            media_type=pick('media_type', 'mediaType', default='all'),
            include_raw=coerce_bool(pick('include_raw', 'includeRaw', default=False)),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None
    enable_json: bool = False
    enable_rotation: bool = True
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5

    def __post_init__(self):
        """Validate logging level and rotation settings."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.level.upper() not in valid_levels:
            raise ValueError(f"Invalid logging level: {self.level}. Must be one of {valid_levels}")
        if self.max_bytes < 1:
            raise ValueError("max_bytes must be at least 1")
        if self.backup_count < 0:
            raise ValueError("backup_count must not be negative")


@dataclass
class AdapterConfig:
    """Main adapter configuration."""
    icloud: ICloudConfig = field(default_factory=ICloudConfig)
    listing: ListParameters = field(default_factory=ListParameters)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, config_path: str, validate: bool = True) -> 'AdapterConfig':
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to YAML configuration file
            validate: Whether to validate against JSON schema

        Returns:
            AdapterConfig instance
        """
        try:
            with open(config_path, 'r') as f:
                config_dict = yaml.safe_load(f)
        except (yaml.YAMLError, IOError, OSError) as e:
            raise ValueError(f"Failed to load configuration file '{config_path}': {e}") from e

        if config_dict is None:
            raise ValueError(f"Configuration file '{config_path}' is empty or invalid")

        if validate:
            cls._validate_schema(config_dict)

        config_dict = cls._apply_env_overrides(config_dict)

        return cls.from_dict(config_dict)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'AdapterConfig':
        """
        Create configuration from dictionary.

        Args:
            config_dict: Configuration dictionary

        Returns:
            AdapterConfig instance
        """
        icloud = ICloudConfig(**(config_dict.get('icloud') or {}))
        listing = ListParameters.from_dict(config_dict.get('listing') or {})
        logging_config = LoggingConfig(**(config_dict.get('logging') or {}))

        return cls(icloud=icloud, listing=listing, logging=logging_config)

    @staticmethod
    def _validate_schema(config_dict: Dict[str, Any]) -> None:
        """Validate configuration against JSON schema."""
        try:
            schema_path = Path(__file__).parent / 'config_schema.json'
            if schema_path.exists():
                with open(schema_path, 'r') as f:
                    schema = json.load(f)

                jsonschema.validate(instance=config_dict, schema=schema)
                logger.debug("Configuration validated against schema")
        except jsonschema.ValidationError as e:
            raise ValueError(
                f"Configuration validation failed: {e.message}\n"
                f"Path: {'.'.join(str(p) for p in e.path)}"
            ) from e
        except (IOError, OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not load configuration schema for validation: {e}")

    @staticmethod
    def _apply_env_overrides(config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration dictionary."""
        # Create a deep copy
        config = json.loads(json.dumps(config_dict))

        if not config.get('icloud'):
            config['icloud'] = {}

        overrides = {
            'cookie': 'ICLOUD_COOKIE',
            'apple_id': 'ICLOUD_APPLE_ID',
            'password': 'ICLOUD_PASSWORD',
            'mfa_code': 'ICLOUD_2FA_CODE',
        }
        for key, env_name in overrides.items():
            value = os.getenv(env_name)
            if value:
                config['icloud'][key] = value

        trust_device = _env_flag('ICLOUD_TRUST_DEVICE')
        if trust_device is not None:
            config['icloud']['trust_device'] = trust_device

        return config
