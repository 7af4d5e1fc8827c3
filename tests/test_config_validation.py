"""
Tests for configuration validation.
"""
import pytest
import yaml

from icloud_media.auth.credentials import AppleIdCredentials, CookieCredentials
from icloud_media.config import (
    AdapterConfig,
    ICloudConfig,
    ListParameters,
    LoggingConfig,
)


class TestICloudConfig:
    """Tests for ICloudConfig."""

    def test_icloud_config_creation(self):
        """Test creating iCloud config."""
        config = ICloudConfig()
        assert config.apple_id is None
        assert config.password is None
        assert config.cookie is None
        assert config.trust_device is False
        assert config.auth_timeout == 20.0

    def test_icloud_config_env_fallback(self, monkeypatch):
        """Test environment variables fill unset fields."""
        monkeypatch.setenv('ICLOUD_APPLE_ID', 'env@example.com')
        monkeypatch.setenv('ICLOUD_PASSWORD', 'envpass')
        monkeypatch.setenv('ICLOUD_TRUST_DEVICE', 'true')

        config = ICloudConfig()

        assert config.apple_id == 'env@example.com'
        assert config.password == 'envpass'
        assert config.trust_device is True

    def test_icloud_config_explicit_values_win(self, monkeypatch):
        """Test explicit values are not replaced by the environment."""
        monkeypatch.setenv('ICLOUD_APPLE_ID', 'env@example.com')
        config = ICloudConfig(apple_id='explicit@example.com')
        assert config.apple_id == 'explicit@example.com'

    def test_icloud_config_invalid_timeout(self):
        """Test validation with non-positive timeout."""
        with pytest.raises(ValueError, match="auth_timeout must be positive"):
            ICloudConfig(auth_timeout=0)

    def test_credentials_cookie_variant(self):
        """Test a cookie selects the cookie credential."""
        config = ICloudConfig(cookie='Cookie: a=1', apple_id='me@example.com')
        creds = config.credentials()
        assert isinstance(creds, CookieCredentials)
        assert creds.cookie == 'a=1'

    def test_credentials_apple_id_variant(self):
        """Test Apple ID credentials when no cookie is set."""
        config = ICloudConfig(apple_id='me@example.com', password='pw', mfa_code=123456)
        creds = config.credentials()
        assert isinstance(creds, AppleIdCredentials)
        assert creds.mfa_code == '123456'

    def test_repr_hides_secrets(self):
        """Test repr never shows the password or cookie."""
        config = ICloudConfig(cookie='TOKEN=secret-cookie', apple_id='me@example.com', password='hunter2')
        text = repr(config)
        assert 'hunter2' not in text
        assert 'secret-cookie' not in text
        assert 'me@example.com' in text


class TestListParameters:
    """Tests for ListParameters."""

    def test_defaults(self):
        """Test default parameters."""
        params = ListParameters()
        assert params.operation == 'list'
        assert params.limit == 100
        assert params.media_type == 'all'
        assert params.include_raw is False

    @pytest.mark.parametrize("limit", [0, 1, 5000])
    def test_limit_bounds_accepted(self, limit):
        assert ListParameters(limit=limit).limit == limit

    @pytest.mark.parametrize("limit", [-1, 5001, 2.5, '10', True])
    def test_invalid_limit(self, limit):
        with pytest.raises(ValueError, match="limit must be"):
            ListParameters(limit=limit)

    def test_invalid_media_type(self):
        with pytest.raises(ValueError, match="Invalid media type"):
            ListParameters(media_type='panorama')

    def test_from_dict_camel_case(self):
        """Test camelCase keys from JSON-style callers."""
        params = ListParameters.from_dict({'operation': 'list', 'limit': 10, 'mediaType': 'video', 'includeRaw': True})
        assert params.limit == 10
        assert params.media_type == 'video'
        assert params.include_raw is True

    @pytest.mark.parametrize("value,expected", [
        ("false", False),
        ("False", False),
        ("0", False),
        ("no", False),
        ("", False),
        ("true", True),
        ("1", True),
        (True, True),
        (False, False),
    ])
    def test_from_dict_include_raw_strings(self, value, expected):
        """Test string flags from env or host mappings are parsed, not truthiness-checked."""
        params = ListParameters.from_dict({'includeRaw': value})
        assert params.include_raw is expected

    def test_from_dict_null_values_use_defaults(self):
        params = ListParameters.from_dict({'limit': None, 'mediaType': None})
        assert params.limit == 100
        assert params.media_type == 'all'


class TestLoggingConfig:
    """Tests for LoggingConfig."""

    def test_logging_config_defaults(self):
        """Test logging config with defaults."""
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.file is None
        assert config.enable_json is False

    def test_logging_config_invalid_level(self):
        """Test validation with invalid log level."""
        with pytest.raises(ValueError, match="Invalid logging level"):
            LoggingConfig(level="INVALID")

    def test_logging_config_rotation_defaults(self):
        """Test rotation is on with a 10MB file and 5 backups by default."""
        config = LoggingConfig()
        assert config.enable_rotation is True
        assert config.max_bytes == 10 * 1024 * 1024
        assert config.backup_count == 5

    def test_logging_config_invalid_rotation(self):
        """Test validation of rotation settings."""
        with pytest.raises(ValueError, match="max_bytes"):
            LoggingConfig(max_bytes=0)
        with pytest.raises(ValueError, match="backup_count"):
            LoggingConfig(backup_count=-1)

    def test_logging_rotation_from_yaml(self, tmp_path):
        """Test rotation settings load from the logging section."""
        config_path = tmp_path / 'config.yaml'
        with open(config_path, 'w') as f:
            yaml.dump({'logging': {'file': 'adapter.log', 'enable_rotation': False,
                                   'max_bytes': 4096, 'backup_count': 1}}, f)

        config = AdapterConfig.from_yaml(str(config_path))

        assert config.logging.enable_rotation is False
        assert config.logging.max_bytes == 4096
        assert config.logging.backup_count == 1


class TestAdapterConfig:
    """Tests for AdapterConfig."""

    def test_adapter_config_from_yaml_valid(self, config_file):
        """Test loading valid config from YAML."""
        config = AdapterConfig.from_yaml(config_file)

        assert isinstance(config, AdapterConfig)
        assert config.icloud.apple_id == 'test@example.com'
        assert config.icloud.trust_device is True
        assert config.icloud.auth_timeout == 15
        assert config.listing.limit == 25
        assert config.listing.media_type == 'video'
        assert config.logging.level == 'DEBUG'

    def test_adapter_config_env_overrides(self, config_file, monkeypatch):
        """Test environment variables override the file."""
        monkeypatch.setenv('ICLOUD_COOKIE', 'Cookie: X=1')
        monkeypatch.setenv('ICLOUD_PASSWORD', 'from-env')
        monkeypatch.setenv('ICLOUD_TRUST_DEVICE', 'false')

        config = AdapterConfig.from_yaml(config_file)

        assert config.icloud.cookie == 'Cookie: X=1'
        assert config.icloud.password == 'from-env'
        assert config.icloud.trust_device is False
        assert isinstance(config.icloud.credentials(), CookieCredentials)

    def test_adapter_config_invalid_schema(self, tmp_path):
        """Test loading config that violates the schema."""
        config_path = tmp_path / 'config.yaml'
        with open(config_path, 'w') as f:
            yaml.dump({'listing': {'limit': 10000}}, f)

        with pytest.raises(ValueError, match="Configuration validation failed"):
            AdapterConfig.from_yaml(str(config_path))

    def test_adapter_config_unknown_key(self, tmp_path):
        """Test unknown keys are rejected by the schema."""
        config_path = tmp_path / 'config.yaml'
        with open(config_path, 'w') as f:
            yaml.dump({'icloud': {'username': 'me'}}, f)

        with pytest.raises(ValueError, match="Configuration validation failed"):
            AdapterConfig.from_yaml(str(config_path))

    def test_adapter_config_invalid_without_validation(self, tmp_path):
        """Test dataclass validation still applies when the schema is skipped."""
        config_path = tmp_path / 'config.yaml'
        with open(config_path, 'w') as f:
            yaml.dump({'listing': {'media_type': 'panorama'}}, f)

        with pytest.raises(ValueError, match="Invalid media type"):
            AdapterConfig.from_yaml(str(config_path), validate=False)

    def test_adapter_config_empty_file(self, tmp_path):
        """Test an empty file is reported."""
        config_path = tmp_path / 'config.yaml'
        config_path.write_text('')

        with pytest.raises(ValueError, match="empty or invalid"):
            AdapterConfig.from_yaml(str(config_path))

    def test_adapter_config_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="Failed to load configuration file"):
            AdapterConfig.from_yaml(str(tmp_path / 'missing.yaml'))

    def test_adapter_config_from_dict_defaults(self):
        config = AdapterConfig.from_dict({})
        assert config.listing == ListParameters()
        assert config.logging.level == 'INFO'
