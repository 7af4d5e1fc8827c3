"""
Pytest configuration and shared fixtures.
"""
import base64
from typing import Dict, List

import pytest
import yaml


ENV_VARS = (
    'ICLOUD_COOKIE',
    'ICLOUD_APPLE_ID',
    'ICLOUD_PASSWORD',
    'ICLOUD_2FA_CODE',
    'ICLOUD_TRUST_DEVICE',
    'ICLOUD_LOGIN_URL',
    'ICLOUD_COOKIE_DOMAIN',
    'PRINT_COOKIE_JSON',
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep credentials from the developer's environment out of tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def flat_assets() -> List[Dict]:
    """Flat-shaped raw assets as returned by JSON-style clients."""
    return [
        {'id': 'A1', 'filename': 'IMG_0001.JPG', 'type': 'photo', 'created': '2024-01-01T10:00:00Z', 'size': 1024},
        {'id': 'A2', 'filename': 'IMG_0002.MOV', 'type': 'VIDEO', 'creationDate': 1704103200000, 'fileSize': 4096},
        {'guid': 'A3', 'name': 'scan.png', 'dateCreated': '2024-01-03'},
    ]


@pytest.fixture
def master_record_asset() -> Dict:
    """Asset in the nested CloudKit master-record shape."""
    return {
        'masterRecord': {
            'recordName': 'MASTER-1',
            'fields': {
                'filenameEnc': {'value': base64.b64encode(b'IMG_0100.MOV').decode('ascii'), 'type': 'ENCRYPTED_BYTES'},
                'resOriginalRes': {'value': {'size': 2048000, 'downloadURL': 'https://example.invalid/x'}},
                'resVidMedRes': {'value': {'size': 512000}},
            },
        },
        'assetDate': 1700000000000,
    }


@pytest.fixture
def cookie_header() -> str:
    return "Cookie: X-APPLE-WEBAUTH-USER=abc; X-APPLE-WEBAUTH-TOKEN=def"


@pytest.fixture
def config_file(tmp_path) -> str:
    """Create a temporary config.yaml file."""
    config = {
        'icloud': {
            'apple_id': 'test@example.com',
            'password': 'app-password',
            'trust_device': True,
            'auth_timeout': 15,
        },
        'listing': {
            'limit': 25,
            'media_type': 'video',
            'include_raw': False,
        },
        'logging': {
            'level': 'DEBUG',
        },
    }
    config_path = tmp_path / 'config.yaml'
    with open(config_path, 'w') as f:
        yaml.dump(config, f)
    return str(config_path)
