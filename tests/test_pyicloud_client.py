"""
Tests for the pyicloud-backed polling client.
"""
import os
from unittest.mock import MagicMock, Mock

import pytest
from pyicloud.exceptions import PyiCloudFailedLoginException

from icloud_media.clients.pyicloud_client import PyiCloudClient


@pytest.fixture
def mock_api():
    """Mock PyiCloudService instance."""
    api = MagicMock()
    api.requires_2fa = False
    api.requires_2sa = False
    api.is_trusted_session = False
    api.validate_2fa_code.return_value = True
    api.trust_session.return_value = True
    return api


@pytest.fixture
def client(mock_api, tmp_path):
    factory = Mock(return_value=mock_api)
    return PyiCloudClient(
        'me@example.com', 'pw',
        cookie_directory=str(tmp_path),
        service_factory=factory,
    )


class TestAuthenticate:
    """Tests for PyiCloudClient.authenticate."""

    def test_initial_status(self, client):
        assert client.status == PyiCloudClient.STATUS_NOT_LOGGED_IN
        assert client.api is None

    def test_ready_without_2fa(self, client, mock_api, tmp_path):
        client.authenticate()

        client._service_factory.assert_called_once_with('me@example.com', 'pw', cookie_directory=str(tmp_path))
        assert client.status == PyiCloudClient.STATUS_READY
        assert client.photos is mock_api.photos

    def test_2fa_requested(self, client, mock_api):
        mock_api.requires_2fa = True

        client.authenticate()

        assert client.status == PyiCloudClient.STATUS_MFA_REQUESTED

    def test_failed_login(self, tmp_path):
        factory = Mock(side_effect=PyiCloudFailedLoginException("Invalid email/password combination."))
        client = PyiCloudClient('me@example.com', 'bad', cookie_directory=str(tmp_path), service_factory=factory)

        client.authenticate()

        assert client.status == PyiCloudClient.STATUS_ERROR
        assert isinstance(client.error, PyiCloudFailedLoginException)
        assert client.photos is None

    def test_unexpected_errors_propagate(self, tmp_path):
        factory = Mock(side_effect=ConnectionError("offline"))
        client = PyiCloudClient('me@example.com', 'pw', cookie_directory=str(tmp_path), service_factory=factory)

        with pytest.raises(ConnectionError):
            client.authenticate()


class TestProvideMfaCode:
    """Tests for PyiCloudClient.provide_mfa_code."""

    def test_code_accepted(self, client, mock_api):
        mock_api.requires_2fa = True
        client.authenticate()

        def accept(code):
            mock_api.requires_2fa = False
            return True

        mock_api.validate_2fa_code.side_effect = accept

        assert client.provide_mfa_code('123456') is True
        mock_api.validate_2fa_code.assert_called_once_with('123456')
        mock_api.trust_session.assert_not_called()
        assert client.status == PyiCloudClient.STATUS_READY

    def test_trust_requested(self, mock_api, tmp_path):
        client = PyiCloudClient('me@example.com', 'pw', trust_device=True,
                                cookie_directory=str(tmp_path), service_factory=Mock(return_value=mock_api))
        client.authenticate()

        client.provide_mfa_code('123456')

        mock_api.trust_session.assert_called_once()

    def test_code_rejected(self, client, mock_api):
        mock_api.requires_2fa = True
        mock_api.validate_2fa_code.return_value = False
        client.authenticate()

        assert client.provide_mfa_code('000000') is False
        assert client.status == PyiCloudClient.STATUS_ERROR

    def test_code_before_authenticate(self, client):
        assert client.provide_mfa_code('123456') is False
        assert client.status == PyiCloudClient.STATUS_ERROR


class TestCookieDirectory:
    """Tests for temporary cookie storage."""

    def test_temporary_directory_removed_on_close(self, mock_api):
        client = PyiCloudClient('me@example.com', 'pw', service_factory=Mock(return_value=mock_api))
        directory = client.cookie_directory
        assert os.path.isdir(directory)

        client.close()

        assert not os.path.exists(directory)

    def test_given_directory_kept(self, client, tmp_path):
        client.close()
        assert tmp_path.exists()

    def test_get_service_is_case_insensitive(self, client, mock_api):
        client.authenticate()
        assert client.get_service('Photos') is mock_api.photos
