"""
Apple ID/password client backed by the pyicloud library.

pyicloud authenticates inside ``PyiCloudService.__init__`` and reports a
pending two-factor challenge through ``requires_2fa``. This wrapper defers
construction to ``authenticate()`` and exposes the outcome as a polled
``status`` so the session establisher can drive it.
"""
import logging
import tempfile
from typing import Any, Callable, Optional

from pyicloud import PyiCloudService
from pyicloud.exceptions import PyiCloudFailedLoginException, PyiCloud2SARequiredException

logger = logging.getLogger(__name__)


class PyiCloudClient:
    """Polling-style handle around :class:`PyiCloudService`."""

    STATUS_NOT_LOGGED_IN = "NotLoggedIn"
    STATUS_MFA_REQUESTED = "MfaRequested"
    STATUS_READY = "Ready"
    STATUS_ERROR = "Error"

    def __init__(self, username: str, password: str,
                 trust_device: bool = False,
                 auth_method: str = "srp",
                 cookie_directory: Optional[str] = None,
                 service_factory: Callable[..., Any] = PyiCloudService):
        """
        Initialize the client. No network traffic happens until ``authenticate``.

        Args:
            username: Apple ID email
            password: Apple ID or app-specific password
            trust_device: Request a trusted session after a successful MFA code
            auth_method: Requested scheme; pyicloud always negotiates SRP itself
            cookie_directory: Where pyicloud keeps its cookie jar. Defaults to a
                temporary directory removed by ``close()`` so nothing outlives
                the invocation.
            service_factory: Constructor for the pyicloud service (for tests)
        """
        self.username = username
        self.password = password
        self.trust_device = trust_device
        self.auth_method = auth_method
        self._service_factory = service_factory
        self._tmp_dir = None
        if cookie_directory is None:
            self._tmp_dir = tempfile.TemporaryDirectory(prefix="icloud-media-")
            cookie_directory = self._tmp_dir.name
        self.cookie_directory = cookie_directory
        self.api: Optional[Any] = None
        self.error: Optional[Exception] = None
        self.status = self.STATUS_NOT_LOGGED_IN

        if auth_method != "srp":
            logger.warning(f"Auth method '{auth_method}' is not configurable with pyicloud; using SRP")

    def authenticate(self) -> None:
        """Log in and record the resulting status."""
        logger.debug(f"Using cookie directory: {self.cookie_directory}")
        try:
            self.api = self._service_factory(
                self.username, self.password, cookie_directory=self.cookie_directory
            )
        except PyiCloud2SARequiredException as e:
            # Legacy two-step accounts cannot be completed with a code here
            self.error = e
            self.status = self.STATUS_ERROR
            logger.error(f"pyicloud requires two-step authentication: {e}")
            return
        except PyiCloudFailedLoginException as e:
            self.error = e
            self.status = self.STATUS_ERROR
            logger.error(f"Apple rejected the login: {e}")
            return

        self._refresh_status()

    def _refresh_status(self) -> None:
        if self.api is None:
            self.status = self.STATUS_ERROR
        elif getattr(self.api, 'requires_2fa', False) or getattr(self.api, 'requires_2sa', False):
            self.status = self.STATUS_MFA_REQUESTED
        else:
            self.status = self.STATUS_READY

    def provide_mfa_code(self, code: str) -> bool:
        """
        Submit a two-factor code.

        Args:
            code: Six-digit verification code

        Returns:
            True if the code was accepted
        """
        if self.api is None:
            self.status = self.STATUS_ERROR
            return False

        if not self.api.validate_2fa_code(code):
            logger.error("Invalid verification code")
            self.status = self.STATUS_ERROR
            return False
        logger.info("✓ Verification code accepted")

        if self.trust_device and not getattr(self.api, 'is_trusted_session', True):
            logger.info("Requesting a trusted session for this device")
            if not self.api.trust_session():
                logger.warning("Failed to request trust; the next login may need MFA again")

        self._refresh_status()
        return self.status == self.STATUS_READY

    def get_service(self, name: str) -> Any:
        """Return a pyicloud service (e.g. ``photos``) or None."""
        if self.api is None:
            return None
        return getattr(self.api, name.lower(), None)

    @property
    def photos(self) -> Any:
        return self.get_service("photos")

    def close(self) -> None:
        """Remove the temporary cookie directory, if one was created."""
        if self._tmp_dir is not None:
            self._tmp_dir.cleanup()
            self._tmp_dir = None
