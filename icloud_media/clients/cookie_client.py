"""
Cookie-based iCloud client.

Reuses a session captured from an authenticated icloud.com browser window
(see ``icloud-media-cookie``). No login handshake or MFA step is involved:
the cookie is validated once against the setup endpoint, and the returned
web service map is used to reach the Photos CloudKit database.
"""
import inspect
import logging
import uuid
from typing import Any, Dict, Optional

import requests
from pyicloud.services.photos import PhotosService

from icloud_media.auth.credentials import normalize_cookie
from icloud_media.exceptions import AuthenticationFailedError

logger = logging.getLogger(__name__)

SETUP_ENDPOINT = "https://setup.icloud.com/setup/ws/1"
HOME_ENDPOINT = "https://www.icloud.com"

DEFAULT_HEADERS = {
    "Origin": HOME_ENDPOINT,
    "Referer": f"{HOME_ENDPOINT}/",
    "Accept": "application/json",
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
}

# HTTP statuses meaning the cookie is expired or not trusted
REJECTED_STATUS_CODES = (401, 403, 421, 450)


class CookieSessionClient:
    """iCloud client that authenticates with a raw Cookie header."""

    def __init__(self, cookie: str,
                 username: Optional[str] = None,
                 password: Optional[str] = None,
                 session: Optional[requests.Session] = None,
                 timeout: float = 30.0):
        """
        Initialize the client.

        Args:
            cookie: Cookie header, with or without the ``Cookie:`` prefix
            username: Apple ID, kept for diagnostics only
            password: Unused by this transport; accepted so both credential
                variants can share one factory signature
            session: Optional pre-configured requests session
            timeout: Per-request timeout in seconds
        """
        self.cookie = normalize_cookie(cookie)
        if not self.cookie:
            raise ValueError("A non-empty cookie header is required")
        self.username = username
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)
        self.session.headers["Cookie"] = self.cookie
        self.params: Dict[str, Any] = {
            "clientBuildNumber": "2522Project44",
            "clientMasteringNumber": "2522B2",
            "clientId": str(uuid.uuid1()).upper(),
        }
        self.data: Dict[str, Any] = {}
        self._photos: Optional[Any] = None

    def authenticate(self) -> None:
        """
        Validate the cookie and load the account's web service map.

        Raises:
            AuthenticationFailedError: iCloud rejected the cookie
            requests.RequestException: Transport failure
        """
        response = self.session.post(
            f"{SETUP_ENDPOINT}/validate",
            params=self.params,
            data="null",
            timeout=self.timeout,
        )
        if response.status_code in REJECTED_STATUS_CODES:
            raise AuthenticationFailedError(
                str(response.status_code),
                f"iCloud rejected the session cookie (HTTP {response.status_code}). "
                "Capture a fresh cookie with icloud-media-cookie and retry.",
            )
        response.raise_for_status()

        self.data = response.json() or {}
        dsid = (self.data.get("dsInfo") or {}).get("dsid")
        if dsid:
            self.params["dsid"] = dsid
        logger.debug(f"Cookie session validated; services: {', '.join(self.webservices)}")

    @property
    def webservices(self) -> Dict[str, Any]:
        return self.data.get("webservices") or {}

    def _service_url(self, key: str) -> Optional[str]:
        service = self.webservices.get(key) or {}
        return service.get("url")

    def get_service(self, name: str) -> Any:
        """Return the named service, or None when the account does not expose it."""
        if name.lower() == "photos":
            return self.photos
        return None

    @property
    def photos(self) -> Optional[Any]:
        """pyicloud PhotosService bound to this cookie session."""
        if self._photos is None:
            service_root = self._service_url("ckdatabasews")
            if not service_root:
                logger.warning("Validated session did not include a CloudKit database service")
                return None
            self._photos = PhotosService(service_root, self.session, dict(self.params),
                                         **self._photos_service_extras())
        return self._photos

    def _photos_service_extras(self) -> Dict[str, Any]:
        # Newer pyicloud releases also need upload and shared stream endpoints
        accepted = inspect.signature(PhotosService.__init__).parameters
        extras = {}
        if "upload_url" in accepted:
            extras["upload_url"] = self._service_url("uploadimagews") or ""
        if "shared_streams_url" in accepted:
            extras["shared_streams_url"] = self._service_url("sharedstreams") or ""
        return extras

    def close(self) -> None:
        self.session.close()
