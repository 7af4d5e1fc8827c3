"""
Single-invocation entry point: credentials and parameters in, assets out.
"""
import asyncio
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from icloud_media.auth.credentials import (
    AppleIdCredentials,
    CookieCredentials,
    Credentials,
    credentials_from_mapping,
)
from icloud_media.auth.establisher import DEFAULT_READY_TIMEOUT, SessionEstablisher
from icloud_media.config import ListParameters
from icloud_media.exceptions import ConfigurationError, UnsupportedOperationError
from icloud_media.processor.normalizer import normalize_all
from icloud_media.processor.projector import project
from icloud_media.services.fetcher import fetch_assets
from icloud_media.services.locator import locate_photo_service
from icloud_media.utils.async_calls import close_client

logger = logging.getLogger(__name__)

SUPPORTED_OPERATIONS = ("list",)


class MediaAdapter:
    """Lists iCloud Photos media as canonical asset records."""

    def __init__(self,
                 establisher_factory: Optional[Callable[[], SessionEstablisher]] = None,
                 ready_timeout: float = DEFAULT_READY_TIMEOUT):
        """
        Initialize the adapter.

        Args:
            establisher_factory: Returns a fresh SessionEstablisher per invocation
                (inject client factories through it for tests)
            ready_timeout: Handshake timeout for the default establisher
        """
        self.establisher_factory = establisher_factory or (
            lambda: SessionEstablisher(ready_timeout=ready_timeout)
        )

    @staticmethod
    def _parameters(parameters: Union[ListParameters, Mapping[str, Any], None]) -> ListParameters:
        if isinstance(parameters, ListParameters):
            return parameters
        try:
            return ListParameters.from_dict(dict(parameters or {}))
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    @staticmethod
    def _credentials(credentials: Union[Credentials, Mapping[str, Any]]) -> Credentials:
        if isinstance(credentials, (CookieCredentials, AppleIdCredentials)):
            return credentials
        return credentials_from_mapping(credentials or {})

    async def execute(self,
                      credentials: Union[Credentials, Mapping[str, Any]],
                      parameters: Union[ListParameters, Mapping[str, Any], None] = None) -> List[Dict[str, Any]]:
        """
        Run one listing invocation.

        Args:
            credentials: Credential object or mapping (cookie or Apple ID variant)
            parameters: ListParameters or mapping with ``operation``, ``limit``,
                ``mediaType`` and ``includeRaw``

        Returns:
            Canonical assets in upstream order, filtered and projected

        Raises:
            UnsupportedOperationError: Operation other than ``list``
            ConfigurationError: Invalid limit or media type
            AuthenticationError: Session could not be established
            ServiceError: Photos service missing or unusable
        """
        params = self._parameters(parameters)
        if params.operation not in SUPPORTED_OPERATIONS:
            raise UnsupportedOperationError(params.operation)

        establisher = self.establisher_factory()
        session = await establisher.establish(self._credentials(credentials))
        try:
            service = await locate_photo_service(session)
            raw_assets = await fetch_assets(service, params.limit)
        finally:
            await close_client(session.client)

        assets = project(normalize_all(raw_assets), params.media_type, params.include_raw)
        logger.info(f"Returning {len(assets)} of {len(raw_assets)} assets (media type: {params.media_type})")
        return assets

    async def list_media(self,
                         credentials: Union[Credentials, Mapping[str, Any]],
                         limit: int = 100,
                         media_type: str = "all",
                         include_raw: bool = False) -> List[Dict[str, Any]]:
        """Keyword-argument form of :meth:`execute` for the ``list`` operation."""
        try:
            params = ListParameters(limit=limit, media_type=media_type, include_raw=include_raw)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        return await self.execute(credentials, params)

    def run_sync(self,
                 credentials: Union[Credentials, Mapping[str, Any]],
                 parameters: Union[ListParameters, Mapping[str, Any], None] = None) -> List[Dict[str, Any]]:
        """Run :meth:`execute` from synchronous code."""
        return asyncio.run(self.execute(credentials, parameters))
