"""
Establish an authenticated iCloud session from either credential variant.

Two strategies are supported, selected by which credential fields are
populated: a captured browser cookie (no handshake, no MFA) or an Apple ID
and password handshake. The handshake itself is driven through whichever
protocol the client handle exposes:

* polling: ``authenticate()`` then a ``status`` attribute that may read
  ``"MfaRequested"``, answered through ``provide_mfa_code()`` (or
  ``provideMfaCode()``);
* events: ``on(event, callback)`` notifications for ready, error or a
  two-factor challenge, awaited with a bounded timeout.
"""
import asyncio
import logging
from typing import Any, Callable, List, Optional, Tuple

from icloud_media.auth.credentials import AppleIdCredentials, CookieCredentials, Credentials
from icloud_media.auth.session import Session, SessionState
from icloud_media.exceptions import (
    AuthenticationFailedError,
    MediaAdapterError,
    MfaRequiredError,
    MissingCredentialsError,
    SessionTimeoutError,
)
from icloud_media.utils.async_calls import call_client, close_client, resolve
from icloud_media.utils.logging_config import mask_secret

logger = logging.getLogger(__name__)

DEFAULT_READY_TIMEOUT = 20.0
DEFAULT_AUTH_METHOD = "srp"

STATUS_MFA_REQUESTED = "MfaRequested"
STATUS_READY = "Ready"

READY_EVENTS = ("ready",)
ERROR_EVENTS = ("error",)
MFA_EVENTS = (
    "mfa", "mfaRequested", "mfa_requested", "2fa", "twoFactor", "two_factor", "2fa_required",
)

# Polling-shape method spellings
MFA_SUBMIT_METHODS = ("provide_mfa_code", "provideMfaCode")
READY_WAITERS = ("await_ready", "awaitReady")

EVENT_PROTOCOL_MFA_MESSAGE = (
    "Multi-factor authentication is required. This client cannot accept an MFA code "
    "during the handshake; capture a session cookie from a trusted browser and use "
    "the cookie credential instead."
)


def _default_password_client_factory(**kwargs) -> Any:
    from icloud_media.clients.pyicloud_client import PyiCloudClient
    return PyiCloudClient(**kwargs)


def _default_cookie_client_factory(**kwargs) -> Any:
    from icloud_media.clients.cookie_client import CookieSessionClient
    return CookieSessionClient(**kwargs)


def _first_attribute(client: Any, names: Tuple[str, ...]) -> Any:
    for name in names:
        value = getattr(client, name, None)
        if value is not None:
            return value
    return None


def _is_polling_client(client: Any) -> bool:
    return hasattr(client, 'status') and callable(_first_attribute(client, MFA_SUBMIT_METHODS))


def _is_event_client(client: Any) -> bool:
    return callable(getattr(client, 'on', None))


class SessionEstablisher:
    """Produces a ready :class:`Session` or raises a classified AuthenticationError."""

    def __init__(self,
                 password_client_factory: Optional[Callable[..., Any]] = None,
                 cookie_client_factory: Optional[Callable[..., Any]] = None,
                 ready_timeout: float = DEFAULT_READY_TIMEOUT,
                 auth_method: str = DEFAULT_AUTH_METHOD):
        """
        Initialize the establisher.

        Args:
            password_client_factory: Builds a client from ``username``, ``password``,
                ``trust_device`` and ``auth_method`` keyword arguments
                (default: pyicloud-backed client)
            cookie_client_factory: Builds a client from ``cookie``, ``username`` and
                ``password`` keyword arguments (default: requests-backed client)
            ready_timeout: Seconds to wait for an event-driven handshake
            auth_method: Authentication scheme requested from the client library
        """
        self.password_client_factory = password_client_factory or _default_password_client_factory
        self.cookie_client_factory = cookie_client_factory or _default_cookie_client_factory
        self.ready_timeout = ready_timeout
        self.auth_method = auth_method
        self.state = SessionState.UNAUTHENTICATED

        # Sealed set of handshake protocols, probed in order
        self._protocols: List[Tuple[str, Callable[[Any], bool], Callable]] = [
            ("polling", _is_polling_client, self._complete_polling_handshake),
            ("events", _is_event_client, self._complete_event_handshake),
        ]

    def _transition(self, state: SessionState) -> None:
        logger.debug(f"Session state: {self.state.value} -> {state.value}")
        self.state = state

    async def establish(self, credentials: Credentials) -> Session:
        """
        Authenticate and return a ready session.

        Args:
            credentials: Cookie or Apple ID credentials

        Returns:
            Session in the READY state

        Raises:
            MissingCredentialsError: No cookie and an incomplete Apple ID/password pair
            MfaRequiredError: A two-factor challenge needs a code (or a cookie)
            SessionTimeoutError: An event-driven handshake did not settle in time
            AuthenticationFailedError: The handshake ended in any other non-ready state
        """
        self.state = SessionState.UNAUTHENTICATED

        if isinstance(credentials, CookieCredentials) and credentials.cookie:
            return await self._establish_with_cookie(credentials)

        if isinstance(credentials, CookieCredentials):
            # Empty cookie: fall back to the refresh credentials it carries
            credentials = AppleIdCredentials(
                apple_id=credentials.apple_id or '',
                password=credentials.password or '',
            )

        if not credentials.apple_id or not credentials.password:
            self._transition(SessionState.FAILED)
            raise MissingCredentialsError()

        return await self._establish_with_password(credentials)

    async def _establish_with_cookie(self, credentials: CookieCredentials) -> Session:
        logger.info(f"Using iCloud session cookie {mask_secret(credentials.cookie)}")
        self._transition(SessionState.AUTHENTICATING)
        client = None
        try:
            client = await call_client(
                self.cookie_client_factory,
                cookie=credentials.cookie,
                username=credentials.apple_id,
                password=credentials.password,
            )
            for method_name in ('authenticate', 'validate'):
                method = getattr(client, method_name, None)
                if callable(method):
                    await call_client(method)
                    break
        except MediaAdapterError:
            self._transition(SessionState.FAILED)
            await close_client(client)
            raise
        except Exception as e:
            self._transition(SessionState.FAILED)
            logger.error(f"iCloud rejected the session cookie: {e}")
            await close_client(client)
            raise AuthenticationFailedError(
                "CookieRejected",
                f"iCloud did not accept the session cookie: {e}",
            ) from e

        self._transition(SessionState.READY)
        logger.info("iCloud session ready (cookie)")
        return Session(client=client, strategy="cookie", state=self.state)

    async def _establish_with_password(self, credentials: AppleIdCredentials) -> Session:
        logger.info(f"Attempting to authenticate with Apple ID: {credentials.apple_id}")
        self._transition(SessionState.AUTHENTICATING)
        client = None
        try:
            client = await call_client(
                self.password_client_factory,
                username=credentials.apple_id,
                password=credentials.password,
                trust_device=credentials.trust_device,
                auth_method=self.auth_method,
            )
            for name, matches, complete in self._protocols:
                if matches(client):
                    logger.debug(f"Using {name} handshake for {type(client).__name__}")
                    await complete(client, credentials)
                    break
            else:
                raise AuthenticationFailedError(
                    None,
                    f"Unsupported iCloud client {type(client).__name__}: "
                    "exposes neither a status nor an event interface",
                )
        except MediaAdapterError:
            if not self.state.is_terminal:
                self._transition(SessionState.FAILED)
            await close_client(client)
            raise
        except Exception as e:
            self._transition(SessionState.FAILED)
            logger.error(f"iCloud authentication failed: {e}")
            await close_client(client)
            raise AuthenticationFailedError(type(e).__name__, f"iCloud authentication failed: {e}") from e

        self._transition(SessionState.READY)
        logger.info("Successfully authenticated with iCloud")
        return Session(client=client, strategy="password", state=self.state)

    async def _complete_polling_handshake(self, client: Any, credentials: AppleIdCredentials) -> None:
        await call_client(client.authenticate)

        if client.status == STATUS_MFA_REQUESTED:
            self._transition(SessionState.MFA_PENDING)
            if not credentials.mfa_code:
                logger.warning("Two-factor authentication requested but no MFA code was supplied")
                self._transition(SessionState.FAILED)
                raise MfaRequiredError()
            logger.info("Submitting MFA code")
            await call_client(_first_attribute(client, MFA_SUBMIT_METHODS), credentials.mfa_code)
            self._transition(SessionState.AUTHENTICATING)

        await_ready = _first_attribute(client, READY_WAITERS)
        if await_ready is not None:
            await resolve(await_ready() if callable(await_ready) else await_ready)

        status = client.status
        if status != STATUS_READY:
            self._transition(SessionState.FAILED)
            raise AuthenticationFailedError(status)

    async def _complete_event_handshake(self, client: Any, credentials: AppleIdCredentials) -> None:
        loop = asyncio.get_running_loop()
        outcome: asyncio.Future = loop.create_future()

        def settle(kind: str, payload: Any = None) -> None:
            if not outcome.done():
                outcome.set_result((kind, payload))

        def listener(kind: str) -> Callable:
            # Clients may emit from a worker thread
            def callback(*args):
                loop.call_soon_threadsafe(settle, kind, args[0] if args else None)
            return callback

        registered = []
        for kind, events in (("ready", READY_EVENTS), ("error", ERROR_EVENTS), ("mfa", MFA_EVENTS)):
            for event in events:
                callback = listener(kind)
                client.on(event, callback)
                registered.append((event, callback))

        def on_authenticate_done(task: asyncio.Future) -> None:
            if not task.cancelled() and task.exception() is not None:
                settle("error", task.exception())

        auth_task = asyncio.ensure_future(call_client(client.authenticate))
        auth_task.add_done_callback(on_authenticate_done)
        try:
            kind, payload = await asyncio.wait_for(outcome, timeout=self.ready_timeout)
        except asyncio.TimeoutError:
            self._transition(SessionState.TIMED_OUT)
            raise SessionTimeoutError(self.ready_timeout)
        finally:
            if not auth_task.done():
                auth_task.cancel()
            off = getattr(client, 'off', None) or getattr(client, 'remove_listener', None)
            if callable(off):
                for event, callback in registered:
                    off(event, callback)

        if kind == "mfa":
            self._transition(SessionState.MFA_PENDING)
            if credentials.mfa_code:
                logger.warning("Ignoring supplied MFA code: event-driven clients cannot submit it")
            self._transition(SessionState.FAILED)
            raise MfaRequiredError(EVENT_PROTOCOL_MFA_MESSAGE)
        if kind == "error":
            self._transition(SessionState.FAILED)
            status = getattr(client, 'status', None) or "Error"
            error = AuthenticationFailedError(status, f"iCloud authentication failed: {payload}")
            if isinstance(payload, BaseException):
                raise error from payload
            raise error
