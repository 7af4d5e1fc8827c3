"""
Custom exceptions for the iCloud media adapter.
"""
from typing import Optional


class MediaAdapterError(Exception):
    """Base exception for adapter errors."""
    pass


class ConfigurationError(MediaAdapterError):
    """Error related to configuration or invocation parameters."""
    pass


class AuthenticationError(MediaAdapterError):
    """Error while establishing an iCloud session."""
    pass


class MissingCredentialsError(AuthenticationError):
    """Neither a usable cookie nor a complete Apple ID/password pair was supplied."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message or
            "Apple ID and app-specific password are required for iCloud authentication "
            "when no session cookie is provided."
        )


class MfaRequiredError(AuthenticationError):
    """A multi-factor challenge is pending and cannot be completed in this invocation."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message or
            "Multi-factor authentication is required. Approve the device and provide the "
            "six-digit MFA code in the credential, then retry."
        )


class SessionTimeoutError(AuthenticationError):
    """The authentication handshake did not resolve within the timeout."""

    def __init__(self, timeout: float):
        super().__init__(f"iCloud authentication did not complete within {timeout:g} seconds")
        self.timeout = timeout


class AuthenticationFailedError(AuthenticationError):
    """The handshake reached a terminal state other than ready."""

    def __init__(self, status: Optional[str], message: Optional[str] = None):
        super().__init__(
            message or f"iCloud authentication did not complete. Status: {status}"
        )
        self.status = status


class ServiceError(MediaAdapterError):
    """Error locating or calling the photo listing capability."""
    pass


class ServiceUnavailableError(ServiceError):
    """The expected service could not be found on the session handle."""

    def __init__(self, service: str = "Photos"):
        super().__init__(f"The iCloud client did not expose a {service} service.")
        self.service = service


class UnsupportedServiceShapeError(ServiceError):
    """The located service exposes none of the known retrieval operations."""

    def __init__(self, handle_type: str):
        super().__init__(
            f"Cannot list media from {handle_type}: no known retrieval operation found"
        )
        self.handle_type = handle_type


class FetchError(ServiceError):
    """The upstream listing call (or lazy paging) failed."""

    def __init__(self, handle_type: str, message: Optional[str] = None):
        super().__init__(message or f"Listing media from {handle_type} failed")
        self.handle_type = handle_type


class UnsupportedOperationError(MediaAdapterError):
    """The caller requested an operation other than listing."""

    def __init__(self, operation: str):
        super().__init__(f"Unsupported operation {operation}")
        self.operation = operation
