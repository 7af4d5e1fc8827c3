"""
Credential variants accepted by the session establisher.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

_COOKIE_PREFIX = re.compile(r'^\s*cookie:\s*', re.IGNORECASE)

# Accepted spellings for each credential field, first match wins
_KEY_ALIASES = {
    'cookie': ('cookie', 'cookie_header', 'cookieHeader'),
    'apple_id': ('apple_id', 'appleId', 'username'),
    'password': ('password', 'app_password', 'appPassword'),
    'mfa_code': ('mfa_code', 'mfaCode', 'two_fa_code'),
    'trust_device': ('trust_device', 'trustDevice'),
}


def normalize_cookie(cookie: Optional[str]) -> str:
    """
    Normalize a cookie header value.

    Strips an optional ``Cookie:`` prefix (any case) and surrounding whitespace.

    Args:
        cookie: Raw cookie header as pasted by the user

    Returns:
        The bare ``Name=Value; Name=Value`` string, or an empty string
    """
    if not cookie:
        return ''
    return _COOKIE_PREFIX.sub('', cookie, count=1).strip()


def normalize_mfa_code(code: Optional[str]) -> Optional[str]:
    """Remove spaces and dashes from an MFA code; blank codes become None."""
    if not code:
        return None
    code = str(code).strip().replace(' ', '').replace('-', '')
    return code or None


def coerce_bool(value: Any) -> bool:
    """Interpret flags from YAML, env or host mappings; "false"/"0"/"no" are False."""
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


@dataclass(frozen=True)
class CookieCredentials:
    """Cookie captured from an authenticated icloud.com browser session."""
    cookie: str = field(repr=False)
    apple_id: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'cookie', normalize_cookie(self.cookie))


@dataclass(frozen=True)
class AppleIdCredentials:
    """Apple ID and app-specific password, with optional MFA input."""
    apple_id: str
    password: str = field(repr=False)
    mfa_code: Optional[str] = field(default=None, repr=False)
    trust_device: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'apple_id', (self.apple_id or '').strip())
        object.__setattr__(self, 'password', (self.password or '').strip())
        object.__setattr__(self, 'mfa_code', normalize_mfa_code(self.mfa_code))


Credentials = Union[CookieCredentials, AppleIdCredentials]


def credentials_from_mapping(values: Mapping[str, Any]) -> Credentials:
    """
    Build the credential variant implied by which fields are populated.

    A non-empty cookie selects :class:`CookieCredentials`; anything else
    produces :class:`AppleIdCredentials`, which may still be blank. Blank
    credentials are rejected later by the establisher, before any network call.

    Args:
        values: Mapping using snake_case or camelCase keys

    Returns:
        CookieCredentials or AppleIdCredentials
    """
    resolved = {}
    for name, aliases in _KEY_ALIASES.items():
        for alias in aliases:
            if values.get(alias) not in (None, ''):
                resolved[name] = values[alias]
                break

    cookie = normalize_cookie(resolved.get('cookie'))
    if cookie:
        return CookieCredentials(
            cookie=cookie,
            apple_id=(resolved.get('apple_id') or '').strip() or None,
            password=(resolved.get('password') or '').strip() or None,
        )

    return AppleIdCredentials(
        apple_id=resolved.get('apple_id') or '',
        password=resolved.get('password') or '',
        mfa_code=resolved.get('mfa_code'),
        trust_device=coerce_bool(resolved.get('trust_device', False)),
    )
