"""
Access token state for the Kick client-credentials flow.

This module holds the single in-memory bearer token, decides when it is
stale, and serializes re-authentication so concurrent callers share one
token request.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN = 3600


@dataclass(frozen=True)
class AccessToken:
    """Bearer token and the instant it stops being usable."""
    value: str
    expires_at: datetime
    token_type: Optional[str] = None
    scope: Optional[str] = None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def __repr__(self) -> str:
        masked = f"{self.value[:4]}..." if len(self.value) > 8 else "[REDACTED]"
        return f"AccessToken(value='{masked}', expires_at={self.expires_at.isoformat()})"


def extract_token(data: Dict[str, Any]) -> Optional[str]:
    """Return the token field of a token endpoint response, if any."""
    if not isinstance(data, dict):
        return None
    return data.get('access_token') or data.get('token') or None


class TokenState:
    """
    Owns the current access token.

    States are Absent (no token), Valid and Stale (now >= expires_at). There
    is no transition back to Absent: a stale token is replaced on the next
    call to ``ensure_valid``.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        """
        Initialize TokenState.

        Args:
            clock: Returns the current time; replaced in tests
        """
        self._clock = clock
        self._token: Optional[AccessToken] = None
        self._refresh_lock = asyncio.Lock()

    @property
    def token(self) -> Optional[AccessToken]:
        return self._token

    @property
    def access_token(self) -> Optional[str]:
        return self._token.value if self._token else None

    @property
    def expires_at(self) -> Optional[datetime]:
        return self._token.expires_at if self._token else None

    def now(self) -> datetime:
        return self._clock()

    def needs_refresh(self, now: Optional[datetime] = None) -> bool:
        """
        Check whether a new token must be obtained.

        Args:
            now: Time to compare against (defaults to the clock)

        Returns:
            bool: True if no token is held or it has expired
        """
        if self._token is None:
            return True
        return self._token.is_expired(now or self._clock())

    def store(self, data: Dict[str, Any], issued_at: Optional[datetime] = None) -> AccessToken:
        """
        Store the token from a successful token endpoint response.

        Args:
            data: Parsed JSON response
            issued_at: Issuance time (defaults to the clock)

        Returns:
            AccessToken: The stored token

        Raises:
            ValueError: If the response carries no token field or an unusable lifetime
        """
        value = extract_token(data)
        if not value:
            raise ValueError("No access token received from authentication")

        expires_in = data.get('expires_in') or DEFAULT_EXPIRES_IN
        issued_at = issued_at or self._clock()

        try:
            expires_at = issued_at + timedelta(seconds=float(expires_in))
        except (TypeError, ValueError, OverflowError) as e:
            raise ValueError(f"Invalid token lifetime {expires_in!r}: {e}") from e

        self._token = AccessToken(
            value=value,
            expires_at=expires_at,
            token_type=data.get('token_type'),
            scope=data.get('scope')
        )
        return self._token

    async def ensure_valid(self, authenticate: Callable[[], Awaitable[Any]]) -> str:
        """
        Return a usable token, re-authenticating first when needed.

        Callers that arrive while a refresh is in flight wait for it and
        reuse its result.

        Args:
            authenticate: Coroutine function that obtains and stores a new token

        Returns:
            str: The current bearer token
        """
        if self.needs_refresh():
            async with self._refresh_lock:
                if self.needs_refresh():
                    logger.info("Access token absent or expired, re-authenticating")
                    await authenticate()
        return self._token.value
