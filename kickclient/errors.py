"""
Exception hierarchy for the Kick integration client.

Authentication and request failures propagate to callers; subscription
failures are raised inside the webhook server and logged there.
"""

from typing import Optional


class KickError(Exception):
    """Base exception for Kick-related errors."""
    pass


class AuthenticationError(KickError):
    """Raised when the token endpoint rejects the request or returns no token."""

    def __init__(self, message: str, status: Optional[int] = None, reason: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.reason = reason


class RequestError(KickError):
    """Raised when an authenticated API call fails."""

    def __init__(self, message: str, status: Optional[int] = None, reason: Optional[str] = None,
                 endpoint: Optional[str] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.reason = reason
        self.endpoint = endpoint
        self.body = body


class SubscriptionError(KickError):
    """Raised when event subscription registration is rejected."""

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.body = body
