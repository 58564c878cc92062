"""Authentication module for Kick application access tokens."""

from .oauth import KickOAuthClient
from .tokens import AccessToken, TokenState

__all__ = [
    'AccessToken',
    'KickOAuthClient',
    'TokenState'
]
