"""
OAuth handling for Kick authentication.

This module performs the client-credentials grant against the Kick
token endpoint.
"""

import asyncio
import aiohttp
import logging
from typing import Any, Dict

from ..errors import AuthenticationError
from .tokens import extract_token

logger = logging.getLogger(__name__)


class KickOAuthClient:
    """Requests application access tokens from Kick."""

    def __init__(self, client_id: str, client_secret: str, token_url: str):
        """
        Initialize KickOAuthClient.

        Args:
            client_id: Kick application client ID
            client_secret: Kick application client secret
            token_url: Token endpoint URL
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url

    async def request_app_token(self, session: aiohttp.ClientSession) -> Dict[str, Any]:
        """
        Exchange the application credentials for an access token.

        Args:
            session: HTTP session to send the request with

        Returns:
            Dict: Token endpoint response containing a token field

        Raises:
            AuthenticationError: If the endpoint fails or returns no token
        """
        data = {
            'grant_type': 'client_credentials',
            'client_id': self.client_id,
            'client_secret': self.client_secret
        }
        headers = {
            'Content-Type': 'application/x-www-form-urlencoded'
        }

        try:
            async with session.post(self.token_url, data=data, headers=headers) as response:
                if not response.ok:
                    error_text = await response.text()
                    logger.error("Token request rejected", extra={
                        'status': response.status,
                        'error': error_text
                    })
                    raise AuthenticationError(
                        f"Authentication failed: {response.status} {response.reason}",
                        status=response.status,
                        reason=response.reason
                    )

                token_data = await response.json(content_type=None)

        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Token request error: {e}")
            raise AuthenticationError(f"Authentication request failed: {e}")

        if not extract_token(token_data):
            raise AuthenticationError(
                "No access token received from authentication",
                status=response.status,
                reason=response.reason
            )

        return token_data
