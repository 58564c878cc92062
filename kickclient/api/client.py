"""
Kick public API client implementation.

This module handles authenticated communication with the Kick public
REST API: token lifecycle, request construction and the read operations
built on top of it.
"""

import asyncio
import aiohttp
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional
from urllib.parse import quote

from ..auth.oauth import KickOAuthClient
from ..auth.tokens import AccessToken, TokenState
from ..config.settings import KickCredentials
from ..errors import AuthenticationError, RequestError
from .models import StreamLookup, StreamStatus


logger = logging.getLogger(__name__)


class KickApiClient:
    """
    HTTP client for the Kick public API.

    Every read operation makes sure a valid application token is held
    before issuing its request. Nothing is cached and nothing is retried.
    """

    def __init__(self, credentials: KickCredentials, timeout: int = 30,
                 clock: Callable[[], datetime] = datetime.now):
        """
        Initialize Kick API client.

        Args:
            credentials: Application credentials and endpoint URLs
            timeout: Request timeout in seconds
            clock: Returns the current time; used for token expiry
        """
        self.credentials = credentials
        self.base_url = credentials.api_base_url.rstrip('/')
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

        self.oauth_client = KickOAuthClient(
            credentials.client_id,
            credentials.client_secret,
            credentials.token_url
        )
        self.token_state = TokenState(clock=clock)

    async def __aenter__(self) -> 'KickApiClient':
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self):
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    @property
    def access_token(self) -> Optional[str]:
        """Current bearer token, or None before the first authentication."""
        return self.token_state.access_token

    @property
    def token_expires_at(self) -> Optional[datetime]:
        return self.token_state.expires_at

    async def authenticate(self) -> AccessToken:
        """
        Obtain a new application access token.

        The held token is replaced only when the request succeeds.

        Returns:
            AccessToken: The newly stored token

        Raises:
            AuthenticationError: If the token endpoint fails or returns no token
        """
        session = await self._get_session()
        try:
            token_data = await self.oauth_client.request_app_token(session)
            token = self.token_state.store(token_data)
        except AuthenticationError as e:
            logger.error(f"Authentication error: {e}")
            raise
        except ValueError as e:
            logger.error(f"Authentication error: {e}")
            raise AuthenticationError(str(e))

        logger.info("Authentication successful", extra={
            'expires_at': token.expires_at.isoformat()
        })
        return token

    async def ensure_valid_token(self) -> str:
        """
        Re-authenticate if no token is held or it has expired.

        Returns:
            str: A bearer token valid at the time of the check
        """
        return await self.token_state.ensure_valid(self.authenticate)

    async def make_request(self, endpoint: str, method: str = "GET",
                           params: Optional[Dict[str, Any]] = None,
                           json: Optional[Any] = None,
                           headers: Optional[Dict[str, str]] = None) -> Any:
        """
        Make HTTP request to the Kick API.

        Args:
            endpoint: API path appended to the base URL (e.g., "/categories")
            method: HTTP method
            params: Query string parameters
            json: JSON request body
            headers: Extra headers, merged over the defaults

        Returns:
            Parsed JSON response

        Raises:
            RequestError: On a non-2xx response or a transport failure
        """
        session = await self._get_session()
        url = f"{self.base_url}{endpoint}"

        request_headers = {
            'Accept': 'application/json',
            'Content-Type': 'application/json'
        }
        if self.access_token:
            request_headers['Authorization'] = f'Bearer {self.access_token}'
        if headers:
            request_headers.update(headers)

        try:
            async with session.request(method, url, params=params, json=json,
                                       headers=request_headers) as response:
                if not response.ok:
                    error_text = await response.text()
                    raise RequestError(
                        f"API request failed: {response.status} {response.reason}",
                        status=response.status,
                        reason=response.reason,
                        endpoint=endpoint,
                        body=error_text
                    )
                return await response.json(content_type=None)

        except asyncio.TimeoutError:
            logger.warning("Kick API request timed out", extra={
                "endpoint": endpoint,
                "timeout": self.timeout
            })
            raise RequestError(f"Request to {endpoint} timed out after {self.timeout}s",
                               endpoint=endpoint)
        except aiohttp.ClientError as e:
            logger.error("Kick API client error", extra={
                "endpoint": endpoint,
                "error": str(e)
            })
            raise RequestError(f"Client error: {str(e)}", endpoint=endpoint)
        except ValueError as e:
            raise RequestError(f"Invalid JSON response from {endpoint}: {e}", endpoint=endpoint)

    async def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        await self.ensure_valid_token()
        return await self.make_request(endpoint, params=params)

    async def get_channel(self, channel_slug: str) -> Dict[str, Any]:
        """Get channel information by slug."""
        return await self._get("/channels", params={"slug": channel_slug})

    async def get_live_streams(self, page: int = 1, limit: int = 20) -> Any:
        """Get currently live streams."""
        return await self._get("/channels/live", params={"page": page, "limit": limit})

    async def lookup_stream(self, channel_slug: str) -> StreamLookup:
        """
        Look up a channel's current livestream.

        Never raises; a failed channel fetch is reported as ``FAILED``.

        Args:
            channel_slug: Channel slug

        Returns:
            StreamLookup: Live, offline or failed result
        """
        try:
            channel = await self.get_channel(channel_slug)
        except Exception as e:
            logger.warning("Could not look up stream", extra={
                "channel": channel_slug,
                "error": str(e)
            })
            return StreamLookup(channel_slug, StreamStatus.FAILED, error=e)

        livestream = channel.get("livestream") if isinstance(channel, dict) else None
        if livestream is not None and not isinstance(livestream, dict):
            error = ValueError(f"Unexpected livestream payload: {type(livestream).__name__}")
            logger.warning("Could not look up stream", extra={
                "channel": channel_slug,
                "error": str(error)
            })
            return StreamLookup(channel_slug, StreamStatus.FAILED, error=error)
        if livestream and livestream.get("is_live"):
            return StreamLookup(channel_slug, StreamStatus.LIVE, stream=livestream)
        return StreamLookup(channel_slug, StreamStatus.OFFLINE, stream=livestream)

    async def get_stream_info(self, channel_slug: str) -> Optional[Dict[str, Any]]:
        """
        Get the livestream of a channel.

        Returns:
            The channel's livestream field, or None when the channel has no
            live session or could not be fetched
        """
        lookup = await self.lookup_stream(channel_slug)
        return lookup.stream

    async def search_channels(self, query: str, page: int = 1) -> Any:
        """Search channels by name."""
        return await self._get("/search/channels", params={"query": query, "page": page})

    async def get_channel_followers(self, channel_slug: str, page: int = 1) -> Any:
        """Get a page of a channel's followers."""
        return await self._get(f"/channels/{quote(channel_slug, safe='')}/followers",
                               params={"page": page})

    async def get_user_info(self, username: str) -> Any:
        """Get user information by username."""
        return await self._get(f"/users/{quote(username, safe='')}")

    async def get_categories(self) -> Any:
        """Get all categories."""
        return await self._get("/categories")

    async def get_streams_by_category(self, category_id: Any, page: int = 1) -> Any:
        """Get live streams in a category."""
        return await self._get(f"/categories/{quote(str(category_id), safe='')}/streams",
                               params={"page": page})
