"""
Webhook receiver and event subscriber for Kick.

Runs a small aiohttp server exposing a health check and the webhook
callback route, and registers the configured event subscriptions with
Kick once the listener is bound.

Inbound deliveries are not signature-verified; bodies are logged and
acknowledged only.
"""

import asyncio
import json
import aiohttp
import logging
from typing import Any, Iterable, Optional

from aiohttp import web

from ..errors import SubscriptionError
from .models import (
    DEFAULT_EVENT_NAMES, SUBSCRIPTIONS_URL, EventSubscriptionRequest, KickEvent, WebhookDelivery
)

logger = logging.getLogger(__name__)


class KickWebhookServer:
    """HTTP listener for Kick webhook callbacks."""

    def __init__(
        self,
        broadcaster_user_id: int,
        webhook_url: str,
        events: Optional[Iterable[KickEvent]] = None,
        port: int = 3000,
        host: str = "0.0.0.0",
        subscriptions_url: str = SUBSCRIPTIONS_URL,
        timeout: int = 30
    ):
        """
        Initialize webhook server.

        Args:
            broadcaster_user_id: Kick user ID whose events are subscribed to
            webhook_url: Public URL Kick delivers events to
            events: Events to subscribe to (defaults to chat, follow and subscription events)
            port: Port to listen on
            host: Host to bind to
            subscriptions_url: Kick event subscriptions endpoint
            timeout: Timeout for the subscription request in seconds
        """
        self.broadcaster_user_id = broadcaster_user_id
        self.webhook_url = webhook_url
        self.events = list(events) if events is not None else [
            KickEvent(name) for name in DEFAULT_EVENT_NAMES
        ]
        self.port = port
        self.host = host
        self.subscriptions_url = subscriptions_url
        self.timeout = timeout

        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None

    @property
    def is_running(self) -> bool:
        return self._site is not None

    def create_app(self) -> web.Application:
        """Build the aiohttp application with its routes."""
        app = web.Application()
        app.router.add_get("/health", self._handle_health)
        app.router.add_post("/webhook", self._handle_webhook)
        return app

    async def _handle_health(self, request: web.Request) -> web.Response:
        return web.json_response({"status": "ok"})

    async def _handle_webhook(self, request: web.Request) -> web.Response:
        body = await request.read()
        if not body.strip() or not request.content_type.endswith("json"):
            payload = {}
        else:
            try:
                payload = json.loads(body)
            except ValueError:
                logger.warning("Webhook body is not valid JSON")
                return web.Response(status=400, text="Invalid JSON body")

        delivery = WebhookDelivery(payload)
        logger.info(f"Webhook received: {delivery.content}")
        return web.Response(status=200, text="Webhook received")

    def build_subscription_request(self) -> EventSubscriptionRequest:
        return EventSubscriptionRequest(
            broadcaster_user_id=self.broadcaster_user_id,
            events=self.events
        )

    async def _register_subscriptions(self, session: aiohttp.ClientSession, token: str) -> Any:
        headers = {
            'Authorization': f'Bearer {token}',
            'Content-Type': 'application/json'
        }
        payload = self.build_subscription_request().to_payload()

        async with session.post(self.subscriptions_url, json=payload, headers=headers) as response:
            if not response.ok:
                error_text = await response.text()
                raise SubscriptionError(
                    f"Failed to subscribe ({response.status}): {error_text}",
                    status=response.status,
                    body=error_text
                )
            return await response.json(content_type=None)

    async def subscribe_to_kick_events(self, token: str) -> Optional[Any]:
        """
        Register the configured events with Kick.

        Failures are logged and not raised; the server keeps running
        unsubscribed.

        Args:
            token: Bearer token for the subscriptions endpoint

        Returns:
            The subscription response, or None if registration failed
        """
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                data = await self._register_subscriptions(session, token)
        except SubscriptionError as e:
            logger.error(str(e), extra={'status': e.status})
            return None
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Subscription error: {e}")
            return None

        logger.info("Successfully subscribed to Kick events", extra={
            'broadcaster_user_id': self.broadcaster_user_id,
            'events': [event.name for event in self.events]
        })
        logger.debug(f"Subscription response: {data}")
        return data

    async def start(self, access_token: str) -> Optional[Any]:
        """
        Bind the listener, then register event subscriptions.

        Args:
            access_token: Bearer token used for the subscription call

        Returns:
            The subscription response, or None if registration failed
        """
        if self.is_running:
            logger.warning("Webhook server already running")
            return None

        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.host, self.port)
        await self._site.start()

        logger.info(f"KickWebhookServer running on port {self.port}", extra={
            'webhook_url': self.webhook_url
        })

        return await self.subscribe_to_kick_events(access_token)

    async def stop(self) -> None:
        """Stop the listener."""
        site, runner = self._site, self._runner
        self._site = None
        self._runner = None

        try:
            if site:
                await site.stop()
        finally:
            if runner:
                await runner.cleanup()

        if site or runner:
            logger.info("Webhook server stopped")
