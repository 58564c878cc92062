"""
Main entry point for the Kick integration client.

This module handles application startup, configuration loading,
authentication, the example API queries, the optional webhook server
and graceful shutdown.
"""

import asyncio
import logging
import signal
import sys
from typing import Any, Dict, Optional

from kickclient.api.client import KickApiClient
from kickclient.config.settings import GlobalConfig, load_global_config, validate_config
from kickclient.logging.logger import configure_logging, get_logger
from kickclient.webhook.server import KickWebhookServer


def _items(result: Any) -> list:
    """Return the list of records in a response, wrapped in ``data`` or not."""
    if isinstance(result, dict):
        result = result.get('data')
    return result if isinstance(result, list) else []


class KickApplication:
    """Main application class for the Kick integration client."""

    def __init__(self, config: Optional[GlobalConfig] = None):
        self.config = config
        self.logger = get_logger("kickclient.main")
        self._shutdown_event = asyncio.Event()

        self.api_client: Optional[KickApiClient] = None
        self.webhook_server: Optional[KickWebhookServer] = None

    async def startup(self) -> None:
        """Load configuration, authenticate and start the webhook server if enabled."""
        try:
            # Step 1: Load and validate global configuration
            self._initialize_configuration()

            # Step 2: Set up structured logging
            self._initialize_logging()

            # Step 3: Authenticate with Kick
            await self._initialize_api_client()

            # Step 4: Run example queries
            await self.run_examples()

            # Step 5: Start webhook server and subscribe
            if self.config.webhook_enabled:
                await self._start_webhook_server()

        except Exception as e:
            self.logger.error(f"Failed to start application: {e}")
            await self.shutdown()
            raise

    def _initialize_configuration(self) -> None:
        if self.config is None:
            self.config = load_global_config()
        validate_config(self.config)

    def _initialize_logging(self) -> None:
        configure_logging(
            level=self.config.log_level,
            format_type=self.config.log_format,
            log_file=self.config.log_file
        )
        self.logger.info(
            "Logging system initialized",
            log_level=self.config.log_level,
            log_format=self.config.log_format
        )

    async def _initialize_api_client(self) -> None:
        self.api_client = KickApiClient(
            self.config.credentials(),
            timeout=self.config.request_timeout
        )
        await self.api_client.authenticate()

    async def _start_webhook_server(self) -> None:
        self.webhook_server = KickWebhookServer(
            broadcaster_user_id=self.config.broadcaster_user_id,
            webhook_url=self.config.webhook_url,
            events=self.config.events,
            port=self.config.webhook_port,
            host=self.config.webhook_host,
            subscriptions_url=self.config.subscriptions_url,
            timeout=self.config.request_timeout
        )
        token = await self.api_client.ensure_valid_token()
        await self.webhook_server.start(token)

    async def run_examples(self) -> Dict[str, bool]:
        """
        Run the example queries against the API.

        Each example is independent; a failure is logged and the next one
        still runs.

        Returns:
            Dict mapping example name to whether it succeeded
        """
        examples = [
            ("channel_info", self._example_channel_info),
            ("live_streams", self._example_live_streams),
            ("search_channels", self._example_search),
            ("categories", self._example_categories),
            ("monitor_stream", self._example_monitor_stream),
        ]

        results = {}
        for name, example in examples:
            try:
                await example()
                results[name] = True
            except Exception as e:
                self.logger.warning(f"Example {name} failed: {e}")
                results[name] = False
        return results

    async def _example_channel_info(self) -> None:
        slug = self.config.example_channel
        channel = await self.api_client.get_channel(slug)
        livestream = channel.get('livestream') or {}
        self.logger.info(
            "Channel info",
            name=(channel.get('user') or {}).get('username'),
            followers=channel.get('followersCount'),
            is_live=livestream.get('is_live', False),
            viewers=livestream.get('viewer_count', 0)
        )

    async def _example_live_streams(self) -> None:
        streams = _items(await self.api_client.get_live_streams(1, 5))
        self.logger.info(f"Live streams count: {len(streams)}")
        for index, stream in enumerate(streams[:3], start=1):
            self.logger.info(
                f"{index}. {(stream.get('user') or {}).get('username')} - "
                f"{stream.get('session_title')} ({stream.get('viewer_count')} viewers)"
            )

    async def _example_search(self) -> None:
        channels = _items(await self.api_client.search_channels("gaming", 1))
        self.logger.info(f"Search results count: {len(channels)}")
        for index, channel in enumerate(channels[:3], start=1):
            self.logger.info(
                f"{index}. {(channel.get('user') or {}).get('username')} - "
                f"{channel.get('followersCount')} followers"
            )

    async def _example_categories(self) -> None:
        categories = _items(await self.api_client.get_categories())
        self.logger.info(f"Categories count: {len(categories)}")
        for index, category in enumerate(categories[:5], start=1):
            self.logger.info(f"{index}. {category.get('name')} (ID: {category.get('id')})")

    async def _example_monitor_stream(self) -> None:
        slug = self.config.monitor_channel
        lookup = await self.api_client.lookup_stream(slug)
        stream = lookup.stream or {}

        if not lookup.ok:
            self.logger.warning(f"Could not determine whether {slug} is live", error=str(lookup.error))
        elif stream.get('is_live'):
            self.logger.info(
                f"{slug} is LIVE",
                title=stream.get('session_title'),
                viewers=stream.get('viewer_count'),
                duration_minutes=(stream.get('duration') or 0) // 60
            )
        else:
            self.logger.info(f"{slug} is offline")

    async def shutdown(self) -> None:
        """Stop the webhook server and close the HTTP session."""
        self.logger.info("Shutting down...")

        if self.webhook_server:
            try:
                await self.webhook_server.stop()
            except Exception as e:
                self.logger.error(f"Error stopping webhook server: {e}")

        if self.api_client:
            try:
                await self.api_client.close()
            except Exception as e:
                self.logger.error(f"Error closing API client: {e}")

        self.logger.info("Shutdown complete")

    async def run(self) -> None:
        """Run the application until a shutdown signal when the webhook server is enabled."""
        await self.startup()

        if self.config.webhook_enabled:
            # Wait for shutdown signal
            await self._shutdown_event.wait()

        await self.shutdown()

    def request_shutdown(self, signum: Optional[int] = None) -> None:
        """Handle shutdown signals."""
        if signum is not None:
            self.logger.info(f"Received signal {signum}, initiating shutdown...")
        self._shutdown_event.set()


def handle_loop_exception(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
    """Log exceptions that escaped their tasks; no recovery is attempted."""
    exception = context.get('exception')
    logging.getLogger("kickclient.main").error(
        f"Unhandled exception: {context.get('message')}",
        exc_info=exception
    )


async def main() -> None:
    """Main entry point."""
    loop = asyncio.get_running_loop()
    loop.set_exception_handler(handle_loop_exception)

    app = KickApplication()

    # Set up signal handlers for graceful shutdown
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, app.request_shutdown, sig)
        except NotImplementedError:
            # Windows event loops do not support signal handlers
            signal.signal(sig, lambda signum, frame: app.request_shutdown(signum))

    await app.run()


def run() -> None:
    """Console script entry point."""
    # Basic logging until the configuration is loaded
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logging.info("Received keyboard interrupt, shutting down...")
    except Exception as e:
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
