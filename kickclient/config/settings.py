"""
Global configuration management for the Kick integration client.

This module handles loading and validation of environment variables
and builds the immutable credential set used by the API client.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv

from ..webhook.models import DEFAULT_EVENT_NAMES, SUBSCRIPTIONS_URL, KickEvent

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_URL = "https://id.kick.com/oauth/token"
DEFAULT_API_BASE_URL = "https://id.kick.com"
DEFAULT_SUBSCRIPTIONS_URL = SUBSCRIPTIONS_URL


@dataclass(frozen=True)
class KickCredentials:
    """Application credentials, fixed for the lifetime of the process."""

    client_id: str
    client_secret: str
    token_url: str = DEFAULT_TOKEN_URL
    api_base_url: str = DEFAULT_API_BASE_URL

    def __repr__(self) -> str:
        return (f"KickCredentials(client_id={self.client_id!r}, client_secret='[REDACTED]', "
                f"token_url={self.token_url!r}, api_base_url={self.api_base_url!r})")


@dataclass
class GlobalConfig:
    """Global configuration settings loaded from environment variables."""

    # Required fields (no defaults)
    kick_client_id: str
    kick_client_secret: str
    token_url: str
    api_base_url: str
    request_timeout: int
    log_level: str
    log_format: str

    # Optional fields (with defaults)
    log_file: Optional[str] = None
    webhook_enabled: bool = False
    webhook_host: str = "0.0.0.0"
    webhook_port: int = 3000
    broadcaster_user_id: Optional[int] = None
    webhook_url: Optional[str] = None
    subscriptions_url: str = DEFAULT_SUBSCRIPTIONS_URL
    events: List[KickEvent] = field(
        default_factory=lambda: [KickEvent(name) for name in DEFAULT_EVENT_NAMES]
    )
    example_channel: str = "mirtur"
    monitor_channel: str = "xqc"

    def credentials(self) -> KickCredentials:
        """Build the credential set for the API client."""
        return KickCredentials(
            client_id=self.kick_client_id,
            client_secret=self.kick_client_secret,
            token_url=self.token_url,
            api_base_url=self.api_base_url
        )


def parse_events(value: str) -> List[KickEvent]:
    """
    Parse a comma separated event list.

    Each entry is either ``name`` or ``name:version``.

    Raises:
        ValueError: If a version is not an integer
    """
    events = []
    for item in value.split(','):
        item = item.strip()
        if not item:
            continue
        name, _, version = item.partition(':')
        if version:
            try:
                events.append(KickEvent(name.strip(), int(version)))
            except ValueError:
                raise ValueError(f"Invalid event version in KICK_WEBHOOK_EVENTS: {item}")
        else:
            events.append(KickEvent(name.strip()))
    return events


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def load_global_config() -> GlobalConfig:
    """
    Load global configuration from environment variables.

    Returns:
        GlobalConfig: Loaded configuration

    Raises:
        ValueError: If required environment variables are missing or invalid
    """
    # Load environment variables from .env file if present
    load_dotenv()

    # Kick application credentials
    client_id = os.getenv('KICK_CLIENT_ID')
    client_secret = os.getenv('KICK_CLIENT_SECRET')

    if not client_id or not client_secret:
        raise ValueError(
            "Kick configuration incomplete. Required: KICK_CLIENT_ID, "
            "KICK_CLIENT_SECRET"
        )

    token_url = os.getenv('KICK_APP_ACCESS_TOKEN_ENDPOINT', DEFAULT_TOKEN_URL)
    api_base_url = os.getenv('KICK_PUBLIC_API_BASE_URL', DEFAULT_API_BASE_URL).rstrip('/')
    request_timeout = _parse_int('KICK_REQUEST_TIMEOUT', os.getenv('KICK_REQUEST_TIMEOUT', '30'))

    # Webhook configuration
    webhook_enabled = os.getenv('WEBHOOK_ENABLED', 'false').lower() == 'true'
    webhook_host = os.getenv('WEBHOOK_HOST', '0.0.0.0')
    webhook_port = _parse_int('WEBHOOK_PORT', os.getenv('WEBHOOK_PORT', '3000'))
    webhook_url = os.getenv('WEBHOOK_URL')
    subscriptions_url = os.getenv('KICK_SUBSCRIPTIONS_URL', DEFAULT_SUBSCRIPTIONS_URL)

    broadcaster_str = os.getenv('KICK_BROADCASTER_USER_ID')
    broadcaster_user_id = (
        _parse_int('KICK_BROADCASTER_USER_ID', broadcaster_str) if broadcaster_str else None
    )

    if webhook_enabled and (broadcaster_user_id is None or not webhook_url):
        raise ValueError(
            "Webhook configuration incomplete. Required when WEBHOOK_ENABLED=true: "
            "KICK_BROADCASTER_USER_ID, WEBHOOK_URL"
        )

    events_str = os.getenv('KICK_WEBHOOK_EVENTS', '')
    events = parse_events(events_str) if events_str.strip() else [
        KickEvent(name) for name in DEFAULT_EVENT_NAMES
    ]

    # Logging configuration
    log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
    log_format = os.getenv('LOG_FORMAT', 'console')  # 'console' or 'json'
    log_file = os.getenv('LOG_FILE')

    return GlobalConfig(
        kick_client_id=client_id,
        kick_client_secret=client_secret,
        token_url=token_url,
        api_base_url=api_base_url,
        request_timeout=request_timeout,
        log_level=log_level,
        log_format=log_format,
        log_file=log_file,
        webhook_enabled=webhook_enabled,
        webhook_host=webhook_host,
        webhook_port=webhook_port,
        broadcaster_user_id=broadcaster_user_id,
        webhook_url=webhook_url,
        subscriptions_url=subscriptions_url,
        events=events,
        example_channel=os.getenv('KICK_EXAMPLE_CHANNEL', 'mirtur'),
        monitor_channel=os.getenv('KICK_MONITOR_CHANNEL', 'xqc')
    )


def validate_config(config: GlobalConfig) -> None:
    """
    Validate configuration values for consistency and correctness.

    Args:
        config: Configuration to validate

    Raises:
        ValueError: If configuration is invalid
    """
    # Validate log level
    valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config.log_level not in valid_log_levels:
        raise ValueError(f"Invalid log level: {config.log_level}")

    # Validate log format
    valid_log_formats = ['console', 'json']
    if config.log_format not in valid_log_formats:
        raise ValueError(f"Invalid log format: {config.log_format}")

    if config.request_timeout <= 0:
        raise ValueError("Request timeout must be positive")

    if config.webhook_port <= 0 or config.webhook_port > 65535:
        raise ValueError("Webhook port must be between 1 and 65535")

    for url_name, url in (('token_url', config.token_url), ('api_base_url', config.api_base_url)):
        if not url.startswith(('http://', 'https://')):
            raise ValueError(f"Invalid {url_name}: {url}")

    if config.webhook_enabled and not config.events:
        raise ValueError("At least one webhook event must be configured")
