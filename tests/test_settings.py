"""
Unit tests for configuration loading and validation.
"""

import pytest
from unittest.mock import patch

from kickclient.config.settings import (
    DEFAULT_API_BASE_URL, DEFAULT_SUBSCRIPTIONS_URL, DEFAULT_TOKEN_URL,
    KickCredentials, load_global_config, parse_events, validate_config
)
from kickclient.webhook.models import DEFAULT_EVENT_NAMES, KickEvent


CONFIG_VARS = [
    'KICK_CLIENT_ID', 'KICK_CLIENT_SECRET', 'KICK_APP_ACCESS_TOKEN_ENDPOINT',
    'KICK_PUBLIC_API_BASE_URL', 'KICK_REQUEST_TIMEOUT', 'WEBHOOK_ENABLED', 'WEBHOOK_HOST',
    'WEBHOOK_PORT', 'KICK_BROADCASTER_USER_ID', 'WEBHOOK_URL', 'KICK_WEBHOOK_EVENTS',
    'KICK_SUBSCRIPTIONS_URL', 'KICK_EXAMPLE_CHANNEL', 'KICK_MONITOR_CHANNEL',
    'LOG_LEVEL', 'LOG_FORMAT', 'LOG_FILE'
]


@pytest.fixture
def env(monkeypatch):
    """Clean environment with credentials set; .env files are ignored."""
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv('KICK_CLIENT_ID', 'client-id')
    monkeypatch.setenv('KICK_CLIENT_SECRET', 'client-secret')
    with patch('kickclient.config.settings.load_dotenv'):
        yield monkeypatch


class TestLoadGlobalConfig:
    """Test cases for load_global_config."""

    def test_defaults(self, env):
        config = load_global_config()

        assert config.kick_client_id == 'client-id'
        assert config.token_url == DEFAULT_TOKEN_URL
        assert config.api_base_url == DEFAULT_API_BASE_URL
        assert config.request_timeout == 30
        assert config.webhook_enabled is False
        assert config.webhook_port == 3000
        assert config.subscriptions_url == DEFAULT_SUBSCRIPTIONS_URL
        assert [event.name for event in config.events] == list(DEFAULT_EVENT_NAMES)
        assert config.log_level == 'INFO'
        assert config.log_format == 'console'
        assert config.log_file is None

    def test_missing_credentials(self, env):
        env.delenv('KICK_CLIENT_SECRET')

        with pytest.raises(ValueError, match="KICK_CLIENT_SECRET"):
            load_global_config()

    def test_overrides(self, env):
        env.setenv('KICK_APP_ACCESS_TOKEN_ENDPOINT', 'https://auth.example.com/token')
        env.setenv('KICK_PUBLIC_API_BASE_URL', 'https://api.example.com/v1/')
        env.setenv('KICK_REQUEST_TIMEOUT', '10')
        env.setenv('LOG_LEVEL', 'debug')
        env.setenv('LOG_FORMAT', 'json')

        config = load_global_config()

        assert config.token_url == 'https://auth.example.com/token'
        assert config.api_base_url == 'https://api.example.com/v1'
        assert config.request_timeout == 10
        assert config.log_level == 'DEBUG'
        assert config.log_format == 'json'

    def test_webhook_enabled(self, env):
        env.setenv('WEBHOOK_ENABLED', 'true')
        env.setenv('WEBHOOK_PORT', '8080')
        env.setenv('KICK_BROADCASTER_USER_ID', '62748268')
        env.setenv('WEBHOOK_URL', 'https://example.com/webhook')
        env.setenv('KICK_WEBHOOK_EVENTS', 'chat.message.sent, channel.followed:2')

        config = load_global_config()

        assert config.webhook_enabled is True
        assert config.webhook_port == 8080
        assert config.broadcaster_user_id == 62748268
        assert config.events == [KickEvent('chat.message.sent'), KickEvent('channel.followed', 2)]

    def test_webhook_enabled_requires_broadcaster(self, env):
        env.setenv('WEBHOOK_ENABLED', 'true')
        env.setenv('WEBHOOK_URL', 'https://example.com/webhook')

        with pytest.raises(ValueError, match="KICK_BROADCASTER_USER_ID"):
            load_global_config()

    def test_invalid_integer(self, env):
        env.setenv('WEBHOOK_PORT', 'eighty')

        with pytest.raises(ValueError, match="WEBHOOK_PORT"):
            load_global_config()

    def test_credentials(self, env):
        credentials = load_global_config().credentials()

        assert credentials == KickCredentials(
            client_id='client-id',
            client_secret='client-secret',
            token_url=DEFAULT_TOKEN_URL,
            api_base_url=DEFAULT_API_BASE_URL
        )
        assert 'client-secret' not in repr(credentials)

    def test_credentials_are_immutable(self, env):
        credentials = load_global_config().credentials()

        with pytest.raises(AttributeError):
            credentials.client_id = 'other'


class TestParseEvents:
    """Test cases for parse_events."""

    def test_names_and_versions(self):
        assert parse_events("a.b, c.d:3,,") == [KickEvent("a.b"), KickEvent("c.d", 3)]

    def test_invalid_version(self):
        with pytest.raises(ValueError, match="Invalid event version"):
            parse_events("a.b:one")


class TestValidateConfig:
    """Test cases for validate_config."""

    def test_valid(self, env):
        validate_config(load_global_config())

    @pytest.mark.parametrize("field,value,message", [
        ('log_level', 'VERBOSE', 'Invalid log level'),
        ('log_format', 'xml', 'Invalid log format'),
        ('request_timeout', 0, 'Request timeout'),
        ('webhook_port', 70000, 'Webhook port'),
        ('token_url', 'ftp://example.com', 'Invalid token_url'),
    ])
    def test_invalid_values(self, env, field, value, message):
        config = load_global_config()
        setattr(config, field, value)

        with pytest.raises(ValueError, match=message):
            validate_config(config)

    def test_webhook_without_events(self, env):
        config = load_global_config()
        config.webhook_enabled = True
        config.events = []

        with pytest.raises(ValueError, match="webhook event"):
            validate_config(config)
