"""
Data models for Kick event subscriptions and webhook deliveries.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


SUBSCRIPTIONS_URL = "https://api.kick.com/public/v1/events/subscriptions"

DEFAULT_EVENT_NAMES = (
    "chat.message.sent",
    "channel.followed",
    "channel.subscription.new",
    "channel.subscription.renewal",
    "channel.subscription.gifts",
)


@dataclass(frozen=True)
class KickEvent:
    """Event name and schema version to subscribe to."""
    name: str
    version: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "version": self.version}


@dataclass
class EventSubscriptionRequest:
    """Body of the subscription registration call."""
    broadcaster_user_id: int
    events: List[KickEvent] = field(default_factory=list)
    method: str = "webhook"

    def to_payload(self) -> Dict[str, Any]:
        """Convert to the JSON body expected by the subscriptions endpoint."""
        return {
            "broadcaster_user_id": self.broadcaster_user_id,
            "events": [event.to_dict() for event in self.events],
            "method": self.method,
        }


@dataclass
class WebhookDelivery:
    """Inbound webhook body, kept opaque apart from the logged content field."""
    payload: Any

    @property
    def content(self) -> Optional[Any]:
        if isinstance(self.payload, dict):
            return self.payload.get("content")
        return None
