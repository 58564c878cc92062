"""Webhook receiver and event subscription for Kick."""

from .models import EventSubscriptionRequest, KickEvent, WebhookDelivery
from .server import KickWebhookServer

__all__ = [
    'EventSubscriptionRequest',
    'KickEvent',
    'KickWebhookServer',
    'WebhookDelivery'
]
