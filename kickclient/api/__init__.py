"""Kick public API client and response models."""

from .client import KickApiClient
from .models import ChannelInfo, StreamInfo, StreamLookup, StreamStatus

__all__ = [
    'KickApiClient',
    'ChannelInfo',
    'StreamInfo',
    'StreamLookup',
    'StreamStatus'
]
