"""
Read-only projections of Kick API responses.

The client returns raw JSON; these types are optional views over it and
keep the original dict in ``raw``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


def _image_url(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        return value.get('url')
    return None


@dataclass
class StreamInfo:
    """A live session as reported in a channel's ``livestream`` field."""
    id: Optional[int]
    slug: Optional[str]
    channel_id: Optional[int]
    session_title: Optional[str]
    is_live: bool
    viewer_count: int
    duration: int = 0
    language: Optional[str] = None
    is_mature: bool = False
    created_at: Optional[str] = None
    thumbnail_url: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StreamInfo':
        return cls(
            id=data.get('id'),
            slug=data.get('slug'),
            channel_id=data.get('channel_id'),
            session_title=data.get('session_title'),
            is_live=bool(data.get('is_live', False)),
            viewer_count=data.get('viewer_count') or 0,
            duration=data.get('duration') or 0,
            language=data.get('language'),
            is_mature=bool(data.get('is_mature', False)),
            created_at=data.get('created_at'),
            thumbnail_url=_image_url(data.get('thumbnail')),
            raw=data
        )


@dataclass
class ChannelInfo:
    """Channel metadata with its current livestream, if any."""
    id: Optional[int]
    slug: Optional[str]
    user_id: Optional[int]
    username: Optional[str]
    followers_count: int
    is_banned: bool = False
    vod_enabled: bool = False
    subscription_enabled: bool = False
    playback_url: Optional[str] = None
    banner_image_url: Optional[str] = None
    livestream: Optional[StreamInfo] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_live(self) -> bool:
        return bool(self.livestream and self.livestream.is_live)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChannelInfo':
        user = data.get('user') or {}
        livestream = data.get('livestream')
        return cls(
            id=data.get('id'),
            slug=data.get('slug'),
            user_id=data.get('user_id'),
            username=user.get('username'),
            followers_count=data.get('followersCount') or 0,
            is_banned=bool(data.get('is_banned', False)),
            vod_enabled=bool(data.get('vod_enabled', False)),
            subscription_enabled=bool(data.get('subscription_enabled', False)),
            playback_url=data.get('playback_url'),
            banner_image_url=_image_url(data.get('banner_image')),
            livestream=StreamInfo.from_dict(livestream) if isinstance(livestream, dict) else None,
            raw=data
        )


class StreamStatus(Enum):
    """Outcome of a stream liveness lookup."""
    LIVE = "live"
    OFFLINE = "offline"
    FAILED = "failed"


@dataclass
class StreamLookup:
    """
    Result of looking up a channel's livestream.

    ``OFFLINE`` means the channel was fetched and has no live session;
    ``FAILED`` means the channel could not be fetched at all.
    """
    slug: str
    status: StreamStatus
    stream: Optional[Dict[str, Any]] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.status != StreamStatus.FAILED
