"""YouTube Data API helpers: client, duration codec, channel resolution, video collection."""

from .client import (
    build_youtube_service,
    call_provider,
    describe_http_error,
    execute_request,
    redact_request_uri,
)
from .time_utils import format_rfc3339, parse_iso8601_duration, parse_rfc3339
from .channel_resolver import ChannelResolver, extract_channel_handle, normalize_handle
from .video_collector import VideoCollector, normalize_video_item

__all__ = [
    "build_youtube_service",
    "call_provider",
    "describe_http_error",
    "execute_request",
    "redact_request_uri",
    "format_rfc3339",
    "parse_iso8601_duration",
    "parse_rfc3339",
    "ChannelResolver",
    "extract_channel_handle",
    "normalize_handle",
    "VideoCollector",
    "normalize_video_item",
]
