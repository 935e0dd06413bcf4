"""Resolve human-entered channel handles to canonical channel IDs."""

from __future__ import annotations

import logging
import re
from typing import Optional

from ingestion.errors import ChannelNotFoundError, InvalidRequestError
from tools.youtube.client import call_provider

logger = logging.getLogger(__name__)

INVALID_CHANNEL_URL_MESSAGE = (
    "Invalid YouTube channel URL. Expected format: https://www.youtube.com/@channelname"
)

_HANDLE_IN_URL_RE = re.compile(r"@([^/?#\s]+)")
_BARE_HANDLE_RE = re.compile(r"^[A-Za-z0-9_.\-]+$")


def normalize_handle(value: Optional[str]) -> Optional[str]:
    """Return handle with a single leading '@' or None if empty."""
    if value is None:
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    cleaned = cleaned.lstrip("@")
    if not cleaned:
        return None
    return f"@{cleaned}"


def extract_channel_handle(url_or_handle: Optional[str]) -> str:
    """
    Extract the '@handle' from a channel URL or a raw handle.

    Supports https://www.youtube.com/@channelname, @channelname and a bare
    channelname. Raises InvalidRequestError for anything else.
    """
    cleaned = (url_or_handle or "").strip()
    match = _HANDLE_IN_URL_RE.search(cleaned)
    if match:
        return f"@{match.group(1)}"
    if _BARE_HANDLE_RE.match(cleaned):
        return f"@{cleaned}"
    raise InvalidRequestError(INVALID_CHANNEL_URL_MESSAGE)


class ChannelResolver:
    """Looks a handle up through a single search.list call. COST: 100 quota units."""

    def __init__(self, service) -> None:
        self._service = service

    def resolve(self, handle: str) -> str:
        username = (normalize_handle(handle) or "").lstrip("@")
        if not username:
            raise InvalidRequestError(INVALID_CHANNEL_URL_MESSAGE)

        request = self._service.search().list(
            part="snippet",
            q=username,
            type="channel",
            maxResults=1,
        )
        response = call_provider(request, retries=0, label="channel search")
        for item in response.get("items") or []:
            channel_id = (item.get("snippet") or {}).get("channelId") or (
                item.get("id") or {}
            ).get("channelId")
            if channel_id:
                logger.info("Resolved %s to channel %s", handle, channel_id)
                return channel_id

        raise ChannelNotFoundError(f"Channel not found: @{username}")


__all__ = [
    "INVALID_CHANNEL_URL_MESSAGE",
    "ChannelResolver",
    "extract_channel_handle",
    "normalize_handle",
]
