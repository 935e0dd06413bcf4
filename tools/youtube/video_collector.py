"""Collect and normalize a channel's most recent uploads."""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, Generator, List, Optional

from config.settings import YOUTUBE_PAGE_SIZE_CEILING
from ingestion.errors import ChannelNotFoundError
from ingestion.models import CAPTIONS_AVAILABLE, NO_TRANSCRIPT, ProgressEvent, VideoRecord
from tools.youtube.client import call_provider
from tools.youtube.time_utils import parse_iso8601_duration

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]


def _safe_count(value: Any) -> int:
    """Coerce a statistics value to a non-negative int, defaulting to 0."""
    if isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number) or number < 0:
        return 0
    return int(number)


def normalize_video_item(item: Dict[str, Any], transcript: str = NO_TRANSCRIPT) -> VideoRecord:
    """Map a videos.list item onto a VideoRecord."""
    snippet = item.get("snippet") or {}
    statistics = item.get("statistics") or {}
    content_details = item.get("contentDetails") or {}
    video_id = item.get("id") or ""

    return VideoRecord(
        title=snippet.get("title") or "",
        description=snippet.get("description") or "",
        transcript=transcript,
        duration=parse_iso8601_duration(content_details.get("duration")),
        release_date=snippet.get("publishedAt") or "",
        view_count=_safe_count(statistics.get("viewCount")),
        like_count=_safe_count(statistics.get("likeCount")),
        comment_count=_safe_count(statistics.get("commentCount")),
        video_url=VideoRecord.watch_url(video_id),
    )


class VideoCollector:
    """
    Fetches upload metadata for one channel.

    Channel details, the uploads listing and the batched video details are
    fatal on failure. Caption lookups are per video and never abort a run.
    """

    def __init__(self, service, *, page_size_ceiling: int = YOUTUBE_PAGE_SIZE_CEILING) -> None:
        self._service = service
        self._page_size_ceiling = page_size_ceiling

    def collect(
        self,
        channel_id: str,
        cap: int,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[VideoRecord]:
        steps = self.iter_collect(channel_id, cap)
        while True:
            try:
                event = next(steps)
            except StopIteration as stop:
                return stop.value
            if on_progress is not None:
                on_progress(event.progress, event.message)

    def iter_collect(
        self, channel_id: str, cap: int
    ) -> Generator[ProgressEvent, None, List[VideoRecord]]:
        """Yield progress milestones; the generator's return value is the record list."""
        limit = max(1, min(cap, self._page_size_ceiling))

        yield ProgressEvent(progress=20, message="Fetching channel details...")
        playlist_id = self._fetch_uploads_playlist_id(channel_id)

        yield ProgressEvent(progress=30, message="Fetching videos...")
        video_ids = self._list_upload_ids(playlist_id, limit)

        yield ProgressEvent(
            progress=50,
            message=f"Found {len(video_ids)} videos, fetching details...",
        )
        items = self._fetch_video_items(video_ids)[:limit]

        records: List[VideoRecord] = []
        total = len(items)
        for index, item in enumerate(items):
            title = (item.get("snippet") or {}).get("title") or ""
            yield ProgressEvent(
                progress=50 + (index * 40) // total,
                message=f"Processing: {title[:50]}...",
            )
            transcript = self._lookup_transcript(item.get("id") or "", title)
            records.append(normalize_video_item(item, transcript))
        return records

    def _fetch_uploads_playlist_id(self, channel_id: str) -> str:
        request = self._service.channels().list(
            part="contentDetails,snippet",
            id=channel_id,
        )
        response = call_provider(request, label="channel details")
        items = response.get("items") or []
        playlist_id = None
        if items:
            playlist_id = (
                items[0]
                .get("contentDetails", {})
                .get("relatedPlaylists", {})
                .get("uploads")
            )
        if not playlist_id:
            raise ChannelNotFoundError(f"Channel details not found for {channel_id}")
        return playlist_id

    def _list_upload_ids(self, playlist_id: str, limit: int) -> List[str]:
        request = self._service.playlistItems().list(
            part="snippet,contentDetails",
            playlistId=playlist_id,
            maxResults=limit,
        )
        response = call_provider(request, label="playlist uploads")
        video_ids: List[str] = []
        for item in response.get("items") or []:
            video_id = (item.get("contentDetails") or {}).get("videoId")
            if video_id:
                video_ids.append(video_id)
        return video_ids[:limit]

    def _fetch_video_items(self, video_ids: List[str]) -> List[Dict[str, Any]]:
        if not video_ids:
            return []
        request = self._service.videos().list(
            part="snippet,contentDetails,statistics",
            id=",".join(video_ids),
        )
        response = call_provider(request, label="video details batch")
        return list(response.get("items") or [])

    def _lookup_transcript(self, video_id: str, title: str) -> str:
        try:
            request = self._service.captions().list(part="snippet", videoId=video_id)
            response = call_provider(request, retries=0, label="captions lookup")
        except Exception as exc:  # noqa: BLE001
            logger.info("No captions for %s (%s): %s", title, video_id, exc)
            return NO_TRANSCRIPT
        if response.get("items"):
            return CAPTIONS_AVAILABLE
        return NO_TRANSCRIPT


__all__ = ["VideoCollector", "normalize_video_item"]
