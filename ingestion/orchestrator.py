"""Drives one ingestion run and turns it into a stream of progress events."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional

from config.settings import (
    INGEST_DEFAULT_MAX_VIDEOS,
    INGEST_MAX_VIDEOS_LIMIT,
    YOUTUBE_PAGE_SIZE_CEILING,
)
from ingestion.errors import IngestionError, InvalidRequestError
from ingestion.models import (
    ChannelDataset,
    DataEvent,
    ErrorEvent,
    ProgressEvent,
    StreamEvent,
)
from tools.youtube.channel_resolver import ChannelResolver, extract_channel_handle
from tools.youtube.client import build_youtube_service
from tools.youtube.time_utils import format_rfc3339
from tools.youtube.video_collector import VideoCollector

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IngestionOrchestrator:
    """
    Resolve a channel handle, collect its uploads, and stream the outcome.

    Every run ends with exactly one terminal event: a DataEvent on success or
    an ErrorEvent carrying a user-presentable message. Runs share no state;
    each builds its own provider client through ``service_factory``.
    """

    def __init__(
        self,
        service_factory: Callable[[], object] = build_youtube_service,
        *,
        page_size_ceiling: int = YOUTUBE_PAGE_SIZE_CEILING,
        max_videos_limit: int = INGEST_MAX_VIDEOS_LIMIT,
        default_max_videos: int = INGEST_DEFAULT_MAX_VIDEOS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._service_factory = service_factory
        self._page_size_ceiling = page_size_ceiling
        self._max_videos_limit = max_videos_limit
        self._default_max_videos = default_max_videos
        self._clock = clock

    def ingest(self, channel_url_or_handle: str, max_videos: Optional[int] = None) -> Iterator[StreamEvent]:
        try:
            yield from self._run(channel_url_or_handle, max_videos)
        except IngestionError as exc:
            logger.warning("Ingestion of %s failed: %s", channel_url_or_handle, exc)
            yield ErrorEvent(error=str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error during ingestion of %s", channel_url_or_handle)
            yield ErrorEvent(error=str(exc) or "Unknown error occurred")

    def _validate_cap(self, max_videos: Optional[int]) -> int:
        if max_videos is None:
            return self._default_max_videos
        if isinstance(max_videos, bool) or not isinstance(max_videos, int):
            raise InvalidRequestError("maxVideos must be an integer.")
        if not 1 <= max_videos <= self._max_videos_limit:
            raise InvalidRequestError(
                f"maxVideos must be between 1 and {self._max_videos_limit}."
            )
        return max_videos

    def _run(self, channel_url_or_handle: str, max_videos: Optional[int]) -> Iterator[StreamEvent]:
        handle = extract_channel_handle(channel_url_or_handle)
        cap = self._validate_cap(max_videos)
        service = self._service_factory()

        warning = None
        if cap > self._page_size_ceiling:
            warning = (
                f"Requested {cap} videos; the YouTube API returns at most "
                f"{self._page_size_ceiling} per request, so only the latest "
                f"{self._page_size_ceiling} were collected."
            )

        yield ProgressEvent(progress=5, message="Searching for channel...")
        channel_id = ChannelResolver(service).resolve(handle)
        yield ProgressEvent(progress=15, message=f"Found channel: {channel_id}")
        if warning:
            yield ProgressEvent(progress=15, message=warning)

        collector = VideoCollector(service, page_size_ceiling=self._page_size_ceiling)
        videos = yield from collector.iter_collect(channel_id, cap)

        dataset = ChannelDataset.from_videos(
            handle,
            videos,
            download_date=format_rfc3339(self._clock()),
        )
        logger.info("Ingested %s videos for %s", dataset.video_count, handle)
        yield ProgressEvent(progress=100, message="Complete!")
        yield DataEvent(data=dataset, warning=warning)


__all__ = ["IngestionOrchestrator"]
