"""Data models for ingested channel data and the progress stream."""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    model_validator,
)
from pydantic.alias_generators import to_camel

NO_TRANSCRIPT = "No transcript available"
CAPTIONS_AVAILABLE = "Captions available (download requires OAuth)"

YOUTUBE_WATCH_URL_TEMPLATE = "https://www.youtube.com/watch?v={video_id}"
YOUTUBE_CHANNEL_URL_TEMPLATE = "https://www.youtube.com/{handle}"

_WIRE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class VideoRecord(BaseModel):
    """One normalized video. Serialized with camelCase keys."""

    model_config = _WIRE_CONFIG

    title: str = ""
    description: str = ""
    transcript: str = NO_TRANSCRIPT
    duration: int = Field(default=0, ge=0, description="Duration in seconds.")
    release_date: str = Field(default="", description="ISO-8601 publish timestamp.")
    view_count: int = Field(default=0, ge=0)
    like_count: int = Field(default=0, ge=0)
    comment_count: int = Field(default=0, ge=0)
    video_url: str = ""

    @classmethod
    def watch_url(cls, video_id: str) -> str:
        return YOUTUBE_WATCH_URL_TEMPLATE.format(video_id=video_id)


class ChannelDataset(BaseModel):
    """Immutable result of one successful ingestion run."""

    model_config = _WIRE_CONFIG

    channel_id: str = Field(..., description="The user-supplied handle, e.g. @example.")
    channel_url: str
    download_date: str
    video_count: int = Field(..., ge=0)
    videos: List[VideoRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_video_count(self) -> "ChannelDataset":
        if self.video_count != len(self.videos):
            raise ValueError(
                f"videoCount ({self.video_count}) does not match number of videos ({len(self.videos)})"
            )
        return self

    @classmethod
    def from_videos(
        cls, handle: str, videos: List[VideoRecord], *, download_date: str
    ) -> "ChannelDataset":
        return cls(
            channel_id=handle,
            channel_url=YOUTUBE_CHANNEL_URL_TEMPLATE.format(handle=handle),
            download_date=download_date,
            video_count=len(videos),
            videos=list(videos),
        )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class IngestRequest(BaseModel):
    """Body of the ingestion endpoint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    channel_handle: Optional[str] = None
    max_videos: Optional[int] = None


# --- Progress stream events ---


class ProgressEvent(BaseModel):
    progress: int = Field(..., ge=0, le=100)
    message: str = ""


class ErrorEvent(BaseModel):
    """Terminal event carrying a user-presentable failure message."""

    error: str


class DataEvent(BaseModel):
    """Terminal event carrying the assembled dataset."""

    data: ChannelDataset
    warning: Optional[str] = None


def _event_kind(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        for key in ("error", "data", "progress"):
            if key in value:
                return key
        return None
    if isinstance(value, ErrorEvent):
        return "error"
    if isinstance(value, DataEvent):
        return "data"
    if isinstance(value, ProgressEvent):
        return "progress"
    return None


StreamEvent = Annotated[
    Union[
        Annotated[ProgressEvent, Tag("progress")],
        Annotated[ErrorEvent, Tag("error")],
        Annotated[DataEvent, Tag("data")],
    ],
    Discriminator(_event_kind),
]

STREAM_EVENT_ADAPTER: TypeAdapter[StreamEvent] = TypeAdapter(StreamEvent)


def is_terminal(event: StreamEvent) -> bool:
    return isinstance(event, (ErrorEvent, DataEvent))


__all__ = [
    "NO_TRANSCRIPT",
    "CAPTIONS_AVAILABLE",
    "VideoRecord",
    "ChannelDataset",
    "IngestRequest",
    "ProgressEvent",
    "ErrorEvent",
    "DataEvent",
    "StreamEvent",
    "STREAM_EVENT_ADAPTER",
    "is_terminal",
]
