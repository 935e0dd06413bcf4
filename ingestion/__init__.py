"""Channel ingestion: typed models, progress stream framing, and orchestration."""

from .errors import (
    ChannelNotFoundError,
    ConfigurationMissingError,
    IngestionError,
    InvalidRequestError,
    ProviderTransportError,
)
from .models import (
    ChannelDataset,
    DataEvent,
    ErrorEvent,
    ProgressEvent,
    StreamEvent,
    VideoRecord,
)

__all__ = [
    "IngestionError",
    "ConfigurationMissingError",
    "InvalidRequestError",
    "ChannelNotFoundError",
    "ProviderTransportError",
    "ChannelDataset",
    "VideoRecord",
    "ProgressEvent",
    "ErrorEvent",
    "DataEvent",
    "StreamEvent",
]
