"""HTTP client that consumes the ingestion progress stream."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Optional, Union

import requests

from config.settings import API_SERVER_HOST, CLIENT_REQUEST_TIMEOUT_SECONDS
from ingestion.errors import IngestionError
from ingestion.models import ChannelDataset, DataEvent, ErrorEvent, ProgressEvent
from ingestion.sse import EventStreamDecoder
from tools.youtube.channel_resolver import extract_channel_handle

logger = logging.getLogger(__name__)

DOWNLOAD_PATH = "/api/youtube/download"
SAVE_PUBLIC_PATH = "/api/youtube/save-public"

ProgressCallback = Callable[[int], None]


def _error_from_response(response: requests.Response) -> str:
    fallback = "Failed to download channel data"
    text = response.text
    try:
        payload = json.loads(text)
    except ValueError:
        return text or fallback
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return fallback


def download_channel_data(
    channel_url: str,
    max_videos: int,
    on_progress: Optional[ProgressCallback] = None,
    *,
    base_url: str = API_SERVER_HOST,
    session: Optional[requests.Session] = None,
    timeout: float = CLIENT_REQUEST_TIMEOUT_SECONDS,
) -> ChannelDataset:
    """
    Request an ingestion run and follow its progress stream.

    Raises IngestionError carrying the server's message when the run fails,
    and when the stream ends without delivering a dataset.
    """
    channel_handle = extract_channel_handle(channel_url)
    http = session or requests

    logger.info("Requesting channel data for %s from %s", channel_handle, base_url)
    if on_progress:
        on_progress(10)

    try:
        response = http.post(
            f"{base_url.rstrip('/')}{DOWNLOAD_PATH}",
            json={"channelHandle": channel_handle, "maxVideos": max_videos},
            stream=True,
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise IngestionError(f"Failed to reach ingestion server: {exc}") from exc

    dataset: Optional[ChannelDataset] = None
    with response:
        if not response.ok:
            raise IngestionError(_error_from_response(response))

        decoder = EventStreamDecoder()
        try:
            for chunk in response.iter_content(chunk_size=None):
                for event in decoder.feed(chunk):
                    dataset = _handle_event(event, on_progress) or dataset
            for event in decoder.flush():
                dataset = _handle_event(event, on_progress) or dataset
        except requests.RequestException as exc:
            raise IngestionError(f"Connection lost while downloading channel data: {exc}") from exc

    if dataset is None:
        raise IngestionError(
            "No data received from server. Make sure the API server is running."
        )

    if on_progress:
        on_progress(100)
    return dataset


def _handle_event(event, on_progress: Optional[ProgressCallback]) -> Optional[ChannelDataset]:
    if isinstance(event, ErrorEvent):
        raise IngestionError(event.error)
    if isinstance(event, DataEvent):
        if event.warning:
            logger.warning(event.warning)
        return event.data
    if isinstance(event, ProgressEvent):
        if on_progress:
            on_progress(event.progress)
        if event.message:
            logger.info(event.message)
    return None


def dataset_filename(dataset: ChannelDataset) -> str:
    return f"{dataset.channel_id.replace('@', '')}_{dataset.video_count}_videos.json"


def dataset_json(dataset: ChannelDataset) -> str:
    return json.dumps(dataset.to_wire(), indent=2, ensure_ascii=False)


def save_channel_dataset(dataset: ChannelDataset, directory: Union[str, Path]) -> Path:
    """Write the dataset as pretty-printed JSON and return the file path."""
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / dataset_filename(dataset)
    path.write_text(dataset_json(dataset), encoding="utf-8")
    return path


def publish_channel_dataset(
    dataset: ChannelDataset,
    *,
    base_url: str = API_SERVER_HOST,
    session: Optional[requests.Session] = None,
    timeout: float = 30.0,
) -> Optional[str]:
    """Ask the server to keep a public copy. Returns its public path, or None."""
    http = session or requests
    try:
        response = http.post(
            f"{base_url.rstrip('/')}{SAVE_PUBLIC_PATH}",
            json={"data": dataset.to_wire(), "filename": dataset_filename(dataset)},
            timeout=timeout,
        )
        response.raise_for_status()
        return response.json().get("path")
    except (requests.RequestException, ValueError) as exc:
        logger.warning("Could not save to public folder: %s", exc)
        return None


__all__ = [
    "download_channel_data",
    "dataset_filename",
    "dataset_json",
    "save_channel_dataset",
    "publish_channel_dataset",
]
