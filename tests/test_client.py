from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock
from typing import Any, Dict, List, Optional

import requests

from ingestion.client import (
    dataset_filename,
    dataset_json,
    download_channel_data,
    publish_channel_dataset,
    save_channel_dataset,
)
from ingestion.errors import IngestionError, InvalidRequestError
from ingestion.models import ChannelDataset, DataEvent, ErrorEvent, ProgressEvent, VideoRecord
from ingestion.sse import encode_event


def _dataset(count: int = 2) -> ChannelDataset:
    videos = [VideoRecord(title=f"Video {index}") for index in range(count)]
    return ChannelDataset.from_videos("@example", videos, download_date="2025-01-01T00:00:00Z")


class _FakeResponse:
    def __init__(self, chunks: List[bytes], status_code: int = 200, text: str = "", payload: Any = None) -> None:
        self._chunks = chunks
        self.status_code = status_code
        self.text = text
        self._payload = payload

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def iter_content(self, chunk_size=None):
        yield from self._chunks

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> Any:
        return self._payload

    def __enter__(self) -> "_FakeResponse":
        return self

    def __exit__(self, *exc_info) -> None:
        return None


class _FakeSession:
    def __init__(self, response: Optional[_FakeResponse] = None, error: Optional[Exception] = None) -> None:
        self.response = response
        self.error = error
        self.posts: List[Dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> _FakeResponse:
        self.posts.append({"url": url, **kwargs})
        if self.error:
            raise self.error
        return self.response


def _stream(*events) -> bytes:
    return "".join(encode_event(event) for event in events).encode("utf-8")


class DownloadChannelDataTest(unittest.TestCase):
    def test_returns_dataset_and_reports_progress(self) -> None:
        body = _stream(
            ProgressEvent(progress=5, message="Searching for channel..."),
            ProgressEvent(progress=50, message="Found 2 videos"),
            ProgressEvent(progress=100, message="Complete!"),
            DataEvent(data=_dataset()),
        )
        session = _FakeSession(_FakeResponse([body[:13], body[13:200], body[200:]]))
        progress: List[int] = []

        dataset = download_channel_data(
            "https://www.youtube.com/@example",
            2,
            on_progress=progress.append,
            base_url="http://api.test/",
            session=session,
        )

        self.assertEqual(dataset, _dataset())
        self.assertEqual(progress, [10, 5, 50, 100, 100])
        self.assertEqual(session.posts[0]["url"], "http://api.test/api/youtube/download")
        self.assertEqual(session.posts[0]["json"], {"channelHandle": "@example", "maxVideos": 2})
        self.assertTrue(session.posts[0]["stream"])

    def test_error_event_raises_with_server_message(self) -> None:
        body = _stream(
            ProgressEvent(progress=5, message="Searching for channel..."),
            ErrorEvent(error="Channel not found: @example"),
        )
        session = _FakeSession(_FakeResponse([body]))

        with self.assertRaises(IngestionError) as ctx:
            download_channel_data("@example", 5, session=session)
        self.assertEqual(str(ctx.exception), "Channel not found: @example")

    def test_http_error_uses_json_error_field(self) -> None:
        session = _FakeSession(
            _FakeResponse([], status_code=400, text=json.dumps({"error": "channelHandle required"}))
        )
        with self.assertRaises(IngestionError) as ctx:
            download_channel_data("@example", 5, session=session)
        self.assertEqual(str(ctx.exception), "channelHandle required")

    def test_stream_without_data_raises(self) -> None:
        session = _FakeSession(_FakeResponse([_stream(ProgressEvent(progress=5, message="x"))]))
        with self.assertRaises(IngestionError) as ctx:
            download_channel_data("@example", 5, session=session)
        self.assertIn("No data received", str(ctx.exception))

    def test_invalid_url_fails_before_request(self) -> None:
        session = _FakeSession(_FakeResponse([]))
        with self.assertRaises(InvalidRequestError):
            download_channel_data("https://example.com/not-a-channel", 5, session=session)
        self.assertEqual(session.posts, [])

    def test_connection_failure(self) -> None:
        session = _FakeSession(error=requests.ConnectionError("refused"))
        with self.assertRaises(IngestionError) as ctx:
            download_channel_data("@example", 5, session=session)
        self.assertIn("refused", str(ctx.exception))

    def test_without_session_uses_module_level_post(self) -> None:
        body = _stream(DataEvent(data=_dataset()))
        with mock.patch("ingestion.client.requests.post", return_value=_FakeResponse([body])) as post, \
                mock.patch("ingestion.client.requests.Session") as session_class:
            dataset = download_channel_data("@example", 2, base_url="http://api.test")

        self.assertEqual(dataset, _dataset())
        post.assert_called_once()
        session_class.assert_not_called()


class DatasetExportTest(unittest.TestCase):
    def test_filename_and_save(self) -> None:
        dataset = _dataset(3)
        self.assertEqual(dataset_filename(dataset), "example_3_videos.json")

        with tempfile.TemporaryDirectory() as tmp_dir:
            path = save_channel_dataset(dataset, tmp_dir)
            saved = json.loads(Path(path).read_text(encoding="utf-8"))

        self.assertEqual(saved["channelId"], "@example")
        self.assertEqual(saved["videoCount"], 3)

    def test_dataset_json_matches_saved_file(self) -> None:
        dataset = _dataset(2)
        self.assertEqual(json.loads(dataset_json(dataset)), dataset.to_wire())
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = save_channel_dataset(dataset, tmp_dir)
            self.assertEqual(Path(path).read_text(encoding="utf-8"), dataset_json(dataset))

    def test_publish_returns_path(self) -> None:
        session = _FakeSession(_FakeResponse([], payload={"ok": True, "path": "/example_2_videos.json"}))

        path = publish_channel_dataset(_dataset(), base_url="http://api.test", session=session)

        self.assertEqual(path, "/example_2_videos.json")
        self.assertEqual(session.posts[0]["url"], "http://api.test/api/youtube/save-public")
        self.assertEqual(session.posts[0]["json"]["filename"], "example_2_videos.json")

    def test_publish_failure_is_logged_not_raised(self) -> None:
        session = _FakeSession(error=requests.ConnectionError("down"))
        with self.assertLogs("ingestion.client", level="WARNING"):
            self.assertIsNone(publish_channel_dataset(_dataset(), session=session))


if __name__ == "__main__":
    unittest.main()
