from __future__ import annotations

import json
import unittest

from ingestion.models import ChannelDataset, DataEvent, ErrorEvent, ProgressEvent, VideoRecord
from ingestion.sse import EventStreamDecoder, decode_event, encode_event


def _dataset() -> ChannelDataset:
    video = VideoRecord(title="Café ☕", video_url="https://www.youtube.com/watch?v=abc", view_count=3)
    return ChannelDataset.from_videos("@example", [video], download_date="2025-01-01T00:00:00Z")


class EncodeEventTest(unittest.TestCase):
    def test_progress_wire_format(self) -> None:
        frame = encode_event(ProgressEvent(progress=5, message="Searching for channel..."))
        self.assertTrue(frame.startswith("data: "))
        self.assertTrue(frame.endswith("\n\n"))
        self.assertEqual(json.loads(frame[6:]), {"progress": 5, "message": "Searching for channel..."})

    def test_data_event_uses_camel_case(self) -> None:
        payload = json.loads(encode_event(DataEvent(data=_dataset()))[6:])
        self.assertEqual(set(payload), {"data"})
        self.assertEqual(payload["data"]["channelId"], "@example")
        self.assertEqual(payload["data"]["videoCount"], 1)
        self.assertEqual(payload["data"]["videos"][0]["viewCount"], 3)

    def test_decode_picks_variant_by_key(self) -> None:
        self.assertIsInstance(decode_event('{"progress": 40, "message": "x"}'), ProgressEvent)
        self.assertIsInstance(decode_event('{"error": "boom"}'), ErrorEvent)
        decoded = decode_event(encode_event(DataEvent(data=_dataset()))[6:])
        self.assertIsInstance(decoded, DataEvent)
        self.assertEqual(decoded.data, _dataset())


class EventStreamDecoderTest(unittest.TestCase):
    def test_record_split_across_chunks(self) -> None:
        stream = (
            encode_event(ProgressEvent(progress=5, message="a"))
            + encode_event(DataEvent(data=_dataset()))
        ).encode("utf-8")
        decoder = EventStreamDecoder()
        events = []
        for index in range(0, len(stream), 7):
            events.extend(decoder.feed(stream[index:index + 7]))
        events.extend(decoder.flush())

        self.assertEqual(len(events), 2)
        self.assertIsInstance(events[0], ProgressEvent)
        self.assertIsInstance(events[1], DataEvent)
        self.assertEqual(events[1].data.videos[0].title, "Café ☕")

    def test_malformed_record_is_skipped(self) -> None:
        decoder = EventStreamDecoder()
        with self.assertLogs("ingestion.sse", level="ERROR"):
            events = decoder.feed(
                b'data: {"progress": 5, "message": "ok"}\n\n'
                b"data: {not json\n\n"
                b'data: {"unexpected": true}\n\n'
                b'data: {"progress": 90, "message": "later"}\n\n'
            )
        self.assertEqual([event.progress for event in events], [5, 90])

    def test_partial_error_record_completes_later(self) -> None:
        decoder = EventStreamDecoder()
        self.assertEqual(decoder.feed(b'data: {"err'), [])
        events = decoder.feed(b'or": "Channel not found: @x"}\n\n')
        self.assertEqual(len(events), 1)
        self.assertIsInstance(events[0], ErrorEvent)
        self.assertEqual(events[0].error, "Channel not found: @x")

    def test_flush_handles_missing_trailing_newline(self) -> None:
        decoder = EventStreamDecoder()
        self.assertEqual(decoder.feed('data: {"error": "late"}'), [])
        events = decoder.flush()
        self.assertIsInstance(events[0], ErrorEvent)


if __name__ == "__main__":
    unittest.main()
