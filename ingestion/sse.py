"""Server-sent event framing for the ingestion progress stream."""

from __future__ import annotations

import codecs
import json
import logging
from typing import Any, Dict, List, Union

from pydantic import ValidationError

from ingestion.models import STREAM_EVENT_ADAPTER, StreamEvent

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
MEDIA_TYPE = "text/event-stream"


def encode_event(event: StreamEvent) -> str:
    """Frame one event as an SSE ``data:`` record."""
    payload = event.model_dump_json(by_alias=True, exclude_none=True)
    return f"{DATA_PREFIX}{payload}\n\n"


def decode_event(payload: Union[str, bytes, Dict[str, Any]]) -> StreamEvent:
    """Decode a JSON payload (without the ``data:`` prefix) into a typed event.

    Raises ValueError for malformed JSON and ValidationError for unknown shapes.
    """
    if isinstance(payload, dict):
        return STREAM_EVENT_ADAPTER.validate_python(payload)
    return STREAM_EVENT_ADAPTER.validate_python(json.loads(payload))


class EventStreamDecoder:
    """
    Incrementally decode an SSE byte stream into typed events.

    Chunks may split records anywhere, including inside a multi-byte
    character; the unfinished tail is buffered until a later chunk completes
    it. Records that fail to decode are logged and skipped.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def feed(self, chunk: Union[bytes, str]) -> List[StreamEvent]:
        if isinstance(chunk, bytes):
            chunk = self._utf8.decode(chunk)
        self._buffer += chunk
        lines = self._buffer.split("\n")
        self._buffer = lines.pop()
        return self._decode_lines(lines)

    def flush(self) -> List[StreamEvent]:
        """Decode whatever is left once the stream has ended."""
        self._buffer += self._utf8.decode(b"", final=True)
        remaining, self._buffer = self._buffer, ""
        return self._decode_lines([remaining])

    def _decode_lines(self, lines: List[str]) -> List[StreamEvent]:
        events: List[StreamEvent] = []
        for line in lines:
            line = line.rstrip("\r")
            if not line.startswith(DATA_PREFIX):
                continue
            payload = line[len(DATA_PREFIX):]
            try:
                events.append(decode_event(payload))
            except (ValueError, ValidationError) as exc:
                logger.error("Failed to parse SSE data: %s", exc)
        return events


__all__ = ["DATA_PREFIX", "MEDIA_TYPE", "EventStreamDecoder", "decode_event", "encode_event"]
