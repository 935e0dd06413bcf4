"""Per-session dataset storage handed to the analytics tools."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, MutableMapping, Optional

from ingestion.models import ChannelDataset

logger = logging.getLogger(__name__)


class DatasetStore:
    """Holds at most one ChannelDataset per chat session."""

    def __init__(self) -> None:
        self._datasets: Dict[str, ChannelDataset] = {}
        self._lock = threading.Lock()

    def load(self, session_id: str, dataset: ChannelDataset) -> None:
        """Replace whatever dataset the session held."""
        with self._lock:
            self._datasets[session_id] = dataset
        logger.info(
            "Loaded %s (%s videos) for session %s",
            dataset.channel_id,
            dataset.video_count,
            session_id,
        )

    def get(self, session_id: str) -> Optional[ChannelDataset]:
        with self._lock:
            return self._datasets.get(session_id)

    def clear(self, session_id: str) -> None:
        with self._lock:
            self._datasets.pop(session_id, None)

    def sessions(self) -> List[str]:
        with self._lock:
            return sorted(self._datasets)


@dataclass(frozen=True)
class ToolContext:
    session_id: str
    store: DatasetStore

    @property
    def dataset(self) -> Optional[ChannelDataset]:
        return self.store.get(self.session_id)


SESSION_ID_KEY = "session_id"
SESSION_STORE_KEY = "dataset_store"


def session_tool_context(state: MutableMapping[str, Any]) -> ToolContext:
    """
    Return the ToolContext kept in a UI session's state, creating it on first use.

    The store lives inside the session state, so its dataset is dropped when
    the session ends or its state is cleared.
    """
    if SESSION_STORE_KEY not in state:
        state[SESSION_ID_KEY] = state.get(SESSION_ID_KEY) or uuid.uuid4().hex
        state[SESSION_STORE_KEY] = DatasetStore()
    return ToolContext(session_id=state[SESSION_ID_KEY], store=state[SESSION_STORE_KEY])


__all__ = ["DatasetStore", "ToolContext", "session_tool_context"]
