"""Statistics and record selection over a loaded channel dataset."""

from __future__ import annotations

import math
import statistics
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from analytics.errors import NoDataLoadedError, NoMatchError, NoNumericValuesError
from ingestion.models import ChannelDataset
from tools.youtube.time_utils import parse_rfc3339

Number = Union[int, float]

ORDINALS = (
    "first",
    "second",
    "third",
    "fourth",
    "fifth",
    "sixth",
    "seventh",
    "eighth",
    "ninth",
    "tenth",
)

# (phrases, field, pick max?) in priority order.
SUPERLATIVES: Tuple[Tuple[Tuple[str, ...], str, bool], ...] = (
    (("most viewed", "highest views"), "viewCount", True),
    (("least viewed", "lowest views"), "viewCount", False),
    (("most liked",), "likeCount", True),
    (("least liked",), "likeCount", False),
    (("most commented",), "commentCount", True),
)

VIDEO_CARD_FIELDS = ("title", "videoUrl", "viewCount", "likeCount", "commentCount", "releaseDate")

_EPOCH_MIN = datetime.min.replace(tzinfo=timezone.utc)


def require_dataset(dataset: Optional[ChannelDataset]) -> List[Dict[str, Any]]:
    """Return the dataset's videos as camelCase dicts."""
    if dataset is None:
        raise NoDataLoadedError()
    return [video.model_dump(by_alias=True) for video in dataset.videos]


def to_number(value: Any) -> Optional[Number]:
    """Parse a field value as a finite number, or None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def compute_field_stats(dataset: Optional[ChannelDataset], field: str) -> Dict[str, Any]:
    videos = require_dataset(dataset)
    values = [n for n in (to_number(v.get(field)) for v in videos) if n is not None]
    if not values:
        raise NoNumericValuesError(field)

    return {
        "field": field,
        "count": len(values),
        "mean": round(statistics.fmean(values), 2),
        "median": round(statistics.median(values), 2),
        "std": round(statistics.pstdev(values), 2),
        "min": min(values),
        "max": max(values),
    }


def metric_time_series(dataset: Optional[ChannelDataset], metric_field: str) -> List[Dict[str, Any]]:
    """One point per video, ordered by release date. Equal dates keep list order."""
    videos = require_dataset(dataset)
    points = [
        {
            "date": video.get("releaseDate") or "",
            "value": to_number(video.get(metric_field)) or 0,
            "title": video.get("title") or "",
        }
        for video in videos
    ]
    return sorted(points, key=lambda point: parse_rfc3339(point["date"]) or _EPOCH_MIN)


def _pick(videos: List[Dict[str, Any]], field: str, largest: bool) -> Dict[str, Any]:
    def metric(video: Dict[str, Any]) -> Number:
        return to_number(video.get(field)) or 0

    # max()/min() keep the first of equal candidates
    return max(videos, key=metric) if largest else min(videos, key=metric)


def select_video(dataset: Optional[ChannelDataset], selector: str) -> Dict[str, Any]:
    """Select by ordinal word, then superlative phrase, then title substring."""
    videos = require_dataset(dataset)
    needle = (selector or "").strip().lower()

    if needle in ORDINALS:
        index = ORDINALS.index(needle)
        if index < len(videos):
            return videos[index]

    if videos:
        for phrases, field, largest in SUPERLATIVES:
            if any(phrase in needle for phrase in phrases):
                return _pick(videos, field, largest)

    if needle:
        for video in videos:
            if needle in (video.get("title") or "").lower():
                return video

    raise NoMatchError(selector)


def video_card(video: Dict[str, Any]) -> Dict[str, Any]:
    return {name: video.get(name) for name in VIDEO_CARD_FIELDS}


def build_image_request(
    dataset: Optional[ChannelDataset], prompt: str, style: Optional[str] = None
) -> Dict[str, Any]:
    require_dataset(dataset)
    return {
        "_chartType": "generated_image",
        "prompt": prompt,
        "style": style or "default",
        "needsGeneration": True,
    }


__all__ = [
    "ORDINALS",
    "SUPERLATIVES",
    "build_image_request",
    "compute_field_stats",
    "metric_time_series",
    "require_dataset",
    "select_video",
    "to_number",
    "video_card",
]
