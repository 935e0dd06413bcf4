"""Failures of analytics operations.

Tools never let these escape; they are reported as ``{"error": str(exc)}``.
"""

from __future__ import annotations

NO_DATA_LOADED_MESSAGE = "No YouTube channel data loaded"


class AnalyticsError(Exception):
    pass


class NoDataLoadedError(AnalyticsError):
    def __init__(self) -> None:
        super().__init__(NO_DATA_LOADED_MESSAGE)


class NoNumericValuesError(AnalyticsError):
    def __init__(self, field: str) -> None:
        super().__init__(f'No numeric values found for field "{field}"')
        self.field = field


class NoMatchError(AnalyticsError):
    def __init__(self, selector: str) -> None:
        super().__init__(f'Could not find video matching "{selector}"')
        self.selector = selector


class UnknownToolError(AnalyticsError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


__all__ = [
    "NO_DATA_LOADED_MESSAGE",
    "AnalyticsError",
    "NoDataLoadedError",
    "NoNumericValuesError",
    "NoMatchError",
    "UnknownToolError",
]
