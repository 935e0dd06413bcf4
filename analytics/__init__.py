"""Analytics over the channel dataset loaded for a chat session."""

from .context import DatasetStore, ToolContext, session_tool_context
from .errors import (
    AnalyticsError,
    NoDataLoadedError,
    NoMatchError,
    NoNumericValuesError,
    UnknownToolError,
)
from .tools import (
    ANALYTICS_TOOLS,
    ToolRequest,
    execute_tool,
    parse_tool_call,
    run_tool_call,
    tool_declarations,
)

__all__ = [
    "DatasetStore",
    "ToolContext",
    "session_tool_context",
    "AnalyticsError",
    "NoDataLoadedError",
    "NoMatchError",
    "NoNumericValuesError",
    "UnknownToolError",
    "ANALYTICS_TOOLS",
    "ToolRequest",
    "execute_tool",
    "parse_tool_call",
    "run_tool_call",
    "tool_declarations",
]
