"""Analytics tools a chat model can call against the session's channel dataset."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from google.genai import types
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from analytics.context import ToolContext
from analytics.errors import AnalyticsError, UnknownToolError
from analytics.operations import (
    build_image_request,
    compute_field_stats,
    metric_time_series,
    select_video,
    video_card,
)
from ingestion.models import ChannelDataset

logger = logging.getLogger(__name__)


class ComputeStatsInput(BaseModel):
    tool: Literal["compute_stats_json"] = "compute_stats_json"
    field: str = Field(
        ...,
        min_length=1,
        description=(
            "The numeric field to analyze. Common fields: viewCount, likeCount, "
            "commentCount, duration. Use exact field names from the JSON."
        ),
    )


class PlotMetricInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tool: Literal["plot_metric_vs_time"] = "plot_metric_vs_time"
    metric_field: str = Field(
        ...,
        alias="metricField",
        min_length=1,
        description="The numeric field to plot on Y-axis. Common: viewCount, likeCount, commentCount, duration.",
    )


class PlayVideoInput(BaseModel):
    tool: Literal["play_video"] = "play_video"
    selector: str = Field(
        ...,
        description=(
            'How to select the video. Examples: "asbestos" (title keyword), "first" (ordinal), '
            '"most viewed" (performance), "least liked" (performance).'
        ),
    )


class GenerateImageInput(BaseModel):
    tool: Literal["generateImage"] = "generateImage"
    prompt: str = Field(..., min_length=1, description="Text description of the image to generate.")
    style: Optional[str] = Field(
        None,
        description='Optional style guidance (e.g., "photorealistic", "cartoon", "minimalist").',
    )


ToolRequest = Annotated[
    Union[ComputeStatsInput, PlotMetricInput, PlayVideoInput, GenerateImageInput],
    Field(discriminator="tool"),
]

TOOL_REQUEST_ADAPTER: TypeAdapter[ToolRequest] = TypeAdapter(ToolRequest)


class AnalyticsTool(ABC):
    """Base class: subclasses implement ``run``; failures come back as ``{"error": ...}``."""

    NAME = ""
    DESCRIPTION = ""

    @property
    @abstractmethod
    def args_schema(self) -> type[BaseModel]:
        ...

    @abstractmethod
    def run(self, dataset: Optional[ChannelDataset], request: Any) -> Dict[str, Any]:
        ...

    def __call__(self, context: ToolContext, request: Any) -> Dict[str, Any]:
        try:
            return self.run(context.dataset, request)
        except AnalyticsError as exc:
            logger.info("Tool %s returned error for session %s: %s", self.NAME, context.session_id, exc)
            return {"error": str(exc)}

    def declaration(self) -> types.FunctionDeclaration:
        properties: Dict[str, types.Schema] = {}
        required: List[str] = []
        for name, field in self.args_schema.model_fields.items():
            if name == "tool":
                continue
            wire_name = field.alias or name
            properties[wire_name] = types.Schema(
                type=types.Type.STRING,
                description=field.description,
            )
            if field.is_required():
                required.append(wire_name)
        return types.FunctionDeclaration(
            name=self.NAME,
            description=self.DESCRIPTION,
            parameters=types.Schema(
                type=types.Type.OBJECT,
                properties=properties,
                required=required,
            ),
        )


class ComputeStatsTool(AnalyticsTool):
    NAME = "compute_stats_json"
    DESCRIPTION = (
        "Compute mean, median, std, min, and max for any numeric field in the YouTube channel "
        "JSON data (e.g., viewCount, likeCount, commentCount, duration)."
    )

    @property
    def args_schema(self) -> type[ComputeStatsInput]:
        return ComputeStatsInput

    def run(self, dataset: Optional[ChannelDataset], request: ComputeStatsInput) -> Dict[str, Any]:
        return compute_field_stats(dataset, request.field)


class PlotMetricVsTimeTool(AnalyticsTool):
    NAME = "plot_metric_vs_time"
    DESCRIPTION = (
        "Create a line chart plotting any numeric metric (views, likes, comments, duration) vs "
        "release date for the YouTube videos. Returns chart data for rendering."
    )

    @property
    def args_schema(self) -> type[PlotMetricInput]:
        return PlotMetricInput

    def run(self, dataset: Optional[ChannelDataset], request: PlotMetricInput) -> Dict[str, Any]:
        return {
            "_chartType": "metric_vs_time",
            "metricField": request.metric_field,
            "data": metric_time_series(dataset, request.metric_field),
        }


class PlayVideoTool(AnalyticsTool):
    NAME = "play_video"
    DESCRIPTION = (
        "Display a clickable video card for a specific video from the loaded YouTube channel data. "
        "User can specify by title keywords, ordinal position (first, second, third, etc.), or "
        "performance metric (most viewed, least liked, etc.)."
    )

    @property
    def args_schema(self) -> type[PlayVideoInput]:
        return PlayVideoInput

    def run(self, dataset: Optional[ChannelDataset], request: PlayVideoInput) -> Dict[str, Any]:
        return {
            "_chartType": "video_card",
            "video": video_card(select_video(dataset, request.selector)),
        }


class GenerateImageTool(AnalyticsTool):
    """Forwards a validated request to the external image generator; generates nothing itself."""

    NAME = "generateImage"
    DESCRIPTION = (
        "Generate an image based on a text prompt and an anchor/reference image. Used for creating "
        "thumbnails, social media graphics, or custom visuals."
    )

    @property
    def args_schema(self) -> type[GenerateImageInput]:
        return GenerateImageInput

    def run(self, dataset: Optional[ChannelDataset], request: GenerateImageInput) -> Dict[str, Any]:
        return build_image_request(dataset, request.prompt, request.style)


COMPUTE_STATS = ComputeStatsTool()
PLOT_METRIC_VS_TIME = PlotMetricVsTimeTool()
PLAY_VIDEO = PlayVideoTool()
GENERATE_IMAGE = GenerateImageTool()

ANALYTICS_TOOLS = [COMPUTE_STATS, PLOT_METRIC_VS_TIME, PLAY_VIDEO, GENERATE_IMAGE]
TOOLS_BY_NAME = {tool.NAME: tool for tool in ANALYTICS_TOOLS}


def tool_declarations() -> List[types.FunctionDeclaration]:
    return [tool.declaration() for tool in ANALYTICS_TOOLS]


def parse_tool_call(name: str, args: Optional[Dict[str, Any]] = None) -> ToolRequest:
    """Validate a raw function call into its typed request.

    Raises UnknownToolError or pydantic.ValidationError.
    """
    if name not in TOOLS_BY_NAME:
        raise UnknownToolError(name)
    return TOOL_REQUEST_ADAPTER.validate_python({**(args or {}), "tool": name})


def execute_tool(request: ToolRequest, context: ToolContext) -> Dict[str, Any]:
    match request:
        case ComputeStatsInput():
            tool: AnalyticsTool = COMPUTE_STATS
        case PlotMetricInput():
            tool = PLOT_METRIC_VS_TIME
        case PlayVideoInput():
            tool = PLAY_VIDEO
        case GenerateImageInput():
            tool = GENERATE_IMAGE
        case _:
            raise TypeError(f"Unsupported tool request: {type(request).__name__}")
    return tool(context, request)


def run_tool_call(name: str, args: Optional[Dict[str, Any]], context: ToolContext) -> Dict[str, Any]:
    """Parse and execute a raw call. Always returns a renderable dict."""
    try:
        request = parse_tool_call(name, args)
    except UnknownToolError as exc:
        return {"error": str(exc)}
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
        )
        return {"error": f"Invalid arguments for {name}: {details}"}
    return execute_tool(request, context)


__all__ = [
    "ANALYTICS_TOOLS",
    "AnalyticsTool",
    "ComputeStatsInput",
    "ComputeStatsTool",
    "GenerateImageInput",
    "GenerateImageTool",
    "PlayVideoInput",
    "PlayVideoTool",
    "PlotMetricInput",
    "PlotMetricVsTimeTool",
    "ToolRequest",
    "execute_tool",
    "parse_tool_call",
    "run_tool_call",
    "tool_declarations",
]
