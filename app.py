"""Streamlit UI for loading a YouTube channel and querying it with the analytics tools."""

from __future__ import annotations

import logging
from typing import Any, Dict

import streamlit as st

from analytics import ToolContext, run_tool_call, session_tool_context
from analytics.tools import ANALYTICS_TOOLS
from config.settings import API_SERVER_HOST, INGEST_DEFAULT_MAX_VIDEOS, INGEST_MAX_VIDEOS_LIMIT
from ingestion.client import (
    dataset_filename,
    dataset_json,
    download_channel_data,
    publish_channel_dataset,
)
from ingestion.errors import IngestionError

logger = logging.getLogger(__name__)

TOOL_ARGUMENT = {
    "compute_stats_json": "field",
    "plot_metric_vs_time": "metricField",
    "play_video": "selector",
    "generateImage": "prompt",
}


def ensure_session_state() -> None:
    """Initialize session state for chat messages and the session's dataset store."""
    session_tool_context(st.session_state)
    if "messages" not in st.session_state:
        st.session_state["messages"] = []


def tool_context() -> ToolContext:
    return session_tool_context(st.session_state)


def sidebar_channel_loader() -> None:
    """Render the sidebar controls for downloading channel data."""
    st.sidebar.header("YouTube Channel Data")
    with st.sidebar.form("download-channel-form"):
        channel_url = st.text_input("Channel URL or @handle", placeholder="https://www.youtube.com/@channelname")
        max_videos = st.number_input(
            "Max videos",
            min_value=1,
            max_value=INGEST_MAX_VIDEOS_LIMIT,
            value=INGEST_DEFAULT_MAX_VIDEOS,
        )
        publish = st.checkbox("Keep a public copy on the server")
        submitted = st.form_submit_button("Download")

    if submitted:
        progress_bar = st.sidebar.progress(0)
        try:
            dataset = download_channel_data(
                channel_url,
                int(max_videos),
                on_progress=lambda value: progress_bar.progress(min(100, max(0, int(value)))),
                base_url=API_SERVER_HOST,
            )
        except IngestionError as exc:
            logger.warning("Channel download failed: %s", exc)
            st.sidebar.error(str(exc))
        else:
            context = tool_context()
            context.store.load(context.session_id, dataset)
            if publish:
                publish_channel_dataset(dataset, base_url=API_SERVER_HOST)
            st.sidebar.success(f"Loaded {dataset.video_count} videos from {dataset.channel_id}.")

    dataset = tool_context().dataset
    if dataset is None:
        st.sidebar.info("No channel data loaded yet.")
    else:
        st.sidebar.caption(f"{dataset.channel_id} · {dataset.video_count} videos · {dataset.download_date}")
        st.sidebar.download_button(
            "Download JSON",
            data=dataset_json(dataset),
            file_name=dataset_filename(dataset),
            mime="application/json",
        )


def render_tool_result(result: Dict[str, Any]) -> None:
    if "error" in result:
        st.error(result["error"])
        return
    chart_type = result.get("_chartType")
    if chart_type == "metric_vs_time":
        points = result["data"]
        st.line_chart(points, x="date", y="value")
        st.dataframe(points)
    elif chart_type == "video_card":
        video = result["video"]
        st.markdown(f"**[{video['title']}]({video['videoUrl']})**")
        st.caption(
            f"{video['viewCount']:,} views · {video['likeCount']:,} likes · "
            f"{video['commentCount']:,} comments · {video['releaseDate']}"
        )
    else:
        st.json(result)


def tool_runner() -> None:
    """Render the form that invokes one analytics tool against the loaded dataset."""
    with st.form("tool-runner"):
        tool_name = st.selectbox("Tool", [tool.NAME for tool in ANALYTICS_TOOLS])
        argument = st.text_input("Argument", placeholder="viewCount / most viewed / first ...")
        style = st.text_input("Image style (generateImage only)")
        submitted = st.form_submit_button("Run")

    if submitted:
        args: Dict[str, Any] = {TOOL_ARGUMENT[tool_name]: argument}
        if tool_name == "generateImage" and style:
            args["style"] = style
        result = run_tool_call(tool_name, args, tool_context())
        st.session_state["messages"].append({"tool": tool_name, "args": args, "result": result})

    for message in reversed(st.session_state["messages"]):
        with st.chat_message("assistant"):
            st.caption(f"{message['tool']}({message['args']})")
            render_tool_result(message["result"])


def main() -> None:
    """Main Streamlit app entry point."""
    st.set_page_config(page_title="Channel Analytics", layout="wide")
    st.title("YouTube Channel Analytics")
    st.caption("Download a channel's recent uploads, then explore them with the analytics tools.")

    ensure_session_state()
    sidebar_channel_loader()
    tool_runner()


if __name__ == "__main__":
    main()
