"""Centralized configuration and environment loading for the channel analytics backend."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"

# Load environment variables from .env if present. This keeps compatibility with
# deployment environments that manage env vars externally.
try:
    if ENV_PATH.exists():
        load_dotenv(dotenv_path=ENV_PATH)
    else:
        load_dotenv()
except PermissionError:
    logger.warning(
        "Unable to read %s due to permissions. Using existing environment variables.",
        ENV_PATH,
    )

# --- API Keys ---
# Optional at import time: ingestion reports a missing key as a stream error.
YOUTUBE_API_KEY = os.getenv("YOUTUBE_API_KEY") or os.getenv("REACT_APP_YOUTUBE_API_KEY")

# --- YouTube Data API ---
YOUTUBE_REQUEST_TIMEOUT_SECONDS = float(os.getenv("YOUTUBE_REQUEST_TIMEOUT_SECONDS", "30"))
YOUTUBE_PAGE_SIZE_CEILING = int(os.getenv("YOUTUBE_PAGE_SIZE_CEILING", "50"))

# --- Ingestion Defaults ---
INGEST_MAX_VIDEOS_LIMIT = int(os.getenv("INGEST_MAX_VIDEOS_LIMIT", "100"))
INGEST_DEFAULT_MAX_VIDEOS = int(os.getenv("INGEST_DEFAULT_MAX_VIDEOS", "10"))

# --- API server / Streamlit integration ---
API_SERVER_BIND = os.getenv("API_SERVER_BIND", "0.0.0.0")
API_SERVER_PORT = int(os.getenv("PORT", os.getenv("API_SERVER_PORT", "3001")))
API_SERVER_HOST = os.getenv("API_SERVER_HOST", f"http://localhost:{API_SERVER_PORT}")
STREAMLIT_BASE_URL = os.getenv("STREAMLIT_BASE_URL", "http://localhost:8501")
CLIENT_REQUEST_TIMEOUT_SECONDS = float(os.getenv("CLIENT_REQUEST_TIMEOUT_SECONDS", "300"))

# --- Dataset exports ---
PUBLIC_DATA_DIR = str((BASE_DIR / os.getenv("PUBLIC_DATA_DIR", "public")).resolve())
