"""YouTube Data API client utilities."""

from __future__ import annotations

import errno
import json
import logging
import time
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httplib2
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from config.settings import YOUTUBE_API_KEY, YOUTUBE_REQUEST_TIMEOUT_SECONDS
from ingestion.errors import ConfigurationMissingError, ProviderTransportError

logger = logging.getLogger(__name__)

MISSING_API_KEY_MESSAGE = (
    "YouTube API key not configured. Please add YOUTUBE_API_KEY to your .env file."
)


def build_youtube_service(
    api_key: Optional[str] = None,
    *,
    timeout: Optional[float] = None,
):
    """Create a YouTube Data API service client.

    A fresh client is built per call; httplib2 transports are not thread-safe,
    so concurrent ingestions must not share one.
    """
    api_key = api_key or YOUTUBE_API_KEY
    if not api_key:
        raise ConfigurationMissingError(MISSING_API_KEY_MESSAGE)
    http = httplib2.Http(timeout=timeout or YOUTUBE_REQUEST_TIMEOUT_SECONDS)
    return build(
        "youtube",
        "v3",
        developerKey=api_key,
        http=http,
        cache_discovery=False,
    )


def execute_request(request, *, retries: int = 1, label: str = "request"):
    """
    Execute a Google API request with basic retries.

    The API client occasionally surfaces `OSError: [Errno 49] Can't assign requested address`
    when the local socket pool is momentarily exhausted. That and timeouts are retried
    with a short backoff; HttpError is never retried here.
    """
    last_exc: Optional[Exception] = None
    attempts = max(0, retries) + 1
    for attempt in range(1, attempts + 1):
        try:
            return request.execute(num_retries=0)
        except TimeoutError as exc:
            last_exc = exc
            if attempt < attempts:
                logger.warning(
                    "YouTube API %s timeout (attempt %s/%s), retrying...",
                    label,
                    attempt,
                    attempts,
                )
                continue
            raise
        except OSError as exc:
            last_exc = exc
            is_addr_unavailable = getattr(exc, "errno", None) == errno.EADDRNOTAVAIL
            if is_addr_unavailable and attempt < attempts:
                backoff = 0.5 * attempt
                logger.warning(
                    "YouTube API %s socket error (%s) attempt %s/%s, retrying in %.1fs",
                    label,
                    exc,
                    attempt,
                    attempts,
                    backoff,
                )
                time.sleep(backoff)
                continue
            raise
    if last_exc:
        raise last_exc
    raise RuntimeError("Failed to execute request for unknown reasons.")


def redact_request_uri(request) -> Optional[str]:
    """Return a sanitized request URI without the API key."""
    try:
        uri = getattr(request, "uri", None)
        if not uri:
            return None
        parts = urlsplit(uri)
        filtered_query = [
            (k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "key"
        ]
        sanitized = urlunsplit(
            (
                parts.scheme,
                parts.netloc,
                parts.path,
                urlencode(filtered_query),
                parts.fragment,
            )
        )
        return sanitized
    except Exception as exc:  # noqa: BLE001
        logger.debug("Failed to redact request URI: %s", exc)
        return None


def _http_error_status(http_err: HttpError) -> Optional[int]:
    resp = getattr(http_err, "resp", None)
    status = getattr(resp, "status", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def _http_error_detail(http_err: HttpError) -> str:
    content = getattr(http_err, "content", b"") or b""
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    try:
        payload = json.loads(content)
        message = payload.get("error", {}).get("message")
        if message:
            return str(message)
    except (ValueError, AttributeError):
        pass
    reason = getattr(http_err, "reason", None)
    return str(reason or content or http_err)


def describe_http_error(http_err: HttpError) -> str:
    """Turn an HttpError into a message fit for end users."""
    status = _http_error_status(http_err)
    detail = _http_error_detail(http_err)
    if status == 403 and "quota" in detail.lower():
        return f"YouTube API quota exceeded: {detail}"
    if status is not None:
        return f"YouTube API error ({status}): {detail}"
    return f"YouTube API error: {detail}"


def call_provider(request, *, retries: int = 1, label: str = "request"):
    """Execute a request, translating transport and provider failures.

    Raises ProviderTransportError with a user-presentable message.
    """
    sanitized_uri = redact_request_uri(request)
    if sanitized_uri:
        logger.info("YouTube API request (%s): %s", label, sanitized_uri)
    try:
        return execute_request(request, retries=retries, label=label)
    except HttpError as http_err:
        logger.warning("YouTube API error during %s: %s", label, http_err)
        raise ProviderTransportError(describe_http_error(http_err)) from http_err
    except (TimeoutError, OSError, httplib2.HttpLib2Error) as exc:
        logger.warning("Network error during %s: %s", label, exc)
        raise ProviderTransportError(
            f"Network error while contacting YouTube ({label}): {exc}"
        ) from exc


__all__ = [
    "MISSING_API_KEY_MESSAGE",
    "build_youtube_service",
    "execute_request",
    "redact_request_uri",
    "describe_http_error",
    "call_provider",
]
