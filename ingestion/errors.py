"""Exceptions raised while ingesting channel data."""

from __future__ import annotations


class IngestionError(Exception):
    """Base class for failures that end an ingestion run.

    The message is shown to the user verbatim, so it must be presentable.
    """


class ConfigurationMissingError(IngestionError):
    """Raised when the YouTube API key is absent. No network call is made."""


class InvalidRequestError(IngestionError):
    """Raised for malformed channel identifiers or video caps."""


class ChannelNotFoundError(IngestionError):
    """Raised when a handle does not resolve to a channel."""


class ProviderTransportError(IngestionError):
    """Raised for network, quota, or provider-side failures."""


__all__ = [
    "IngestionError",
    "ConfigurationMissingError",
    "InvalidRequestError",
    "ChannelNotFoundError",
    "ProviderTransportError",
]
