"""Data providers package."""

from marketfeed.providers.base import DataProvider
from marketfeed.providers.brapi import BrapiError, BrapiProvider
from marketfeed.providers.transport import RetryingTransport, TransportError

__all__ = [
    "BrapiError",
    "BrapiProvider",
    "DataProvider",
    "RetryingTransport",
    "TransportError",
]
