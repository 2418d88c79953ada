"""
Verb transport adapters for fetch_transport_retry.

Provides concrete transports that a RetryTransport can wrap.
"""
from .adapter_httpx import HttpxVerbTransport

__all__ = [
    "HttpxVerbTransport",
]
