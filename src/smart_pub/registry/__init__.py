"""Package registry clients.

This module provides the HTTP client used to search the pub.dev registry
and fetch package details.
"""

from smart_pub.registry.http import HttpClient
from smart_pub.registry.pub import DEFAULT_BASE_URL, PubClient, describe_error

__all__ = [
    "DEFAULT_BASE_URL",
    "HttpClient",
    "PubClient",
    "describe_error",
]
