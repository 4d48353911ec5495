"""netool: a convenience HTTP client.

This package wraps httpx with a small blocking API: GET/POST/PUT calls
with merged query parameters, optional retries on transient failures,
and JSON and form encoding helpers.

:var __version__: Current package version
:type __version__: str
"""

from .config import ClientConfig
from .exceptions import (
    DeserializationError,
    HTTPError,
    NetoolError,
    ParseError,
    SerializationError,
)
from .httpclient import (
    Client,
    with_delay,
    with_header,
    with_host,
    with_retry,
    with_timeout,
)

__version__ = "0.1.0"

__all__ = [
    "Client",
    "ClientConfig",
    "NetoolError",
    "HTTPError",
    "ParseError",
    "SerializationError",
    "DeserializationError",
    "with_header",
    "with_timeout",
    "with_retry",
    "with_delay",
    "with_host",
]
