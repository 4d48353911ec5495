"""HTTP client public API (barrel module).

This package provides:
- A blocking client with GET/POST/PUT and JSON/form helpers
- Per-call options (headers, timeout, retry, delay, host override)
- Retry classification of attempt outcomes
- Response body wrapper and transport construction helpers

Recommended import pattern for consumers:
    from netool.httpclient import Client, with_retry, with_timeout
"""

from .body import RequestBody, ResponseBody
from .client import (
    FORM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    Client,
    append_queries,
    encode_values,
)
from .options import (
    DEFAULT_RETRY_DELAY,
    DEFAULT_TIMEOUT,
    Option,
    RequestOptions,
    with_delay,
    with_header,
    with_host,
    with_retry,
    with_timeout,
)
from .outcome import Outcome, OutcomeKind, can_retry, classify
from .transport import create_http_client, create_limits

__all__ = [
    "Client",
    "append_queries",
    "encode_values",
    "JSON_CONTENT_TYPE",
    "FORM_CONTENT_TYPE",
    "Option",
    "RequestOptions",
    "DEFAULT_TIMEOUT",
    "DEFAULT_RETRY_DELAY",
    "with_header",
    "with_timeout",
    "with_retry",
    "with_delay",
    "with_host",
    "Outcome",
    "OutcomeKind",
    "can_retry",
    "classify",
    "RequestBody",
    "ResponseBody",
    "create_http_client",
    "create_limits",
]
