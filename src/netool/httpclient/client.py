"""Convenience HTTP client with query merging, retries and JSON helpers.

The client wraps a single ``httpx.Client`` and exposes a small method
surface. Every call goes through :meth:`Client.execute`, which:

1. Resolves the per-call options and their defaults
2. Merges extra query parameters into the address
3. Builds and dispatches the request
4. Classifies the outcome and retries transient failures

Successful calls return a :class:`ResponseBody` the caller must close,
or ``None`` when the server answered without content.

Examples:
    >>> with Client() as client:
    ...     user = client.get_json("https://api.example.com/users/1")
    ...     body = client.get(
    ...         "https://api.example.com/export?fmt=csv",
    ...         {"page": "2"},
    ...         with_retry(3),
    ...         with_timeout(10),
    ...     )
    ...     with body:
    ...         data = body.read()
"""

import logging
import re
import time
from collections.abc import Iterable, Mapping
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx
from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_json

from ..config.settings import ClientConfig
from ..exceptions import (
    SNIPPET_LIMIT,
    DeserializationError,
    HTTPError,
    ParseError,
    SerializationError,
)
from .body import RequestBody, ResponseBody, read_snippet
from .options import Option, RequestOptions, with_header
from .outcome import Outcome
from .transport import create_http_client

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"

# 2xx statuses that never carry a body
_NO_CONTENT = (204, 205)

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

Values = Union[
    Mapping[str, Union[str, Iterable]],
    Iterable[Tuple[str, str]],
]


def to_pairs(values: Optional[Values]) -> List[Tuple[str, str]]:
    """Flatten a query or form multimap into ``(key, value)`` pairs.

    :param values: Mapping of key to value or list of values, or a
                   sequence of ``(key, value)`` pairs
    :type values: Optional[Values]
    :return: Pairs in input order, values converted to strings
    :rtype: List[Tuple[str, str]]
    """
    if not values:
        return []
    items = values.items() if isinstance(values, Mapping) else values
    pairs = []
    for key, value in items:
        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            pairs.append((key, _to_str(value)))
        else:
            pairs.extend((key, _to_str(v)) for v in value)
    return pairs


def _to_str(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def encode_values(pairs: List[Tuple[str, str]]) -> str:
    """Encode pairs as ``k=v&k2=v2``, keys sorted, values in insertion order."""
    grouped: Dict[str, List[str]] = {}
    for key, value in pairs:
        grouped.setdefault(key, []).append(value)
    return urlencode(
        [(key, value) for key in sorted(grouped) for value in grouped[key]],
        encoding="utf-8",
        errors="surrogateescape",
    )


def append_queries(addr: str, queries: Values) -> str:
    """Merge query parameters into an address.

    Parameters already present in ``addr`` are kept and placed after the
    supplied values for the same key.

    example:
        addr:    https://example.com/?name=jack
        queries: {"age": ["18"]}
        result:  https://example.com/?age=18&name=jack

    :param addr: Target address, possibly with a query string
    :type addr: str
    :param queries: Parameters to add
    :type queries: Values
    :return: Address with the merged, re-encoded query string
    :rtype: str
    :raises ParseError: If the address or its query string is malformed
    """
    try:
        parts = urlsplit(addr)
        parts.port  # raises on a non-numeric port
    except ValueError as e:
        raise ParseError(f"invalid address {addr!r}: {e}", addr=addr) from e

    pairs = to_pairs(queries)
    if parts.query:
        if ";" in parts.query:
            raise ParseError("invalid semicolon separator in query", addr=addr)
        if _BAD_ESCAPE.search(parts.query):
            raise ParseError(f"invalid escape in query {parts.query!r}", addr=addr)
        # surrogateescape keeps non-UTF-8 escapes byte for byte
        pairs.extend(
            parse_qsl(
                parts.query,
                keep_blank_values=True,
                encoding="utf-8",
                errors="surrogateescape",
            )
        )

    return urlunsplit(parts._replace(query=encode_values(pairs)))


def encode_json(payload: Any) -> bytes:
    """Serialize a payload to compact UTF-8 JSON.

    Pydantic models, dataclasses and datetimes are handled by pydantic's
    serializer.

    :raises SerializationError: If the payload cannot be represented as JSON
    """
    try:
        return to_json(payload)
    except PydanticSerializationError as e:
        raise SerializationError(f"cannot encode request body as JSON: {e}") from e


def decode_json(body: Optional[ResponseBody], model: Any = None) -> Any:
    """Read, close and decode a JSON response body.

    :param body: Response body, ``None`` for no content
    :type body: Optional[ResponseBody]
    :param model: Optional type to validate the decoded value into
    :return: Decoded value, or ``None`` when there was no content
    :raises DeserializationError: If the body is not valid JSON or does
                                  not match ``model``
    """
    if body is None:
        return None
    with body:
        raw = body.read()
    try:
        if model is None:
            return TypeAdapter(Any).validate_json(raw)
        return TypeAdapter(model).validate_json(raw)
    except ValidationError as e:
        raise DeserializationError(f"cannot decode response body: {e}") from e


class Client:
    """Blocking HTTP client with per-call options.

    The client holds no per-call state, so one instance can be shared
    between threads. When no ``http_client`` is supplied one is built
    from ``config`` (or the defaults: keep-alive off, compression off,
    TLS verification off) and closed by :meth:`close`. A supplied
    ``http_client`` stays owned by the caller.

    :param http_client: Pre-built httpx client to send requests with
    :type http_client: Optional[httpx.Client]
    :param config: Transport settings used to build a client
    :type config: Optional[ClientConfig]
    :raises ValueError: If both ``http_client`` and ``config`` are given
    """

    def __init__(
        self,
        http_client: Optional[httpx.Client] = None,
        config: Optional[ClientConfig] = None,
    ):
        if http_client is not None and config is not None:
            raise ValueError("pass either http_client or config, not both")
        self._owns_client = http_client is None
        self._client = http_client or create_http_client(config)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
            logger.debug("Closed HTTP client")

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get(
        self, addr: str, queries: Optional[Values] = None, *opts: Option
    ) -> Optional[ResponseBody]:
        """Send a GET request."""
        return self.execute("GET", addr, queries, None, *opts)

    def post(
        self, addr: str, queries: Optional[Values] = None, body: Any = None, *opts: Option
    ) -> Optional[ResponseBody]:
        """Send a POST request."""
        return self.execute("POST", addr, queries, body, *opts)

    def put(
        self, addr: str, queries: Optional[Values] = None, body: Any = None, *opts: Option
    ) -> Optional[ResponseBody]:
        """Send a PUT request."""
        return self.execute("PUT", addr, queries, body, *opts)

    def post_form(
        self,
        addr: str,
        queries: Optional[Values] = None,
        form: Optional[Values] = None,
        *opts: Option,
    ) -> Optional[ResponseBody]:
        """Send a POST request with a URL-encoded form body."""
        body = encode_values(to_pairs(form))
        return self.post(
            addr, queries, body, *opts, with_header("Content-Type", FORM_CONTENT_TYPE)
        )

    def get_json(
        self,
        addr: str,
        queries: Optional[Values] = None,
        *opts: Option,
        model: Any = None,
    ) -> Any:
        """Send a GET request and decode the JSON response.

        :param addr: Target address
        :param queries: Extra query parameters
        :param opts: Per-call options
        :param model: Optional type to validate the response into
        :return: Decoded response, ``None`` if the server sent no content
        :raises HTTPError: On a non-2xx response
        :raises DeserializationError: If the response is not valid JSON
        """
        body = self.execute(
            "GET", addr, queries, None, *opts, with_header("Accept", "application/json")
        )
        return decode_json(body, model)

    def post_json(
        self,
        addr: str,
        queries: Optional[Values] = None,
        payload: Any = None,
        *opts: Option,
        model: Any = None,
    ) -> Any:
        """Send a JSON body with POST and decode the JSON response.

        A ``None`` payload sends an empty body.

        :param addr: Target address
        :param queries: Extra query parameters
        :param payload: Value to send as JSON
        :param opts: Per-call options
        :param model: Optional type to validate the response into
        :return: Decoded response, ``None`` if the server sent no content
        :raises SerializationError: If ``payload`` cannot be encoded
        :raises HTTPError: On a non-2xx response
        :raises DeserializationError: If the response is not valid JSON
        """
        content = b"" if payload is None else encode_json(payload)
        body = self.post(
            addr, queries, content, *opts, with_header("Content-Type", JSON_CONTENT_TYPE)
        )
        return decode_json(body, model)

    def execute(
        self,
        method: str,
        addr: str,
        queries: Optional[Values] = None,
        body: Any = None,
        *opts: Option,
    ) -> Optional[ResponseBody]:
        """Send a request, retrying transient failures.

        Transport errors and 5xx responses are retried up to the
        configured count with a fixed, blocking delay in between. Any
        other failure is raised at once.

        :param method: HTTP method
        :type method: str
        :param addr: Target address
        :type addr: str
        :param queries: Extra query parameters merged into ``addr``
        :type queries: Optional[Values]
        :param body: Request body (bytes, str, file object or byte iterator)
        :type body: Any
        :param opts: Per-call options
        :return: Live response body, or ``None`` for no content
        :rtype: Optional[ResponseBody]
        :raises ParseError: If the address is malformed
        :raises HTTPError: On a non-2xx response after retries
        :raises httpx.RequestError: On a transport failure after retries
        """
        options = RequestOptions.resolve(*opts)
        if queries:
            addr = append_queries(addr, queries)
        payload = RequestBody(body, replay=options.retry > 0)

        outcome = self._attempt(method, addr, payload, options)
        if outcome.ok or options.retry <= 0 or not outcome.retryable:
            return outcome.unwrap()

        for attempt in range(1, options.retry + 1):
            logger.debug(
                "Retrying %s %s in %.2fs (retry %d/%d): %s",
                method,
                addr,
                options.delay,
                attempt,
                options.retry,
                outcome.error,
            )
            time.sleep(options.delay)
            outcome = self._attempt(method, addr, payload, options)
            if outcome.ok or not outcome.retryable:
                break

        return outcome.unwrap()

    def fetch(self, request: httpx.Request) -> Optional[ResponseBody]:
        """Send one request and classify the response.

        :param request: Prepared request
        :type request: httpx.Request
        :return: Live response body on 2xx, ``None`` for 204/205
        :rtype: Optional[ResponseBody]
        :raises HTTPError: On a non-2xx response
        :raises httpx.RequestError: On a transport failure
        """
        response = self._client.send(request, stream=True)
        code = response.status_code
        if 200 <= code < 300:
            if code in _NO_CONTENT:
                response.close()
                return None
            return ResponseBody(response)
        raise HTTPError(code, read_snippet(response, SNIPPET_LIMIT))

    def _attempt(
        self, method: str, addr: str, payload: RequestBody, options: RequestOptions
    ) -> Outcome:
        request = self._build_request(method, addr, payload, options)
        logger.debug("Sending %s %s", method, request.url)
        try:
            return Outcome.success(self.fetch(request))
        except HTTPError as e:
            return Outcome.http_error(e)
        except httpx.RequestError as e:
            return Outcome.transport_error(e)

    def _build_request(
        self, method: str, addr: str, payload: RequestBody, options: RequestOptions
    ) -> httpx.Request:
        headers = options.header_items()
        if options.host:
            headers.append(("Host", options.host))
        try:
            return self._client.build_request(
                method,
                addr,
                content=payload.content(),
                headers=headers,
                timeout=options.timeout,
            )
        except httpx.InvalidURL as e:
            raise ParseError(f"invalid address {addr!r}: {e}", addr=addr) from e
