"""Structured exception classes for netool."""

import json
from typing import Any, Dict, Optional

SNIPPET_LIMIT = 1024


class NetoolError(Exception):
    """Base exception for all netool errors.

    Failures a caller can act on all derive from this class: malformed
    addresses (:class:`ParseError`), request payloads that cannot be
    encoded (:class:`SerializationError`), response bodies that cannot
    be decoded (:class:`DeserializationError`) and non-2xx responses
    (:class:`HTTPError`). Transport failures are not wrapped; they
    surface as httpx's own ``httpx.RequestError`` subclasses.

    :param message: Human-readable error message
    :param code: Optional error code for programmatic handling
    :param details: Optional dictionary containing additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the exception with message, code, and details."""
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format.

        :return: Dictionary containing error code, message, and details
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        """Convert exception to JSON string.

        :return: JSON-encoded string representation of the exception
        """
        return json.dumps(self.to_dict())


class ParseError(NetoolError, ValueError):
    """Raised when a request address or its query string is malformed.

    :param message: Description of the parse failure
    :param addr: Optional address that failed to parse
    """

    def __init__(self, message: str, addr: Optional[str] = None):
        """Initialize parse error with message and optional address."""
        details = {}
        if addr:
            details["addr"] = addr
        super().__init__(message=message, code="PARSE_ERROR", details=details)
        self.addr = addr


class SerializationError(NetoolError, TypeError):
    """Raised when a request payload cannot be encoded as JSON."""

    def __init__(self, message: str):
        super().__init__(message=message, code="SERIALIZATION_ERROR")


class DeserializationError(NetoolError, ValueError):
    """Raised when a response body cannot be decoded as JSON.

    Also covers validation failures when the decoded value is checked
    against a caller supplied model.
    """

    def __init__(self, message: str):
        super().__init__(message=message, code="DESERIALIZATION_ERROR")


class HTTPError(NetoolError):
    """Raised when a response status falls outside the 2xx range.

    Only a snippet of the response body is kept: at most the first
    1024 bytes, which is enough for diagnostics without holding the
    full payload.

    :param status_code: HTTP status code of the response
    :param body: Raw leading bytes of the response body
    """

    def __init__(self, status_code: int, body: bytes = b""):
        """Initialize HTTP error from status code and body snippet."""
        body = body[:SNIPPET_LIMIT]
        text = body.decode("utf-8", errors="replace")
        super().__init__(
            message=f"http response status {status_code}, message is: {text}",
            code="HTTP_ERROR",
            details={"status_code": status_code, "text": text},
        )
        self.status_code = status_code
        self.text = text
        self.body = body

    @property
    def is_server_error(self) -> bool:
        """Whether the status is 5xx, the only retryable HTTP failure.

        :return: True if the status code is 500 or above
        :rtype: bool
        """
        return self.status_code >= 500
