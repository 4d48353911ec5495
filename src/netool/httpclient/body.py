"""Request and response body handling.

:class:`RequestBody` makes sure every attempt of a retried call sends
the same bytes. :class:`ResponseBody` wraps a streamed
``httpx.Response`` and gives the caller a small file-like interface
over it. The caller owns a returned :class:`ResponseBody` and must
close it, or use it as a context manager.
"""

import io
import json
from typing import Any, Iterator, Optional

import httpx


class RequestBody:
    """A request body that can be sent more than once.

    Accepted sources:

    - ``bytes``, ``bytearray`` and ``str`` are sent as is on every attempt.
    - Text streams are read once and encoded as UTF-8.
    - Seekable binary file objects are rewound to their starting position
      before each attempt.
    - Non-seekable streams and byte iterators are streamed through when
      the call will not be retried, and buffered in memory once when it
      may be.

    :param source: Body source, or ``None`` for no body
    :param replay: Whether the body may be sent more than once
    """

    def __init__(self, source: Any = None, replay: bool = False):
        self._start: Optional[int] = None
        if isinstance(source, str):
            source = source.encode("utf-8")
        elif isinstance(source, bytearray):
            source = bytes(source)
        elif isinstance(source, io.TextIOBase):
            source = source.read().encode("utf-8")
        elif source is not None and not isinstance(source, bytes):
            if _is_seekable(source):
                self._start = source.tell()
            elif replay:
                source = _drain(source)
        self._source = source

    def content(self) -> Any:
        """Return the body to hand to httpx for the next attempt."""
        if self._start is not None:
            self._source.seek(self._start)
            if self._start:
                # httpx sizes file bodies from offset 0
                return _iter_file(self._source)
        return self._source


def _is_seekable(source: Any) -> bool:
    seekable = getattr(source, "seekable", None)
    if seekable is None or not hasattr(source, "tell"):
        return False
    return bool(seekable())


def _iter_file(source: Any, chunk_size: int = 65536) -> Iterator[bytes]:
    while True:
        chunk = source.read(chunk_size)
        if not chunk:
            return
        yield chunk


def _drain(source: Any) -> bytes:
    if hasattr(source, "read"):
        data = source.read()
        return data.encode("utf-8") if isinstance(data, str) else data
    return b"".join(source)


def read_snippet(response: httpx.Response, limit: int) -> bytes:
    """Read at most ``limit`` bytes of a streamed response and close it.

    :param response: Streamed response, not yet read
    :type response: httpx.Response
    :param limit: Maximum number of bytes to keep
    :type limit: int
    :return: Leading bytes of the body
    :rtype: bytes
    """
    buf = bytearray()
    try:
        for chunk in response.iter_bytes():
            buf.extend(chunk)
            if len(buf) >= limit:
                break
    finally:
        response.close()
    return bytes(buf[:limit])


class ResponseBody:
    """Live body of a successful response.

    This class wraps an ``httpx.Response`` opened in streaming mode. The
    body is not read until the caller asks for it, and the underlying
    connection is only released by :meth:`close`.
    """

    def __init__(self, response: httpx.Response):
        """Initialize the wrapper.

        :param response: Streamed response with an unread body
        :type response: httpx.Response
        """
        self.response = response
        self._chunks = response.iter_bytes()
        self._buffer = bytearray()
        self._exhausted = False
        self._closed = False

    @property
    def status_code(self) -> int:
        """Get the HTTP status code of the response.

        :return: HTTP status code
        :rtype: int
        """
        return self.response.status_code

    @property
    def headers(self) -> httpx.Headers:
        """Get the response headers.

        :return: Response headers
        :rtype: httpx.Headers
        """
        return self.response.headers

    @property
    def closed(self) -> bool:
        """Whether the body was closed or fully consumed.

        httpx marks responses built from in-memory content as closed
        before they are read, so the response state alone is not used
        while unread bytes remain.

        :return: True once closed, or once every byte has been read
        :rtype: bool
        """
        if self._closed:
            return True
        return self._exhausted and not self._buffer and self.response.is_closed

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes, or everything left when negative.

        :param size: Number of bytes to read
        :type size: int
        :return: Body bytes, empty at end of stream
        :rtype: bytes
        """
        if size is None or size < 0:
            data = bytes(self._buffer) + b"".join(self._chunks)
            self._buffer.clear()
            self._exhausted = True
            return data
        while len(self._buffer) < size:
            chunk = next(self._chunks, None)
            if chunk is None:
                self._exhausted = True
                break
            self._buffer.extend(chunk)
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data

    def iter_bytes(self) -> Iterator[bytes]:
        """Iterate over the remaining body in chunks."""
        if self._buffer:
            pending = bytes(self._buffer)
            self._buffer.clear()
            yield pending
        yield from self._chunks
        self._exhausted = True

    __iter__ = iter_bytes

    def text(self) -> str:
        """Read the remaining body and decode it as text."""
        return self.read().decode(self.response.encoding or "utf-8", errors="replace")

    def json(self) -> Any:
        """Read the remaining body and parse it as JSON."""
        return json.loads(self.read())

    def close(self) -> None:
        self._closed = True
        self.response.close()

    def __enter__(self) -> "ResponseBody":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<ResponseBody [{self.status_code}]>"
