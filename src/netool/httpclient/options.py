"""Per-call request options.

Options are plain callables that mutate a :class:`RequestOptions`
instance. They are folded left to right, so a later option overwrites an
earlier one for the same field. Headers are the exception: every
:func:`with_header` call appends another value.

Examples:
    >>> opts = RequestOptions.resolve(with_retry(2), with_header("X-Id", "1"))
    >>> opts.retry, opts.delay, opts.timeout
    (2, 1.0, 5.0)
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, Dict, List, Union

DEFAULT_TIMEOUT = 5.0
DEFAULT_RETRY_DELAY = 1.0

Duration = Union[float, int, timedelta]


def canonical_header_key(key: str) -> str:
    """Normalise a header name to ``Title-Case`` form.

    :param key: Header name in any case
    :type key: str
    :return: Canonical header name, e.g. ``x-trace-id`` -> ``X-Trace-Id``
    :rtype: str
    """
    return "-".join(part[:1].upper() + part[1:].lower() for part in key.split("-"))


def to_seconds(duration: Duration) -> float:
    """Convert a duration to seconds.

    :param duration: Seconds as a number, or a ``timedelta``
    :type duration: Duration
    :return: Duration in seconds
    :rtype: float
    """
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    return float(duration)


@dataclass
class RequestOptions:
    """Resolved configuration for a single call.

    :param header: Header name to ordered list of values
    :param timeout: Call timeout in seconds, non-positive means unset
    :param retry: Additional attempts after the first one
    :param delay: Seconds to sleep between attempts
    :param host: Value for the ``Host`` header, empty keeps the URL host
    """

    header: Dict[str, List[str]] = field(default_factory=dict)
    timeout: float = 0.0
    retry: int = 0
    delay: float = 0.0
    host: str = ""

    @classmethod
    def resolve(cls, *opts: "Option") -> "RequestOptions":
        """Fold options over a zero value and fill in defaults.

        :param opts: Options applied in call order
        :return: Options with timeout and delay defaults applied
        :rtype: RequestOptions
        """
        resolved = cls()
        for opt in opts:
            opt(resolved)
        if resolved.timeout <= 0:
            resolved.timeout = DEFAULT_TIMEOUT
        if resolved.retry < 0:
            resolved.retry = 0
        if resolved.retry > 0 and resolved.delay <= 0:
            resolved.delay = DEFAULT_RETRY_DELAY
        return resolved

    def header_items(self) -> List[tuple]:
        """Flatten the header multimap into ``(name, value)`` pairs."""
        return [(key, value) for key, values in self.header.items() for value in values]


Option = Callable[[RequestOptions], None]


def with_header(key: str, value: str) -> Option:
    """Append ``value`` to the values sent for header ``key``."""

    def apply(opts: RequestOptions) -> None:
        opts.header.setdefault(canonical_header_key(key), []).append(value)

    return apply


def with_timeout(timeout: Duration) -> Option:
    """Set the call timeout. Non-positive values fall back to the default."""

    def apply(opts: RequestOptions) -> None:
        opts.timeout = to_seconds(timeout)

    return apply


def with_retry(n: int) -> Option:
    """Set the number of attempts made after the first one fails."""

    def apply(opts: RequestOptions) -> None:
        opts.retry = n

    return apply


def with_delay(delay: Duration) -> Option:
    """Set the sleep between attempts."""

    def apply(opts: RequestOptions) -> None:
        opts.delay = to_seconds(delay)

    return apply


def with_host(host: str) -> Option:
    """Override the ``Host`` header without changing the connection target.

    Useful for reaching a server by IP address while presenting a
    virtual host name.
    """

    def apply(opts: RequestOptions) -> None:
        opts.host = host

    return apply
