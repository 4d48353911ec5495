"""Attempt outcomes and the retry policy.

Each dispatch produces an :class:`Outcome` tagged with one of three
kinds. The retry decision is a function of the tag alone:

- ``SUCCESS`` is never retried.
- ``HTTP_ERROR`` is retried only for server errors (status >= 500).
  Client errors are assumed to be permanent.
- ``TRANSPORT_ERROR`` (DNS, refused connection, timeout, TLS) is
  always retried.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..exceptions import HTTPError
from .body import ResponseBody


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    HTTP_ERROR = "http_error"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class Outcome:
    """Result of a single attempt.

    :param kind: Classification of the attempt
    :param body: Response body on success, ``None`` for no content
    :param error: Exception raised by the attempt, if any
    """

    kind: OutcomeKind
    body: Optional[ResponseBody] = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, body: Optional[ResponseBody]) -> "Outcome":
        return cls(OutcomeKind.SUCCESS, body=body)

    @classmethod
    def http_error(cls, error: HTTPError) -> "Outcome":
        return cls(OutcomeKind.HTTP_ERROR, error=error)

    @classmethod
    def transport_error(cls, error: BaseException) -> "Outcome":
        return cls(OutcomeKind.TRANSPORT_ERROR, error=error)

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @property
    def retryable(self) -> bool:
        """Whether another attempt may succeed.

        :return: True for transport errors and 5xx responses
        :rtype: bool
        """
        if self.kind is OutcomeKind.SUCCESS:
            return False
        if self.kind is OutcomeKind.HTTP_ERROR:
            return self.error.is_server_error
        return True

    def unwrap(self) -> Optional[ResponseBody]:
        """Return the body on success, raise the recorded error otherwise."""
        if self.error is not None:
            raise self.error
        return self.body


def classify(error: Optional[BaseException]) -> Outcome:
    """Wrap an exception (or its absence) in an :class:`Outcome`."""
    if error is None:
        return Outcome.success(None)
    if isinstance(error, HTTPError):
        return Outcome.http_error(error)
    return Outcome.transport_error(error)


def can_retry(error: Optional[BaseException]) -> bool:
    """Report whether a failed call is worth another attempt.

    :param error: Exception raised by the call, or ``None`` on success
    :type error: Optional[BaseException]
    :return: True if the error is classified as transient
    :rtype: bool
    """
    return classify(error).retryable
