"""Unit tests for per-call request options."""

from datetime import timedelta

from netool.httpclient.options import (
    DEFAULT_RETRY_DELAY,
    DEFAULT_TIMEOUT,
    RequestOptions,
    canonical_header_key,
    with_delay,
    with_header,
    with_host,
    with_retry,
    with_timeout,
)


def test_headers_accumulate():
    opts = RequestOptions.resolve(with_header("X", "1"), with_header("X", "2"))
    assert opts.header == {"X": ["1", "2"]}


def test_header_keys_are_canonical():
    opts = RequestOptions.resolve(
        with_header("x-trace-id", "a"), with_header("X-TRACE-ID", "b")
    )
    assert opts.header == {"X-Trace-Id": ["a", "b"]}
    assert opts.header_items() == [("X-Trace-Id", "a"), ("X-Trace-Id", "b")]


def test_canonical_header_key():
    assert canonical_header_key("content-type") == "Content-Type"
    assert canonical_header_key("ACCEPT") == "Accept"


def test_defaults_without_options():
    opts = RequestOptions.resolve()
    assert opts.timeout == DEFAULT_TIMEOUT == 5.0
    assert opts.retry == 0
    assert opts.delay == 0.0
    assert opts.host == ""
    assert opts.header == {}


def test_non_positive_timeout_uses_default():
    assert RequestOptions.resolve(with_timeout(0)).timeout == DEFAULT_TIMEOUT
    assert RequestOptions.resolve(with_timeout(-3)).timeout == DEFAULT_TIMEOUT


def test_retry_without_delay_uses_default_delay():
    opts = RequestOptions.resolve(with_retry(2))
    assert opts.retry == 2
    assert opts.delay == DEFAULT_RETRY_DELAY == 1.0


def test_explicit_delay_is_kept():
    opts = RequestOptions.resolve(with_retry(1), with_delay(0.25))
    assert opts.delay == 0.25


def test_negative_retry_resolves_to_zero():
    opts = RequestOptions.resolve(with_retry(-1))
    assert opts.retry == 0
    assert opts.delay == 0.0


def test_timedelta_durations():
    opts = RequestOptions.resolve(
        with_timeout(timedelta(seconds=30)),
        with_retry(1),
        with_delay(timedelta(milliseconds=500)),
    )
    assert opts.timeout == 30.0
    assert opts.delay == 0.5


def test_later_options_overwrite_earlier():
    opts = RequestOptions.resolve(
        with_timeout(1),
        with_timeout(2),
        with_host("a.example"),
        with_host("b.example"),
        with_retry(5),
        with_retry(1),
    )
    assert opts.timeout == 2.0
    assert opts.host == "b.example"
    assert opts.retry == 1
