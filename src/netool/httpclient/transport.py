"""Construction of the underlying httpx client.

This module turns a :class:`~netool.config.ClientConfig` into a
configured ``httpx.Client``. The default configuration opens a fresh
connection per request, asks servers for uncompressed bodies and does
not verify TLS certificates.
"""

import logging
from typing import Optional

import httpx

from ..config.settings import ClientConfig

logger = logging.getLogger(__name__)


def create_limits(config: Optional[ClientConfig] = None) -> httpx.Limits:
    """Create a connection limits configuration object.

    httpx has no separate per-host cap, so ``max_conns_per_host`` bounds
    the whole pool. With keep-alive disabled no connection is kept idle.

    :param config: Transport configuration, defaults when omitted
    :type config: Optional[ClientConfig]
    :return: Configured limits object
    :rtype: httpx.Limits
    """
    config = config or ClientConfig()
    idle = 0
    if config.keep_alive:
        idle = min(config.max_idle_conns, config.max_idle_conns_per_host)
    return httpx.Limits(
        max_keepalive_connections=idle,
        max_connections=config.max_conns_per_host,
    )


def default_headers(config: ClientConfig) -> dict:
    """Build the client-wide headers implied by a configuration.

    :param config: Transport configuration
    :type config: ClientConfig
    :return: ``Accept-Encoding`` and ``Connection`` overrides
    :rtype: dict
    """
    headers = {}
    if not config.compression:
        headers["Accept-Encoding"] = "identity"
    if not config.keep_alive:
        headers["Connection"] = "close"
    return headers


def create_http_client(config: Optional[ClientConfig] = None) -> httpx.Client:
    """Build an ``httpx.Client`` from a transport configuration.

    Per-call timeouts are attached to each request, so the client
    itself carries no timeout.

    :param config: Transport configuration, defaults when omitted
    :type config: Optional[ClientConfig]
    :return: Configured HTTP client instance
    :rtype: httpx.Client
    """
    config = config or ClientConfig()
    client = httpx.Client(
        verify=config.verify,
        limits=create_limits(config),
        headers=default_headers(config),
        follow_redirects=config.follow_redirects,
        timeout=None,
    )
    logger.debug(
        "Created HTTP client (verify=%s, keep_alive=%s, compression=%s)",
        config.verify,
        config.keep_alive,
        config.compression,
    )
    return client
