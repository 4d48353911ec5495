"""Configuration for the underlying HTTP transport.

This module defines the transport defaults used when a :class:`Client`
builds its own ``httpx.Client``. The defaults favour short-lived,
uncompressed connections and skip TLS verification; callers that talk
to public endpoints should opt back into verification with
``ClientConfig(verify=True)``.
"""

from pydantic import BaseModel, ConfigDict, Field


class ClientConfig(BaseModel):
    """Transport settings for a netool client.

    :param verify: Verify TLS certificates
    :type verify: bool
    :param keep_alive: Reuse connections between requests
    :type keep_alive: bool
    :param compression: Advertise gzip/deflate content encodings
    :type compression: bool
    :param max_idle_conns: Idle connections kept in the pool
    :type max_idle_conns: int
    :param max_conns_per_host: Upper bound on open connections
    :type max_conns_per_host: int
    :param max_idle_conns_per_host: Idle connections kept per host
    :type max_idle_conns_per_host: int
    :param follow_redirects: Follow 3xx redirects
    :type follow_redirects: bool
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    verify: bool = Field(False, description="Verify TLS certificates")
    keep_alive: bool = Field(False, description="Reuse connections")
    compression: bool = Field(
        False, description="Advertise gzip/deflate response compression"
    )
    max_idle_conns: int = Field(10, ge=0, description="Idle pool size")
    max_conns_per_host: int = Field(10, ge=1, description="Connection cap")
    max_idle_conns_per_host: int = Field(
        10, ge=0, description="Idle connections kept per host"
    )
    follow_redirects: bool = Field(True, description="Follow redirects")
