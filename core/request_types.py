"""Shared request data types."""

from collections.abc import AsyncIterator
from dataclasses import dataclass

import httpx

from core.credentials import ApiKey


@dataclass(frozen=True)
class InboundRequest:
    """A client request as received by the listener.

    ``path`` is percent-decoded; ``raw_path`` is the path as sent on the wire
    (empty when unknown).
    """

    method: str
    path: str
    query: str
    headers: httpx.Headers
    body: AsyncIterator[bytes] | None
    raw_path: str = ""


@dataclass(frozen=True)
class OutboundRequest:
    """Prepared data for an upstream request."""

    method: str
    url: str
    headers: httpx.Headers
    body: AsyncIterator[bytes] | None
    credential: ApiKey
