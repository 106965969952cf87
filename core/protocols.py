"""Shared protocol definitions."""

from typing import Protocol

import httpx
from fastapi import Response

from core.credentials import ApiKey


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard, HeadlessLogger)."""

    def log_forward(
        self,
        method: str,
        path: str,
        headers: httpx.Headers,
        *,
        target_url: str,
    ) -> None: ...
    def log_health(self, method: str, path: str) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...
    def log_rejection(self, status: int, path: str, credential: str) -> None: ...


class CredentialProvider(Protocol):
    """Source of the credential attached to each upstream request."""

    def current(self) -> ApiKey: ...


class ResponseHook(Protocol):
    """Inspect an upstream response before it is relayed.

    Returning ``None`` relays the upstream response unchanged; returning a
    Response relays that instead.
    """

    async def on_response(
        self,
        response: httpx.Response,
        credential: ApiKey,
    ) -> Response | None: ...
