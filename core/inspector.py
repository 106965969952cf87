"""Upstream response inspection."""

import httpx
from fastapi import Response

from core.credentials import ApiKey
from core.protocols import RequestLogger

# Upstream statuses that mean the attached key was refused.
REJECTED_KEY_STATUSES = frozenset({403, 422})


class ResponseInspector:
    """Observe credential rejections; never alters the response."""

    def __init__(self, logger: RequestLogger) -> None:
        self._logger = logger

    async def on_response(
        self,
        response: httpx.Response,
        credential: ApiKey,
    ) -> Response | None:
        if response.status_code in REJECTED_KEY_STATUSES:
            self._logger.log_rejection(
                response.status_code,
                response.request.url.path,
                credential.label,
            )
        return None
