"""HTTP forwarding to the upstream API with streaming support."""

from collections.abc import AsyncIterator

import httpx
from fastapi import Response
from fastapi.responses import PlainTextResponse, StreamingResponse

from core.exceptions import UpstreamConnectionError, UpstreamError, UpstreamTimeoutError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger, ResponseHook
from core.request_types import OutboundRequest

BAD_GATEWAY_BODY = "Error forwarding request."


class UpstreamClient:
    """Send rewritten requests upstream and relay the response as it arrives."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        hook: ResponseHook,
        logger: RequestLogger,
        header_builder: HeaderBuilder | None = None,
    ) -> None:
        self._client = client
        self._hook = hook
        self._logger = logger
        self._headers = header_builder or HeaderBuilder()

    async def forward(self, outbound: OutboundRequest) -> Response:
        """Forward one request. Transport failures become a generic 502."""
        try:
            response = await self._send(outbound)
        except UpstreamError as e:
            self._logger.log_error("upstream", 502, f"{type(e).__name__}: {e} ({e.url})")
            return PlainTextResponse(BAD_GATEWAY_BODY, status_code=502)

        try:
            replacement = await self._hook.on_response(response, outbound.credential)
        except BaseException:
            await response.aclose()
            raise
        if replacement is not None:
            await response.aclose()
            return replacement

        relayed = StreamingResponse(self._relay(response), status_code=response.status_code)
        relayed.raw_headers = self._headers.build_response_headers(response.headers)
        return relayed

    async def _send(self, outbound: OutboundRequest) -> httpx.Response:
        """Open the upstream response stream, classifying transport errors."""
        req = self._client.build_request(
            outbound.method,
            outbound.url,
            headers=outbound.headers,
            content=outbound.body,
        )
        try:
            return await self._client.send(req, stream=True)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(str(e) or "Upstream timeout", url=outbound.url) from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(str(e) or repr(e), url=outbound.url) from e

    async def _relay(self, response: httpx.Response) -> AsyncIterator[bytes]:
        """Yield the raw upstream body; the upstream response is always closed."""
        try:
            async for chunk in response.aiter_raw():
                yield chunk
        except httpx.RequestError as e:
            self._logger.log_error("upstream", response.status_code, f"Stream interrupted: {e}")
            raise
        finally:
            await response.aclose()
