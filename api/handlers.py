"""FastAPI route handlers."""

import httpx
from fastapi import Request, Response
from fastapi.responses import PlainTextResponse
from starlette.types import Receive, Scope, Send

from core.protocols import CredentialProvider, RequestLogger
from core.request_types import InboundRequest
from core.rewriter import RequestRewriter, is_api_path
from services.upstream import UpstreamClient


def request_path(request: Request) -> str:
    """Decoded path taken from the scope; request.url would re-split a decoded "?"."""
    return request.scope["path"]


def build_inbound(request: Request) -> InboundRequest:
    """Capture a Starlette request without reading its body."""
    headers = httpx.Headers(request.headers.raw)
    has_body = "content-length" in headers or "transfer-encoding" in headers
    raw_path = request.scope.get("raw_path") or b""
    return InboundRequest(
        method=request.method,
        path=request_path(request),
        query=request.scope.get("query_string", b"").decode("latin-1"),
        headers=headers,
        body=request.stream() if has_body else None,
        raw_path=raw_path.split(b"?", 1)[0].decode("latin-1"),
    )


async def handle_health(request: Request, logger: RequestLogger) -> Response:
    """Answer any non-API path without contacting the upstream."""
    logger.log_health(request.method, request_path(request))
    return PlainTextResponse("OK", status_code=200)


async def handle_proxy(
    request: Request,
    logger: RequestLogger,
    credentials: CredentialProvider,
) -> Response:
    """Handle every request: health short-circuit, else rewrite and forward."""
    if not is_api_path(request_path(request)):
        return await handle_health(request, logger)

    rewriter: RequestRewriter = request.app.state.rewriter
    upstream: UpstreamClient = request.app.state.upstream_client

    inbound = build_inbound(request)
    outbound = rewriter.rewrite(inbound, credentials.current())
    logger.log_forward(inbound.method, inbound.path, outbound.headers, target_url=outbound.url)
    return await upstream.forward(outbound)


class ProxyEndpoint:
    """Raw ASGI endpoint serving every path and method."""

    def __init__(self, logger: RequestLogger, credentials: CredentialProvider) -> None:
        self._logger = logger
        self._credentials = credentials

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive, send)
        response = await handle_proxy(request, self._logger, self._credentials)
        await response(scope, receive, send)
