"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from starlette.routing import Route

from api.handlers import ProxyEndpoint
from core.config import Config
from core.credentials import StaticCredentialProvider
from core.identity import IdentityGenerator
from core.inspector import ResponseInspector
from core.protocols import CredentialProvider, RequestLogger, ResponseHook
from core.rewriter import RequestRewriter
from services.upstream import UpstreamClient


def create_app(
    config: Config,
    logger: RequestLogger,
    *,
    identity: IdentityGenerator | None = None,
    credentials: CredentialProvider | None = None,
    response_hook: ResponseHook | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    target = config.upstream_target()
    identity = identity or IdentityGenerator()
    credentials = credentials or StaticCredentialProvider(config.upstream.api_key)
    response_hook = response_hook or ResponseInspector(logger)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = config.limits
        client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=limits.connect_timeout,
                read=limits.read_timeout,
                write=limits.write_timeout,
                pool=limits.connect_timeout,
            ),
            limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            transport=transport,
        )
        app.state.upstream_client = UpstreamClient(client, response_hook, logger)
        app.state.rewriter = RequestRewriter(
            target,
            identity,
            config.identity.cidr,
            logger,
            inject_real_ip=config.identity.inject_real_ip,
        )
        try:
            yield
        finally:
            await client.aclose()

    # No docs routes: every non-/v1 path must reach the health handler.
    app = FastAPI(
        title="OpenAI Stealth Proxy",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # An ASGI endpoint (not a function) gets no method filter: every verb is proxied.
    app.router.routes.append(
        Route("/{path:path}", ProxyEndpoint(logger, credentials), include_in_schema=False)
    )

    return app
