"""Shared fixtures for proxy tests."""

import httpx
import pytest

from core.config import Config, IdentitySettings, LoggingSettings, UpstreamSettings

UPSTREAM_URL = "https://api.example.com/v1/openai"


class RecordingLogger:
    """RequestLogger that keeps every call for assertions."""

    def __init__(self):
        self.forwarded: list[tuple[str, str, httpx.Headers, str]] = []
        self.health: list[tuple[str, str]] = []
        self.errors: list[tuple[str, int, str]] = []
        self.rejections: list[tuple[int, str, str]] = []

    def log_forward(self, method, path, headers, *, target_url):
        self.forwarded.append((method, path, headers, target_url))

    def log_health(self, method, path):
        self.health.append((method, path))

    def log_error(self, route, status, message):
        self.errors.append((route, status, message))

    def log_rejection(self, status, path, credential):
        self.rejections.append((status, path, credential))


async def stream_chunks(body: bytes, chunk_size: int = 8):
    for start in range(0, len(body), chunk_size):
        yield body[start : start + chunk_size]


class UpstreamRecorder:
    """MockTransport handler that records requests and returns a fixed reply.

    ``response`` is a template: each call replies with a fresh response whose
    body arrives as an unread stream, the way a network transport delivers it.
    """

    def __init__(self, response: httpx.Response | Exception | None = None):
        self.requests: list[httpx.Request] = []
        self.bodies: list[bytes] = []
        self.response = response or httpx.Response(200, json={"ok": True})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.bodies.append(request.content)
        if isinstance(self.response, Exception):
            raise self.response
        return httpx.Response(
            self.response.status_code,
            headers=self.response.headers,
            content=stream_chunks(self.response.content),
        )


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def config(tmp_path):
    return Config(
        upstream=UpstreamSettings(base_url=UPSTREAM_URL, api_key="sk-test-1234567890"),
        identity=IdentitySettings(cidr="32.250.0.0/14"),
        logging=LoggingSettings(log_dir=tmp_path / "logs", dashboard=False),
    )
