"""Header construction for upstream requests and relayed responses."""

import httpx

from core.credentials import ApiKey

# Headers that leak the original client or the fronting infrastructure.
STRIPPED_HEADERS: tuple[str, ...] = (
    "Cf-Connecting-Ip",
    "Cf-Ipcountry",
    "Cf-Visitor",
    "X-Forwarded-Proto",
    "X-Real-Ip",
    "X-Forwarded-For",
    "X-Forwarded-Port",
    "X-Stainless-Arch",
    "X-Stainless-Package-Version",
    "X-Stainless-Runtime",
    "X-Stainless-Lang",
    "X-Direct-Url",
    "X-Middleware-Subrequest",
)

HOP_BY_HOP_HEADERS: tuple[str, ...] = (
    "Connection",
    "Keep-Alive",
    "Proxy-Connection",
    "Proxy-Authenticate",
    "Proxy-Authorization",
    "TE",
    "Trailer",
    "Transfer-Encoding",
    "Upgrade",
)


def drop_hop_by_hop(headers: httpx.Headers) -> None:
    """Remove hop-by-hop headers in place, including any named by Connection."""
    for value in headers.get_list("Connection", split_commas=True):
        headers.pop(value.strip(), None)
    for name in HOP_BY_HOP_HEADERS:
        headers.pop(name, None)


class HeaderBuilder:
    """Build upstream headers from an inbound header set."""

    def build_upstream_headers(
        self,
        inbound: httpx.Headers,
        *,
        host: str,
        credential: ApiKey,
        user_agent: str,
        real_ip: str | None,
    ) -> httpx.Headers:
        """Return a new header set; ``inbound`` is left untouched."""
        headers = httpx.Headers(inbound.multi_items())
        drop_hop_by_hop(headers)
        for name in STRIPPED_HEADERS:
            headers.pop(name, None)

        headers["Host"] = host
        headers["Authorization"] = credential.bearer
        headers["User-Agent"] = user_agent
        if real_ip is not None:
            headers["X-Real-IP"] = real_ip
        if "Accept-Encoding" not in headers:
            # Body is relayed raw; don't let the client library negotiate gzip.
            headers["Accept-Encoding"] = "identity"
        return headers

    def build_response_headers(self, upstream: httpx.Headers) -> list[tuple[bytes, bytes]]:
        """Raw header list for relaying an upstream response."""
        headers = httpx.Headers(upstream.multi_items())
        drop_hop_by_hop(headers)
        return headers.raw
