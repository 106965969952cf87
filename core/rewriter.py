"""Inbound to outbound request rewriting."""

from urllib.parse import quote, unquote

from core.config import UpstreamTarget
from core.credentials import ApiKey
from core.exceptions import CIDRError
from core.headers import HeaderBuilder
from core.identity import IdentityGenerator
from core.protocols import RequestLogger
from core.request_types import InboundRequest, OutboundRequest

API_PREFIX = "/v1"

# RFC 3986 pchar plus "/"; everything else in a decoded path is re-escaped.
PATH_SAFE = "/:@!$&'()*+,;=-._~"


def is_api_path(path: str) -> bool:
    """Whether ``path`` is forwarded upstream (everything else is a health check)."""
    return path.startswith(API_PREFIX)


def escaped_path(inbound: InboundRequest) -> str:
    """The inbound path with its percent-escapes intact.

    The wire form is used when it agrees with the decoded path; otherwise the
    decoded path is re-escaped so "%3F" or "%23" never turn into "?" or "#".
    """
    raw = inbound.raw_path
    if raw and is_api_path(raw) and unquote(raw) == inbound.path:
        return raw
    return quote(inbound.path, safe=PATH_SAFE)


class RequestRewriter:
    """Turn an inbound client request into the request sent upstream.

    The ``/v1`` prefix is stripped once and the remainder appended to the
    upstream base path. Scheme and host come from the target regardless of
    what the client sent. Identifying headers are stripped, then a synthetic
    User-Agent and X-Real-IP plus the credential are injected.
    """

    def __init__(
        self,
        target: UpstreamTarget,
        identity: IdentityGenerator,
        cidr: str,
        logger: RequestLogger,
        *,
        inject_real_ip: bool = True,
        header_builder: HeaderBuilder | None = None,
    ) -> None:
        self._target = target
        self._identity = identity
        self._cidr = cidr
        self._logger = logger
        self._inject_real_ip = inject_real_ip
        self._headers = header_builder or HeaderBuilder()

    def rewrite(self, inbound: InboundRequest, credential: ApiKey) -> OutboundRequest:
        if not is_api_path(inbound.path):
            raise ValueError(f"Not an API path: {inbound.path!r}")

        headers = self._headers.build_upstream_headers(
            inbound.headers,
            host=self._target.host,
            credential=credential,
            user_agent=self._identity.pick_user_agent(),
            real_ip=self._synthetic_address(),
        )
        return OutboundRequest(
            method=inbound.method,
            url=self.upstream_url(escaped_path(inbound), inbound.query),
            headers=headers,
            body=inbound.body,
            credential=credential,
        )

    def upstream_url(self, path: str, query: str = "") -> str:
        """Map an escaped inbound /v1 path (and raw query) onto the upstream."""
        upstream_path = self._target.base_path + path.replace(API_PREFIX, "", 1)
        url = f"{self._target.origin}{upstream_path}"
        if query:
            url += f"?{query}"
        return url

    def _synthetic_address(self) -> str | None:
        if not self._inject_real_ip:
            return None
        try:
            return self._identity.pick_random_address(self._cidr)
        except CIDRError as e:
            self._logger.log_error("identity", 0, f"X-Real-IP not set: {e}")
            return None
