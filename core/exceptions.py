"""Custom exception hierarchy for the forwarding proxy."""


class ProxyError(Exception):
    """Base exception for all proxy errors."""


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid."""


class CIDRError(ProxyError):
    """Raised when a random address cannot be drawn from a CIDR literal.

    Attributes:
        cidr: The literal that was rejected
    """

    def __init__(self, message: str, cidr: str) -> None:
        super().__init__(message)
        self.cidr = cidr


class InvalidCIDR(CIDRError):
    """The literal is not a network/prefix pair."""


class UnsupportedFamily(CIDRError):
    """The literal parsed, but is not an IPv4 network."""


class UpstreamError(ProxyError):
    """Raised when the upstream round-trip fails at the transport level.

    Attributes:
        message: Error message
        url: Upstream URL that was being requested (optional)
    """

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class UpstreamTimeoutError(UpstreamError):
    """Raised when the upstream request times out."""


class UpstreamConnectionError(UpstreamError):
    """Raised when unable to connect to (or talk to) the upstream."""
