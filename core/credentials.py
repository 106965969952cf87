"""Upstream credential slot."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ApiKey:
    """Credential attached to an upstream request; ``value`` may be unset."""

    value: str | None = None

    @property
    def bearer(self) -> str:
        return f"Bearer {self.value or ''}"

    @property
    def label(self) -> str:
        """Masked form that is safe to log."""
        if not self.value:
            return "<none>"
        if len(self.value) <= 10:
            return "***"
        return self.value[:4] + "..." + self.value[-4:]


class StaticCredentialProvider:
    """Serve the single configured key for every request."""

    def __init__(self, api_key: str | None = None) -> None:
        self._key = ApiKey(api_key)

    def current(self) -> ApiKey:
        return self._key
