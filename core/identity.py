"""Synthetic client identities: random User-Agent and source address."""

import ipaddress
import random
from collections.abc import Sequence
from dataclasses import dataclass

from core.exceptions import InvalidCIDR, UnsupportedFamily

USER_AGENTS: tuple[str, ...] = (
    # Windows 10/11 + Chrome
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; WOW64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36 Edg/122.0.2365.52",
    "Mozilla/5.0 (Windows NT 11.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    # Windows 10/11 + Firefox
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) Gecko/20100101 Firefox/125.0",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:124.0) Gecko/20100101 Firefox/124.0",
    "Mozilla/5.0 (Windows NT 11.0; Win64; x64; rv:125.0) Gecko/20100101 Firefox/125.0",
    # macOS + Safari
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4.1 Safari/605.1.15",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.3.1 Safari/605.1.15",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_4_1) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4.1 Safari/605.1.15",
    # macOS + Chrome
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Arm Mac OS X 14_4_1) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    # Android + Chrome
    "Mozilla/5.0 (Linux; Android 14; Pixel 8 Pro) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Mobile Safari/537.36",
    "Mozilla/5.0 (Linux; Android 13; SM-S908B) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/112.0.0.0 Mobile Safari/537.36",
    "Mozilla/5.0 (Linux; Android 12; SM-G991U) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Mobile Safari/537.36",
    "Mozilla/5.0 (Linux; Android 11; Pixel 5) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/90.0.4430.91 Mobile Safari/537.36",
    "Mozilla/5.0 (Linux; Android 10; K) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Mobile Safari/537.36",
    # iOS + Safari
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4_1 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4.1 Mobile/15E148 Safari/604.1",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_3_1 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.3.1 Mobile/15E148 Safari/604.1",
    "Mozilla/5.0 (iPad; CPU OS 17_4_1 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4.1 Mobile/15E148 Safari/604.1",
    "Mozilla/5.0 (iPod touch; CPU iPhone OS 14_7_1 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/14.1.2 Mobile/15E148 Safari/604.1",
    # iOS + Chrome
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) CriOS/124.0.6367.88 Mobile/15E148 Safari/604.1",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 16_6 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) CriOS/117.0.5938.108 Mobile/15E148 Safari/604.1",
    "Mozilla/5.0 (iPad; CPU OS 17_4 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) CriOS/124.0.6367.88 Mobile/15E148 Safari/604.1",
)


@dataclass(frozen=True)
class CIDRBlock:
    """An IPv4 block; network_address always has its host bits zeroed."""

    network_address: int
    prefix_length: int

    @classmethod
    def parse(cls, cidr: str) -> "CIDRBlock":
        """Parse a network/prefix literal such as ``32.250.0.0/14``.

        Host bits in the literal are allowed and cleared.

        Raises:
            InvalidCIDR: the literal is not a network/prefix pair
            UnsupportedFamily: the literal is an IPv6 network
        """
        if "/" not in cidr:
            raise InvalidCIDR(f"Invalid CIDR literal: {cidr!r}", cidr)
        try:
            network = ipaddress.ip_network(cidr.strip(), strict=False)
        except ValueError as e:
            raise InvalidCIDR(f"Invalid CIDR literal: {cidr!r} ({e})", cidr) from e
        if network.version != 4:
            raise UnsupportedFamily(f"Only IPv4 CIDR blocks are supported: {cidr!r}", cidr)
        return cls(int(network.network_address), network.prefixlen)

    @property
    def num_hosts(self) -> int:
        return 1 << (32 - self.prefix_length)

    def address_at(self, offset: int) -> str:
        """Render network_address + offset as a dotted quad."""
        return str(ipaddress.IPv4Address(self.network_address + offset))


class IdentityGenerator:
    """Produce randomized User-Agent strings and source addresses.

    A single ``random.SystemRandom`` is shared by every call. It draws from
    the OS entropy pool, so concurrent requests never see correlated
    sequences and no reseeding is needed.
    """

    def __init__(
        self,
        user_agents: Sequence[str] = USER_AGENTS,
        rng: random.Random | None = None,
    ) -> None:
        self._user_agents = tuple(user_agents)
        if not self._user_agents:
            raise ValueError("User-Agent corpus must not be empty")
        self._random = rng or random.SystemRandom()

    @property
    def user_agents(self) -> tuple[str, ...]:
        return self._user_agents

    def pick_user_agent(self) -> str:
        """Return one corpus entry, chosen uniformly."""
        return self._random.choice(self._user_agents)

    def pick_random_address(self, cidr: str) -> str:
        """Return a random IPv4 address inside ``cidr``.

        The network and broadcast addresses are part of the drawable range.
        A /32 block always yields its single address.
        """
        block = CIDRBlock.parse(cidr)
        if block.prefix_length == 32:
            return block.address_at(0)
        return block.address_at(self._random.randrange(block.num_hosts))
