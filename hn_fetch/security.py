"""Request-forgery guard for outbound content fetches."""

from __future__ import annotations

import asyncio
import ipaddress
import logging
import socket
from collections.abc import Awaitable, Callable
from typing import Optional
from urllib.parse import urlsplit

from hn_fetch.errors import FetchError, SecurityError

logger = logging.getLogger(__name__)

Resolver = Callable[[str], Awaitable[list[str]]]

ALLOWED_SCHEMES = frozenset({"http", "https"})
BLOCKED_HOSTNAMES = frozenset({"localhost", "localhost.localdomain", "ip6-localhost"})


async def resolve_host(host: str) -> list[str]:
    """Resolve a hostname to every address the system resolver returns."""
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(host, None, proto=socket.IPPROTO_TCP)
    return [str(info[4][0]) for info in infos]


def is_public_address(address: str) -> bool:
    """
    True only for globally routable unicast addresses.

    IPv4-mapped and 6to4/Teredo-wrapped IPv6 addresses are judged by the IPv4
    address they carry.
    """
    try:
        ip = ipaddress.ip_address(address.split("%", 1)[0])
    except ValueError:
        return False
    if isinstance(ip, ipaddress.IPv6Address):
        embedded = ip.ipv4_mapped or ip.sixtofour or (ip.teredo[1] if ip.teredo else None)
        if embedded is not None:
            return is_public_address(str(embedded))
    return not (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_multicast
        or ip.is_reserved
        or ip.is_unspecified
        or not ip.is_global
    )


def _literal_address(host: str) -> Optional[str]:
    try:
        return str(ipaddress.ip_address(host))
    except ValueError:
        return None


async def check_url(url: str, resolver: Optional[Resolver] = None) -> str:
    """
    Refuse URLs that could reach the local machine or internal network.

    Raises SecurityError when the scheme is not http(s) or when the host, or
    any address it resolves to, is not public. A host that cannot be resolved
    raises FetchError.

    Returns the vetted address. Callers connect to it instead of resolving
    the host again, so a later DNS answer cannot redirect the request.
    """
    try:
        parts = urlsplit(url)
        host = (parts.hostname or "").rstrip(".")
    except ValueError as e:
        raise SecurityError(f"Refusing to fetch malformed URL {url}: {e}") from e

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise SecurityError(
            f"Refusing to fetch {url}: only http and https URLs are allowed"
        )
    if not host:
        raise SecurityError(f"Refusing to fetch {url}: URL has no host")

    if host in BLOCKED_HOSTNAMES or host.endswith(".localhost"):
        raise SecurityError(_blocked_message(url, host))

    literal = _literal_address(host)
    if literal is not None:
        addresses = [literal]
    else:
        try:
            addresses = await (resolver or resolve_host)(host)
        except (OSError, UnicodeError) as e:
            raise FetchError(f"Failed to fetch {url}: could not resolve {host}") from e
        if not addresses:
            raise FetchError(f"Failed to fetch {url}: could not resolve {host}")

    for address in addresses:
        if not is_public_address(address):
            logger.warning(f"Blocked fetch of {url}: {host} resolves to {address}")
            raise SecurityError(_blocked_message(url, address))
    return addresses[0]


def _blocked_message(url: str, address: str) -> str:
    return (
        f"Blocked an attempt to fetch {url}: {address} is a private or local "
        "network address. Fetching internal addresses is not allowed."
    )
