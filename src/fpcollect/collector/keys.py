"""Source key derivation from connection addresses."""

from __future__ import annotations


def strip_port(address: str) -> str:
    """Return the host part of ``address`` without any port.

    Handles ``host:port``, ``[v6]:port`` and bare IPv6 literals, which are
    returned unchanged.
    """
    address = address.strip()
    if address.startswith("["):
        end = address.find("]")
        if end != -1:
            return address[1:end]
        return address
    if address.count(":") == 1:
        return address.split(":", 1)[0]
    return address


def source_key(peer_host: str | None, forwarded_for: str | None = None, *, trust_forwarded: bool = False) -> str:
    if trust_forwarded and forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return strip_port(first)
    return strip_port(peer_host or "unknown")
