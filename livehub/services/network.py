"""Local address discovery for the startup banner and default OBS host."""

import socket
from functools import lru_cache

import psutil

# Checked first, in this order
PRIORITY_INTERFACES = ("Wi-Fi", "Ethernet", "en0", "eth0", "wlan0")

FALLBACK_HOST = "localhost"


def _ipv4_addresses(addrs) -> list[str]:
    return [
        addr.address
        for addr in addrs
        if addr.family == socket.AF_INET and not addr.address.startswith("127.")
    ]


def get_local_ip(interfaces: dict | None = None) -> str:
    """Return the first non-loopback IPv4 address, preferring well-known interfaces.

    Args:
        interfaces: Mapping of interface name to addresses, as returned by
            `psutil.net_if_addrs()`; read from the host when omitted

    Returns:
        An IPv4 address, or "localhost" when none is found
    """
    if interfaces is None:
        interfaces = psutil.net_if_addrs()

    for name in PRIORITY_INTERFACES:
        found = _ipv4_addresses(interfaces.get(name, []))
        if found:
            return found[0]

    for addrs in interfaces.values():
        found = _ipv4_addresses(addrs)
        if found:
            return found[0]

    return FALLBACK_HOST


@lru_cache
def get_host_address() -> str:
    """`get_local_ip()` for this host, scanned once per process."""
    return get_local_ip()
