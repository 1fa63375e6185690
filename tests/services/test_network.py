"""Tests for local address discovery."""

import socket
from collections import namedtuple
from unittest.mock import patch

from livehub.services.network import FALLBACK_HOST, get_host_address, get_local_ip

Addr = namedtuple("Addr", ["family", "address"])


def ipv4(address: str) -> Addr:
    return Addr(socket.AF_INET, address)


def ipv6(address: str) -> Addr:
    return Addr(socket.AF_INET6, address)


class TestGetLocalIp:
    def test_prefers_priority_interface(self):
        interfaces = {
            "docker0": [ipv4("172.17.0.1")],
            "eth0": [ipv6("fe80::1"), ipv4("192.168.1.20")],
        }
        assert get_local_ip(interfaces) == "192.168.1.20"

    def test_priority_order(self):
        interfaces = {
            "wlan0": [ipv4("10.0.0.7")],
            "en0": [ipv4("192.168.1.30")],
        }
        assert get_local_ip(interfaces) == "192.168.1.30"

    def test_falls_back_to_any_external_ipv4(self):
        interfaces = {
            "lo": [ipv4("127.0.0.1")],
            "enp3s0": [ipv4("10.1.2.3")],
        }
        assert get_local_ip(interfaces) == "10.1.2.3"

    def test_loopback_only_returns_localhost(self):
        assert get_local_ip({"lo": [ipv4("127.0.0.1")]}) == FALLBACK_HOST
        assert get_local_ip({}) == FALLBACK_HOST

    def test_reads_host_interfaces_by_default(self):
        with patch(
            "livehub.services.network.psutil.net_if_addrs",
            return_value={"eth0": [ipv4("192.168.5.5")]},
        ):
            assert get_local_ip() == "192.168.5.5"


class TestGetHostAddress:
    def test_interfaces_scanned_once(self):
        get_host_address.cache_clear()
        try:
            with patch(
                "livehub.services.network.psutil.net_if_addrs",
                return_value={"eth0": [ipv4("192.168.7.7")]},
            ) as net_if_addrs:
                assert get_host_address() == "192.168.7.7"
                assert get_host_address() == "192.168.7.7"

            net_if_addrs.assert_called_once()
        finally:
            get_host_address.cache_clear()
