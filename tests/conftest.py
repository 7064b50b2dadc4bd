# tests/conftest.py
import socket
import struct

import pytest


def build_ip_header(src: str, dst: str, proto: int, payload_len: int, ttl: int = 64) -> bytes:
    return struct.pack(
        "!BBHHHBBH4s4s",
        0x45, 0, 20 + payload_len, 0, 0, ttl, proto, 0,
        socket.inet_aton(src), socket.inet_aton(dst),
    )


def build_icmp_reply(src: str, icmp_type: int, icmp_code: int = 0,
                     probe_dst: str = "93.184.216.34", probe_dport: int = 33434,
                     local: str = "192.168.1.10") -> bytes:
    """IPv4 + ICMP error quoting a UDP probe, the way a raw ICMP socket delivers it."""
    udp = struct.pack("!HHHH", 40000, probe_dport, 8, 0)
    quoted = build_ip_header(local, probe_dst, 17, len(udp), ttl=1) + udp
    icmp = struct.pack("!BBHI", icmp_type, icmp_code, 0, 0) + quoted
    return build_ip_header(src, local, 1, len(icmp)) + icmp


@pytest.fixture
def icmp_reply():
    return build_icmp_reply


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
