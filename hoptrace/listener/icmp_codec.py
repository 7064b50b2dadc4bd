# hoptrace/listener/icmp_codec.py
"""
Decoding of the raw datagrams an IPPROTO_ICMP raw socket delivers.

On Linux a raw ICMP socket hands us the full IPv4 packet:

    +----------------+------------------------------+
    | IPv4 header    | ICMP: type, code, checksum,  |
    | (IHL * 4 B)    | 4 unused B, quoted datagram  |
    +----------------+------------------------------+

For Time Exceeded and Destination Unreachable the quoted datagram is the
IPv4 header of our probe plus at least its first 8 bytes (the UDP header).
"""
import socket
import struct
from typing import Optional

from hoptrace.errors import DecodeError
from hoptrace.schemas import Reply, ReplyKind

ICMP_DEST_UNREACHABLE = 3
ICMP_TIME_EXCEEDED = 11
IPPROTO_ICMP = 1
IPPROTO_UDP = 17

ICMP_HEADER_LEN = 4
ICMP_ERROR_HEADER_LEN = 8
MIN_IP_HEADER_LEN = 20

KINDS: dict = {
    ICMP_TIME_EXCEEDED: "time_exceeded",
    ICMP_DEST_UNREACHABLE: "dest_unreachable",
}


def reply_kind(icmp_type: int) -> ReplyKind:
    return KINDS.get(icmp_type, "other")


def _ip_header(data: bytes, what: str):
    if len(data) < MIN_IP_HEADER_LEN:
        raise DecodeError(f"{what}: {len(data)} bytes is shorter than an IPv4 header")
    ver_ihl, proto = data[0], data[9]
    version, ihl = ver_ihl >> 4, (ver_ihl & 0x0F) * 4
    if version != 4:
        raise DecodeError(f"{what}: not IPv4 (version {version})")
    if ihl < MIN_IP_HEADER_LEN or ihl > len(data):
        raise DecodeError(f"{what}: bad header length {ihl}")
    return ihl, proto


def _quoted(payload: bytes):
    """Best-effort (dst, dport) of the datagram quoted in an ICMP error."""
    try:
        ihl, proto = _ip_header(payload, "quoted datagram")
    except DecodeError:
        return None, None
    dst = socket.inet_ntoa(payload[16:20])
    dport: Optional[int] = None
    if proto == IPPROTO_UDP and len(payload) >= ihl + 4:
        _, dport = struct.unpack("!HH", payload[ihl:ihl + 4])
    return dst, dport


def decode_icmp(data: bytes, source: str) -> Reply:
    ihl, proto = _ip_header(data, "reply")
    if proto != IPPROTO_ICMP:
        raise DecodeError(f"reply: protocol {proto} is not ICMP")
    icmp = data[ihl:]
    if len(icmp) < ICMP_HEADER_LEN:
        raise DecodeError(f"reply: ICMP message truncated to {len(icmp)} bytes")

    icmp_type, icmp_code = icmp[0], icmp[1]
    kind = reply_kind(icmp_type)

    quoted_dst = quoted_dport = None
    if kind != "other" and len(icmp) > ICMP_ERROR_HEADER_LEN:
        quoted_dst, quoted_dport = _quoted(icmp[ICMP_ERROR_HEADER_LEN:])

    return Reply(
        source=source,
        kind=kind,
        icmp_type=icmp_type,
        icmp_code=icmp_code,
        length=len(data),
        quoted_dst=quoted_dst,
        quoted_dport=quoted_dport,
    )
