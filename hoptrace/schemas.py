# hoptrace/schemas.py
from dataclasses import dataclass, field
from typing import Literal, Optional

ReplyKind = Literal["time_exceeded", "dest_unreachable", "other"]
Outcome = Literal["hop", "final", "unrecognized", "timeout"]
StopReason = Literal["dest_reached", "max_hops"]


@dataclass(frozen=True)
class Target:
    name: str
    address: str


@dataclass(frozen=True)
class Probe:
    ttl: int
    target: Target
    dest_port: int


@dataclass(frozen=True)
class Reply:
    source: str
    kind: ReplyKind
    icmp_type: int
    icmp_code: int
    length: int
    # from the datagram quoted inside an ICMP error, debug only
    quoted_dst: Optional[str] = None
    quoted_dport: Optional[int] = None


@dataclass(frozen=True)
class HopResult:
    ttl: int
    responder: Optional[str]
    outcome: Outcome
    reply: Optional[Reply] = None
    rtt_ms: Optional[float] = None


@dataclass
class TraceSummary:
    target: Target
    hops: list = field(default_factory=list)
    stop_reason: Optional[StopReason] = None
    probes_sent: int = 0

    @property
    def reached(self) -> bool:
        return self.stop_reason == "dest_reached"
