# hoptrace/brain/state.py
from dataclasses import dataclass
from typing import Optional


@dataclass
class RunState:
    max_hops: int
    ttl: int = 1
    probes_sent: int = 0
    stop_reason: Optional[str] = None
    # replies carry no probe id, so a second probe in flight would make them ambiguous
    in_flight: Optional[int] = None

    def begin_probe(self) -> int:
        assert self.in_flight is None, f"probe for ttl {self.in_flight} still outstanding"
        self.in_flight = self.ttl
        self.probes_sent += 1
        return self.ttl

    def end_probe(self) -> None:
        self.in_flight = None
        self.ttl += 1

    @property
    def exhausted(self) -> bool:
        return self.ttl > self.max_hops
