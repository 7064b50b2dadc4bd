# hoptrace/prober/fake.py
import logging
from collections import deque
from typing import Optional

from hoptrace.errors import DecodeError, SendError
from hoptrace.listener.base import Listener
from hoptrace.listener.icmp_codec import decode_icmp, reply_kind
from hoptrace.prober.base import ProbeSender
from hoptrace.schemas import Probe, Reply, Target

log = logging.getLogger(__name__)


class FakeNetwork(ProbeSender, Listener):
    """
    In-memory network playing both the sender and the listener.

    script: dict[ttl] -> list of things the listener yields after the probe
    for that ttl was sent, consumed in order:
      - a Reply is returned as is
      - bytes are run through decode_icmp (the source is "0.0.0.0"), so
        malformed data exercises the decode-and-retry path
      - None, or running out of items, is a timeout
    fail_at: ttl whose send raises SendError.
    """

    def __init__(self, script=None, fail_at: Optional[int] = None):
        self.script = {}
        if script:
            for k, v in script.items():
                self.script[k] = deque(v)
        self.fail_at = fail_at
        self.sent = []
        self.closed = False
        self._current: Optional[int] = None

    def send(self, probe: Probe) -> None:
        if self.closed:
            raise SendError(probe.ttl, "network closed")
        if probe.ttl == self.fail_at:
            raise SendError(probe.ttl, "scripted failure")
        self.sent.append(probe)
        self._current = probe.ttl

    def receive(self, deadline: float) -> Optional[Reply]:
        dq = self.script.get(self._current)
        while dq:
            item = dq.popleft()
            if item is None:
                return None
            if isinstance(item, Reply):
                return item
            try:
                return decode_icmp(item, "0.0.0.0")
            except DecodeError as e:
                log.warning("dropping malformed reply: %s", e)
        return None

    def close(self) -> None:
        self.closed = True


def reply(source: str, icmp_type: int, icmp_code: int = 0) -> Reply:
    return Reply(source=source, kind=reply_kind(icmp_type),
                 icmp_type=icmp_type, icmp_code=icmp_code, length=56)


def demo_script(target: Target, hops: int = 4):
    """A path of `hops` routers at 10.0.0.N followed by the target itself."""
    script = {}
    for ttl in range(1, hops + 1):
        script[ttl] = [reply(f"10.0.0.{ttl}", 11)]
    script[hops + 1] = [reply(target.address, 3, 3)]
    return script
