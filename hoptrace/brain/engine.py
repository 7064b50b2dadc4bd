# hoptrace/brain/engine.py

import logging
import time

from hoptrace.brain.rules import classify, is_final
from hoptrace.brain.state import RunState
from hoptrace.schemas import HopResult, Probe, Target, TraceSummary

log = logging.getLogger(__name__)


class HopEngine:
    """
    Sequential TTL loop: one probe, one bounded wait, one HopResult per hop.

    The engine owns the listener and closes it when a run ends, however it
    ends. The sender is only borrowed.
    """

    def __init__(self, sender, listener, settings, clock=time.monotonic):
        self.sender = sender
        self.listener = listener
        self.s = settings
        self.clock = clock

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def close(self):
        self.listener.close()

    def trace(self, target: Target, state: RunState = None):
        run = state or RunState(max_hops=self.s.max_hops)

        while not run.exhausted:
            ttl = run.begin_probe()
            probe = Probe(ttl=ttl, target=target, dest_port=self.s.dest_port)

            # SendError propagates: a failed send means the local stack is broken
            self.sender.send(probe)
            sent_at = self.clock()

            reply = self.listener.receive(sent_at + self.s.timeout_s)
            outcome = classify(reply)

            if reply is None:
                result = HopResult(ttl=ttl, responder=None, outcome=outcome)
            else:
                rtt_ms = round((self.clock() - sent_at) * 1000.0, 3)
                result = HopResult(ttl=ttl, responder=reply.source, outcome=outcome,
                                   reply=reply, rtt_ms=rtt_ms)
                log.debug("ttl=%d %s from %s (type=%d code=%d quoted=%s:%s)",
                          ttl, reply.kind, reply.source, reply.icmp_type,
                          reply.icmp_code, reply.quoted_dst, reply.quoted_dport)

            run.end_probe()
            yield result

            if is_final(outcome):
                run.stop_reason = "dest_reached"
                return

        run.stop_reason = "max_hops"

    def run(self, target: Target, on_hop=None) -> TraceSummary:
        summary = TraceSummary(target=target)
        run = RunState(max_hops=self.s.max_hops)
        try:
            for result in self.trace(target, run):
                summary.hops.append(result)
                if on_hop is not None:
                    on_hop(result)
        finally:
            summary.probes_sent = run.probes_sent
            self.close()

        summary.stop_reason = run.stop_reason
        if not summary.reached:
            log.info("no conclusive route to %s within %d hops", target.address, self.s.max_hops)
        return summary
