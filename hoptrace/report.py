# hoptrace/report.py
from dataclasses import asdict

from hoptrace.schemas import HopResult, Target, TraceSummary

TIMEOUT_MARK = "* * *"
TIMEOUT_TAG = "Request timed out"

TAGS = {
    "time_exceeded": "Time Exceeded",
    "dest_unreachable": "Destination Unreachable",
}


def format_banner(target: Target, settings) -> str:
    return f"traceroute to {target.name} ({target.address}), {settings.max_hops} hops max"


def format_hop(result: HopResult) -> str:
    if result.reply is None:
        return f"{result.ttl:2d}  {TIMEOUT_MARK:<15} ({TIMEOUT_TAG})"
    r = result.reply
    tag = TAGS.get(r.kind) or f"Unknown ICMP type {r.icmp_type}, code {r.icmp_code}"
    return f"{result.ttl:2d}  {result.responder:<15} ({tag})"


def format_completion(summary: TraceSummary, max_hops: int) -> str:
    if summary.reached:
        return "Trace complete."
    return f"Destination not reached within {max_hops} hops."


def summary_to_dict(summary: TraceSummary) -> dict:
    return {
        "target": summary.target.name,
        "address": summary.target.address,
        "stop_reason": summary.stop_reason,
        "probes_sent": summary.probes_sent,
        "path": {h.ttl: h.responder for h in summary.hops},
        "hops": [
            {
                "ttl": h.ttl,
                "responder": h.responder,
                "outcome": h.outcome,
                "rtt_ms": h.rtt_ms,
                "reply": asdict(h.reply) if h.reply else None,
            }
            for h in summary.hops
        ],
    }
