# hoptrace/brain/rules.py
from typing import Optional

from hoptrace.schemas import Outcome, Reply

OUTCOMES = {
    "time_exceeded": "hop",
    "dest_unreachable": "final",
    "other": "unrecognized",
}


def classify(reply: Optional[Reply]) -> Outcome:
    """
    Destination Unreachable can only come from the target's own stack, since
    the probe port is closed and routers on the way answer with Time Exceeded.
    """
    if reply is None:
        return "timeout"
    return OUTCOMES[reply.kind]


def is_final(outcome: Outcome) -> bool:
    return outcome == "final"
