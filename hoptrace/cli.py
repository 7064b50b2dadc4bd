# hoptrace/cli.py
# Usage examples:
#   sudo hoptrace example.com
#   sudo hoptrace 93.184.216.34 --max-hops 20 --timeout 1 --json
#   hoptrace example.com --fake          # scripted network, no privileges needed

import argparse
import ipaddress
import json
import logging
import math
import sys

from hoptrace.brain.engine import HopEngine
from hoptrace.config import Settings
from hoptrace.errors import HoptraceError
from hoptrace.report import format_banner, format_completion, format_hop, summary_to_dict
from hoptrace.resolve import resolve
from hoptrace.schemas import Target

log = logging.getLogger("hoptrace")

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_INCOMPLETE = 3

# TEST-NET-1, stands in for names given with --fake
FAKE_ADDRESS = "192.0.2.1"


def _positive_int(value):
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {n}")
    return n


def _positive_float(value):
    x = float(value)
    if not math.isfinite(x) or x <= 0:
        raise argparse.ArgumentTypeError(f"must be a finite number > 0, got {x}")
    return x


def _port(value):
    n = int(value)
    if not 1 <= n <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range: {n}")
    return n


def build_argparser():
    d = Settings()
    ap = argparse.ArgumentParser(prog="hoptrace", description="UDP/ICMP traceroute, one probe per hop")
    ap.add_argument("target", help="Destination hostname or IPv4 address")
    ap.add_argument("--max-hops", type=_positive_int, default=d.max_hops, help="Hop ceiling")
    ap.add_argument("--timeout", type=_positive_float, default=d.timeout_s,
                    help="Seconds to wait for each hop's reply")
    ap.add_argument("--port", type=_port, default=d.dest_port, help="Destination UDP port (should be closed)")
    ap.add_argument("--bind", default=d.bind_addr, help="Local address for the ICMP listener and probes")
    ap.add_argument("--json", action="store_true", help="Print a JSON summary instead of hop lines")
    ap.add_argument("--fake", action="store_true", help="Trace a scripted in-memory network (no DNS, no privileges)")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    return ap


def settings_from_args(args) -> Settings:
    return Settings(
        max_hops=args.max_hops,
        timeout_s=args.timeout,
        dest_port=args.port,
        bind_addr=args.bind,
    )


def fake_target(name: str) -> Target:
    """IPv4 literals are kept; any other name maps to FAKE_ADDRESS without a lookup."""
    try:
        return Target(name=name, address=str(ipaddress.IPv4Address(name)))
    except ValueError:
        return Target(name=name, address=FAKE_ADDRESS)


def build_engine(args, settings, target):
    if args.fake:
        from hoptrace.prober.fake import FakeNetwork, demo_script
        net = FakeNetwork(script=demo_script(target))
        return HopEngine(net, net, settings)

    from hoptrace.listener.icmp import IcmpListener
    from hoptrace.prober.udp import UdpProbeSender
    listener = IcmpListener(settings)
    return HopEngine(UdpProbeSender(settings.bind_addr), listener, settings)


def main(argv=None, out=None) -> int:
    out = out or sys.stdout
    args = build_argparser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    settings = settings_from_args(args)

    try:
        target = fake_target(args.target) if args.fake else resolve(args.target)
        engine = build_engine(args, settings, target)
        if args.json:
            summary = engine.run(target)
            print(json.dumps(summary_to_dict(summary), indent=2), file=out)
        else:
            print(format_banner(target, settings), file=out)
            summary = engine.run(target, on_hop=lambda r: print(format_hop(r), file=out, flush=True))
            print(format_completion(summary, settings.max_hops), file=out)
    except HoptraceError as e:
        log.error("%s", e)
        return EXIT_FATAL

    return EXIT_OK if summary.reached else EXIT_INCOMPLETE


if __name__ == "__main__":
    sys.exit(main())
