# tests/test_cli.py
import io
import json

import pytest

from hoptrace import cli
from hoptrace.brain.engine import HopEngine
from hoptrace.errors import ListenSetupError, ResolutionError
from hoptrace.prober.fake import FakeNetwork, reply
from hoptrace.schemas import Target

TARGET = Target(name="example.com", address="93.184.216.34")
TIMED_OUT = "{:2d}  " + f"{'* * *':<15}" + " (Request timed out)"


def run_cli(argv):
    out = io.StringIO()
    code = cli.main(argv, out=out)
    return code, out.getvalue().splitlines()


@pytest.fixture
def scripted(monkeypatch):
    """Point the CLI at a FakeNetwork and a fixed resolution of example.com."""
    def install(script):
        net = FakeNetwork(script=script)
        monkeypatch.setattr(cli, "resolve", lambda name: TARGET)
        monkeypatch.setattr(cli, "build_engine", lambda args, settings, target: HopEngine(net, net, settings))
        return net
    return install


def test_end_to_end_scenario(scripted):
    """Timeout, one router, then the destination answers Port Unreachable."""
    net = scripted({
        1: [None],
        2: [reply("10.0.0.1", 11)],
        3: [reply("93.184.216.34", 3, 3)],
    })
    code, lines = run_cli(["example.com"])

    assert code == 0
    assert lines[0] == "traceroute to example.com (93.184.216.34), 30 hops max"
    assert lines[1:] == [
        TIMED_OUT.format(1),
        f" 2  {'10.0.0.1':<15} (Time Exceeded)",
        f" 3  {'93.184.216.34':<15} (Destination Unreachable)",
        "Trace complete.",
    ]
    assert len(net.sent) == 3
    assert net.closed


def test_unknown_reply_type_is_printed_verbatim(scripted):
    scripted({1: [reply("10.0.0.1", 5, 1)], 2: [reply("93.184.216.34", 3, 3)]})
    code, lines = run_cli(["example.com"])
    assert code == 0
    assert lines[1] == f" 1  {'10.0.0.1':<15} (Unknown ICMP type 5, code 1)"


def test_exhausted_ceiling_is_reported_as_incomplete(scripted):
    scripted({})
    code, lines = run_cli(["example.com", "--max-hops", "3"])
    assert code == cli.EXIT_INCOMPLETE
    assert lines[1:] == [TIMED_OUT.format(n) for n in (1, 2, 3)] + ["Destination not reached within 3 hops."]


def test_json_summary(scripted):
    scripted({1: [reply("10.0.0.1", 11)], 2: [reply("93.184.216.34", 3, 3)]})
    code, lines = run_cli(["example.com", "--json"])
    doc = json.loads("\n".join(lines))

    assert code == 0
    assert doc["stop_reason"] == "dest_reached"
    assert doc["probes_sent"] == 2
    assert doc["path"] == {"1": "10.0.0.1", "2": "93.184.216.34"}
    assert doc["hops"][1]["reply"]["icmp_code"] == 3


def test_fake_mode_runs_without_privileges():
    code, lines = run_cli(["93.184.216.34", "--fake"])
    assert code == 0
    assert lines[-1] == "Trace complete."
    assert lines[-2].startswith(" 5  93.184.216.34")


def test_fake_mode_never_looks_up_names(monkeypatch):
    def no_dns(name):
        raise AssertionError(f"resolve({name!r}) called in fake mode")
    monkeypatch.setattr(cli, "resolve", no_dns)

    code, lines = run_cli(["example.com", "--fake"])
    assert code == 0
    assert lines[0] == f"traceroute to example.com ({cli.FAKE_ADDRESS}), 30 hops max"
    assert lines[-2].startswith(f" 5  {cli.FAKE_ADDRESS}")


def test_fake_target_keeps_ipv4_literals():
    assert cli.fake_target("10.1.2.3") == Target(name="10.1.2.3", address="10.1.2.3")
    assert cli.fake_target("host.invalid").address == cli.FAKE_ADDRESS


def test_missing_target_is_usage_error(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == 2
    assert "target" in capsys.readouterr().err


@pytest.mark.parametrize("argv", [
    ["x", "--max-hops", "0"],
    ["x", "--timeout", "0"],
    ["x", "--port", "70000"],
    ["x", "--timeout", "nan"],
    ["x", "--timeout", "inf"],
    ["x", "--timeout", "-inf"],
])
def test_invalid_settings_are_usage_errors(argv):
    with pytest.raises(SystemExit) as exc:
        cli.main(argv)
    assert exc.value.code == 2


def test_resolution_failure_is_fatal(monkeypatch, caplog):
    def fail(name):
        raise ResolutionError(name, "Name or service not known")
    monkeypatch.setattr(cli, "resolve", fail)

    code, lines = run_cli(["no-such-host.invalid"])
    assert code == cli.EXIT_FATAL
    assert lines == []
    assert "no-such-host.invalid" in caplog.text


def test_listen_setup_failure_sends_nothing(monkeypatch, caplog):
    def no_listener(args, settings, target):
        raise ListenSetupError("opening raw ICMP socket: [Errno 1] Operation not permitted")
    monkeypatch.setattr(cli, "resolve", lambda name: TARGET)
    monkeypatch.setattr(cli, "build_engine", no_listener)

    code, lines = run_cli(["example.com"])
    assert code == cli.EXIT_FATAL
    assert "Operation not permitted" in caplog.text


def test_send_failure_mid_run_is_fatal(monkeypatch):
    net = FakeNetwork(script={1: [reply("10.0.0.1", 11)]}, fail_at=2)
    monkeypatch.setattr(cli, "resolve", lambda name: TARGET)
    monkeypatch.setattr(cli, "build_engine", lambda args, settings, target: HopEngine(net, net, settings))

    code, lines = run_cli(["example.com"])
    assert code == cli.EXIT_FATAL
    assert lines[1] == f" 1  {'10.0.0.1':<15} (Time Exceeded)"
    assert net.closed


def test_settings_from_args():
    args = cli.build_argparser().parse_args(["x", "--max-hops", "12", "--timeout", "0.5", "--port", "33500"])
    s = cli.settings_from_args(args)
    assert (s.max_hops, s.timeout_s, s.dest_port) == (12, 0.5, 33500)
