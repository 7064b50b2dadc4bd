# hoptrace/prober/udp.py
import logging
import socket

from hoptrace.errors import SendError, SendSetupError
from hoptrace.prober.base import ProbeSender
from hoptrace.schemas import Probe

log = logging.getLogger(__name__)


class UdpProbeSender(ProbeSender):
    """
    Sends a zero-length UDP datagram with the IP TTL set to the probe's ttl.
    A fresh socket is opened for every probe and closed right after the send,
    so TTL state never leaks from one hop into the next.
    """

    def __init__(self, bind_addr: str = "0.0.0.0"):
        self.bind_addr = bind_addr

    def send(self, probe: Probe) -> None:
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        except OSError as e:
            raise SendSetupError(probe.ttl, f"opening UDP socket: {e}") from e

        with sock:
            try:
                sock.setsockopt(socket.IPPROTO_IP, socket.IP_TTL, probe.ttl)
                sock.bind((self.bind_addr, 0))
            except OSError as e:
                raise SendSetupError(probe.ttl, f"setting TTL: {e}") from e

            dest = (probe.target.address, probe.dest_port)
            try:
                sock.sendto(b"", dest)
            except OSError as e:
                raise SendError(probe.ttl, str(e)) from e
            log.debug("sent probe ttl=%d to %s:%d from port %d",
                      probe.ttl, dest[0], dest[1], sock.getsockname()[1])
