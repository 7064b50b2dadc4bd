# hoptrace/listener/icmp.py
import logging
import socket
import time
from typing import Optional

from hoptrace.config import Settings
from hoptrace.errors import DecodeError, ListenSetupError
from hoptrace.listener.base import Listener
from hoptrace.listener.icmp_codec import decode_icmp
from hoptrace.schemas import Reply

log = logging.getLogger(__name__)


class IcmpListener(Listener):
    """
    One raw ICMP socket shared by every hop of a run. Opening it normally
    needs root or CAP_NET_RAW.
    """

    def __init__(self, settings: Settings, clock=time.monotonic):
        self.bufsize = settings.recv_bufsize
        self.clock = clock
        try:
            self.sock = socket.socket(socket.AF_INET, socket.SOCK_RAW, socket.IPPROTO_ICMP)
        except PermissionError as e:
            raise ListenSetupError(
                f"opening raw ICMP socket: {e} (run as root or grant CAP_NET_RAW)"
            ) from e
        except OSError as e:
            raise ListenSetupError(f"opening raw ICMP socket: {e}") from e
        try:
            self.sock.bind((settings.bind_addr, 0))
        except OSError as e:
            self.sock.close()
            raise ListenSetupError(f"binding ICMP socket to {settings.bind_addr}: {e}") from e

    def receive(self, deadline: float) -> Optional[Reply]:
        while True:
            remaining = deadline - self.clock()
            if remaining <= 0:
                return None
            self.sock.settimeout(remaining)
            try:
                data, addr = self.sock.recvfrom(self.bufsize)
            except socket.timeout:
                return None
            except OSError as e:
                # a failed read costs the hop, not the run
                log.warning("ICMP read failed: %s", e)
                return None

            try:
                return decode_icmp(data, addr[0])
            except DecodeError as e:
                log.warning("dropping malformed reply from %s: %s", addr[0], e)

    def close(self) -> None:
        if self.sock is not None:
            self.sock.close()
            self.sock = None
