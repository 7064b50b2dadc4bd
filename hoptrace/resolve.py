# hoptrace/resolve.py
import logging
import socket

from hoptrace.errors import ResolutionError
from hoptrace.schemas import Target

log = logging.getLogger(__name__)


def resolve(name: str) -> Target:
    """Resolve a hostname or dotted-quad literal to an IPv4 Target."""
    if not name:
        raise ResolutionError(name, "empty name")
    try:
        infos = socket.getaddrinfo(name, None, socket.AF_INET, socket.SOCK_DGRAM)
    except (socket.gaierror, UnicodeError) as e:
        raise ResolutionError(name, str(e)) from e
    if not infos:
        raise ResolutionError(name, "no IPv4 address")
    address = infos[0][4][0]
    log.debug("resolved %s -> %s", name, address)
    return Target(name=name, address=address)
