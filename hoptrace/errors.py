# hoptrace/errors.py


class HoptraceError(Exception):
    """Base class for every failure that ends a trace."""


class ResolutionError(HoptraceError):
    def __init__(self, name: str, reason: str = ""):
        self.name = name
        msg = f"cannot resolve {name!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ListenSetupError(HoptraceError):
    pass


class SendError(HoptraceError):
    def __init__(self, ttl: int, reason: str):
        self.ttl = ttl
        super().__init__(f"probe send failed at ttl {ttl}: {reason}")


class SendSetupError(SendError):
    pass


class DecodeError(ValueError):
    """Reply bytes could not be parsed. Absorbed by the listener, never ends a trace."""
