# hoptrace/prober/base.py
from abc import ABC, abstractmethod

from hoptrace.schemas import Probe


class ProbeSender(ABC):
    @abstractmethod
    def send(self, probe: Probe) -> None:
        """Transmit exactly one probe. Raises SendError; never retries."""
        raise NotImplementedError
