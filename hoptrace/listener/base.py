# hoptrace/listener/base.py
from abc import ABC, abstractmethod
from typing import Optional

from hoptrace.schemas import Reply


class Listener(ABC):
    @abstractmethod
    def receive(self, deadline: float) -> Optional[Reply]:
        """Block until a reply arrives or the monotonic deadline passes (returns None)."""
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False
