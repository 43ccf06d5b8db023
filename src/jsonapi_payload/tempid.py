import itertools
import threading
import typing
import uuid

from .interfaces import TempIdGenerator


class CounterTempIdGenerator(TempIdGenerator):
    """
    Yields ``temp-id-1``, ``temp-id-2``, and so on.
    """

    prefix: str
    _counter: typing.Iterator[int]
    _lock: threading.Lock

    def generate(self) -> str:
        with self._lock:
            n = next(self._counter)
        return f"{self.prefix}{n}"

    def __init__(self, prefix: str = "temp-id-", start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)
        self._lock = threading.Lock()


class UUIDTempIdGenerator(TempIdGenerator):
    def generate(self) -> str:
        return str(uuid.uuid4())


default_generator = CounterTempIdGenerator()
