from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from typing import Optional, Union

from lob_core.types import DeltaEvent


@dataclass(frozen=True)
class StreamFailure:
    """Sent by the reader when it hit a fatal error and stopped."""

    reason: str


Message = Union[DeltaEvent, StreamFailure]


class EventChannel:
    """Single-producer/single-consumer FIFO between the reader and the synchronizer.

    Unbounded: if the consumer falls behind, the queue grows. `close()` is
    called by the consumer when it stops so the producer can notice and exit.
    """

    def __init__(self) -> None:
        self._q: "queue.Queue[Message]" = queue.Queue()
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        self._closed.set()

    def send(self, msg: Message) -> bool:
        """Enqueue `msg`. Returns False once the consumer has gone away."""
        if self._closed.is_set():
            return False
        self._q.put(msg)
        return True

    def recv(self, timeout: Optional[float] = None) -> Message:
        """Block for the next message. Raises queue.Empty only when `timeout` is set."""
        return self._q.get(timeout=timeout)

    def qsize(self) -> int:
        return self._q.qsize()
