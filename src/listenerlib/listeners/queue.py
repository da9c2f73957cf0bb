"""FrameQueue: the producer/consumer hand-off inside every listener."""

from __future__ import annotations

import logging
import threading
from collections import deque

from listenerlib.core.errors import QueueTimeoutError
from listenerlib.frames.composite import CompositeFrame

logger = logging.getLogger(__name__)


class FrameQueue:
    """Unbounded FIFO of composite frames with a "new frame" flag.

    One producer (a capture callback or stream worker) calls :meth:`put`;
    any number of consumers call :meth:`get_next` or :meth:`get_latest`.
    The queue and flag are guarded by a single condition variable.
    """

    def __init__(self) -> None:
        self._frames: deque[CompositeFrame] = deque()
        self._new_frame = False
        self._cond = threading.Condition()

    def put(self, frame: CompositeFrame) -> None:
        """Append *frame* and wake one waiting consumer.  Never blocks."""
        with self._cond:
            self._frames.append(frame)
            self._new_frame = True
            self._cond.notify()

    def get_next(self, timeout: float) -> CompositeFrame:
        """Pop the oldest frame, waiting up to *timeout* seconds if empty.

        Raises:
            QueueTimeoutError: If no frame arrives in time.
        """
        with self._cond:
            if not self._cond.wait_for(lambda: len(self._frames) > 0, timeout):
                raise QueueTimeoutError(f"No frame arrived within {timeout:.3f}s")
            frame = self._frames.popleft()
            if not self._frames:
                self._new_frame = False
            return frame

    def get_latest(self, timeout: float) -> CompositeFrame:
        """Wait for a new frame, then drain the queue and return the newest.

        Older frames are discarded.

        Raises:
            QueueTimeoutError: If no new frame arrives in time.
        """
        with self._cond:
            if not self._cond.wait_for(
                lambda: self._new_frame and len(self._frames) > 0, timeout
            ):
                raise QueueTimeoutError(f"No new frame arrived within {timeout:.3f}s")
            frame = self._frames[-1]
            dropped = len(self._frames) - 1
            self._frames.clear()
            self._new_frame = False
        if dropped:
            logger.debug("Dropped %d stale frames", dropped)
        return frame

    def clear(self) -> None:
        with self._cond:
            self._frames.clear()
            self._new_frame = False

    def __len__(self) -> int:
        with self._cond:
            return len(self._frames)
