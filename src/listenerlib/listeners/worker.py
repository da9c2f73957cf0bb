"""StreamWorker: the one background thread behind a poll-driven listener."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from listenerlib.frames.composite import CompositeFrame

logger = logging.getLogger(__name__)

PollFunction = Callable[[], "CompositeFrame | None"]


class StreamWorker:
    """Calls a poll function at a fixed rate on a daemon thread.

    Each iteration calls ``poll``, hands a non-None result to ``sink`` and
    then waits ``1 / framerate`` seconds on an event that :meth:`stop`
    sets, so stopping never waits out a full frame period.

    An exception from ``poll`` or ``sink`` is logged and ends the loop.
    ``on_exit`` runs on the worker thread whenever the loop ends, however
    it ends.
    """

    def __init__(
        self,
        name: str,
        poll: PollFunction,
        sink: Callable[[CompositeFrame], None],
        framerate: float,
        on_exit: Callable[[], None] | None = None,
    ) -> None:
        self._name = name
        self._poll = poll
        self._sink = sink
        self._period = 1.0 / framerate if framerate > 0 else 0.0
        self._on_exit = on_exit
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start a fresh loop, first joining a loop that ended on its own."""
        if self._thread is not None:
            self.stop()
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop,
            name=f"listenerlib-{self._name}",
            daemon=True,
        )
        self._thread.start()

    def request_stop(self) -> None:
        """Ask the loop to exit after the current iteration, without joining."""
        self._stop_event.set()

    def stop(self, timeout: float | None = None) -> None:
        """Stop the loop and join the thread.

        Safe to call from the worker thread itself; the join is skipped then.
        """
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning("Worker of listener %r did not stop in time", self._name)
        self._thread = None

    def _loop(self) -> None:
        try:
            while not self._stop_event.is_set():
                frame = self._poll()
                if frame is not None:
                    self._sink(frame)
                if self._stop_event.wait(self._period):
                    break
        except Exception:
            logger.exception("Poll loop of listener %r failed; ending stream", self._name)
        finally:
            self._stop_event.set()
            if self._on_exit is not None:
                self._on_exit()
