"""SensorListener: common lifecycle, queueing and dumping for every sensor.

A listener is assembled from parts instead of inherited mix-ins:

- a :class:`FrameQueue` (always),
- a :class:`SensorCalibration` (when ``calibrated``),
- a :class:`StreamWorker` (when a poll function drives the stream).

Which parts are present is reported by :attr:`SensorListener.capabilities`.
"""

from __future__ import annotations

import logging
import sys
import threading
import time
import weakref
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TextIO

import numpy as np

from listenerlib.core.errors import QueueTimeoutError, StreamStateError
from listenerlib.core.params import CamParameters
from listenerlib.frames.composite import CompositeFrame
from listenerlib.frames.data_frame import DataFrame
from listenerlib.listeners.calibration import SensorCalibration
from listenerlib.listeners.queue import FrameQueue
from listenerlib.listeners.registry import ListenerRegistry
from listenerlib.listeners.worker import PollFunction, StreamWorker
from listenerlib.sensors.base import SensorInterface

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 5.0


def now_us() -> int:
    """Current wall-clock time in epoch microseconds."""
    return time.time_ns() // 1000


@dataclass(frozen=True)
class ListenerCapabilities:
    has_calibration: bool = False
    has_own_thread: bool = False


class SensorListener:
    """Receives data from one sensor and queues it as composite frames.

    Two ways to feed the queue:

    - **Callback-driven** (no ``poll``): a hardware SDK delivers data on its
      own thread.  Subclasses override :meth:`_start_capture`,
      :meth:`_stop_capture` and :meth:`on_new_data`, which must end by
      calling :meth:`add_to_queue`.
    - **Poll-driven** (``poll`` given): a :class:`StreamWorker` calls
      ``poll`` once per ``1 / framerate`` seconds while streaming and queues
      whatever it returns.

    Args:
        name: Unique listener name within *registry*.
        sensor: Static description of the sensor.
        registry: Registry the name is claimed in.
        poll: Function producing one composite frame (or None) per call.
        framerate: Poll rate; defaults to the sensor's framerate.
        calibrated: Attach a :class:`SensorCalibration`.
        resize_factor: Scale applied to frames (and camera parameters).
        param_dir: Directory to load saved parameters from, if present.
        identity_name: Reference sensor for the extrinsic matrix.
        timeout: Seconds consumers wait for a frame.

    The name is released by :meth:`close` or, failing that, when the
    listener is garbage collected.

    Raises:
        DuplicateNameError: If *name* is already registered.
    """

    def __init__(
        self,
        name: str,
        sensor: SensorInterface,
        registry: ListenerRegistry,
        poll: PollFunction | None = None,
        framerate: float | None = None,
        calibrated: bool = True,
        resize_factor: float = 1.0,
        param_dir: str | Path | None = None,
        identity_name: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        if resize_factor <= 0:
            raise ValueError(f"resize_factor must be > 0, got {resize_factor}")
        if timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {timeout}")
        registry.register(name)
        # Releases the name if the listener is garbage collected without close()
        self._finalizer = weakref.finalize(self, registry.release, name)
        self._name = name
        self._sensor = sensor
        self._registry = registry
        self._poll = poll
        self._framerate = framerate if framerate is not None else sensor.framerate
        self._resize_factor = resize_factor
        self._timeout = timeout
        self._queue = FrameQueue()
        self._worker: StreamWorker | None = None
        self._streaming = False
        self._closed = False
        self._state_lock = threading.Lock()

        self._calibration: SensorCalibration | None = None
        if calibrated:
            self._calibration = SensorCalibration(
                name, sensor.default_cam_params(), resize_factor, identity_name
            )
            if param_dir is not None:
                self._load_saved_calibration(Path(param_dir))

        self._capabilities = ListenerCapabilities(
            has_calibration=calibrated, has_own_thread=poll is not None
        )
        logger.info("Created listener %r for %s", name, sensor.sensor_id.display_name)

    def _load_saved_calibration(self, param_dir: Path) -> None:
        try:
            self._calibration.load_parameters(param_dir)
        except FileNotFoundError:
            logger.debug("No saved parameters for %r in %s; using defaults", self._name, param_dir)
        if self._calibration.identity_name:
            try:
                self._calibration.load_extrinsic(param_dir)
            except FileNotFoundError:
                logger.debug("No saved extrinsic for %r in %s", self._name, param_dir)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def sensor(self) -> SensorInterface:
        return self._sensor

    @property
    def registry(self) -> ListenerRegistry:
        return self._registry

    @property
    def framerate(self) -> float:
        return self._framerate

    @property
    def resize_factor(self) -> float:
        return self._resize_factor

    @property
    def capabilities(self) -> ListenerCapabilities:
        return self._capabilities

    @property
    def calibration(self) -> SensorCalibration | None:
        return self._calibration

    @property
    def cam_params(self) -> CamParameters:
        """Camera parameters matching the frames this listener queues."""
        if self._calibration is not None:
            return self._calibration.cam_params
        return self._sensor.default_cam_params().scaled(self._resize_factor)

    @property
    def extrinsic(self) -> np.ndarray:
        if self._calibration is not None:
            return self._calibration.extrinsic
        return np.eye(4)

    @property
    def is_streaming(self) -> bool:
        with self._state_lock:
            return self._streaming

    @property
    def timeout(self) -> float:
        return self._timeout

    @timeout.setter
    def timeout(self, value: float) -> None:
        if value <= 0:
            raise ValueError(f"timeout must be > 0, got {value}")
        self._timeout = value

    @property
    def queue_size(self) -> int:
        return len(self._queue)

    # ------------------------------------------------------------------
    # Stream lifecycle
    # ------------------------------------------------------------------

    def start_stream(self) -> None:
        """Begin producing frames.

        Raises:
            StreamStateError: If the listener is already streaming.
        """
        with self._state_lock:
            if self._streaming:
                raise StreamStateError(f"Listener {self._name!r} is already streaming")
            old_worker = self._worker
        if old_worker is not None:
            # A loop that ended on its own may still be winding down
            old_worker.stop()

        with self._state_lock:
            self._streaming = True
            if self._poll is not None:
                worker = StreamWorker(
                    self._name,
                    self._poll,
                    self.add_to_queue,
                    self._framerate,
                    on_exit=lambda: self._worker_exited(worker),
                )
                self._worker = worker
        try:
            if self._poll is not None:
                worker.start()
            else:
                self._start_capture()
        except Exception:
            with self._state_lock:
                self._streaming = False
            raise
        logger.info("Listener %r started streaming", self._name)

    def stop_stream(self) -> None:
        """Stop producing frames.  Frames already queued stay available.

        Raises:
            StreamStateError: If the listener is not streaming.
        """
        with self._state_lock:
            if not self._streaming:
                raise StreamStateError(f"Listener {self._name!r} is not streaming")
            self._streaming = False
            worker = self._worker
        if worker is not None:
            worker.stop(timeout=self._timeout)
        else:
            self._stop_capture()
        logger.info("Listener %r stopped streaming", self._name)

    def end_stream(self) -> None:
        """End the stream from the producing side (e.g. end of recorded data).

        Unlike :meth:`stop_stream` this may be called from within the poll
        function and never raises for a listener that is not streaming.
        """
        with self._state_lock:
            was_streaming = self._streaming
            self._streaming = False
            worker = self._worker
        if worker is not None:
            worker.request_stop()
        elif was_streaming:
            self._stop_capture()
        if was_streaming:
            logger.info("Listener %r ended its stream", self._name)

    def _worker_exited(self, worker: StreamWorker) -> None:
        with self._state_lock:
            if self._worker is worker:
                self._streaming = False

    def _start_capture(self) -> None:
        """Hook: start the sensor SDK's own capture.  No-op by default."""

    def _stop_capture(self) -> None:
        """Hook: stop the sensor SDK's own capture.  No-op by default."""

    def on_new_data(self, data: Any) -> None:
        """Callback for SDK-delivered data; must end with :meth:`add_to_queue`."""
        raise NotImplementedError(f"{type(self).__name__} does not accept pushed data")

    # ------------------------------------------------------------------
    # Frames
    # ------------------------------------------------------------------

    def new_composite(self, timestamp: int | None = None) -> CompositeFrame:
        """Empty composite stamped now (or at *timestamp*) for this sensor."""
        return CompositeFrame(
            now_us() if timestamp is None else timestamp, self._sensor.rgb_mappable
        )

    def make_frame(self, frame_cls: type[DataFrame], data: np.ndarray | None = None) -> DataFrame:
        """Frame of *frame_cls* sharing this listener's calibration."""
        return frame_cls(data, self.cam_params, self.extrinsic)

    def add_to_queue(self, frame: CompositeFrame) -> None:
        self._queue.put(frame)

    def get_next_frame(self, timeout: float | None = None) -> CompositeFrame:
        """Oldest queued frame; waits up to the listener timeout if none.

        Raises:
            QueueTimeoutError: If nothing arrives in time.
        """
        try:
            return self._queue.get_next(self._timeout if timeout is None else timeout)
        except QueueTimeoutError:
            logger.debug("Listener %r timed out waiting for the next frame", self._name)
            raise

    def get_latest_frame(self, timeout: float | None = None) -> CompositeFrame:
        """Newest frame since the last read; older queued frames are dropped.

        Raises:
            QueueTimeoutError: If no new frame arrives in time.
        """
        try:
            return self._queue.get_latest(self._timeout if timeout is None else timeout)
        except QueueTimeoutError:
            logger.debug("Listener %r timed out waiting for a new frame", self._name)
            raise

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_sensor_info(self) -> dict[str, str]:
        return {
            "Name": self._name,
            "Sensor": self._sensor.sensor_id.display_name,
            "Framerate": f"{self._framerate:g}",
            "RGB mappable": str(self._sensor.rgb_mappable),
            "Resize factor": f"{self._resize_factor:g}",
        }

    def get_sensor_status(self) -> dict[str, list[str]]:
        """Sensor-specific status entries; empty unless a subclass reports some."""
        return {}

    def print_info_and_status(self, file: TextIO | None = None) -> None:
        out = file if file is not None else sys.stdout
        print(f"Listener {self._name}", file=out)
        for key, value in self.get_sensor_info().items():
            print(f"  {key}: {value}", file=out)
        print(f"  Streaming: {self.is_streaming}", file=out)
        print(f"  Queued frames: {self.queue_size}", file=out)
        for key, values in self.get_sensor_status().items():
            print(f"  {key}:", file=out)
            for value in values:
                print(f"    {value}", file=out)

    # ------------------------------------------------------------------
    # Dumping
    # ------------------------------------------------------------------

    def dump_stream(self, dump_dir: str | Path, max_frames: int | None = None) -> int:
        """Stream and write frames to *dump_dir* until the source goes quiet.

        Frames are numbered from 1 and written with
        :meth:`CompositeFrame.save_all`.  Stops after a consumer timeout or
        after *max_frames* frames.

        Returns:
            Number of composite frames written.
        """
        dump_dir = Path(dump_dir)
        dump_dir.mkdir(parents=True, exist_ok=True)
        written = 0
        self.start_stream()
        try:
            while max_frames is None or written < max_frames:
                try:
                    frame = self.get_latest_frame()
                except QueueTimeoutError:
                    break
                written += 1
                frame.save_all(dump_dir, written)
        finally:
            self.end_stream()
            if self._worker is not None:
                self._worker.stop(timeout=self._timeout)
        logger.info("Listener %r dumped %d frames to %s", self._name, written, dump_dir)
        return written

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Stop streaming and release the name.  Idempotent."""
        if self._closed:
            return
        self.end_stream()
        if self._worker is not None:
            self._worker.stop(timeout=self._timeout)
        self._finalizer()
        self._closed = True
        logger.info("Closed listener %r", self._name)

    def __enter__(self) -> SensorListener:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self._name!r}, "
            f"sensor={self._sensor.sensor_id.name}, streaming={self.is_streaming})"
        )
