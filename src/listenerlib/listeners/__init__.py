"""Sensor listeners and their concurrency core."""

from listenerlib.listeners.base import ListenerCapabilities, SensorListener
from listenerlib.listeners.buffer import BufferListener
from listenerlib.listeners.calibration import SensorCalibration
from listenerlib.listeners.queue import FrameQueue
from listenerlib.listeners.registry import ListenerRegistry
from listenerlib.listeners.saved import SavedListener
from listenerlib.listeners.synthetic import SyntheticListener
from listenerlib.listeners.worker import StreamWorker

__all__ = [
    "BufferListener",
    "FrameQueue",
    "ListenerCapabilities",
    "ListenerRegistry",
    "SavedListener",
    "SensorCalibration",
    "SensorListener",
    "StreamWorker",
    "SyntheticListener",
]
