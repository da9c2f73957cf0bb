"""SyntheticListener: a poll-driven DUMMY sensor for demos and tests."""

from __future__ import annotations

import logging

import numpy as np

from listenerlib.frames.composite import CompositeFrame
from listenerlib.frames.data_frame import GrayFrame, RGBFrame
from listenerlib.frames.grid import GridFrame
from listenerlib.frames.organizer import back_project
from listenerlib.listeners.base import SensorListener
from listenerlib.listeners.registry import ListenerRegistry
from listenerlib.sensors.cameras import DummyInterface

logger = logging.getLogger(__name__)


class SyntheticListener(SensorListener):
    """Generates a tilted plane in front of the camera on every poll.

    The plane sits ``base_depth`` metres away at the top image row and
    recedes by ``slope`` metres per row; it drifts by ``drift`` metres per
    frame so consecutive frames differ.  Each composite holds a point grid,
    its mask, a grayscale image of the normalized depth and an RGB image
    (red: column, green: row, blue: depth).
    """

    def __init__(
        self,
        name: str,
        registry: ListenerRegistry,
        sensor: DummyInterface | None = None,
        base_depth: float = 1.0,
        slope: float = 0.01,
        drift: float = 0.0,
        **kwargs,
    ) -> None:
        super().__init__(
            name, sensor or DummyInterface(), registry, poll=self._produce, **kwargs
        )
        self._base_depth = base_depth
        self._slope = slope
        self._drift = drift
        self._frame_count = 0

    @property
    def frame_count(self) -> int:
        """Number of composite frames produced so far."""
        return self._frame_count

    def _frame_shape(self) -> tuple[int, int]:
        params = self.cam_params
        return int(round(2 * params.cy)), int(round(2 * params.cx))

    def _produce(self) -> CompositeFrame:
        rows, cols = self._frame_shape()
        offset = self._base_depth + self._drift * self._frame_count
        depth = offset + self._slope * np.arange(rows, dtype=np.float64)[:, np.newaxis]
        depth = np.broadcast_to(depth, (rows, cols))
        grid = back_project(depth, self.cam_params.intrinsic)

        scale = float(depth.max()) or 1.0
        gray = (depth * 255.0 / scale).astype(np.uint8)
        rgb = np.empty((rows, cols, 3), dtype=np.uint8)
        rgb[..., 0] = np.linspace(0, 255, cols, dtype=np.uint8)[np.newaxis, :]
        rgb[..., 1] = np.linspace(0, 255, rows, dtype=np.uint8)[:, np.newaxis]
        rgb[..., 2] = gray

        composite = self.new_composite()
        composite.add_frame(GridFrame.frame_id, self.make_frame(GridFrame, grid))
        composite.add_frame(GrayFrame.frame_id, self.make_frame(GrayFrame, gray))
        composite.add_frame(RGBFrame.frame_id, self.make_frame(RGBFrame, rgb))
        self._frame_count += 1
        return composite

    def get_sensor_status(self) -> dict[str, list[str]]:
        return {"Frames produced": [str(self._frame_count)]}
