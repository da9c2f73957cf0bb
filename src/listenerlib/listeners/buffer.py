"""BufferListener: follows a directory another process writes point grids into."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from listenerlib.frames.composite import CompositeFrame
from listenerlib.frames.data_frame import GrayFrame, RGBFrame
from listenerlib.frames.grid import GridFrame
from listenerlib.listeners.base import SensorListener
from listenerlib.listeners.registry import ListenerRegistry
from listenerlib.sensors.base import SensorInterface
from listenerlib.utils.files import list_data_files

logger = logging.getLogger(__name__)

BUFFER_SUFFIXES = (".npy", ".npz", ".ply")


def depth_to_gray(depth: np.ndarray) -> np.ndarray:
    """Scale depth so its maximum maps to 255; an all-zero image stays zero."""
    depth_max = float(depth.max()) if depth.size else 0.0
    if depth_max == 0:
        depth_max = 1.0
    scaled = np.clip(depth * 255.0 / depth_max, 0, 255)
    return scaled.astype(np.uint8)


class BufferListener(SensorListener):
    """Streams the second-newest point-grid file of a buffer directory.

    The newest file (natural order) may still be being written, so each
    poll looks at the one before it.  Nothing is queued while the buffer
    holds fewer than two files or when that file was already processed.
    Grayscale and RGB images are derived from the grid's normalized depth.
    """

    def __init__(
        self,
        buffer_dir: str | Path,
        sensor: SensorInterface,
        name: str,
        registry: ListenerRegistry,
        resize_factor: float = 1.0,
        **kwargs,
    ) -> None:
        super().__init__(
            name, sensor, registry, poll=self._poll_buffer, resize_factor=resize_factor, **kwargs
        )
        self._buffer_dir = Path(buffer_dir)
        self._prev_file: Path | None = None

    @property
    def buffer_dir(self) -> Path:
        return self._buffer_dir

    @property
    def last_file(self) -> Path | None:
        """Buffer file most recently turned into a frame."""
        return self._prev_file

    def _poll_buffer(self) -> CompositeFrame | None:
        files = list_data_files(self._buffer_dir, BUFFER_SUFFIXES)
        if len(files) < 2:
            return None
        current = files[-2]
        if current == self._prev_file:
            return None
        self._prev_file = current

        grid = GridFrame.from_file(current, self.cam_params, self.extrinsic, self.sensor)
        gray = depth_to_gray(grid.depth)
        rgb = np.repeat(gray[..., np.newaxis], 3, axis=2)

        composite = self.new_composite()
        composite.add_frame(GrayFrame.frame_id, self.make_frame(GrayFrame, gray))
        composite.add_frame(RGBFrame.frame_id, self.make_frame(RGBFrame, rgb))
        composite.add_frame(GridFrame.frame_id, grid)
        # PLY scans are organized directly at the scaled resolution
        if current.suffix.lower() != ".ply":
            composite.resize_all(self.resize_factor)
        logger.debug("Listener %r queued buffer file %s", self.name, current.name)
        return composite

    def get_sensor_status(self) -> dict[str, list[str]]:
        last = self._prev_file.name if self._prev_file is not None else "none"
        return {"Buffer directory": [str(self._buffer_dir)], "Last file": [last]}
