"""CompositeFrame: every data frame captured by a sensor at one instant."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import numpy as np

from listenerlib.core.errors import FrameNotFoundError
from listenerlib.core.types import FrameID
from listenerlib.frames.data_frame import DataFrame, MaskFrame
from listenerlib.frames.pointcloud import PointCloud

logger = logging.getLogger(__name__)


class CompositeFrame:
    """Timestamped bundle of co-registered data frames, at most one per FrameID.

    Adding a ``POINTCLOUD_GRID`` to a composite without a
    ``POINTCLOUD_MASK`` also adds a mask that is True wherever the grid has
    a non-zero point.

    Once handed to a listener queue the composite belongs to whichever
    consumer pops it; it is not shared between threads afterwards.

    Args:
        timestamp: Epoch microseconds at which the data was acquired.
        rgb_mappable: Whether the RGB image is pixel-aligned with the grid.
    """

    def __init__(self, timestamp: int, rgb_mappable: bool = True):
        self._timestamp = int(timestamp)
        self._rgb_mappable = rgb_mappable
        self._frames: dict[FrameID, DataFrame] = {}

    @property
    def timestamp(self) -> int:
        return self._timestamp

    @property
    def rgb_mappable(self) -> bool:
        return self._rgb_mappable

    @property
    def frame_ids(self) -> list[FrameID]:
        return list(self._frames)

    def __len__(self) -> int:
        return len(self._frames)

    def __contains__(self, frame_id: object) -> bool:
        return frame_id in self._frames

    def __iter__(self) -> Iterator[FrameID]:
        return iter(self._frames)

    def __getitem__(self, frame_id: FrameID) -> np.ndarray:
        """Raw data array of the frame stored under *frame_id*."""
        return self.get_frame(frame_id).data

    def has(self, frame_id: FrameID) -> bool:
        return frame_id in self._frames

    def add_frame(self, frame_id: FrameID, frame: DataFrame) -> None:
        """Store *frame* under *frame_id*, replacing any previous one.

        A frame carrying a ``loaded_timestamp`` overrides this composite's
        timestamp.
        """
        if frame.frame_id is not frame_id:
            raise ValueError(
                f"Cannot store {type(frame).__name__} ({frame.frame_id.name}) "
                f"under {frame_id.name}"
            )
        mask = None
        if frame_id is FrameID.POINTCLOUD_GRID and not self.has(FrameID.POINTCLOUD_MASK):
            # Built before either insert so a failure leaves the composite unchanged
            mask = MaskFrame(frame.nonzero_mask(), frame.cam_params, frame.extrinsic)

        self._frames[frame_id] = frame
        if mask is not None:
            self._frames[FrameID.POINTCLOUD_MASK] = mask
        if frame.loaded_timestamp is not None:
            self._timestamp = frame.loaded_timestamp

    def get_frame(self, frame_id: FrameID) -> DataFrame:
        if frame_id not in self._frames:
            logger.error(
                "Tried to access a CompositeFrame's %s when it does not have one",
                frame_id.tag,
            )
            raise FrameNotFoundError(f"Frame ID {frame_id.name} not found in CompositeFrame")
        return self._frames[frame_id]

    def resize_all(self, factor: float) -> None:
        """Resize every frame except the point-cloud mask.

        The mask keeps its original resolution even when the grid it was
        derived from is resized.
        """
        if factor == 1.0:
            return
        for frame_id, frame in self._frames.items():
            if frame_id is FrameID.POINTCLOUD_MASK:
                continue
            frame.resize(factor)

    def save_all(self, save_dir: str | Path, frame_number: int) -> list[Path]:
        """Write every frame to ``<save_dir>/<tag>/<tag><frame_number>.<ext>``."""
        save_dir = Path(save_dir)
        written = []
        for frame_id, frame in self._frames.items():
            frame_dir = save_dir / frame_id.tag
            frame_dir.mkdir(parents=True, exist_ok=True)
            written.append(frame.save(frame_dir / f"{frame_id.tag}{frame_number}"))
        return written

    def to_point_cloud(self, sink: PointCloud | None = None) -> PointCloud:
        """Flatten the organized grid into an unorganized point cloud.

        Keeps pixels flagged by the mask, in row-major order.  When the
        composite is RGB-mappable and holds an RGB image, each kept point gets
        the color of its pixel.

        Args:
            sink: Point cloud to clear and refill; a new one is created if None.
        """
        grid = self.get_frame(FrameID.POINTCLOUD_GRID).data
        mask = self.get_frame(FrameID.POINTCLOUD_MASK).data[..., 0]
        if mask.shape != grid.shape[:2]:
            raise ValueError(
                f"Mask shape {mask.shape} does not match point grid {grid.shape[:2]}"
            )
        if sink is None:
            sink = PointCloud()
        sink.clear()
        sink.points = grid[mask].astype(np.float64)
        if self._rgb_mappable and self.has(FrameID.RGB_IMAGE):
            rgb = self.get_frame(FrameID.RGB_IMAGE).data
            sink.colors = rgb[mask].astype(np.float64)
        return sink

    def __repr__(self) -> str:
        tags = ", ".join(fid.tag for fid in self._frames)
        return f"CompositeFrame(timestamp={self._timestamp}, frames=[{tags}])"
