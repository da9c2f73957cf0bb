"""Sensor contexts: static descriptions of a connected or hypothetical sensor."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np

from listenerlib.core.params import CamParameters
from listenerlib.core.types import SensorID


@runtime_checkable
class PointCloudConditioning(Protocol):
    """Optional capability of sensors that emit unorganized point clouds.

    The point-cloud organizer requires it to know the filter window and how
    to clean raw points before projection.  Scanning LiDAR contexts
    implement it; any other sensor context may opt in.
    """

    def get_filter_size(self) -> int:
        """Extent of the floor-median window; ``<= 0`` disables filtering."""
        ...

    def condition_point_cloud(self, points: np.ndarray) -> np.ndarray:
        """Return a cleaned ``(N, 3)`` copy of *points* in the camera frame."""
        ...


class SensorInterface:
    """Information about a physical sensor needed by listeners and frames.

    Args:
        sensor_id: Sensor family.
        framerate: Nominal frames per second.
        rgb_mappable: Whether RGB data is pixel-aligned with the point grid.
    """

    def __init__(self, sensor_id: SensorID, framerate: int, rgb_mappable: bool):
        if framerate < 0:
            raise ValueError(f"framerate must be >= 0, got {framerate}")
        self._sensor_id = sensor_id
        self._framerate = framerate
        self._rgb_mappable = rgb_mappable

    @property
    def sensor_id(self) -> SensorID:
        return self._sensor_id

    @property
    def framerate(self) -> int:
        return self._framerate

    @property
    def rgb_mappable(self) -> bool:
        return self._rgb_mappable

    def default_cam_params(self) -> CamParameters:
        """Parameters used until calibrated ones are loaded."""
        return CamParameters()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(sensor_id={self._sensor_id.name}, "
            f"framerate={self._framerate}, rgb_mappable={self._rgb_mappable})"
        )
