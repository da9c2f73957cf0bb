"""Scanning LiDAR sensor contexts (Cepton, Movia)."""

from __future__ import annotations

import logging
import math
from typing import ClassVar

import numpy as np

from listenerlib.core.params import CamParameters
from listenerlib.core.types import SensorID
from listenerlib.sensors.base import SensorInterface

logger = logging.getLogger(__name__)


class ScanningLidarInterface(SensorInterface):
    """Context for a scanning LiDAR whose output must be organized.

    Implements :class:`~listenerlib.sensors.base.PointCloudConditioning`.
    Each subclass provides ``MODE_TABLE``, mapping an operating mode to the
    virtual camera used for organizing (``focal``, ``width``, ``height``)
    and the floor-median ``filter_size``.

    Args:
        sensor_id: Sensor family.
        framerate: Nominal frames per second.
        mode: Operating mode, a key of ``MODE_TABLE``.
        apply_processing: Crop the virtual image and filter the depth when
            organizing.  When False the filter is disabled.
        vertical_crop_ratio: Fraction of the frame height kept when processing.
        aspect_ratio: Width/height ratio of the processed frame.
    """

    MODE_TABLE: ClassVar[dict[int, dict[str, float]]] = {
        0: {"focal": 86.6, "width": 100.0, "height": 100.0, "filter_size": 1.0},
    }

    def __init__(
        self,
        sensor_id: SensorID,
        framerate: int,
        mode: int = 0,
        apply_processing: bool = True,
        vertical_crop_ratio: float = 1.0,
        aspect_ratio: float = 1.0,
    ):
        super().__init__(sensor_id, framerate, rgb_mappable=False)
        if mode not in self.MODE_TABLE:
            raise ValueError(
                f"Invalid mode {mode} for {type(self).__name__}; "
                f"expected one of {sorted(self.MODE_TABLE)}"
            )
        self._mode = mode
        self._apply_processing = apply_processing
        self._crop_ratio = vertical_crop_ratio
        self._aspect_ratio = aspect_ratio
        self._properties = dict(self.MODE_TABLE[mode])

    @property
    def mode(self) -> int:
        return self._mode

    @property
    def apply_processing(self) -> bool:
        return self._apply_processing

    def get_filter_size(self) -> int:
        if self._apply_processing:
            return int(self._properties["filter_size"])
        return 0

    def default_cam_params(self) -> CamParameters:
        focal = self._properties["focal"]
        height = self._properties["height"]
        if self._apply_processing:
            cx = math.floor(height * self._crop_ratio * self._aspect_ratio / 2.0)
            cy = math.floor(height * self._crop_ratio / 2.0)
        else:
            cx = self._properties["width"] / 2.0
            cy = height / 2.0
        return CamParameters.from_focal(focal, focal, cx, cy)

    def condition_point_cloud(self, points: np.ndarray) -> np.ndarray:
        return np.asarray(points, dtype=np.float64).reshape(-1, 3)


class CeptonInterface(ScanningLidarInterface):
    """Cepton scanning LiDAR."""

    MODE_TABLE: ClassVar[dict[int, dict[str, float]]] = {
        0: {"focal": 86.6, "width": 100.0, "height": 36.0, "filter_size": 1.0},
        1: {"focal": 216.5, "width": 250.0, "height": 92.0, "filter_size": 3.0},
        2: {"focal": 433.0, "width": 500.0, "height": 184.0, "filter_size": 5.0},
        3: {"focal": 649.4, "width": 750.0, "height": 276.0, "filter_size": 7.0},
        4: {"focal": 866.0, "width": 1000.0, "height": 368.0, "filter_size": 7.0},
    }

    def __init__(self, mode: int = 0, framerate: int = 10, apply_processing: bool = True):
        super().__init__(
            SensorID.CEPTON,
            framerate,
            mode,
            apply_processing,
            vertical_crop_ratio=0.85,
            aspect_ratio=1.5,
        )


class MoviaInterface(ScanningLidarInterface):
    """Movia scanning LiDAR.

    Raw Movia points are reported as (depth, x, y); conditioning reorders
    them to camera convention and drops returns outside the usable range.
    """

    MODE_TABLE: ClassVar[dict[int, dict[str, float]]] = {
        0: {"focal": 86.6, "width": 100.0, "height": 58.0, "filter_size": 1.0},
        1: {"focal": 216.5, "width": 250.0, "height": 146.0, "filter_size": 3.0},
        2: {"focal": 433.0, "width": 500.0, "height": 294.0, "filter_size": 5.0},
        3: {"focal": 649.4, "width": 750.0, "height": 440.0, "filter_size": 7.0},
        4: {"focal": 866.0, "width": 1000.0, "height": 588.0, "filter_size": 7.0},
    }

    MIN_DEPTH_M = 0.2
    MAX_DEPTH_M = 84.0

    def __init__(self, mode: int = 0, framerate: int = 10, apply_processing: bool = True):
        super().__init__(SensorID.MOVIA, framerate, mode, apply_processing)

    def condition_point_cloud(self, points: np.ndarray) -> np.ndarray:
        points = super().condition_point_cloud(points)
        if len(points) == 0:
            return points
        # np.unique sorts; keep first-occurrence order for determinism
        _, first = np.unique(points, axis=0, return_index=True)
        points = points[np.sort(first)]
        reordered = points[:, [1, 2, 0]]
        depth = reordered[:, 2]
        keep = (depth > self.MIN_DEPTH_M) & (depth < self.MAX_DEPTH_M)
        logger.debug(
            "Movia conditioning kept %d of %d points", int(keep.sum()), len(points)
        )
        return reordered[keep]
