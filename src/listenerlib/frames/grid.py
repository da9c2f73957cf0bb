"""Organized point-cloud frame."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from listenerlib.core.errors import FormatError
from listenerlib.core.types import FrameID
from listenerlib.frames.data_frame import DataFrame
from listenerlib.frames.organizer import organize_point_cloud
from listenerlib.sensors.base import PointCloudConditioning, SensorInterface

logger = logging.getLogger(__name__)


class GridFrame(DataFrame):
    """float32 ``(rows, cols, 3)`` grid of camera-frame X/Y/Z points.

    Loads organized grids directly (``.npy``, ``.npz``) and organizes raw
    scanning LiDAR point sets (``.ply``) with
    :func:`~listenerlib.frames.organizer.organize_point_cloud`.
    """

    frame_id = FrameID.POINTCLOUD_GRID
    dtype = np.float32
    CHANNELS = 3
    EXTENSION = ".npy"

    def organize(self, points: np.ndarray, filter_size: int) -> None:
        """Fill the grid from an unorganized ``(N, 3)`` point set.

        The grid extent follows from the frame's intrinsic matrix (twice the
        principal point offsets).
        """
        self._data = organize_point_cloud(points, self._cam_params.intrinsic, filter_size)

    @property
    def depth(self) -> np.ndarray:
        """``(rows, cols)`` view of the Z channel."""
        return self._data[..., 2]

    def save_npz(self, path_stem: str | Path, timestamp: int) -> Path:
        """Write the grid with its acquisition timestamp (epoch microseconds).

        Loading the archive sets :attr:`loaded_timestamp`, which then
        overrides the timestamp of the composite frame it is added to.
        """
        path = Path(f"{path_stem}.npz")
        np.savez(path, grid=self._data, timestamp=np.int64(timestamp))
        return path

    def _write(self, path: Path) -> None:
        np.save(path, self._data)

    def _read(self, path: Path, sensor: SensorInterface | None):
        suffix = path.suffix.lower()
        if suffix == ".npy":
            try:
                return np.load(path, allow_pickle=False), None
            except (ValueError, OSError, EOFError) as exc:
                raise FormatError(f"Malformed .npy file {path}: {exc}") from exc
        if suffix == ".npz":
            return self._read_npz(path)
        if suffix == ".ply":
            return self._read_ply(path, sensor), None
        raise FormatError(f"Invalid file format loading point cloud data: {suffix!r}")

    def _read_npz(self, path: Path) -> tuple[np.ndarray, int | None]:
        try:
            archive = np.load(path, allow_pickle=False)
        except (ValueError, OSError, EOFError) as exc:
            raise FormatError(f"Malformed .npz file {path}: {exc}") from exc
        if isinstance(archive, np.ndarray):
            raise FormatError(f"{path} is a bare array, not an .npz archive")
        with archive:
            if "grid" not in archive.files:
                raise FormatError(f"{path} has no 'grid' array")
            grid = archive["grid"]
            timestamp = None
            if "timestamp" in archive.files:
                stamp = archive["timestamp"]
                if stamp.ndim != 0:
                    raise FormatError(f"{path} timestamp must be a scalar, got shape {stamp.shape}")
                try:
                    timestamp = int(stamp)
                except (TypeError, ValueError) as exc:
                    raise FormatError(f"{path} has a non-integer timestamp: {exc}") from exc
        return grid, timestamp

    def _read_ply(self, path: Path, sensor: SensorInterface | None) -> np.ndarray:
        if not isinstance(sensor, PointCloudConditioning):
            raise FormatError(
                "Loading an unorganized point cloud requires a sensor with "
                f"point-cloud conditioning, got {type(sensor).__name__}"
            )
        import open3d as o3d

        pcd = o3d.io.read_point_cloud(str(path), format="ply")
        points = np.asarray(pcd.points)
        if len(points) == 0:
            logger.warning("Point cloud file %s contains no points", path)
        points = sensor.condition_point_cloud(points)
        return organize_point_cloud(
            points, self._cam_params.intrinsic, sensor.get_filter_size()
        )
