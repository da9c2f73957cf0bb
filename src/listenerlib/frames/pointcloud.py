"""Unorganized point cloud produced from a composite frame."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


def _empty() -> np.ndarray:
    return np.empty((0, 3), dtype=np.float64)


@dataclass
class PointCloud:
    """Flat list of points with optional per-point colors.

    ``colors`` is either empty or index-aligned with ``points``.  Colors are
    kept in the 0-255 range of the source RGB frame.
    """

    points: np.ndarray = field(default_factory=_empty)
    colors: np.ndarray = field(default_factory=_empty)

    def __len__(self) -> int:
        return len(self.points)

    @property
    def has_colors(self) -> bool:
        return len(self.colors) > 0

    def clear(self) -> None:
        self.points = _empty()
        self.colors = _empty()

    def to_open3d(self):
        """Return an ``open3d.geometry.PointCloud`` (colors scaled to [0, 1])."""
        import open3d as o3d

        pcd = o3d.geometry.PointCloud()
        pcd.points = o3d.utility.Vector3dVector(self.points)
        if self.has_colors:
            pcd.colors = o3d.utility.Vector3dVector(self.colors / 255.0)
        return pcd
