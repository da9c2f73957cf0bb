"""Organize unorganized point clouds into pixel-indexed grids.

Scanning LiDARs return sparse, irregularly spaced points.  Projecting them
through a virtual pinhole camera and scattering them into pixels leaves most
cells empty, so depth is optionally densified with a *floor median* filter:
every pixel takes the lower median of the positive depths in a square window
around it.  Only order statistics are selected, never averages, so no depth
is invented between a foreground and a background surface and the result is
biased toward the nearer surface at sparse edges.
"""

from __future__ import annotations

import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def floor_median(window: np.ndarray) -> float:
    """Lower median of the strictly positive values in *window*.

    Returns 0.0 when the window holds no positive value.  For an odd count
    this is the median; for an even count, the lower of the two center values.
    """
    values = np.asarray(window, dtype=np.float64).ravel()
    values = values[values > 0]
    if values.size == 0:
        return 0.0
    values.sort(kind="stable")
    return float(values[(values.size - 1) // 2])


def floor_median_filter(depth: np.ndarray, kernel_size: int) -> np.ndarray:
    """Apply :func:`floor_median` over a ``kernel_size`` square window per pixel.

    Windows are centered on each pixel and clipped at the image borders
    (padding contributes zeros, which are ignored).

    Args:
        depth: ``(rows, cols)`` depth image; non-positive values mean no data.
        kernel_size: Window extent in pixels, expected odd.

    Returns:
        Filtered ``(rows, cols)`` depth image with the input dtype.
    """
    depth = np.asarray(depth)
    if depth.ndim != 2:
        raise ValueError(f"depth must be 2-D, got shape {depth.shape}")
    if kernel_size <= 0:
        raise ValueError(f"kernel_size must be > 0, got {kernel_size}")
    if depth.size == 0:
        return depth.copy()

    half = kernel_size // 2
    extent = 2 * half + 1
    padded = np.pad(depth, half, mode="constant", constant_values=0)
    windows = np.lib.stride_tricks.sliding_window_view(padded, (extent, extent))
    windows = windows.reshape(depth.shape[0], depth.shape[1], extent * extent)

    # Push non-positive samples to the end of each sorted window
    samples = np.where(windows > 0, windows, np.inf)
    samples = np.sort(samples, axis=-1, kind="stable")
    counts = np.count_nonzero(windows > 0, axis=-1)

    index = np.maximum(counts - 1, 0) // 2
    picked = np.take_along_axis(samples, index[..., None], axis=-1)[..., 0]
    filtered = np.where(counts > 0, picked, 0.0)
    return filtered.astype(depth.dtype, copy=False)


def project_points(points: np.ndarray, intrinsic: np.ndarray) -> np.ndarray:
    """Pinhole-project camera-frame points to ``(N, 2)`` pixel coordinates.

    Rotation, translation and distortion are all zero at this stage.
    """
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    if len(points) == 0:
        return np.empty((0, 2), dtype=np.float64)
    pixels, _ = cv2.projectPoints(
        points,
        np.zeros(3),
        np.zeros(3),
        np.asarray(intrinsic, dtype=np.float64),
        np.zeros(5),
    )
    return pixels.reshape(-1, 2)


def back_project(depth: np.ndarray, intrinsic: np.ndarray) -> np.ndarray:
    """Inverse pinhole model: ``(rows, cols)`` depth -> ``(rows, cols, 3)`` XYZ."""
    rows, cols = depth.shape
    fx, fy = intrinsic[0, 0], intrinsic[1, 1]
    cx, cy = intrinsic[0, 2], intrinsic[1, 2]
    v, u = np.mgrid[0:rows, 0:cols]
    z = depth.astype(np.float64)
    x = (u - cx) * z / fx
    y = (v - cy) * z / fy
    return np.stack([x, y, z], axis=-1)


def organize_point_cloud(
    points: np.ndarray, intrinsic: np.ndarray, filter_size: int
) -> np.ndarray:
    """Convert an unorganized point set into a dense ``(rows, cols, 3)`` grid.

    The grid is sized so the principal point sits at its center:
    ``rows = int(2 * cy)``, ``cols = int(2 * cx)``.  Points projecting
    outside the grid are dropped.  With ``filter_size <= 0`` each remaining
    point's XYZ is written into its pixel (later points overwrite earlier
    ones).  Otherwise the projected depths are floor-median filtered and
    back-projected, and XYZ is written only where the filtered depth is
    non-zero.

    Args:
        points: ``(N, 3)`` camera-frame points.
        intrinsic: 3x3 intrinsic matrix of the virtual camera.
        filter_size: Floor-median window extent; ``<= 0`` disables filtering.

    Returns:
        float32 grid of shape ``(rows, cols, 3)``; empty cells are zero.
    """
    intrinsic = np.asarray(intrinsic, dtype=np.float64)
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    rows = int(intrinsic[1, 2] * 2)
    cols = int(intrinsic[0, 2] * 2)
    grid = np.zeros((rows, cols, 3), dtype=np.float32)

    pixels = project_points(points, intrinsic)
    u, v = pixels[:, 0], pixels[:, 1]
    inside = (u >= 0) & (u < cols) & (v >= 0) & (v < rows)
    valid_points = points[inside]
    cols_idx = u[inside].astype(np.intp)
    rows_idx = v[inside].astype(np.intp)
    logger.debug(
        "Organizing %d points into %dx%d grid (%d in bounds, filter=%d)",
        len(points),
        rows,
        cols,
        len(valid_points),
        filter_size,
    )

    if filter_size <= 0:
        grid[rows_idx, cols_idx] = valid_points
        return grid

    depth = np.zeros((rows, cols), dtype=np.float32)
    depth[rows_idx, cols_idx] = valid_points[:, 2]
    filtered = floor_median_filter(depth, filter_size)

    xyz = back_project(filtered, intrinsic)
    hit = filtered > 0
    grid[hit] = xyz[hit]
    return grid
