"""Typed data frames: one dense ``(rows, cols, channels)`` tensor per frame.

:class:`DataFrame` is the generic container; each concrete variant fixes the
semantic layer (:class:`~listenerlib.core.types.FrameID`), element dtype,
channel count and on-disk encoding.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, ClassVar

import cv2
import numpy as np

from listenerlib.core.errors import FormatError
from listenerlib.core.params import CamParameters
from listenerlib.core.types import FrameID
from listenerlib.sensors.base import SensorInterface

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff")


class DataFrame(ABC):
    """Generic sensor data frame.

    Holds the raw tensor together with shared references to the producing
    sensor's camera parameters and extrinsic matrix (pose relative to the
    identity sensor; stored for downstream consumers, not applied here).

    A frame created without data is an unallocated placeholder with
    ``rows == cols == channels == 0``.

    Args:
        data: Array of shape ``(rows, cols, channels)``, or ``(rows, cols)``
            for single-channel variants.  Converted to the variant dtype.
        cam_params: Shared camera parameters.
        extrinsic: Shared 4x4 extrinsic matrix.
        loaded_timestamp: Epoch microseconds carried by persisted data.
    """

    frame_id: ClassVar[FrameID]
    dtype: ClassVar[type]
    CHANNELS: ClassVar[int]
    EXTENSION: ClassVar[str]

    def __init__(
        self,
        data: np.ndarray | None = None,
        cam_params: CamParameters | None = None,
        extrinsic: np.ndarray | None = None,
        loaded_timestamp: int | None = None,
    ):
        self._cam_params = cam_params if cam_params is not None else CamParameters()
        self._extrinsic = extrinsic if extrinsic is not None else np.eye(4)
        self._loaded_timestamp = loaded_timestamp
        if data is None:
            self._data = np.zeros((0, 0, 0), dtype=self.dtype)
        else:
            self._data = self._coerce(data)

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_file(
        cls,
        file_path: str | Path,
        cam_params: CamParameters | None = None,
        extrinsic: np.ndarray | None = None,
        sensor: SensorInterface | None = None,
    ) -> DataFrame:
        """Create a frame and populate it with :meth:`load`."""
        frame = cls(cam_params=cam_params, extrinsic=extrinsic)
        frame.load(file_path, sensor)
        return frame

    def _coerce(self, data: Any) -> np.ndarray:
        arr = np.asarray(data)
        if arr.ndim == 2:
            arr = arr[..., np.newaxis]
        if arr.ndim != 3 or arr.shape[2] != self.CHANNELS:
            raise ValueError(
                f"{type(self).__name__} expects (rows, cols, {self.CHANNELS}) data, "
                f"got shape {arr.shape}"
            )
        return np.ascontiguousarray(arr, dtype=self.dtype)

    def _initialize(self, rows: int, cols: int, channels: int) -> None:
        self._data = np.zeros((rows, cols, channels), dtype=self.dtype)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def data(self) -> np.ndarray:
        return self._data

    @property
    def rows(self) -> int:
        return self._data.shape[0]

    @property
    def cols(self) -> int:
        return self._data.shape[1]

    @property
    def channels(self) -> int:
        return self._data.shape[2]

    @property
    def shape(self) -> tuple[int, int, int]:
        return self._data.shape

    @property
    def is_allocated(self) -> bool:
        return self._data.size > 0

    @property
    def cam_params(self) -> CamParameters:
        return self._cam_params

    @property
    def extrinsic(self) -> np.ndarray:
        return self._extrinsic

    @property
    def loaded_timestamp(self) -> int | None:
        """Epoch microseconds from persisted data, or None."""
        return self._loaded_timestamp

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------

    def as_cv_mat(self) -> np.ndarray:
        """Data in OpenCV layout (2-D for single-channel frames)."""
        if self.channels == 1:
            return self._data[..., 0]
        return self._data

    def _from_cv_mat(self, mat: np.ndarray) -> None:
        self._data = self._coerce(mat)

    def resize(self, factor: float) -> None:
        """Resample in place to ``round(rows * factor) x round(cols * factor)``.

        Uses nearest-neighbour interpolation so sharp edges (and exact
        depth values) are preserved.
        """
        if factor <= 0:
            raise ValueError(f"Resize factor must be > 0, got {factor}")
        if factor == 1.0 or not self.is_allocated:
            return
        new_rows = int(round(self.rows * factor))
        new_cols = int(round(self.cols * factor))
        if new_rows == 0 or new_cols == 0:
            raise ValueError(
                f"Resize factor {factor} collapses {self.rows}x{self.cols} frame"
            )
        resized = cv2.resize(
            self.as_cv_mat(), (new_cols, new_rows), interpolation=cv2.INTER_NEAREST
        )
        self._initialize(new_rows, new_cols, self.CHANNELS)
        self._from_cv_mat(resized)

    def nonzero_mask(self) -> np.ndarray:
        """``(rows, cols, 1)`` bool array, True where any channel is non-zero."""
        return np.any(self._data != 0, axis=2, keepdims=True)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, path_stem: str | Path) -> Path:
        """Write the frame to ``<path_stem><EXTENSION>`` and return that path."""
        path = Path(f"{path_stem}{self.EXTENSION}")
        self._write(path)
        logger.debug("Saved %s to %s", self.frame_id.tag, path)
        return path

    def load(self, file_path: str | Path, sensor: SensorInterface | None = None) -> None:
        """Replace the frame's data with the contents of *file_path*.

        Raises:
            FileNotFoundError: If the file does not exist.
            FormatError: If the encoding is unsupported or malformed.  The
                frame is left untouched.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Frame file not found: {path}")
        raw, timestamp = self._read(path, sensor)
        try:
            data = self._coerce(raw)
        except ValueError as exc:
            raise FormatError(f"{path}: {exc}") from exc
        self._data = data
        if timestamp is not None:
            self._loaded_timestamp = timestamp

    @abstractmethod
    def _write(self, path: Path) -> None: ...

    @abstractmethod
    def _read(
        self, path: Path, sensor: SensorInterface | None
    ) -> tuple[np.ndarray, int | None]: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(shape={self.shape})"


# ---------------------------------------------------------------------------
# Shared encodings
# ---------------------------------------------------------------------------


def _read_npy(path: Path) -> np.ndarray:
    if path.suffix != ".npy":
        raise FormatError(f"Unsupported file format for numeric frame: {path.suffix!r}")
    try:
        return np.load(path, allow_pickle=False)
    except (ValueError, OSError, EOFError) as exc:
        raise FormatError(f"Malformed .npy file {path}: {exc}") from exc


def _read_image(path: Path, flags: int) -> np.ndarray:
    if path.suffix.lower() not in IMAGE_EXTENSIONS:
        raise FormatError(f"Unsupported image format: {path.suffix!r}")
    mat = cv2.imread(str(path), flags)
    if mat is None:
        raise FormatError(f"Could not decode image file {path}")
    return mat


def _write_image(path: Path, mat: np.ndarray) -> None:
    if not cv2.imwrite(str(path), mat):
        raise OSError(f"Could not write image file {path}")


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------


class GrayFrame(DataFrame):
    """Normalized 8-bit grayscale (or infrared) image."""

    frame_id = FrameID.GRAYSCALE_IMAGE
    dtype = np.uint8
    CHANNELS = 1
    EXTENSION = ".png"

    def _write(self, path: Path) -> None:
        _write_image(path, self.as_cv_mat())

    def _read(self, path, sensor):
        return _read_image(path, cv2.IMREAD_GRAYSCALE), None


class RGBFrame(DataFrame):
    """8-bit color image, RGB channel order in memory (BGR on disk)."""

    frame_id = FrameID.RGB_IMAGE
    dtype = np.uint8
    CHANNELS = 3
    EXTENSION = ".png"

    def _write(self, path: Path) -> None:
        _write_image(path, cv2.cvtColor(self.as_cv_mat(), cv2.COLOR_RGB2BGR))

    def _read(self, path, sensor):
        mat = _read_image(path, cv2.IMREAD_COLOR)
        return cv2.cvtColor(mat, cv2.COLOR_BGR2RGB), None


class TempFrame(DataFrame):
    """Per-pixel temperature grid."""

    frame_id = FrameID.TEMPERATURE_GRID
    dtype = np.float32
    CHANNELS = 1
    EXTENSION = ".npy"

    def _write(self, path: Path) -> None:
        np.save(path, self._data)

    def _read(self, path, sensor):
        return _read_npy(path), None


class MaskFrame(DataFrame):
    """Boolean validity mask for an organized point cloud."""

    frame_id = FrameID.POINTCLOUD_MASK
    dtype = np.bool_
    CHANNELS = 1
    EXTENSION = ".npy"

    def as_cv_mat(self) -> np.ndarray:
        # OpenCV has no bool matrices
        return self._data[..., 0].astype(np.uint8) * 255

    def _from_cv_mat(self, mat: np.ndarray) -> None:
        self._data = self._coerce(np.asarray(mat) > 0)

    def _write(self, path: Path) -> None:
        np.save(path, self._data)

    def _read(self, path, sensor):
        return _read_npy(path), None
