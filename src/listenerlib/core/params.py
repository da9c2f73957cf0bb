"""Camera intrinsic parameters shared by every frame of one sensor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from listenerlib.core.errors import FormatError


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class CamParameters:
    """3x3 intrinsic matrix plus 5 distortion coefficients.

    Immutable after construction: both arrays are copied and marked
    read-only.  Rescaling returns a new instance, so the parameters can be
    shared by reference across all frames produced by one sensor.
    """

    intrinsic: np.ndarray = field(default_factory=lambda: np.eye(3))
    distortion: np.ndarray = field(default_factory=lambda: np.ones(5))

    def __post_init__(self) -> None:
        intrinsic = np.array(self.intrinsic, dtype=np.float64)
        distortion = np.array(self.distortion, dtype=np.float64).reshape(-1)
        if intrinsic.shape != (3, 3):
            raise ValueError(f"intrinsic must be 3x3, got shape {intrinsic.shape}")
        if distortion.shape != (5,):
            raise ValueError(f"distortion must have 5 elements, got {distortion.size}")
        object.__setattr__(self, "intrinsic", _readonly(intrinsic))
        object.__setattr__(self, "distortion", _readonly(distortion))

    @classmethod
    def from_focal(
        cls, fx: float, fy: float, cx: float, cy: float, distortion: Any = None
    ) -> CamParameters:
        intrinsic = np.array([[fx, 0.0, cx], [0.0, fy, cy], [0.0, 0.0, 1.0]])
        if distortion is None:
            distortion = np.ones(5)
        return cls(intrinsic=intrinsic, distortion=distortion)

    @property
    def fx(self) -> float:
        return float(self.intrinsic[0, 0])

    @property
    def fy(self) -> float:
        return float(self.intrinsic[1, 1])

    @property
    def cx(self) -> float:
        return float(self.intrinsic[0, 2])

    @property
    def cy(self) -> float:
        return float(self.intrinsic[1, 2])

    def scaled(self, factor: float) -> CamParameters:
        """Return parameters for images resized by *factor*.

        Only the top-left 2x3 block (focal lengths, skew, principal point)
        is scaled.
        """
        if factor == 1.0:
            return self
        intrinsic = self.intrinsic.copy()
        intrinsic[:2, :] *= factor
        return CamParameters(intrinsic=intrinsic, distortion=self.distortion)

    def to_dict(self) -> dict[str, Any]:
        return {
            "intrinsic": self.intrinsic.tolist(),
            "distortion": self.distortion.tolist(),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> CamParameters:
        """Build from a ``{"intrinsic": 3x3, "distortion": 5}`` document."""
        try:
            return cls(intrinsic=d["intrinsic"], distortion=d["distortion"])
        except (KeyError, TypeError, ValueError) as exc:
            raise FormatError(f"Malformed camera parameters: {exc}") from exc
