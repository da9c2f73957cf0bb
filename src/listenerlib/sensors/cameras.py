"""Sensor contexts for organized-output cameras (FLEXX, RealSense, synthetic)."""

from __future__ import annotations

from listenerlib.core.params import CamParameters
from listenerlib.core.types import SensorID
from listenerlib.sensors.base import SensorInterface

# FLEXX2 use-case mode -> framerate
FLEXX_MODE_FRAMERATES = {8: 5, 4: 10, 5: 15, 6: 20, 7: 30}

# 0 lets the RealSense SDK pick its default
REALSENSE_WIDTHS = (1280, 848, 640, 480, 424, 256, 0)
REALSENSE_HEIGHTS = (800, 720, 480, 360, 270, 240, 144, 100, 0)
REALSENSE_FRAMERATES = (5, 6, 15, 30, 60, 90, 100, 0)


class FlexxInterface(SensorInterface):
    """pmd FLEXX2 time-of-flight camera."""

    def __init__(self, mode: int = 4):
        if mode not in FLEXX_MODE_FRAMERATES:
            raise ValueError(
                f"Invalid FLEXX mode {mode}; expected one of {sorted(FLEXX_MODE_FRAMERATES)}"
            )
        super().__init__(SensorID.FLEXX, FLEXX_MODE_FRAMERATES[mode], rgb_mappable=False)
        self._mode = mode

    @property
    def mode(self) -> int:
        return self._mode


class RealsenseInterface(SensorInterface):
    """Intel RealSense stereo depth camera (color aligned to depth)."""

    def __init__(self, width: int = 0, height: int = 0, framerate: int = 0):
        if (
            width not in REALSENSE_WIDTHS
            or height not in REALSENSE_HEIGHTS
            or framerate not in REALSENSE_FRAMERATES
        ):
            raise ValueError(
                f"Invalid RealSense settings: {width}x{height} @ {framerate} FPS"
            )
        super().__init__(SensorID.REALSENSE, framerate, rgb_mappable=True)
        self._width = width
        self._height = height

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height


class DummyInterface(SensorInterface):
    """Synthetic sensor used for emulation, demos and tests.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        framerate: Nominal frames per second.
        focal: Focal length in pixels; the principal point is the image center.
    """

    def __init__(
        self,
        width: int = 64,
        height: int = 48,
        framerate: int = 30,
        focal: float = 50.0,
        rgb_mappable: bool = True,
    ):
        if width <= 0 or height <= 0:
            raise ValueError(f"Resolution must be positive, got {width}x{height}")
        super().__init__(SensorID.DUMMY, framerate, rgb_mappable=rgb_mappable)
        self._width = width
        self._height = height
        self._focal = focal

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def default_cam_params(self) -> CamParameters:
        return CamParameters.from_focal(
            self._focal, self._focal, self._width / 2.0, self._height / 2.0
        )
