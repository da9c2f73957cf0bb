"""Core enumerations shared across listenerlib."""

from __future__ import annotations

import enum


class FrameID(enum.Enum):
    """Semantic layer of a data frame inside a CompositeFrame.

    The value is the tag used for directory and file names when frames are
    written to disk.
    """

    POINTCLOUD_GRID = "ptclGrid"  # float32 (M, N, 3) organized point cloud
    GRAYSCALE_IMAGE = "imgGray"  # uint8 (M, N, 1)
    RGB_IMAGE = "imgRGB"  # uint8 (M, N, 3)
    TEMPERATURE_GRID = "tempGrid"  # float32 (M, N, 1)
    POINTCLOUD_MASK = "imgDepthMask"  # bool (M, N, 1)

    @property
    def tag(self) -> str:
        return self.value

    @classmethod
    def from_tag(cls, tag: str) -> FrameID:
        try:
            return cls(tag)
        except ValueError:
            raise ValueError(f"Unknown frame tag: {tag!r}") from None


class SensorID(enum.Enum):
    """Physical sensor families known to listenerlib."""

    FLEXX = "FLEXX"
    REALSENSE = "RealSense"
    CEPTON = "Cepton"
    XIMEA = "Ximea"
    BOSON = "Boson"
    MOVIA = "Movia"
    DUMMY = "Dummy"
    NONE = "None"

    @property
    def display_name(self) -> str:
        return self.value

    @classmethod
    def from_display_name(cls, name: str) -> SensorID:
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown sensor name: {name!r}") from None
