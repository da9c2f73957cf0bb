"""Standardized frame data model."""

from listenerlib.frames.composite import CompositeFrame
from listenerlib.frames.data_frame import DataFrame, GrayFrame, MaskFrame, RGBFrame, TempFrame
from listenerlib.frames.grid import GridFrame
from listenerlib.frames.pointcloud import PointCloud

FRAME_CLASSES: dict = {
    cls.frame_id: cls for cls in (GridFrame, GrayFrame, RGBFrame, TempFrame, MaskFrame)
}

__all__ = [
    "CompositeFrame",
    "DataFrame",
    "FRAME_CLASSES",
    "GrayFrame",
    "GridFrame",
    "MaskFrame",
    "PointCloud",
    "RGBFrame",
    "TempFrame",
]
