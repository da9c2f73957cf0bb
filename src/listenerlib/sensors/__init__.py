"""Sensor contexts describing the hardware behind a listener."""

from listenerlib.sensors.base import PointCloudConditioning, SensorInterface
from listenerlib.sensors.cameras import DummyInterface, FlexxInterface, RealsenseInterface
from listenerlib.sensors.scanning_lidar import (
    CeptonInterface,
    MoviaInterface,
    ScanningLidarInterface,
)

__all__ = [
    "CeptonInterface",
    "DummyInterface",
    "FlexxInterface",
    "MoviaInterface",
    "PointCloudConditioning",
    "RealsenseInterface",
    "ScanningLidarInterface",
    "SensorInterface",
]
