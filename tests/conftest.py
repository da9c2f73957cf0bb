"""Shared pytest fixtures for listenerlib tests."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from omegaconf import OmegaConf

from listenerlib.core.params import CamParameters
from listenerlib.core.types import FrameID
from listenerlib.frames.composite import CompositeFrame
from listenerlib.frames.data_frame import GrayFrame, RGBFrame
from listenerlib.frames.grid import GridFrame
from listenerlib.listeners.registry import ListenerRegistry
from listenerlib.sensors.cameras import DummyInterface


@pytest.fixture
def project_root() -> Path:
    return Path(__file__).parent.parent


@pytest.fixture
def config_path(project_root: Path) -> Path:
    return project_root / "config" / "default.yaml"


@pytest.fixture
def default_config(config_path: Path):
    return OmegaConf.load(config_path)


@pytest.fixture
def registry() -> ListenerRegistry:
    return ListenerRegistry()


@pytest.fixture
def dummy_sensor() -> DummyInterface:
    """Small 16x12 synthetic sensor at 100 FPS so streams produce quickly."""
    return DummyInterface(width=16, height=12, framerate=100, focal=10.0)


@pytest.fixture
def cam_params() -> CamParameters:
    return CamParameters.from_focal(10.0, 10.0, 8.0, 6.0)


@pytest.fixture
def grid_data() -> np.ndarray:
    """12x16 point grid with a 4x4 block of valid points, the rest empty."""
    grid = np.zeros((12, 16, 3), dtype=np.float32)
    grid[4:8, 6:10] = [0.1, -0.2, 2.0]
    return grid


@pytest.fixture
def rgb_data() -> np.ndarray:
    rgb = np.zeros((12, 16, 3), dtype=np.uint8)
    rgb[..., 0] = 200
    rgb[4:8, 6:10] = [10, 20, 30]
    return rgb


@pytest.fixture
def composite(grid_data, rgb_data, cam_params) -> CompositeFrame:
    """Composite with grid (+ derived mask), grayscale and RGB frames."""
    comp = CompositeFrame(timestamp=1_700_000_000_000_000, rgb_mappable=True)
    comp.add_frame(FrameID.POINTCLOUD_GRID, GridFrame(grid_data, cam_params))
    comp.add_frame(FrameID.GRAYSCALE_IMAGE, GrayFrame(rgb_data[..., 0], cam_params))
    comp.add_frame(FrameID.RGB_IMAGE, RGBFrame(rgb_data, cam_params))
    return comp


def make_composite(index: int, timestamp: int | None = None) -> CompositeFrame:
    """Minimal composite whose grayscale pixel (0, 0) encodes *index*."""
    comp = CompositeFrame(timestamp if timestamp is not None else index, rgb_mappable=False)
    gray = np.zeros((2, 2), dtype=np.uint8)
    gray[0, 0] = index % 256
    comp.add_frame(FrameID.GRAYSCALE_IMAGE, GrayFrame(gray))
    return comp


@pytest.fixture
def frame_factory():
    return make_composite
