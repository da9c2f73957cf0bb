"""Tests for listenerlib.listeners.saved — SavedListener replay."""

from __future__ import annotations

import logging
import time

import numpy as np
import pytest

from listenerlib.core.errors import FormatError
from listenerlib.core.params import CamParameters
from listenerlib.core.types import FrameID
from listenerlib.frames.composite import CompositeFrame
from listenerlib.frames.data_frame import GrayFrame
from listenerlib.frames.grid import GridFrame
from listenerlib.listeners.calibration import SensorCalibration
from listenerlib.listeners.saved import SavedListener
from listenerlib.sensors import CeptonInterface


def _record(directory, count: int, shape=(12, 16)) -> None:
    """Write *count* composites whose grayscale value and depth encode the index."""
    for n in range(1, count + 1):
        comp = CompositeFrame(n)
        grid = np.zeros((*shape, 3), dtype=np.float32)
        grid[..., 2] = n
        comp.add_frame(FrameID.POINTCLOUD_GRID, GridFrame(grid))
        comp.add_frame(FrameID.GRAYSCALE_IMAGE, GrayFrame(np.full(shape, n, dtype=np.uint8)))
        comp.save_all(directory, n)


def _wait_until(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


class TestSavedListener:
    def test_replays_in_natural_order(self, tmp_path, dummy_sensor, registry):
        _record(tmp_path, 11)
        listener = SavedListener(
            [FrameID.GRAYSCALE_IMAGE], tmp_path, dummy_sensor, "replay", registry
        )
        with listener:
            assert listener.num_files == 11
            values = [int(listener._next_frame()[FrameID.GRAYSCALE_IMAGE][0, 0, 0]) for _ in range(11)]
        assert values == list(range(1, 12))

    def test_stream_ends_at_end_of_data(self, tmp_path, dummy_sensor, registry):
        _record(tmp_path, 3)
        listener = SavedListener(
            [FrameID.GRAYSCALE_IMAGE, FrameID.POINTCLOUD_GRID],
            tmp_path,
            dummy_sensor,
            "replay",
            registry,
        )
        with listener:
            listener.start_stream()
            assert _wait_until(lambda: not listener.is_streaming)
            frames = [listener.get_next_frame(0.5) for _ in range(3)]
            assert listener.queue_size == 0
        depths = [float(f[FrameID.POINTCLOUD_GRID][0, 0, 2]) for f in frames]
        assert depths == [1.0, 2.0, 3.0]
        assert all(f.has(FrameID.POINTCLOUD_MASK) for f in frames)

    def test_repeat_last_frame(self, tmp_path, dummy_sensor, registry, caplog):
        _record(tmp_path, 2)
        listener = SavedListener(
            [FrameID.GRAYSCALE_IMAGE], tmp_path, dummy_sensor, "replay", registry, repeat=True
        )
        with listener, caplog.at_level(logging.INFO, logger="listenerlib"):
            values = [int(listener._next_frame()[FrameID.GRAYSCALE_IMAGE][0, 0, 0]) for _ in range(5)]
            assert listener.is_streaming is False  # never started
        assert values == [1, 2, 2, 2, 2]
        assert caplog.text.count("repeating last frame") == 1

    def test_resize(self, tmp_path, dummy_sensor, registry):
        _record(tmp_path, 1)
        listener = SavedListener(
            [FrameID.POINTCLOUD_GRID], tmp_path, dummy_sensor, "replay", registry, resize_factor=0.5
        )
        with listener:
            frame = listener._next_frame()
        assert frame.get_frame(FrameID.POINTCLOUD_GRID).shape == (6, 8, 3)
        # the derived mask keeps the recorded resolution
        assert frame.get_frame(FrameID.POINTCLOUD_MASK).shape == (12, 16, 1)

    def test_loads_parameters_from_data_dir(self, tmp_path, dummy_sensor, registry):
        _record(tmp_path, 1)
        params = CamParameters.from_focal(300.0, 300.0, 8.0, 6.0)
        SensorCalibration("replay", params).save_parameters(tmp_path)
        listener = SavedListener(
            [FrameID.GRAYSCALE_IMAGE], tmp_path, dummy_sensor, "replay", registry
        )
        with listener:
            frame = listener._next_frame().get_frame(FrameID.GRAYSCALE_IMAGE)
            assert frame.cam_params.fx == 300.0

    def test_missing_frame_directory(self, tmp_path, dummy_sensor, registry):
        _record(tmp_path, 1)
        with pytest.raises(FileNotFoundError):
            SavedListener([FrameID.RGB_IMAGE], tmp_path, dummy_sensor, "replay", registry)
        assert "replay" not in registry

    def test_empty_frame_directory(self, tmp_path, dummy_sensor, registry):
        (tmp_path / "imgRGB").mkdir()
        with pytest.raises(FileNotFoundError, match="No saved imgRGB"):
            SavedListener([FrameID.RGB_IMAGE], tmp_path, dummy_sensor, "replay", registry)

    def test_status(self, tmp_path, dummy_sensor, registry):
        _record(tmp_path, 2)
        with SavedListener(
            [FrameID.GRAYSCALE_IMAGE], tmp_path, dummy_sensor, "replay", registry
        ) as listener:
            assert listener.get_sensor_status()["Position"] == ["1/2"]


class TestSavedRawPointClouds:
    def test_raw_mode_requires_conditioning(self, tmp_path, dummy_sensor, registry):
        (tmp_path / "scan1.ply").write_text("ply\n")
        with SavedListener([], tmp_path, dummy_sensor, "raw", registry) as listener:
            with pytest.raises(FormatError):
                listener._next_frame()

    def test_raw_mode_ignores_other_files(self, tmp_path, registry):
        (tmp_path / "scan1.ply").write_text("ply\n")
        (tmp_path / "raw_parameters.json").write_text("{}")
        with SavedListener([], tmp_path, CeptonInterface(), "raw", registry, param_dir=None) as listener:
            assert listener.num_files == 1

    def test_raw_mode_organizes_scans(self, tmp_path, registry):
        o3d = pytest.importorskip("open3d")
        sensor = CeptonInterface(mode=0, apply_processing=False)
        for n in (1, 2):
            pcd = o3d.geometry.PointCloud()
            pcd.points = o3d.utility.Vector3dVector(np.array([[0.0, 0.0, float(n)]]))
            o3d.io.write_point_cloud(str(tmp_path / f"scan{n}.ply"), pcd)
        with SavedListener([], tmp_path, sensor, "raw", registry) as listener:
            frame = listener._next_frame()
        grid = frame[FrameID.POINTCLOUD_GRID]
        assert grid.shape == (36, 100, 3)
        assert grid[18, 50, 2] == pytest.approx(1.0)
