"""Tests for listenerlib.listeners.buffer — BufferListener."""

from __future__ import annotations

import numpy as np
import pytest

from listenerlib.core.types import FrameID
from listenerlib.frames.grid import GridFrame
from listenerlib.listeners.buffer import BufferListener, depth_to_gray


def _write_grid(directory, n: int, depth: float) -> None:
    grid = np.zeros((12, 16, 3), dtype=np.float32)
    grid[2:6, 2:6, 2] = depth
    grid[0, 0, 2] = depth / 2
    GridFrame(grid).save(directory / f"grid{n}")


class TestDepthToGray:
    def test_max_maps_to_255(self):
        gray = depth_to_gray(np.array([[0.0, 1.0], [2.0, 4.0]]))
        assert gray.dtype == np.uint8
        assert gray.tolist() == [[0, 63], [127, 255]]

    def test_all_zero(self):
        assert not depth_to_gray(np.zeros((3, 3))).any()


class TestBufferListener:
    def test_needs_two_files(self, tmp_path, dummy_sensor, registry):
        _write_grid(tmp_path, 1, 2.0)
        with BufferListener(tmp_path, dummy_sensor, "buf", registry) as listener:
            assert listener._poll_buffer() is None

    def test_takes_second_newest(self, tmp_path, dummy_sensor, registry):
        for n, depth in ((1, 2.0), (2, 3.0), (10, 4.0)):
            _write_grid(tmp_path, n, depth)
        with BufferListener(tmp_path, dummy_sensor, "buf", registry) as listener:
            frame = listener._poll_buffer()
            assert listener.last_file.name == "grid2.npy"
        assert frame[FrameID.POINTCLOUD_GRID][3, 3, 2] == pytest.approx(3.0)

    def test_same_file_not_reprocessed(self, tmp_path, dummy_sensor, registry):
        _write_grid(tmp_path, 1, 2.0)
        _write_grid(tmp_path, 2, 3.0)
        with BufferListener(tmp_path, dummy_sensor, "buf", registry) as listener:
            assert listener._poll_buffer() is not None
            assert listener._poll_buffer() is None
            _write_grid(tmp_path, 3, 5.0)
            frame = listener._poll_buffer()
        assert frame is not None
        assert frame[FrameID.POINTCLOUD_GRID][3, 3, 2] == pytest.approx(3.0)

    def test_derived_images(self, tmp_path, dummy_sensor, registry):
        _write_grid(tmp_path, 1, 2.0)
        _write_grid(tmp_path, 2, 3.0)
        with BufferListener(tmp_path, dummy_sensor, "buf", registry) as listener:
            frame = listener._poll_buffer()
        gray = frame[FrameID.GRAYSCALE_IMAGE][..., 0]
        rgb = frame[FrameID.RGB_IMAGE]
        assert gray[3, 3] == 255
        assert gray[0, 0] == 127
        assert gray[10, 10] == 0
        np.testing.assert_array_equal(rgb[..., 0], gray)
        np.testing.assert_array_equal(rgb[..., 2], gray)
        assert frame.has(FrameID.POINTCLOUD_MASK)

    def test_resize(self, tmp_path, dummy_sensor, registry):
        _write_grid(tmp_path, 1, 2.0)
        _write_grid(tmp_path, 2, 3.0)
        with BufferListener(tmp_path, dummy_sensor, "buf", registry, resize_factor=0.5) as listener:
            frame = listener._poll_buffer()
        assert frame[FrameID.GRAYSCALE_IMAGE].shape == (6, 8, 1)
        assert frame[FrameID.POINTCLOUD_GRID].shape == (6, 8, 3)

    def test_streams_from_directory(self, tmp_path, dummy_sensor, registry):
        _write_grid(tmp_path, 1, 2.0)
        _write_grid(tmp_path, 2, 3.0)
        with BufferListener(tmp_path, dummy_sensor, "buf", registry) as listener:
            listener.start_stream()
            frame = listener.get_latest_frame(2.0)
            listener.stop_stream()
        assert frame[FrameID.POINTCLOUD_GRID][3, 3, 2] == pytest.approx(2.0)

    def test_missing_directory_raises(self, tmp_path, dummy_sensor, registry):
        with BufferListener(tmp_path / "absent", dummy_sensor, "buf", registry) as listener:
            with pytest.raises(FileNotFoundError):
                listener._poll_buffer()
