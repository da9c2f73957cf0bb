"""Tests for listenerlib.listeners.synthetic — SyntheticListener."""

from __future__ import annotations

import numpy as np
import pytest

from listenerlib.core.types import FrameID
from listenerlib.listeners.synthetic import SyntheticListener


class TestSyntheticListener:
    def test_composite_contents(self, dummy_sensor, registry):
        with SyntheticListener("synth", registry, dummy_sensor) as listener:
            listener.start_stream()
            frame = listener.get_latest_frame(2.0)
            listener.stop_stream()
        assert set(frame.frame_ids) == {
            FrameID.POINTCLOUD_GRID,
            FrameID.POINTCLOUD_MASK,
            FrameID.GRAYSCALE_IMAGE,
            FrameID.RGB_IMAGE,
        }
        grid = frame[FrameID.POINTCLOUD_GRID]
        assert grid.shape == (12, 16, 3)
        assert frame[FrameID.POINTCLOUD_MASK].all()
        assert frame.rgb_mappable

    def test_plane_geometry(self, dummy_sensor, registry):
        listener = SyntheticListener("synth", registry, dummy_sensor, base_depth=2.0, slope=0.5)
        with listener:
            frame = listener._produce()
        grid = frame[FrameID.POINTCLOUD_GRID]
        assert grid[0, 0, 2] == pytest.approx(2.0)
        assert grid[3, 0, 2] == pytest.approx(3.5)
        # pixel at the principal point lies on the optical axis
        np.testing.assert_allclose(grid[6, 8, :2], [0.0, 0.0], atol=1e-6)

    def test_resize_factor(self, dummy_sensor, registry):
        with SyntheticListener("synth", registry, dummy_sensor, resize_factor=0.5) as listener:
            frame = listener._produce()
        assert frame[FrameID.RGB_IMAGE].shape == (6, 8, 3)

    def test_counts_frames(self, dummy_sensor, registry):
        with SyntheticListener("synth", registry, dummy_sensor) as listener:
            listener._produce()
            listener._produce()
            assert listener.frame_count == 2
            assert listener.get_sensor_status() == {"Frames produced": ["2"]}

    def test_point_cloud(self, dummy_sensor, registry):
        with SyntheticListener("synth", registry, dummy_sensor) as listener:
            cloud = listener._produce().to_point_cloud()
        assert len(cloud) == 12 * 16
        assert cloud.has_colors
