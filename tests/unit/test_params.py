"""Tests for listenerlib.core.params — CamParameters."""

from __future__ import annotations

import numpy as np
import pytest

from listenerlib.core.errors import FormatError
from listenerlib.core.params import CamParameters


class TestCamParametersInit:
    def test_defaults(self):
        p = CamParameters()
        np.testing.assert_array_equal(p.intrinsic, np.eye(3))
        np.testing.assert_array_equal(p.distortion, np.ones(5))

    def test_from_focal(self):
        p = CamParameters.from_focal(100.0, 110.0, 50.0, 40.0)
        assert p.fx == 100.0
        assert p.fy == 110.0
        assert p.cx == 50.0
        assert p.cy == 40.0
        assert p.intrinsic[2, 2] == 1.0

    def test_bad_intrinsic_shape(self):
        with pytest.raises(ValueError, match="3x3"):
            CamParameters(intrinsic=np.eye(4))

    def test_bad_distortion_size(self):
        with pytest.raises(ValueError, match="5 elements"):
            CamParameters(distortion=np.zeros(4))

    def test_arrays_are_read_only(self):
        p = CamParameters()
        with pytest.raises(ValueError):
            p.intrinsic[0, 0] = 5.0

    def test_input_is_copied(self):
        k = np.eye(3)
        p = CamParameters(intrinsic=k)
        k[0, 0] = 9.0
        assert p.fx == 1.0


class TestCamParametersScaled:
    def test_identity_factor_returns_same_instance(self):
        p = CamParameters.from_focal(100.0, 100.0, 50.0, 50.0)
        assert p.scaled(1.0) is p

    def test_scales_top_two_rows(self):
        p = CamParameters.from_focal(100.0, 80.0, 50.0, 40.0)
        s = p.scaled(0.5)
        assert s.fx == 50.0
        assert s.fy == 40.0
        assert s.cx == 25.0
        assert s.cy == 20.0
        assert s.intrinsic[2, 2] == 1.0
        # original untouched
        assert p.fx == 100.0

    def test_distortion_kept(self):
        p = CamParameters.from_focal(1.0, 1.0, 1.0, 1.0, distortion=[0.1, 0.2, 0.0, 0.0, 0.3])
        np.testing.assert_allclose(p.scaled(2.0).distortion, [0.1, 0.2, 0.0, 0.0, 0.3])


class TestCamParametersDict:
    def test_roundtrip(self):
        p = CamParameters.from_focal(120.0, 121.0, 64.0, 48.0, distortion=[0.0] * 5)
        q = CamParameters.from_dict(p.to_dict())
        np.testing.assert_array_equal(p.intrinsic, q.intrinsic)
        np.testing.assert_array_equal(p.distortion, q.distortion)

    def test_missing_key(self):
        with pytest.raises(FormatError):
            CamParameters.from_dict({"intrinsic": np.eye(3).tolist()})

    def test_wrong_shape(self):
        with pytest.raises(FormatError):
            CamParameters.from_dict({"intrinsic": [[1, 0], [0, 1]], "distortion": [1] * 5})
