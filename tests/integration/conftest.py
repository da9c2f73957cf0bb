"""Shared fixtures for integration tests."""

from __future__ import annotations

import logging

import pytest
from omegaconf import OmegaConf

from listenerlib.utils.logging import ROOT_LOGGER


def _small_config(**listener_overrides):
    """Config for a fast 16x12 synthetic stream."""
    cfg = OmegaConf.create(
        {
            "listenerlib": {
                "system": {"name": "listenerlib-test", "log_level": "WARNING"},
                "queue": {"timeout_s": 0.5},
                "calibration": {"param_dir": None, "identity_name": None},
                "listener": {
                    "name": "synthetic",
                    "kind": "synthetic",
                    "resize_factor": 1.0,
                    "sensor": {
                        "type": "dummy",
                        "width": 16,
                        "height": 12,
                        "framerate": 100,
                        "focal": 10.0,
                    },
                    "source": {
                        "data_dir": None,
                        "buffer_dir": None,
                        "frame_ids": [],
                        "repeat": False,
                    },
                },
            }
        }
    )
    for dotpath, value in listener_overrides.items():
        OmegaConf.update(cfg, f"listenerlib.listener.{dotpath}", value)
    return cfg


@pytest.fixture
def small_config():
    return _small_config


@pytest.fixture
def small_config_file(tmp_path):
    """Write a small config to disk and return its path."""

    def _write(**listener_overrides):
        path = tmp_path / "config" / "test.yaml"
        path.parent.mkdir(parents=True, exist_ok=True)
        OmegaConf.save(_small_config(**listener_overrides), path)
        return path

    return _write


@pytest.fixture
def restore_logging():
    """The CLI calls setup_logging(); undo it so later caplog tests still see records."""
    yield
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)
    root.propagate = True
