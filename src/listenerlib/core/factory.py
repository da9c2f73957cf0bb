"""Build sensor contexts and listeners from configuration."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from omegaconf import DictConfig, OmegaConf

from listenerlib.core.types import FrameID
from listenerlib.listeners.base import DEFAULT_TIMEOUT_S, SensorListener
from listenerlib.listeners.buffer import BufferListener
from listenerlib.listeners.registry import ListenerRegistry
from listenerlib.listeners.saved import SavedListener
from listenerlib.listeners.synthetic import SyntheticListener
from listenerlib.sensors import (
    CeptonInterface,
    DummyInterface,
    FlexxInterface,
    MoviaInterface,
    RealsenseInterface,
    SensorInterface,
)

logger = logging.getLogger(__name__)

# Config key -> constructor keyword, per sensor type
_SENSOR_ARGS = {
    "dummy": (DummyInterface, ("width", "height", "framerate", "focal", "rgb_mappable")),
    "flexx": (FlexxInterface, ("mode",)),
    "realsense": (RealsenseInterface, ("width", "height", "framerate")),
    "cepton": (CeptonInterface, ("mode", "framerate", "apply_processing")),
    "movia": (MoviaInterface, ("mode", "framerate", "apply_processing")),
}


def _to_dict(cfg: Any) -> dict:
    if isinstance(cfg, DictConfig):
        return OmegaConf.to_container(cfg, resolve=True)
    if isinstance(cfg, Mapping):
        return dict(cfg)
    raise TypeError(f"Expected a mapping config, got {type(cfg).__name__}")


def create_sensor_interface(
    sensor_cfg: Any, presets: Mapping[str, Any] | None = None
) -> SensorInterface:
    """Build a sensor context from a ``{"type": ..., <options>}`` mapping.

    *sensor_cfg* may also be the name of an entry in *presets*.  Options
    left unset (``None``) fall back to the sensor's own defaults.
    """
    if isinstance(sensor_cfg, str):
        presets = _to_dict(presets) if presets is not None else {}
        if sensor_cfg not in presets:
            raise ValueError(f"Unknown sensor preset: {sensor_cfg!r}")
        sensor_cfg = presets[sensor_cfg]
    cfg = _to_dict(sensor_cfg)

    sensor_type = str(cfg.get("type", "dummy")).lower()
    if sensor_type not in _SENSOR_ARGS:
        raise ValueError(f"Unknown sensor type: {sensor_type!r}")
    cls, keys = _SENSOR_ARGS[sensor_type]
    kwargs = {key: cfg[key] for key in keys if cfg.get(key) is not None}
    return cls(**kwargs)


def create_listener(cfg: Any, registry: ListenerRegistry) -> SensorListener:
    """Build the listener described by the ``listenerlib`` config tree.

    Accepts either the full config (with a ``listenerlib`` root key) or the
    ``listenerlib`` section itself.
    """
    root = _to_dict(cfg)
    root = root.get("listenerlib", root)
    section = root.get("listener") or {}
    calibration = root.get("calibration") or {}
    timeout = (root.get("queue") or {}).get("timeout_s", DEFAULT_TIMEOUT_S)

    sensor = create_sensor_interface(section.get("sensor") or {}, root.get("sensor_presets"))
    kind = section.get("kind", "synthetic")
    name = section.get("name", "listener")
    source = section.get("source") or {}
    common = dict(
        resize_factor=float(section.get("resize_factor", 1.0)),
        identity_name=calibration.get("identity_name"),
        timeout=float(timeout),
    )
    param_dir = calibration.get("param_dir")
    if param_dir is not None:
        common["param_dir"] = param_dir

    if kind == "synthetic":
        if not isinstance(sensor, DummyInterface):
            raise ValueError("A synthetic listener needs a dummy sensor")
        listener = SyntheticListener(name, registry, sensor, **common)
    elif kind == "saved":
        data_dir = source.get("data_dir")
        if not data_dir:
            raise ValueError("A saved listener needs listener.source.data_dir")
        frame_ids = [FrameID.from_tag(tag) for tag in source.get("frame_ids") or []]
        listener = SavedListener(
            frame_ids,
            data_dir,
            sensor,
            name,
            registry,
            repeat=bool(source.get("repeat", False)),
            **common,
        )
    elif kind == "buffer":
        buffer_dir = source.get("buffer_dir")
        if not buffer_dir:
            raise ValueError("A buffer listener needs listener.source.buffer_dir")
        listener = BufferListener(buffer_dir, sensor, name, registry, **common)
    else:
        raise ValueError(f"Unknown listener kind: {kind!r}")

    logger.info("Built %s listener %r from config", kind, name)
    return listener
