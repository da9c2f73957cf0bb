"""Pydantic schema for listenerlib configuration validation.

Mirrors the YAML structure in config/default.yaml. Used when
``validate=True`` is passed to ``ListenerConfig.load()``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from listenerlib.core.types import FrameID

SensorType = Literal["dummy", "flexx", "realsense", "cepton", "movia"]
ListenerKind = Literal["synthetic", "saved", "buffer"]

# ---------------------------------------------------------------------------
# Leaf / shared models
# ---------------------------------------------------------------------------


class SystemConfig(BaseModel):
    name: str = "listenerlib"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    validate_config: bool = False
    log_file: str | None = None
    log_json: bool = False


class QueueConfig(BaseModel):
    timeout_s: float = Field(default=5.0, gt=0)


class CalibrationConfig(BaseModel):
    param_dir: str | None = None
    identity_name: str | None = None


class SensorConfig(BaseModel):
    type: SensorType = "dummy"
    mode: int | None = None
    framerate: int | None = Field(default=None, ge=0)
    width: int | None = Field(default=None, ge=0)
    height: int | None = Field(default=None, ge=0)
    focal: float | None = Field(default=None, gt=0)
    apply_processing: bool = True
    rgb_mappable: bool | None = None

    model_config = {"extra": "allow"}


class SourceConfig(BaseModel):
    data_dir: str | None = None
    buffer_dir: str | None = None
    frame_ids: list[str] = Field(default_factory=list)
    repeat: bool = False

    @field_validator("frame_ids")
    @classmethod
    def _known_tags(cls, tags: list[str]) -> list[str]:
        for tag in tags:
            FrameID.from_tag(tag)
        return tags


class ListenerSection(BaseModel):
    name: str = "listener"
    kind: ListenerKind = "synthetic"
    resize_factor: float = Field(default=1.0, gt=0)
    sensor: SensorConfig | str = Field(default_factory=SensorConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


class ListenerLibRootConfig(BaseModel):
    system: SystemConfig = Field(default_factory=SystemConfig)
    queue: QueueConfig = Field(default_factory=QueueConfig)
    calibration: CalibrationConfig = Field(default_factory=CalibrationConfig)
    listener: ListenerSection = Field(default_factory=ListenerSection)
    sensor_presets: dict[str, SensorConfig] = Field(default_factory=dict)

    model_config = {"extra": "allow"}


class ListenerLibConfigSchema(BaseModel):
    """Top-level wrapper matching YAML root key ``listenerlib:``."""

    listenerlib: ListenerLibRootConfig

    model_config = {"extra": "allow"}


def validate_config(cfg_dict: dict) -> ListenerLibConfigSchema:
    """Validate a raw config dict (e.g. from OmegaConf) against the schema.

    Raises ``pydantic.ValidationError`` on invalid config.
    """
    return ListenerLibConfigSchema.model_validate(cfg_dict)
