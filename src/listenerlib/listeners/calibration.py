"""SensorCalibration: camera parameters and extrinsic pose of one listener."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import numpy as np

from listenerlib.core.errors import FormatError
from listenerlib.core.params import CamParameters

logger = logging.getLogger(__name__)

PARAMETERS_SUFFIX = "_parameters.json"
EXTRINSIC_SUFFIX = "_extrinsic.json"


class SensorCalibration:
    """Intrinsics, distortion and extrinsic matrix shared by a listener's frames.

    Camera parameters passed to :meth:`set_cam_params` (or loaded from disk)
    are rescaled once by ``resize_factor`` so they match frames that the
    listener resizes before queueing.  The unscaled parameters are what gets
    written by :meth:`save_parameters`.

    Args:
        name: Listener name, used for parameter file names.
        cam_params: Initial (unscaled) camera parameters.
        resize_factor: Scale applied to every frame the listener produces.
        identity_name: Name of the reference sensor the extrinsic is
            relative to.
    """

    def __init__(
        self,
        name: str,
        cam_params: CamParameters | None = None,
        resize_factor: float = 1.0,
        identity_name: str | None = None,
    ) -> None:
        if resize_factor <= 0:
            raise ValueError(f"resize_factor must be > 0, got {resize_factor}")
        self._name = name
        self._resize_factor = resize_factor
        self._identity_name = identity_name
        self._native_params = cam_params or CamParameters()
        self._cam_params = self._native_params.scaled(resize_factor)
        self._extrinsic = np.eye(4)

    @property
    def cam_params(self) -> CamParameters:
        return self._cam_params

    @property
    def extrinsic(self) -> np.ndarray:
        return self._extrinsic

    @property
    def resize_factor(self) -> float:
        return self._resize_factor

    @property
    def identity_name(self) -> str | None:
        return self._identity_name

    @identity_name.setter
    def identity_name(self, value: str | None) -> None:
        self._identity_name = value

    def set_cam_params(self, params: CamParameters) -> None:
        self._native_params = params
        self._cam_params = params.scaled(self._resize_factor)

    def set_extrinsic(self, extrinsic: np.ndarray) -> None:
        extrinsic = np.asarray(extrinsic, dtype=np.float64)
        if extrinsic.shape != (4, 4):
            raise ValueError(f"Extrinsic must be 4x4, got shape {extrinsic.shape}")
        self._extrinsic = extrinsic

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def parameters_path(self, directory: str | Path) -> Path:
        return Path(directory) / f"{self._name}{PARAMETERS_SUFFIX}"

    def extrinsic_path(self, directory: str | Path) -> Path:
        if not self._identity_name:
            raise ValueError(f"Listener {self._name!r} has no identity sensor name set")
        return Path(directory) / f"{self._name}_{self._identity_name}{EXTRINSIC_SUFFIX}"

    def save_parameters(self, directory: str | Path, overwrite: bool = False) -> Path | None:
        """Write intrinsic and distortion to ``<name>_parameters.json``.

        Returns the written path, or None if the file exists and
        *overwrite* is False.
        """
        path = self.parameters_path(directory)
        return _write_json(path, self._native_params.to_dict(), overwrite)

    def load_parameters(self, directory: str | Path) -> None:
        """Load camera parameters saved by :meth:`save_parameters`."""
        path = self.parameters_path(directory)
        self.set_cam_params(CamParameters.from_dict(_read_json(path)))
        logger.info("Loaded camera parameters for %r from %s", self._name, path)

    def save_extrinsic(self, directory: str | Path, overwrite: bool = False) -> Path | None:
        path = self.extrinsic_path(directory)
        return _write_json(path, {"extrinsic": self._extrinsic.tolist()}, overwrite)

    def load_extrinsic(self, directory: str | Path) -> None:
        path = self.extrinsic_path(directory)
        payload = _read_json(path)
        try:
            self.set_extrinsic(payload["extrinsic"])
        except (KeyError, TypeError, ValueError) as exc:
            raise FormatError(f"Malformed extrinsic file {path}: {exc}") from exc
        logger.info("Loaded extrinsic for %r from %s", self._name, path)


def _write_json(path: Path, payload: dict, overwrite: bool) -> Path | None:
    if path.exists() and not overwrite:
        logger.warning("%s already exists; not overwriting", path)
        return None
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2))
    logger.info("Saved %s", path)
    return path


def _read_json(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"Calibration file not found: {path}")
    try:
        payload = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise FormatError(f"Malformed calibration file {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise FormatError(f"Calibration file {path} does not hold a JSON object")
    return payload
