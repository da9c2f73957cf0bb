"""SavedListener: replays a recording written by ``CompositeFrame.save_all``."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from listenerlib.core.types import FrameID
from listenerlib.frames import FRAME_CLASSES
from listenerlib.frames.composite import CompositeFrame
from listenerlib.listeners.base import SensorListener
from listenerlib.listeners.registry import ListenerRegistry
from listenerlib.sensors.base import SensorInterface
from listenerlib.utils.files import list_data_files

logger = logging.getLogger(__name__)

RAW_POINT_CLOUD_SUFFIXES = (".ply",)


class SavedListener(SensorListener):
    """Emulates a sensor by streaming previously saved frames.

    With *frame_ids* given, files are read from ``<data_dir>/<tag>/`` for
    each frame type.  With *frame_ids* empty, *data_dir* itself holds raw
    ``.ply`` point-cloud scans, organized into point grids through
    the sensor's point-cloud conditioning.  Files are replayed in natural
    order at the sensor framerate.

    Raw point clouds are organized straight into the resized grid, so
    ``resize_factor`` is only applied to frames read from a recording.

    Args:
        frame_ids: Frame types to replay.
        data_dir: Root of the recording; also searched for saved parameters.
        sensor: Context of the sensor that made the recording.
        name: Unique listener name.
        registry: Registry the name is claimed in.
        repeat: At the end of the data keep re-queueing the last frame
            instead of ending the stream.

    Raises:
        FileNotFoundError: If a frame directory is missing or empty.
    """

    def __init__(
        self,
        frame_ids: Sequence[FrameID],
        data_dir: str | Path,
        sensor: SensorInterface,
        name: str,
        registry: ListenerRegistry,
        resize_factor: float = 1.0,
        repeat: bool = False,
        **kwargs,
    ) -> None:
        data_dir = Path(data_dir)
        files = _collect_files(list(frame_ids), data_dir)
        kwargs.setdefault("param_dir", data_dir)
        super().__init__(
            name, sensor, registry, poll=self._next_frame, resize_factor=resize_factor, **kwargs
        )
        self._data_dir = data_dir
        self._files = files
        self._raw_point_clouds = not frame_ids
        self._num_files = min(len(paths) for paths in files.values())
        self._repeat = repeat
        self._index = 0
        self._repeat_logged = False

    @property
    def num_files(self) -> int:
        """Number of composite frames available in the recording."""
        return self._num_files

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _next_frame(self) -> CompositeFrame:
        composite = self.new_composite()
        for frame_id, paths in self._files.items():
            frame = FRAME_CLASSES[frame_id].from_file(
                paths[self._index], self.cam_params, self.extrinsic, self.sensor
            )
            composite.add_frame(frame_id, frame)
        if not self._raw_point_clouds:
            composite.resize_all(self.resize_factor)

        if self._index + 1 < self._num_files:
            self._index += 1
        elif self._repeat:
            if not self._repeat_logged:
                logger.info("Reached end of saved data in %s, repeating last frame", self._data_dir)
                self._repeat_logged = True
        else:
            logger.info("Reached end of saved data in %s, stopping stream", self._data_dir)
            self.end_stream()
        return composite

    def get_sensor_status(self) -> dict[str, list[str]]:
        return {
            "Data directory": [str(self._data_dir)],
            "Position": [f"{self._index + 1}/{self._num_files}"],
        }


def _collect_files(frame_ids: list[FrameID], data_dir: Path) -> dict[FrameID, list[Path]]:
    if not frame_ids:
        dirs = {FrameID.POINTCLOUD_GRID: data_dir}
        suffixes = RAW_POINT_CLOUD_SUFFIXES
    else:
        dirs = {frame_id: data_dir / frame_id.tag for frame_id in frame_ids}
        suffixes = None
    files = {}
    for frame_id, directory in dirs.items():
        paths = list_data_files(directory, suffixes)
        if not paths:
            raise FileNotFoundError(f"No saved {frame_id.tag} files in {directory}")
        files[frame_id] = paths
    return files
