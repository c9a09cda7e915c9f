"""
ObservationSource interface for pluggable video sources.

This defines the contract that all frame sources implement, so the
processing pipeline works the same way with:
- USB/CSI cameras
- Video files
- Synthetic sources in tests
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional

import numpy as np

from video_annotator.errors import SourceExhaustedError
from video_annotator.models.config import DEFAULT_FPS
from video_annotator.models.frame import FrameData, PixelFormat


@dataclass
class ObservationConfig:
    """
    Base configuration for observation sources.

    Attributes:
        source_id: Identifier for this source, used in logs and FrameData.
        default_fps: Frame rate to assume when the source reports none.
    """
    source_id: str = "default"
    default_fps: float = DEFAULT_FPS


@dataclass(frozen=True)
class StreamInfo:
    """Native stream geometry and rate, read once after the source opens."""
    width: int
    height: int
    fps: float

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)


class ObservationSource(ABC):
    """
    Abstract base class for frame sources.

    Lifecycle:
        1. Create instance with config
        2. Call open() to acquire the device or file
        3. Call read() repeatedly to get frames
        4. Call close() to release resources

    read() returns None exactly once, at end of stream. The handle is not
    restartable: a further read() raises SourceExhaustedError.

    Can also be used as a context manager:
        with OpenCVSource(config) as source:
            for frame_data in source:
                process(frame_data)
    """

    pixel_format: PixelFormat = PixelFormat.BGR888

    def __init__(self, config: ObservationConfig):
        self._config = config
        self._is_open = False
        self._exhausted = False
        self._frame_index = 0
        self._info: Optional[StreamInfo] = None

    @property
    def source_id(self) -> str:
        """Identifier for this source."""
        return self._config.source_id

    @property
    def is_open(self) -> bool:
        """Whether the source is currently open and ready to read."""
        return self._is_open

    @property
    def exhausted(self) -> bool:
        """Whether end of stream has been reported."""
        return self._exhausted

    @property
    def frame_index(self) -> int:
        """Number of frames read since open."""
        return self._frame_index

    @property
    def info(self) -> StreamInfo:
        """Native width, height and frame rate. Only valid once open."""
        if self._info is None:
            raise RuntimeError("Source must be open before reading stream info")
        return self._info

    def _set_info(self, width: int, height: int, fps: float) -> None:
        """Record native stream properties, substituting the default rate when unknown."""
        if fps is None or fps <= 0:
            fps = self._config.default_fps
        self._info = StreamInfo(width=int(width), height=int(height), fps=float(fps))

    @abstractmethod
    def open(self) -> None:
        """
        Open/initialize the source and populate `info`.

        Raises:
            SourceOpenError: If the source cannot be opened.
        """
        pass

    @abstractmethod
    def _grab(self) -> Optional[np.ndarray]:
        """Decode the next raw frame, or return None at end of stream."""
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Close/release the source.

        Safe to call multiple times.
        """
        pass

    def read(self) -> Optional[FrameData]:
        """
        Read the next frame from the source.

        Returns:
            FrameData for the next frame, or None once at end of stream.

        Raises:
            RuntimeError: If the source is not open.
            SourceExhaustedError: If end of stream was already reported.
        """
        if self._exhausted:
            raise SourceExhaustedError(f"Source {self.source_id} is exhausted")
        if not self._is_open:
            raise RuntimeError("Source must be open before reading")

        frame = self._grab()
        if frame is None:
            self._exhausted = True
            return None

        self._frame_index += 1
        return FrameData.from_numpy(
            frame,
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
            pixel_format=self.pixel_format,
        )

    def __enter__(self) -> "ObservationSource":
        """Context manager entry - opens the source."""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - closes the source."""
        self.close()

    def __iter__(self) -> Iterator[FrameData]:
        """
        Iterate over frames from the source.

        Yields FrameData objects until the source is exhausted.
        The source must be open before iterating.
        """
        if not self._is_open:
            raise RuntimeError("Source must be open before iterating")

        while True:
            frame_data = self.read()
            if frame_data is None:
                break
            yield frame_data
