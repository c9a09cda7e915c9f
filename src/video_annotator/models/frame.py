"""
Frame models: decoded frames and detector-ready input buffers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np


class PixelFormat(str, Enum):
    """Channel order of a packed 8-bit raster."""
    BGR888 = "bgr888"
    RGB888 = "rgb888"

    @property
    def channels(self) -> int:
        return 3


@dataclass
class FrameData:
    """
    Metadata and payload for a decoded video frame.

    Attributes:
        frame: The raw frame data as a numpy array (H x W x 3).
        width: Frame width in pixels.
        height: Frame height in pixels.
        timestamp: Unix timestamp when frame was captured.
        frame_index: Sequential frame number since the source was opened (1-based).
        source: Identifier for the camera/video source.
        pixel_format: Channel order of `frame` (OpenCV decodes to BGR).
    """
    frame: np.ndarray
    width: int
    height: int
    timestamp: float
    frame_index: int = 0
    source: Optional[str] = None
    pixel_format: PixelFormat = PixelFormat.BGR888

    @classmethod
    def from_numpy(
        cls,
        frame: np.ndarray,
        timestamp: float,
        frame_index: int = 0,
        source: Optional[str] = None,
        pixel_format: PixelFormat = PixelFormat.BGR888,
    ) -> "FrameData":
        """Create FrameData from a numpy array."""
        h, w = frame.shape[:2]
        return cls(
            frame=frame,
            width=w,
            height=h,
            timestamp=timestamp,
            frame_index=frame_index,
            source=source,
            pixel_format=pixel_format,
        )

    @property
    def shape(self) -> Tuple[int, int, int]:
        """Return (height, width, channels)."""
        return self.frame.shape

    @property
    def size(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.width, self.height)

    def display_copy(self) -> np.ndarray:
        """Return a private, writable copy of the pixels for drawing."""
        return self.frame.copy()


@dataclass(frozen=True)
class DetectorInputBuffer:
    """
    A resized, colour-converted view of a frame in the detector's input geometry.

    `data` may be a scratch array owned by the Preprocessor and overwritten on the
    next call, so consumers must not hold on to it across frames.
    """
    width: int
    height: int
    channels: int
    size: int
    data: np.ndarray
    pixel_format: PixelFormat

    @classmethod
    def from_array(cls, data: np.ndarray, pixel_format: PixelFormat) -> "DetectorInputBuffer":
        h, w = data.shape[:2]
        channels = data.shape[2] if data.ndim == 3 else 1
        return cls(
            width=w,
            height=h,
            channels=channels,
            size=w * h * channels,
            data=data,
            pixel_format=pixel_format,
        )
