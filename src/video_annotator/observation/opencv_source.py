"""
OpenCV-based observation source.

Supports:
- Capture devices (single-digit index, opened through a chosen capture API)
- Video files (any path the FFmpeg/GStreamer demuxer understands)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import cv2
import numpy as np

from video_annotator.errors import SourceOpenError
from video_annotator.models.config import DEFAULT_FPS, SourceConfig
from .base import ObservationSource, ObservationConfig
from .descriptor import SourceDescriptor, SourceKind, parse_source_descriptor

CAPTURE_APIS: Dict[str, int] = {
    "any": cv2.CAP_ANY,
    "v4l2": cv2.CAP_V4L2,
}


@dataclass
class OpenCVSourceConfig(ObservationConfig):
    """
    Configuration for OpenCV-based observation sources.

    Attributes:
        descriptor: Resolved device index or file path.
        capture_api: Capture backend for devices ("v4l2" or "any").
    """
    descriptor: SourceDescriptor = field(
        default_factory=lambda: SourceDescriptor(kind=SourceKind.DEVICE, index=0)
    )
    capture_api: str = "v4l2"

    @classmethod
    def from_source_config(
        cls,
        source_text: str,
        source_cfg: SourceConfig,
        source_id: str = "main",
    ) -> "OpenCVSourceConfig":
        """
        Adapter: build from the command-line source argument and the `source` config section.
        """
        return cls(
            source_id=source_id,
            default_fps=source_cfg.default_fps or DEFAULT_FPS,
            descriptor=parse_source_descriptor(source_text),
            capture_api=source_cfg.capture_api,
        )


class OpenCVSource(ObservationSource):
    """
    OpenCV-based observation source for cameras and video files.

    Wraps cv2.VideoCapture to provide frames as FrameData objects. There is no
    reconnection: a failed read is end of stream.

    Example:
        config = OpenCVSourceConfig(descriptor=parse_source_descriptor("video.mp4"))
        with OpenCVSource(config) as source:
            for frame_data in source:
                process(frame_data.frame)
    """

    def __init__(self, config: OpenCVSourceConfig):
        super().__init__(config)
        self._opencv_config = config
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def descriptor(self) -> SourceDescriptor:
        return self._opencv_config.descriptor

    @property
    def is_device(self) -> bool:
        return self.descriptor.kind is SourceKind.DEVICE

    def open(self) -> None:
        """Open the video source and read its native properties."""
        if self._is_open:
            return

        if self.is_device:
            api = CAPTURE_APIS.get(self._opencv_config.capture_api)
            if api is None:
                raise SourceOpenError(
                    f"Unknown capture API '{self._opencv_config.capture_api}' "
                    f"(expected one of: {', '.join(CAPTURE_APIS)})"
                )
            self._cap = cv2.VideoCapture(self.descriptor.index, api)
        else:
            self._cap = cv2.VideoCapture(self.descriptor.path)

        if not self._cap.isOpened():
            self._cap.release()
            self._cap = None
            raise SourceOpenError(f"Failed to open video source: {self.descriptor}")

        self._set_info(
            width=int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            height=int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            fps=self._cap.get(cv2.CAP_PROP_FPS),
        )
        self._is_open = True
        self._frame_index = 0

        logging.info(
            f"OpenCVSource opened: source_id={self.source_id}, source={self.descriptor}, "
            f"size={self.info.width}x{self.info.height}, fps={self.info.fps:.1f}"
        )

    def _grab(self) -> Optional[np.ndarray]:
        if self._cap is None:
            return None

        ret, frame = self._cap.read()
        if not ret or frame is None or frame.size == 0:
            logging.info(f"End of stream reached: source_id={self.source_id}")
            return None
        return frame

    def close(self) -> None:
        """Close the video source and release resources."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logging.info(f"OpenCVSource closed: source_id={self.source_id}")
        self._is_open = False
