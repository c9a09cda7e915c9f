"""
Annotated video output.

Opening the writer is best effort: if OpenCV cannot open the requested
codec/container, VideoSink.open returns None and the run carries on without
saving video.
"""

from __future__ import annotations

import logging
import os
from typing import Optional, Tuple

import cv2
import numpy as np


def fourcc_code(fourcc: str) -> int:
    if len(fourcc) != 4:
        raise ValueError(f"FourCC must be exactly 4 characters, got '{fourcc}'")
    return cv2.VideoWriter_fourcc(*fourcc)


class VideoSink:
    """Owns one opened cv2.VideoWriter."""

    def __init__(self, writer: cv2.VideoWriter, path: str, fps: float, size: Tuple[int, int]):
        self._writer: Optional[cv2.VideoWriter] = writer
        self.path = path
        self.fps = fps
        self.size = size
        self.frames_written = 0

    @classmethod
    def open(
        cls,
        path: str,
        fourcc: str,
        fps: float,
        size: Tuple[int, int],
    ) -> Optional["VideoSink"]:
        """
        Open a video writer, overwriting any existing file at `path`.

        Returns:
            The sink, or None if the writer could not be opened.
        """
        try:
            code = fourcc_code(fourcc)
        except ValueError as e:
            logging.warning(f"Invalid output codec: {e}")
            return None

        try:
            out_dir = os.path.dirname(path)
            if out_dir and not os.path.exists(out_dir):
                os.makedirs(out_dir)
            writer = cv2.VideoWriter(path, code, fps, tuple(size), True)
        except (OSError, cv2.error) as e:
            logging.warning(f"Cannot create output video {path}: {e}")
            return None

        if not writer.isOpened():
            writer.release()
            return None

        logging.info(
            f"Saving inference result to {path} (FPS: {fps:.1f}, Size: {size[0]}x{size[1]})"
        )
        return cls(writer, path, fps, size)

    @property
    def is_open(self) -> bool:
        return self._writer is not None

    def write(self, frame: np.ndarray) -> None:
        if self._writer is None:
            raise RuntimeError(f"Video sink {self.path} is closed")
        self._writer.write(frame)
        self.frames_written += 1

    def close(self) -> None:
        """Release the writer. Later calls do nothing."""
        if self._writer is None:
            return
        self._writer.release()
        self._writer = None
        logging.info(f"Video saved successfully: {self.path} ({self.frames_written} frames)")
