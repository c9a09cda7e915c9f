"""
Frame preprocessing for the detector.

Resizes a decoded frame to the model's fixed input geometry and converts it
to the channel order the detector expects. The source frame is never written.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

import cv2
import numpy as np

from video_annotator.models.frame import DetectorInputBuffer, FrameData, PixelFormat

_CONVERSIONS: Dict[Tuple[PixelFormat, PixelFormat], int] = {
    (PixelFormat.BGR888, PixelFormat.RGB888): cv2.COLOR_BGR2RGB,
    (PixelFormat.RGB888, PixelFormat.BGR888): cv2.COLOR_RGB2BGR,
}


def conversion_code(src: PixelFormat, dst: PixelFormat) -> Optional[int]:
    """cv2 colour conversion code between two layouts, or None when they match."""
    if src == dst:
        return None
    try:
        return _CONVERSIONS[(src, dst)]
    except KeyError:
        raise ValueError(f"Unsupported pixel format conversion: {src.value} -> {dst.value}")


class Preprocessor:
    """
    Turns FrameData into a DetectorInputBuffer of a fixed size.

    With reuse_buffers enabled, the resized and converted pixels live in scratch
    arrays owned by this object and are overwritten on every call. The returned
    buffer is only valid until the next prepare().
    """

    def __init__(
        self,
        target_w: int,
        target_h: int,
        output_format: PixelFormat = PixelFormat.RGB888,
        interpolation: int = cv2.INTER_LINEAR,
        reuse_buffers: bool = True,
    ):
        if target_w <= 0 or target_h <= 0:
            raise ValueError(f"Invalid detector input size: {target_w}x{target_h}")
        self.target_w = target_w
        self.target_h = target_h
        self.output_format = output_format
        self.interpolation = interpolation
        self.reuse_buffers = reuse_buffers
        self._resized: Optional[np.ndarray] = None
        self._converted: Optional[np.ndarray] = None

    def _scratch(self, current: Optional[np.ndarray], src: np.ndarray) -> Optional[np.ndarray]:
        if not self.reuse_buffers:
            return None
        shape = (self.target_h, self.target_w) + src.shape[2:]
        if current is None or current.shape != shape or current.dtype != src.dtype:
            current = np.empty(shape, dtype=src.dtype)
        return current

    def prepare(self, frame_data: FrameData) -> DetectorInputBuffer:
        """Resize and colour-convert one frame."""
        src = frame_data.frame
        size = (self.target_w, self.target_h)

        self._resized = self._scratch(self._resized, src)
        if self._resized is not None:
            resized = cv2.resize(src, size, dst=self._resized, interpolation=self.interpolation)
        else:
            resized = cv2.resize(src, size, interpolation=self.interpolation)

        code = conversion_code(frame_data.pixel_format, self.output_format)
        if code is None:
            out = resized
        else:
            self._converted = self._scratch(self._converted, src)
            if self._converted is not None:
                out = cv2.cvtColor(resized, code, dst=self._converted)
            else:
                out = cv2.cvtColor(resized, code)

        return DetectorInputBuffer.from_array(out, self.output_format)


def prepare_frame(
    frame: np.ndarray,
    target_w: int,
    target_h: int,
    src_format: PixelFormat = PixelFormat.BGR888,
    dst_format: PixelFormat = PixelFormat.RGB888,
) -> DetectorInputBuffer:
    """One-off preprocessing of a bare array, allocating fresh output."""
    h, w = frame.shape[:2]
    frame_data = FrameData(frame=frame, width=w, height=h, timestamp=0.0, pixel_format=src_format)
    return Preprocessor(target_w, target_h, dst_format, reuse_buffers=False).prepare(frame_data)
