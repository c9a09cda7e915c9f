"""
Overlay drawing for annotated output frames.

Everything here draws in place on the display frame, a copy the caller made
from the decoded frame. The decoded frame itself is never passed in.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from video_annotator.models.config import OverlayConfig
from video_annotator.models.detection import AnnotatedDetection

LABEL_OFFSET_Y = 10
FPS_ORIGIN: Tuple[int, int] = (10, 40)
FONT = cv2.FONT_HERSHEY_SIMPLEX


def format_label(label: str, confidence: float) -> str:
    """Caption such as 'person 87.5%'."""
    return f"{label} {confidence * 100:.1f}%"


def format_fps(fps: float, frame_index: int) -> str:
    return f"FPS: {fps:.1f}  Frame: {frame_index}"


def instantaneous_fps(elapsed_seconds: float) -> float:
    """Reciprocal of one iteration's wall-clock time. Not smoothed."""
    if elapsed_seconds <= 0:
        return 0.0
    return 1.0 / elapsed_seconds


class OverlayRenderer:
    """Draws detection boxes, captions and the FPS/frame counter."""

    def __init__(self, style: Optional[OverlayConfig] = None):
        self.style = style or OverlayConfig()

    def draw_detections(self, frame: np.ndarray, annotated: Sequence[AnnotatedDetection]) -> None:
        s = self.style
        for item in annotated:
            box = item.box
            cv2.rectangle(frame, box.top_left, box.bottom_right, s.box_color, s.box_thickness)
            cv2.putText(
                frame,
                format_label(item.label, item.confidence),
                (box.x1, box.y1 - LABEL_OFFSET_Y),
                FONT,
                s.label_scale,
                s.label_color,
                s.label_thickness,
            )

    def draw_fps(self, frame: np.ndarray, fps: float, frame_index: int) -> None:
        s = self.style
        cv2.putText(
            frame,
            format_fps(fps, frame_index),
            FPS_ORIGIN,
            FONT,
            s.fps_scale,
            s.fps_color,
            s.fps_thickness,
        )

    def render(
        self,
        display_frame: np.ndarray,
        annotated: Sequence[AnnotatedDetection],
        fps: float,
        frame_index: int,
    ) -> None:
        """Draw all detections, then the single FPS line."""
        self.draw_detections(display_frame, annotated)
        self.draw_fps(display_frame, fps, frame_index)
