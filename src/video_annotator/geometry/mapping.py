"""
Model-space to frame-space box mapping.

The detector sees a resized copy of the frame, so its boxes are in model input
coordinates. Each edge is multiplied by the per-axis scale factor, truncated to
a whole pixel and then clamped to the frame. Clamping always follows scaling.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from video_annotator.models.detection import Detection, ScaledBox


def compute_scale(frame_w: int, frame_h: int, model_w: int, model_h: int) -> Tuple[float, float]:
    """Return (scale_x, scale_y) = frame size / model input size."""
    if model_w <= 0 or model_h <= 0:
        raise ValueError(f"Invalid model input size: {model_w}x{model_h}")
    return (frame_w / model_w, frame_h / model_h)


def clamp_box(box: ScaledBox, frame_w: int, frame_h: int) -> ScaledBox:
    """Clamp a frame-space box into the frame. Idempotent."""
    return box.clamp(frame_w, frame_h)


def scale_box(detection: Detection, scale_x: float, scale_y: float) -> ScaledBox:
    """Project a model-space box into frame space without clamping."""
    return ScaledBox(
        x1=int(detection.x1 * scale_x),
        y1=int(detection.y1 * scale_y),
        x2=int(detection.x2 * scale_x),
        y2=int(detection.y2 * scale_y),
    )


def map_detection(
    detection: Detection,
    scale_x: float,
    scale_y: float,
    frame_w: int,
    frame_h: int,
) -> ScaledBox:
    """Scale then clamp one detection's box."""
    return clamp_box(scale_box(detection, scale_x, scale_y), frame_w, frame_h)


def map_detections(
    detections: Sequence[Detection],
    model_w: int,
    model_h: int,
    frame_w: int,
    frame_h: int,
) -> List[ScaledBox]:
    """Map a whole detection list, computing the scale once. Order is preserved."""
    scale_x, scale_y = compute_scale(frame_w, frame_h, model_w, model_h)
    return [map_detection(d, scale_x, scale_y, frame_w, frame_h) for d in detections]
