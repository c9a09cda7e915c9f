"""
Detection models for object detection results.

Detections coming out of the detector are expressed in model input space.
ScaledBox is the same rectangle projected into frame space and clamped to it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np


@dataclass(frozen=True)
class BoundingBox:
    """
    A bounding box in pixel coordinates.

    Attributes:
        x1: Left edge x coordinate.
        y1: Top edge y coordinate.
        x2: Right edge x coordinate.
        y2: Bottom edge y coordinate.
    """
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """Return as (x1, y1, x2, y2) tuple."""
        return (self.x1, self.y1, self.x2, self.y2)

    def as_int_tuple(self) -> Tuple[int, int, int, int]:
        """Return as integer (x1, y1, x2, y2) tuple, truncating toward zero."""
        return (int(self.x1), int(self.y1), int(self.x2), int(self.y2))

    @classmethod
    def from_tuple(cls, t: Tuple[float, float, float, float]) -> "BoundingBox":
        """Create from (x1, y1, x2, y2) tuple."""
        return cls(x1=t[0], y1=t[1], x2=t[2], y2=t[3])


@dataclass(frozen=True)
class Detection:
    """
    A single detection from the detector, in model input space.

    Attributes:
        bbox: Bounding box (left, top, right, bottom).
        class_id: Class index into the label table.
        confidence: Detection confidence score (0-1).
    """
    bbox: BoundingBox
    class_id: int = 0
    confidence: float = 1.0

    @property
    def x1(self) -> float:
        return self.bbox.x1

    @property
    def y1(self) -> float:
        return self.bbox.y1

    @property
    def x2(self) -> float:
        return self.bbox.x2

    @property
    def y2(self) -> float:
        return self.bbox.y2

    @classmethod
    def from_xyxy(
        cls,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        class_id: int = 0,
        confidence: float = 1.0,
    ) -> "Detection":
        """Create Detection from x1, y1, x2, y2 coordinates."""
        return cls(
            bbox=BoundingBox(x1=x1, y1=y1, x2=x2, y2=y2),
            class_id=class_id,
            confidence=confidence,
        )

    @classmethod
    def from_numpy_row(cls, row: np.ndarray) -> "Detection":
        """
        Adapter: Convert from numpy array row [x1, y1, x2, y2, confidence, class_id].
        """
        return cls(
            bbox=BoundingBox(
                x1=float(row[0]),
                y1=float(row[1]),
                x2=float(row[2]),
                y2=float(row[3]),
            ),
            confidence=float(row[4]) if len(row) > 4 else 1.0,
            class_id=int(row[5]) if len(row) > 5 else 0,
        )


def detections_from_numpy(arr: np.ndarray) -> List[Detection]:
    """
    Adapter: Convert numpy array of detections to list of Detection objects.

    Args:
        arr: Array of shape (N, 4+) where each row is [x1, y1, x2, y2, conf, class_id].
    """
    if arr is None or len(arr) == 0:
        return []
    return [Detection.from_numpy_row(row) for row in arr]


@dataclass(frozen=True)
class ScaledBox:
    """A box in frame space, in whole pixels."""
    x1: int
    y1: int
    x2: int
    y2: int

    def clamp(self, frame_w: int, frame_h: int) -> "ScaledBox":
        """Clamp every edge independently into [0, frame_w-1] x [0, frame_h-1]."""
        max_x = frame_w - 1
        max_y = frame_h - 1
        return ScaledBox(
            x1=max(0, min(self.x1, max_x)),
            y1=max(0, min(self.y1, max_y)),
            x2=max(0, min(self.x2, max_x)),
            y2=max(0, min(self.y2, max_y)),
        )

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.x1, self.y1, self.x2, self.y2)

    @property
    def top_left(self) -> Tuple[int, int]:
        return (self.x1, self.y1)

    @property
    def bottom_right(self) -> Tuple[int, int]:
        return (self.x2, self.y2)


@dataclass(frozen=True)
class AnnotatedDetection:
    """A detection together with its frame-space box and resolved class name."""
    detection: Detection
    box: ScaledBox
    label: str

    @property
    def confidence(self) -> float:
        return self.detection.confidence
