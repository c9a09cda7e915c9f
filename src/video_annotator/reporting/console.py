"""
Per-frame detection report.

The report prints model-space boxes, not the scaled ones drawn on the frame,
so the raw detector output can be inspected.
"""

from __future__ import annotations

import sys
from typing import Optional, Sequence, TextIO

from video_annotator.models.detection import AnnotatedDetection

NO_OBJECTS = "  no objects detected"


def format_detection_line(label: str, box, confidence: float) -> str:
    x1, y1, x2, y2 = box.as_int_tuple()
    return f"  {label} @ ({x1} {y1} {x2} {y2}) {confidence:.3f}"


class ConsoleReporter:
    """Writes the human-readable detection report to a text stream."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so pytest's capsys sees the replaced sys.stdout.
        return self._stream if self._stream is not None else sys.stdout

    def _emit(self, line: str) -> None:
        print(line, file=self.stream)

    def report(self, frame_index: int, detections: Sequence[AnnotatedDetection]) -> None:
        self._emit(f"Frame {frame_index} detections ({len(detections)} objects):")
        for item in detections:
            det = item.detection
            self._emit(format_detection_line(item.label, det.bbox, det.confidence))
        if not detections:
            self._emit(NO_OBJECTS)

    def summary(self, frame_count: int) -> None:
        self._emit(f"End of video. Total processed frames: {frame_count}")
        self.stream.flush()
