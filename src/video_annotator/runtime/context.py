from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from video_annotator.output.video_sink import VideoSink


@dataclass
class PipelineContext:
    """Run-scoped state owned by the pipeline engine; avoids global counters."""

    model_width: int
    model_height: int
    frame_width: int
    frame_height: int
    input_fps: float
    sink: Optional[VideoSink] = None
    frame_count: int = 0
    last_fps: float = 0.0

    @property
    def frame_size(self) -> Tuple[int, int]:
        return (self.frame_width, self.frame_height)

    def next_frame(self) -> int:
        """Count one acquired frame and return its 1-based index."""
        self.frame_count += 1
        return self.frame_count
