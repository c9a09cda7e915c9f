"""
Inference backend interface.

A model context is created once per run and released once at the end. Backends
return detections in model input space, i.e. in the coordinates of the
DetectorInputBuffer they were given, not of the original frame.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol

from video_annotator.models.detection import Detection
from video_annotator.models.frame import DetectorInputBuffer, PixelFormat


class ModelContext(Protocol):
    model_width: int
    model_height: int
    input_format: PixelFormat
    # Class id -> name as shipped with the model weights, when known.
    class_names: Optional[Dict[int, str]]

    def infer(self, buffer: DetectorInputBuffer) -> List[Detection]:
        """
        Run the detector on one buffer.

        Raises:
            InferenceError: If the detector fails. An empty list is not a failure.
        """
        ...

    def release(self) -> None:
        ...
