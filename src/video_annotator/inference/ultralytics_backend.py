"""
Ultralytics YOLO backend.

The model is fed the already-resized DetectorInputBuffer, so the boxes it
returns are in model input space. Ultralytics reads numpy input as BGR, so
this backend asks the preprocessor for BGR pixels.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from video_annotator.errors import InferenceError, ModelInitError
from video_annotator.models.config import ModelConfig
from video_annotator.models.detection import Detection, detections_from_numpy
from video_annotator.models.frame import DetectorInputBuffer, PixelFormat
from .backend import ModelContext


@dataclass(frozen=True)
class UltralyticsConfig:
    model: str
    width: int = 640
    height: int = 640
    conf_threshold: float = 0.25
    iou_threshold: float = 0.45
    max_detections: int = 128
    device: Optional[str] = None

    @classmethod
    def from_model_config(cls, model_path: str, cfg: ModelConfig) -> "UltralyticsConfig":
        return cls(
            model=model_path,
            width=int(cfg.width),
            height=int(cfg.height),
            conf_threshold=float(cfg.conf_threshold),
            iou_threshold=float(cfg.iou_threshold),
            max_detections=int(cfg.max_detections),
            device=cfg.device,
        )


def _to_numpy(values) -> np.ndarray:
    return values.cpu().numpy() if hasattr(values, "cpu") else np.asarray(values)


class UltralyticsBackend(ModelContext):
    input_format = PixelFormat.BGR888

    def __init__(self, cfg: UltralyticsConfig):
        self.cfg = cfg
        self.model_width = cfg.width
        self.model_height = cfg.height
        try:
            from ultralytics import YOLO  # type: ignore
        except ImportError as e:
            raise ModelInitError(
                "Ultralytics is not installed. Install with `pip install ultralytics` "
                "or `pip install video-annotator[yolo]`."
            ) from e

        try:
            self._model = YOLO(cfg.model)
        except Exception as e:
            raise ModelInitError(f"Failed to load model {cfg.model}: {e}") from e

        names = getattr(self._model, "names", None)
        self.class_names: Optional[Dict[int, str]] = (
            {int(k): str(v) for k, v in names.items()} if isinstance(names, dict) and names else None
        )

        logging.info(
            f"Model loaded: {cfg.model} (input {self.model_width}x{self.model_height}, "
            f"conf={cfg.conf_threshold}, iou={cfg.iou_threshold})"
        )

    def infer(self, buffer: DetectorInputBuffer) -> List[Detection]:
        if self._model is None:
            raise InferenceError("Model context has been released")
        if buffer.pixel_format != self.input_format:
            raise InferenceError(
                f"Expected {self.input_format.value} input, got {buffer.pixel_format.value}"
            )

        try:
            results = self._model.predict(
                source=buffer.data,
                imgsz=(self.model_height, self.model_width),
                conf=self.cfg.conf_threshold,
                iou=self.cfg.iou_threshold,
                max_det=self.cfg.max_detections,
                device=self.cfg.device,
                verbose=False,
            )
        except Exception as e:
            raise InferenceError(f"Ultralytics predict failed: {e}") from e

        if not results:
            return []
        boxes = getattr(results[0], "boxes", None)
        if boxes is None:
            return []

        xyxy = _to_numpy(boxes.xyxy).reshape(-1, 4)
        conf = _to_numpy(boxes.conf).reshape(-1, 1)
        cls = _to_numpy(boxes.cls).reshape(-1, 1)
        return detections_from_numpy(np.hstack([xyxy, conf, cls]))

    def release(self) -> None:
        self._model = None
        logging.info(f"Model released: {self.cfg.model}")
