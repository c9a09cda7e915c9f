"""
Typed models for the video annotator.

Frames, detector input buffers, detections and configuration.
"""

from .frame import FrameData, PixelFormat, DetectorInputBuffer
from .detection import (
    AnnotatedDetection,
    BoundingBox,
    Detection,
    ScaledBox,
    detections_from_numpy,
)
from .config import (
    Config,
    ModelConfig,
    SourceConfig,
    OutputConfig,
    OverlayConfig,
    PipelineSettings,
)

__all__ = [
    # Frame
    "FrameData",
    "PixelFormat",
    "DetectorInputBuffer",
    # Detection
    "AnnotatedDetection",
    "BoundingBox",
    "Detection",
    "ScaledBox",
    "detections_from_numpy",
    # Config
    "Config",
    "ModelConfig",
    "SourceConfig",
    "OutputConfig",
    "OverlayConfig",
    "PipelineSettings",
]
