"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

DEFAULT_FPS = 30.0
DEFAULT_OUTPUT_PATH = "output.mp4"
DEFAULT_FOURCC = "H264"

Color = Tuple[int, int, int]


def _color(value: Any, default: Color) -> Color:
    if value is None:
        return default
    return tuple(int(c) for c in value)  # type: ignore[return-value]


@dataclass
class ModelConfig:
    """Detector configuration."""
    backend: str = "ultralytics"
    width: int = 640
    height: int = 640
    conf_threshold: float = 0.25
    iou_threshold: float = 0.45
    max_detections: int = 128
    device: Optional[str] = None
    labels_path: Optional[str] = None
    class_name_overrides: Dict[int, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ModelConfig":
        overrides = d.get("class_name_overrides") or {}
        return cls(
            backend=d.get("backend", "ultralytics"),
            width=d.get("width", 640),
            height=d.get("height", 640),
            conf_threshold=d.get("conf_threshold", 0.25),
            iou_threshold=d.get("iou_threshold", 0.45),
            max_detections=d.get("max_detections", 128),
            device=d.get("device"),
            labels_path=d.get("labels_path"),
            class_name_overrides={int(k): str(v) for k, v in overrides.items()},
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "backend": self.backend,
            "width": self.width,
            "height": self.height,
            "conf_threshold": self.conf_threshold,
            "iou_threshold": self.iou_threshold,
            "max_detections": self.max_detections,
        }
        if self.device is not None:
            d["device"] = self.device
        if self.labels_path is not None:
            d["labels_path"] = self.labels_path
        if self.class_name_overrides:
            d["class_name_overrides"] = dict(self.class_name_overrides)
        return d


@dataclass
class SourceConfig:
    """Frame source configuration."""
    capture_api: str = "v4l2"
    default_fps: float = DEFAULT_FPS

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SourceConfig":
        return cls(
            capture_api=d.get("capture_api", "v4l2"),
            default_fps=float(d.get("default_fps", DEFAULT_FPS)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "capture_api": self.capture_api,
            "default_fps": self.default_fps,
        }


@dataclass
class OutputConfig:
    """Annotated video output configuration."""
    enabled: bool = True
    path: str = DEFAULT_OUTPUT_PATH
    fourcc: str = DEFAULT_FOURCC

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OutputConfig":
        return cls(
            enabled=d.get("enabled", True),
            path=d.get("path", DEFAULT_OUTPUT_PATH),
            fourcc=d.get("fourcc", DEFAULT_FOURCC),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "path": self.path,
            "fourcc": self.fourcc,
        }


@dataclass
class OverlayConfig:
    """Overlay colours (BGR) and text sizes."""
    box_color: Color = (255, 0, 0)
    box_thickness: int = 3
    label_color: Color = (0, 255, 0)
    label_scale: float = 0.8
    label_thickness: int = 2
    fps_color: Color = (0, 0, 255)
    fps_scale: float = 1.2
    fps_thickness: int = 3

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OverlayConfig":
        defaults = cls()
        return cls(
            box_color=_color(d.get("box_color"), defaults.box_color),
            box_thickness=d.get("box_thickness", defaults.box_thickness),
            label_color=_color(d.get("label_color"), defaults.label_color),
            label_scale=d.get("label_scale", defaults.label_scale),
            label_thickness=d.get("label_thickness", defaults.label_thickness),
            fps_color=_color(d.get("fps_color"), defaults.fps_color),
            fps_scale=d.get("fps_scale", defaults.fps_scale),
            fps_thickness=d.get("fps_thickness", defaults.fps_thickness),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "box_color": list(self.box_color),
            "box_thickness": self.box_thickness,
            "label_color": list(self.label_color),
            "label_scale": self.label_scale,
            "label_thickness": self.label_thickness,
            "fps_color": list(self.fps_color),
            "fps_scale": self.fps_scale,
            "fps_thickness": self.fps_thickness,
        }


@dataclass
class PipelineSettings:
    """Driver loop settings."""
    stats_log_interval: float = 60.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PipelineSettings":
        return cls(stats_log_interval=float(d.get("stats_log_interval", 60.0)))

    def to_dict(self) -> Dict[str, Any]:
        return {"stats_log_interval": self.stats_log_interval}


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    model: ModelConfig = field(default_factory=ModelConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)
    pipeline: PipelineSettings = field(default_factory=PipelineSettings)
    log_level: str = "INFO"
    log_path: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            model=ModelConfig.from_dict(d.get("model") or {}),
            source=SourceConfig.from_dict(d.get("source") or {}),
            output=OutputConfig.from_dict(d.get("output") or {}),
            overlay=OverlayConfig.from_dict(d.get("overlay") or {}),
            pipeline=PipelineSettings.from_dict(d.get("pipeline") or {}),
            log_level=d.get("log_level", "INFO"),
            log_path=d.get("log_path"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary."""
        d: Dict[str, Any] = {
            "model": self.model.to_dict(),
            "source": self.source.to_dict(),
            "output": self.output.to_dict(),
            "overlay": self.overlay.to_dict(),
            "pipeline": self.pipeline.to_dict(),
            "log_level": self.log_level,
        }
        if self.log_path is not None:
            d["log_path"] = self.log_path
        return d


VALID_LOG_LEVELS: List[str] = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
