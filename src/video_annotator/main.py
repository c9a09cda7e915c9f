"""
Command-line entry point for the video annotator.

Reads a camera or video file, runs the detector on every frame, prints a
per-frame detection report and saves the annotated stream to output.mp4.

Usage:
    video-annotator <model_path> <video_source> [--config config/config.yaml]

Arguments:
    model_path: Detector model artifact (e.g. yolov8n.pt)
    video_source: Camera index (single digit, e.g. 0) or video file path
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

import yaml

from video_annotator.errors import AnnotatorError, ConfigError
from video_annotator.inference.factory import BACKENDS
from video_annotator.models.config import VALID_LOG_LEVELS, Config
from video_annotator.observation.opencv_source import CAPTURE_APIS
from video_annotator.ops.logging import setup_logging
from video_annotator.pipeline.engine import EXIT_FAILURE, create_engine_from_config

EXIT_INTERRUPTED = 130
DEFAULT_CONFIG_PATH = os.path.join("config", "config.yaml")


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return data


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - built-in defaults
    - `default.yaml` next to config_path (checked in)
    - `config.yaml` next to config_path (local overrides)
    - the explicitly provided config_path itself

    Without config_path the layers are read from `config/` under the working
    directory; either file may be absent.

    Raises:
        ConfigError: If a file exists but cannot be parsed, or config_path is missing.
    """
    merged = Config().to_dict()
    explicit = bool(config_path)
    if not explicit:
        config_path = DEFAULT_CONFIG_PATH
    elif not os.path.exists(config_path):
        raise ConfigError(f"Config file not found: {config_path}")

    config_dir = os.path.dirname(config_path)
    base_path = os.path.join(config_dir, "default.yaml")
    local_overrides_path = os.path.join(config_dir, "config.yaml")

    layers = [base_path, local_overrides_path]
    if explicit:
        layers = [p for p in layers if os.path.abspath(p) != os.path.abspath(config_path)]
        layers.append(config_path)

    try:
        for path in layers:
            if os.path.exists(path):
                merged = _deep_merge(merged, _read_yaml(path))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load configuration: {e}") from e

    return merged


def _is_color(value: Any) -> bool:
    return (
        isinstance(value, (list, tuple))
        and len(value) == 3
        and all(isinstance(c, int) and 0 <= c <= 255 for c in value)
    )


def _is_class_id(key: Any) -> bool:
    if isinstance(key, bool):
        return False
    try:
        int(key)
    except (TypeError, ValueError):
        return False
    return True


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ["model", "source", "output", "log_level"]
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Model
    model = config.get("model") or {}
    if model.get("backend", "ultralytics") not in BACKENDS:
        return False, f"model.backend must be one of: {', '.join(BACKENDS)}"
    for key in ("width", "height"):
        value = model.get(key)
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            return False, f"model.{key} must be a positive integer"
    for key in ("conf_threshold", "iou_threshold"):
        value = model.get(key, 0.5)
        if not isinstance(value, (int, float)) or not (0 <= value <= 1):
            return False, f"model.{key} must be a number between 0 and 1"
    max_det = model.get("max_detections", 1)
    if not isinstance(max_det, int) or max_det <= 0:
        return False, "model.max_detections must be a positive integer"
    labels_path = model.get("labels_path")
    if labels_path is not None and not isinstance(labels_path, str):
        return False, "model.labels_path must be a string"
    overrides = model.get("class_name_overrides") or {}
    if not isinstance(overrides, dict):
        return False, "model.class_name_overrides must be a mapping of class id to name"
    if not all(_is_class_id(k) for k in overrides):
        return False, "model.class_name_overrides keys must be integer class ids"

    # Source
    source = config.get("source") or {}
    if source.get("capture_api", "v4l2") not in CAPTURE_APIS:
        return False, f"source.capture_api must be one of: {', '.join(CAPTURE_APIS)}"
    default_fps = source.get("default_fps", 30)
    if not isinstance(default_fps, (int, float)) or default_fps <= 0:
        return False, "source.default_fps must be a positive number"

    # Output
    output = config.get("output") or {}
    if not isinstance(output.get("path"), str) or not output.get("path"):
        return False, "output.path must be a non-empty string"
    fourcc = output.get("fourcc")
    if not isinstance(fourcc, str) or len(fourcc) != 4:
        return False, "output.fourcc must be a 4-character codec tag"

    # Overlay colours
    overlay = config.get("overlay") or {}
    for key in ("box_color", "label_color", "fps_color"):
        if key in overlay and not _is_color(overlay[key]):
            return False, f"overlay.{key} must be a list of three 0-255 integers"

    # Pipeline
    pipeline = config.get("pipeline") or {}
    interval = pipeline.get("stats_log_interval", 60)
    if not isinstance(interval, (int, float)) or interval < 0:
        return False, "pipeline.stats_log_interval must be a non-negative number"

    # Logging
    if config["log_level"] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def apply_cli_overrides(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Apply command-line flags on top of the loaded config."""
    if args.output:
        config["output"]["path"] = args.output
    if args.fourcc:
        config["output"]["fourcc"] = args.fourcc
    if args.no_save:
        config["output"]["enabled"] = False
    if args.log_level:
        config["log_level"] = args.log_level.upper()
    return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="video-annotator",
        description="Run an object detector over a camera or video file and save the annotated video.",
        epilog="Output: saved to output.mp4 + per-frame detections printed to stdout",
    )
    parser.add_argument("model_path", help="Detector model artifact (e.g. yolov8n.pt)")
    parser.add_argument("video_source", help="Camera id (e.g. 0) or video file path")
    parser.add_argument("--config", type=str, default=None,
                        help="Path to YAML configuration file (default: config/config.yaml)")
    parser.add_argument("--output", type=str, default=None,
                        help="Output video path (default: output.mp4)")
    parser.add_argument("--fourcc", type=str, default=None,
                        help="Output codec tag (default: H264)")
    parser.add_argument("--no-save", action="store_true",
                        help="Do not write the annotated video")
    parser.add_argument("--log-level", type=str, default=None,
                        help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main application function. Returns the process exit code."""
    # Usage errors exit with code 2 here, before anything is opened.
    args = build_parser().parse_args(argv)

    try:
        raw_config = apply_cli_overrides(load_config(args.config), args)
    except ConfigError as e:
        logging.error(str(e))
        return EXIT_FAILURE

    is_valid, error_msg = validate_config(raw_config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        return EXIT_FAILURE

    config = Config.from_dict(raw_config)
    setup_logging(config.log_level, config.log_path)
    logging.info(f"Starting video annotator: model={args.model_path}, source={args.video_source}")

    try:
        engine = create_engine_from_config(args.model_path, args.video_source, config)
        result = engine.run()
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except AnnotatorError as e:
        logging.error(str(e))
        return EXIT_FAILURE

    if result.ok and result.output_path:
        logging.info(f"Annotated video written to {result.output_path}")
    return result.exit_code


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
