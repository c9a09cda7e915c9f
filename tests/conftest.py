"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import cv2
import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from video_annotator.models.config import Config  # noqa: E402


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary (the built-in defaults)."""
    return Config().to_dict()


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
model:
  backend: "ultralytics"
  width: 320
  height: 320
  conf_threshold: 0.3

source:
  capture_api: "any"
  default_fps: 25

output:
  path: "out/annotated.mp4"
  fourcc: "mp4v"

log_level: "DEBUG"
""")

    return config_dir


def write_test_video(path, num_frames=5, size=(64, 48), fps=10.0):
    """Write a small MJPG video whose frames differ by brightness. Returns False if unsupported."""
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), fps, size, True)
    if not writer.isOpened():
        return False
    w, h = size
    for i in range(num_frames):
        frame = np.full((h, w, 3), 20 * (i + 1), dtype=np.uint8)
        writer.write(frame)
    writer.release()
    return True


@pytest.fixture
def sample_video(tmp_path):
    """Path to a 5-frame 64x48 MJPG .avi at 10 FPS."""
    path = tmp_path / "sample.avi"
    if not write_test_video(path):
        pytest.skip("OpenCV build cannot write MJPG video")
    return path
