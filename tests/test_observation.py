"""
Tests for observation layer.
"""

from typing import Optional
from unittest.mock import MagicMock, patch

import cv2
import numpy as np
import pytest

from video_annotator.errors import SourceExhaustedError, SourceOpenError
from video_annotator.models.config import SourceConfig
from video_annotator.observation.base import ObservationSource, ObservationConfig
from video_annotator.observation.descriptor import SourceKind, parse_source_descriptor
from video_annotator.observation.opencv_source import OpenCVSource, OpenCVSourceConfig


class MockSource(ObservationSource):
    """Mock observation source for testing."""

    def __init__(self, config: ObservationConfig, frames: list = None, fps: float = 25.0):
        super().__init__(config)
        self._frames = frames or []
        self._fps = fps
        self._pos = 0

    def open(self) -> None:
        self._is_open = True
        self._pos = 0
        self._frame_index = 0
        h, w = self._frames[0].shape[:2] if self._frames else (0, 0)
        self._set_info(w, h, self._fps)

    def _grab(self) -> Optional[np.ndarray]:
        if self._pos >= len(self._frames):
            return None
        frame = self._frames[self._pos]
        self._pos += 1
        return frame

    def close(self) -> None:
        self._is_open = False


class TestSourceDescriptor:
    @pytest.mark.parametrize("text,index", [("0", 0), ("7", 7), ("9", 9)])
    def test_single_digit_is_device(self, text, index):
        desc = parse_source_descriptor(text)
        assert desc.kind is SourceKind.DEVICE
        assert desc.index == index
        assert desc.target == index

    @pytest.mark.parametrize("text", ["10", "video.mp4", "./0", "a", "", "/dev/video0"])
    def test_everything_else_is_file(self, text):
        desc = parse_source_descriptor(text)
        assert desc.kind is SourceKind.FILE
        assert desc.path == text
        assert desc.target == text

    def test_str(self):
        assert str(parse_source_descriptor("2")) == "device:2"
        assert str(parse_source_descriptor("clip.avi")) == "clip.avi"


class TestObservationConfig:
    def test_default_config(self):
        config = ObservationConfig()
        assert config.source_id == "default"
        assert config.default_fps == 30.0


class TestMockSource:
    def test_source_lifecycle(self):
        config = ObservationConfig(source_id="test")
        frames = [np.zeros((100, 120, 3), dtype=np.uint8) for _ in range(3)]
        source = MockSource(config, frames)

        assert not source.is_open
        source.open()
        assert source.is_open
        assert source.frame_index == 0
        assert source.info.size == (120, 100)

        fd = source.read()
        assert fd is not None
        assert fd.source == "test"
        assert fd.frame_index == 1
        assert source.frame_index == 1

        source.close()
        assert not source.is_open

    def test_none_exactly_once_then_exhausted(self):
        frames = [np.zeros((10, 10, 3), dtype=np.uint8)]
        source = MockSource(ObservationConfig(), frames)
        source.open()

        assert source.read() is not None
        assert source.read() is None
        assert source.exhausted
        with pytest.raises(SourceExhaustedError):
            source.read()

    def test_read_before_open(self):
        source = MockSource(ObservationConfig(), [np.zeros((10, 10, 3), dtype=np.uint8)])
        with pytest.raises(RuntimeError):
            source.read()

    def test_info_before_open(self):
        with pytest.raises(RuntimeError):
            MockSource(ObservationConfig()).info

    @pytest.mark.parametrize("reported", [0.0, -1.0])
    def test_non_positive_fps_uses_default(self, reported):
        source = MockSource(ObservationConfig(default_fps=30.0), [np.zeros((4, 4, 3), np.uint8)], fps=reported)
        source.open()
        assert source.info.fps == 30.0

    def test_context_manager(self):
        config = ObservationConfig(source_id="ctx-test")
        frames = [np.zeros((50, 50, 3), dtype=np.uint8) for _ in range(2)]

        with MockSource(config, frames) as source:
            assert source.is_open
            count = sum(1 for _ in source)
            assert count == 2

        assert not source.is_open

    def test_iteration_order(self):
        frames = [np.ones((10, 10, 3), dtype=np.uint8) * i for i in range(5)]
        source = MockSource(ObservationConfig(source_id="iter-test"), frames)
        source.open()

        values = [int(fd.frame[0, 0, 0]) for fd in source]

        assert values == [0, 1, 2, 3, 4]


def _mock_capture(width=1920, height=1080, fps=0.0, frames=(), opened=True):
    cap = MagicMock()
    cap.isOpened.return_value = opened
    props = {
        cv2.CAP_PROP_FRAME_WIDTH: width,
        cv2.CAP_PROP_FRAME_HEIGHT: height,
        cv2.CAP_PROP_FPS: fps,
    }
    cap.get.side_effect = lambda prop: props.get(prop, 0)
    cap.read.side_effect = [(True, f) for f in frames] + [(False, None)]
    return cap


class TestOpenCVSource:
    def test_from_source_config(self):
        config = OpenCVSourceConfig.from_source_config(
            "0", SourceConfig(capture_api="any", default_fps=25), source_id="cam"
        )
        assert config.source_id == "cam"
        assert config.descriptor.kind is SourceKind.DEVICE
        assert config.capture_api == "any"
        assert config.default_fps == 25

    def test_device_opens_with_capture_api(self):
        cap = _mock_capture()
        config = OpenCVSourceConfig(descriptor=parse_source_descriptor("3"), capture_api="v4l2")

        with patch("video_annotator.observation.opencv_source.cv2.VideoCapture", return_value=cap) as vc:
            source = OpenCVSource(config)
            source.open()

        vc.assert_called_once_with(3, cv2.CAP_V4L2)
        assert source.is_device

    def test_file_opens_with_path(self):
        cap = _mock_capture()
        config = OpenCVSourceConfig(descriptor=parse_source_descriptor("clip.mp4"))

        with patch("video_annotator.observation.opencv_source.cv2.VideoCapture", return_value=cap) as vc:
            OpenCVSource(config).open()

        vc.assert_called_once_with("clip.mp4")

    def test_reads_native_properties_once(self):
        cap = _mock_capture(width=1920, height=1080, fps=0.0)
        config = OpenCVSourceConfig(descriptor=parse_source_descriptor("clip.mp4"))

        with patch("video_annotator.observation.opencv_source.cv2.VideoCapture", return_value=cap):
            source = OpenCVSource(config)
            source.open()

        assert source.info.width == 1920
        assert source.info.height == 1080
        assert source.info.fps == 30.0

    def test_open_failure_raises_and_releases(self):
        cap = _mock_capture(opened=False)
        config = OpenCVSourceConfig(descriptor=parse_source_descriptor("missing.mp4"))

        with patch("video_annotator.observation.opencv_source.cv2.VideoCapture", return_value=cap):
            source = OpenCVSource(config)
            with pytest.raises(SourceOpenError, match="missing.mp4"):
                source.open()

        cap.release.assert_called_once()
        assert not source.is_open

    def test_unknown_capture_api(self):
        config = OpenCVSourceConfig(descriptor=parse_source_descriptor("0"), capture_api="dshow-ish")
        with patch("video_annotator.observation.opencv_source.cv2.VideoCapture") as vc:
            with pytest.raises(SourceOpenError):
                OpenCVSource(config).open()
        vc.assert_not_called()

    def test_read_until_end(self):
        frames = [np.full((1080, 1920, 3), i, dtype=np.uint8) for i in range(2)]
        cap = _mock_capture(frames=frames)
        config = OpenCVSourceConfig(descriptor=parse_source_descriptor("clip.mp4"))

        with patch("video_annotator.observation.opencv_source.cv2.VideoCapture", return_value=cap):
            source = OpenCVSource(config)
            source.open()
            first = source.read()
            second = source.read()
            end = source.read()
            source.close()
            source.close()

        assert first.frame_index == 1
        assert second.frame_index == 2
        assert end is None
        cap.release.assert_called_once()

    def test_real_video_file(self, sample_video):
        config = OpenCVSourceConfig(descriptor=parse_source_descriptor(str(sample_video)))

        with OpenCVSource(config) as source:
            assert source.info.size == (64, 48)
            assert source.info.fps == pytest.approx(10.0)
            frames = list(source)

        assert len(frames) == 5
        assert [f.frame_index for f in frames] == [1, 2, 3, 4, 5]
        assert frames[0].frame.shape == (48, 64, 3)

    def test_missing_file(self, tmp_path):
        config = OpenCVSourceConfig(descriptor=parse_source_descriptor(str(tmp_path / "nope.mp4")))
        with pytest.raises(SourceOpenError):
            OpenCVSource(config).open()
