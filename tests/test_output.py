"""
Tests for the annotated video sink.
"""

import logging
from unittest.mock import MagicMock, patch

import cv2
import numpy as np
import pytest

from video_annotator.output.video_sink import VideoSink, fourcc_code


class TestFourcc:
    def test_valid(self):
        assert fourcc_code("MJPG") == cv2.VideoWriter_fourcc(*"MJPG")

    @pytest.mark.parametrize("tag", ["", "H26", "H2645"])
    def test_wrong_length(self, tag):
        with pytest.raises(ValueError):
            fourcc_code(tag)


class TestVideoSink:
    def test_open_passes_geometry_and_rate(self, tmp_path):
        writer = MagicMock()
        writer.isOpened.return_value = True
        path = str(tmp_path / "out.mp4")

        with patch("video_annotator.output.video_sink.cv2.VideoWriter", return_value=writer) as vw:
            sink = VideoSink.open(path, "mp4v", 30.0, (1920, 1080))

        vw.assert_called_once_with(path, cv2.VideoWriter_fourcc(*"mp4v"), 30.0, (1920, 1080), True)
        assert sink is not None
        assert sink.is_open
        assert sink.size == (1920, 1080)

    def test_unopened_writer_returns_none(self, tmp_path):
        writer = MagicMock()
        writer.isOpened.return_value = False

        with patch("video_annotator.output.video_sink.cv2.VideoWriter", return_value=writer):
            sink = VideoSink.open(str(tmp_path / "out.mp4"), "H264", 30.0, (64, 48))

        assert sink is None
        writer.release.assert_called_once()

    def test_invalid_codec_returns_none(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            sink = VideoSink.open(str(tmp_path / "out.mp4"), "H2", 30.0, (64, 48))

        assert sink is None
        assert "Invalid output codec" in caplog.text

    def test_creates_output_directory(self, tmp_path):
        writer = MagicMock()
        writer.isOpened.return_value = True
        target = tmp_path / "nested" / "dir" / "out.mp4"

        with patch("video_annotator.output.video_sink.cv2.VideoWriter", return_value=writer):
            VideoSink.open(str(target), "mp4v", 10.0, (64, 48))

        assert target.parent.is_dir()

    def test_uncreatable_directory_returns_none(self, tmp_path, caplog):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with caplog.at_level(logging.WARNING):
            sink = VideoSink.open(str(blocker / "sub" / "out.avi"), "MJPG", 10.0, (64, 48))

        assert sink is None
        assert "Cannot create output video" in caplog.text

    def test_writer_construction_error_returns_none(self, tmp_path):
        with patch("video_annotator.output.video_sink.cv2.VideoWriter",
                   side_effect=cv2.error("bad writer")):
            sink = VideoSink.open(str(tmp_path / "out.mp4"), "mp4v", 30.0, (64, 48))

        assert sink is None

    def test_write_and_idempotent_close(self):
        writer = MagicMock()
        sink = VideoSink(writer, "out.mp4", 30.0, (4, 4))
        frame = np.zeros((4, 4, 3), dtype=np.uint8)

        sink.write(frame)
        sink.write(frame)
        sink.close()
        sink.close()

        assert writer.write.call_count == 2
        writer.release.assert_called_once()
        assert sink.frames_written == 2
        assert not sink.is_open
        with pytest.raises(RuntimeError):
            sink.write(frame)

    def test_real_mjpg_file(self, tmp_path):
        path = tmp_path / "real.avi"
        sink = VideoSink.open(str(path), "MJPG", 10.0, (64, 48))
        if sink is None:
            pytest.skip("OpenCV build cannot write MJPG video")

        for i in range(3):
            sink.write(np.full((48, 64, 3), 40 * i, dtype=np.uint8))
        sink.close()

        cap = cv2.VideoCapture(str(path))
        try:
            assert cap.isOpened()
            assert int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)) == 64
            assert int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)) == 48
            count = 0
            while cap.read()[0]:
                count += 1
            assert count == 3
        finally:
            cap.release()
