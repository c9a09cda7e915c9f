"""
Video output sink.
"""

from .video_sink import VideoSink, fourcc_code

__all__ = ["VideoSink", "fourcc_code"]
