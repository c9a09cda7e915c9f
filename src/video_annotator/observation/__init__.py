"""
Observation layer for pluggable video sources.

This layer abstracts where frames come from (camera or video file) from the
processing pipeline. Each source implements the ObservationSource interface
and returns FrameData objects.
"""

from .base import ObservationSource, ObservationConfig, StreamInfo
from .descriptor import SourceDescriptor, SourceKind, parse_source_descriptor
from .opencv_source import OpenCVSource, OpenCVSourceConfig

__all__ = [
    "ObservationSource",
    "ObservationConfig",
    "StreamInfo",
    "SourceDescriptor",
    "SourceKind",
    "parse_source_descriptor",
    "OpenCVSource",
    "OpenCVSourceConfig",
]
