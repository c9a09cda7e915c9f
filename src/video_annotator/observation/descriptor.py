"""
Source descriptor parsing.

The command line takes a single string for the video source. A single digit
selects a capture device by index; anything else is treated as a file path.
The decision is made once, before the source is opened.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class SourceKind(str, Enum):
    DEVICE = "device"
    FILE = "file"


@dataclass(frozen=True)
class SourceDescriptor:
    """
    Resolved video source.

    Attributes:
        kind: DEVICE or FILE.
        index: Device index when kind is DEVICE.
        path: File path when kind is FILE.
    """
    kind: SourceKind
    index: Optional[int] = None
    path: Optional[str] = None

    @property
    def target(self) -> Union[int, str]:
        """Argument to hand to cv2.VideoCapture."""
        if self.kind is SourceKind.DEVICE:
            return self.index  # type: ignore[return-value]
        return self.path  # type: ignore[return-value]

    def __str__(self) -> str:
        if self.kind is SourceKind.DEVICE:
            return f"device:{self.index}"
        return str(self.path)


def parse_source_descriptor(text: str) -> SourceDescriptor:
    """
    Resolve a command-line video source argument.

    "0".."9" open a capture device; "10", "./0" or "video.mp4" are file paths.
    """
    if len(text) == 1 and text in "0123456789":
        return SourceDescriptor(kind=SourceKind.DEVICE, index=int(text))
    return SourceDescriptor(kind=SourceKind.FILE, path=text)
