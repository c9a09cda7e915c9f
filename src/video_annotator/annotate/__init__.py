"""
Frame annotation (boxes, captions, FPS counter).
"""

from .overlay import OverlayRenderer, format_fps, format_label, instantaneous_fps

__all__ = ["OverlayRenderer", "format_fps", "format_label", "instantaneous_fps"]
