"""
Coordinate mapping between model input space and frame space.
"""

from .mapping import clamp_box, compute_scale, map_detection, map_detections, scale_box

__all__ = ["clamp_box", "compute_scale", "map_detection", "map_detections", "scale_box"]
