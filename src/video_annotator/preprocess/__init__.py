"""
Detector input preparation (resize + colour conversion).
"""

from .resize import Preprocessor, conversion_code, prepare_frame

__all__ = ["Preprocessor", "conversion_code", "prepare_frame"]
