"""
Real-time video annotation: detect objects frame by frame, draw them, save the result.
"""

__version__ = "0.1.0"
