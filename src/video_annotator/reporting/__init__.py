"""
Console detection reporting.
"""

from .console import ConsoleReporter, NO_OBJECTS, format_detection_line

__all__ = ["ConsoleReporter", "NO_OBJECTS", "format_detection_line"]
