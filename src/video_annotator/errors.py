"""Exceptions raised by the annotation pipeline."""


class AnnotatorError(Exception):
    """Base error for the annotation pipeline."""
    pass


class ConfigError(AnnotatorError):
    """Invalid or unreadable configuration."""
    pass


class InitError(AnnotatorError):
    """A run-scoped resource could not be acquired."""
    pass


class ModelInitError(InitError):
    """The model context could not be created."""
    pass


class SourceOpenError(InitError):
    """The camera or video file could not be opened."""
    pass


class InferenceError(AnnotatorError):
    """The detector failed on a frame. Fatal for the run."""

    def __init__(self, message: str, frame_index: int = 0):
        super().__init__(message)
        self.frame_index = frame_index


class SourceExhaustedError(AnnotatorError, RuntimeError):
    """read() was called again after the source reported end of stream."""
    pass
