"""
Model context construction from configuration.
"""

from __future__ import annotations

from video_annotator.errors import ModelInitError
from video_annotator.models.config import ModelConfig
from .backend import ModelContext

BACKENDS = ("ultralytics",)


def create_model_context(model_path: str, cfg: ModelConfig) -> ModelContext:
    """
    Create the model context named by `cfg.backend`.

    Raises:
        ModelInitError: Unknown backend or the backend failed to load the model.
    """
    if cfg.backend == "ultralytics":
        from .ultralytics_backend import UltralyticsBackend, UltralyticsConfig

        return UltralyticsBackend(UltralyticsConfig.from_model_config(model_path, cfg))

    raise ModelInitError(
        f"Unknown model backend '{cfg.backend}' (expected one of: {', '.join(BACKENDS)})"
    )
