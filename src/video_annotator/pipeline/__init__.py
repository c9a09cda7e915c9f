"""
Pipeline module for the video annotator.

The pipeline orchestrates the per-frame flow:
- Frame acquisition from an observation source
- Preprocessing and inference
- Box mapping, reporting and overlay drawing
- Writing the annotated video
"""

from .engine import (
    EXIT_FAILURE,
    EXIT_SUCCESS,
    PipelineConfig,
    PipelineEngine,
    PipelineResult,
    PipelineState,
    create_engine_from_config,
)

__all__ = [
    "EXIT_FAILURE",
    "EXIT_SUCCESS",
    "PipelineConfig",
    "PipelineEngine",
    "PipelineResult",
    "PipelineState",
    "create_engine_from_config",
]
