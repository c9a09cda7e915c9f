from .context import PipelineContext

__all__ = ["PipelineContext"]
