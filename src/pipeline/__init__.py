"""Pipeline orchestration for smart-link track resolution."""

from src.pipeline.orchestrator import TrackResolutionPipeline

__all__ = ["TrackResolutionPipeline"]
