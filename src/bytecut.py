"""Public SDK surface for bytecut.

This module provides a stable import path for library users.
It re-exports the config model, the trim helper and the pipeline runner.
"""

from __future__ import annotations

from core.config import CutConfig
from core.errors import BytecutConfigError, BytecutError
from core.types import LifecycleState, OutputTarget, PipelineReport
from pipeline.controller import PipelineController, run_pipeline
from pipeline.sink_writer import open_output_target
from pipeline.transformer import trim_line

__all__ = [
    "BytecutConfigError",
    "BytecutError",
    "CutConfig",
    "LifecycleState",
    "OutputTarget",
    "PipelineController",
    "PipelineReport",
    "open_output_target",
    "run_pipeline",
    "trim_line",
]
