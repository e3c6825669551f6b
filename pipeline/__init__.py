"""
pipeline package

Per-frame orchestration, configuration and logging setup.
"""

from pipeline.config import AppConfig
from pipeline.frame_loop import FrameLoop, FrameOutput, FrameSource, RenderSink
from pipeline.logging_setup import configure_logging

__all__ = [
    "AppConfig",
    "FrameLoop",
    "FrameOutput",
    "FrameSource",
    "RenderSink",
    "configure_logging",
]
