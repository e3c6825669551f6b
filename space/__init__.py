"""
space package

Sensor-space to screen-space projection utilities.

Includes the per-frame Projector and the pixel rounding policy.
"""

from space.projection import (
    Projector,
    ProjectionError,
    TransformProtocol,
    project,
    project_pixel,
    round_pixels,
    round_half_away_from_zero,
)

__all__ = [
    "Projector",
    "ProjectionError",
    "TransformProtocol",
    "project",
    "project_pixel",
    "round_pixels",
    "round_half_away_from_zero",
]
