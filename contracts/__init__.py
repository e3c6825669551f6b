"""
contracts

Core data contracts for the sensor-to-screen calibration and stroke engine.

This package defines strict, documented dataclasses that form the data contracts
between the sensor driver, calibration, projection, stroke tracking and the
rendering layer.

All contracts are immutable (frozen dataclasses) with runtime validation.
Modules can evolve independently as long as they honor these contracts.

Contracts
---------
Point Layer:
    SensorPoint : 3D joint position in sensor space (meters)
    ScreenPoint : 2D position on the display surface (pixels)
    Correspondence : (SensorPoint, ScreenPoint) calibration pair

Skeleton Layer:
    Joint : Single joint with tracking flag
    SkeletonRecord : One tracked body
    SkeletonFrame : All bodies in one sensor frame

Event Layer:
    PaintEvent, EraseEvent : Stroke events for the rendering sink
    CalibrationProgress : Progress notification for instructional display
    CalibrationState, SessionState, Gesture : State enumerations
"""

from contracts.points import (
    SensorPoint,
    ScreenPoint,
    Correspondence,
    round_half_away_from_zero,
)
from contracts.skeleton import (
    Joint,
    JointType,
    JointTrackingState,
    SkeletonRecord,
    SkeletonFrame,
    SkeletonTrackingState,
)
from contracts.events import (
    CalibrationState,
    SessionState,
    Gesture,
    PaintEvent,
    EraseEvent,
    StrokeEvent,
    CalibrationProgress,
)
from contracts.validation import (
    validate_finite_scalar,
    validate_coordinates,
    validate_positive,
    validate_points_array,
    ValidationError,
)
from contracts.compat import (
    skeleton_from_dict,
    frame_from_dict,
    sensor_points_to_xz,
    screen_points_to_array,
)

__all__ = [
    # Points
    "SensorPoint",
    "ScreenPoint",
    "Correspondence",
    "round_half_away_from_zero",
    # Skeleton
    "Joint",
    "JointType",
    "JointTrackingState",
    "SkeletonRecord",
    "SkeletonFrame",
    "SkeletonTrackingState",
    # Events
    "CalibrationState",
    "SessionState",
    "Gesture",
    "PaintEvent",
    "EraseEvent",
    "StrokeEvent",
    "CalibrationProgress",
    # Validation
    "validate_finite_scalar",
    "validate_coordinates",
    "validate_positive",
    "validate_points_array",
    "ValidationError",
    # Compatibility
    "skeleton_from_dict",
    "frame_from_dict",
    "sensor_points_to_xz",
    "screen_points_to_array",
]
