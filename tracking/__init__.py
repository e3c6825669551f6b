"""
tracking package

Gesture classification and per-subject stroke tracking.
"""

from tracking.gestures import (
    GestureThresholds,
    GestureReading,
    classify_gesture,
    is_painting,
    is_erasing,
)
from tracking.strokes import (
    DEFAULT_SLOT_COLORS,
    TrackerConfig,
    SubjectTrack,
    StrokeTracker,
)

__all__ = [
    "GestureThresholds",
    "GestureReading",
    "classify_gesture",
    "is_painting",
    "is_erasing",
    "DEFAULT_SLOT_COLORS",
    "TrackerConfig",
    "SubjectTrack",
    "StrokeTracker",
]
