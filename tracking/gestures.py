"""
gestures.py

Per-frame gesture classification from raw joint geometry.

Heuristics, relative to the body reference (torso) position:
- Paint: dominant hand tracked, below the torso and nearer to the sensor
  (palm forward and down).
- Erase: off-hand tracked and raised at least ``erase_height_margin``
  above the torso (hand above head).
- Idle: neither.

Each frame is classified on its own; there is no hysteresis. The thresholds
are heuristic and not derived from calibration data, so they are exposed as
configuration.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping

from contracts.events import Gesture
from contracts.skeleton import JointType, SkeletonRecord
from contracts.validation import ValidationError, validate_finite_scalar


@dataclass(frozen=True)
class GestureThresholds:
    """
    Tunable gesture thresholds, in sensor units (meters).

    Parameters
    ----------
    erase_height_margin : float
        How far above the torso the off-hand must be to erase.
    paint_height_margin : float
        How far below the torso the dominant hand must be to paint.
    paint_depth_margin : float
        How much nearer to the sensor than the torso the dominant hand
        must be to paint.
    dominant_hand : JointType
        Painting hand.
    off_hand : JointType
        Erasing hand.
    """

    erase_height_margin: float = 0.5
    paint_height_margin: float = 0.0
    paint_depth_margin: float = 0.0
    dominant_hand: JointType = JointType.HAND_RIGHT
    off_hand: JointType = JointType.HAND_LEFT

    def __post_init__(self) -> None:
        validate_finite_scalar(self.erase_height_margin, "erase_height_margin")
        validate_finite_scalar(self.paint_height_margin, "paint_height_margin")
        validate_finite_scalar(self.paint_depth_margin, "paint_depth_margin")
        for name in ("dominant_hand", "off_hand"):
            value = getattr(self, name)
            if not isinstance(value, JointType):
                try:
                    value = JointType[str(value).upper()]
                except KeyError as e:
                    raise ValidationError(f"{name} must be a JointType, got {value!r}") from e
                object.__setattr__(self, name, value)
        if self.dominant_hand == self.off_hand:
            raise ValidationError("dominant_hand and off_hand must differ")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GestureThresholds":
        return cls(**dict(data))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "erase_height_margin": self.erase_height_margin,
            "paint_height_margin": self.paint_height_margin,
            "paint_depth_margin": self.paint_depth_margin,
            "dominant_hand": self.dominant_hand.name,
            "off_hand": self.off_hand.name,
        }


@dataclass(frozen=True)
class GestureReading:
    """
    Result of classifying one skeleton in one frame.

    Both flags can be set in the same frame; consumers apply paint before
    erase.
    """

    paint: bool = False
    erase: bool = False

    @property
    def gesture(self) -> Gesture:
        """Single label; ERASE wins since it is applied last."""
        if self.erase:
            return Gesture.ERASE
        if self.paint:
            return Gesture.PAINT
        return Gesture.IDLE


def is_painting(skeleton: SkeletonRecord, thresholds: GestureThresholds) -> bool:
    hand = skeleton.tracked_joint(thresholds.dominant_hand)
    if hand is None:
        return False
    torso = skeleton.position
    return (
        hand.position.y < torso.y - thresholds.paint_height_margin
        and hand.position.z < torso.z - thresholds.paint_depth_margin
    )


def is_erasing(skeleton: SkeletonRecord, thresholds: GestureThresholds) -> bool:
    hand = skeleton.tracked_joint(thresholds.off_hand)
    if hand is None:
        return False
    return hand.position.y >= skeleton.position.y + thresholds.erase_height_margin


def classify_gesture(
    skeleton: SkeletonRecord,
    thresholds: GestureThresholds = GestureThresholds(),
) -> GestureReading:
    """
    Classify one skeleton's pose for this frame.

    Parameters
    ----------
    skeleton : SkeletonRecord
        Tracked body; its reference position is the torso reference.
    thresholds : GestureThresholds
        Heuristic margins and hand assignment.

    Returns
    -------
    GestureReading
        Paint / erase flags. Bodies that are not fully tracked are idle.
    """
    if not skeleton.is_tracked:
        return GestureReading()
    return GestureReading(
        paint=is_painting(skeleton, thresholds),
        erase=is_erasing(skeleton, thresholds),
    )
