"""
subjects.py

Scripted subjects for the simulated world.

Each subject follows a list of segments. A segment places the body at a
fixed reference position with a fixed pose for a duration; the subject
walks the list in order and holds the last segment forever.

Poses
-----
idle   : hands lowered at the sides
paint  : dominant hand forward and down (nearer the sensor than the torso)
erase  : off-hand raised above the head
absent : body not reported by the sensor

All spatial quantities are in meters.
All time quantities are in seconds.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from contracts.points import SensorPoint
from contracts.skeleton import Joint, JointType, SkeletonRecord
from contracts.validation import ValidationError, validate_coordinates, validate_positive

POSES = ("idle", "paint", "erase", "absent")

# Joint offsets from the torso reference, (dx, dy, dz).
_HEAD_OFFSET = (0.0, 0.6, 0.0)
_HAND_DOWN_RIGHT = (0.25, -0.3, 0.0)
_HAND_DOWN_LEFT = (-0.25, -0.3, 0.0)
_HAND_PAINT_RIGHT = (0.2, -0.2, -0.4)
_HAND_RAISED_LEFT = (-0.2, 0.7, 0.0)


@dataclass(frozen=True)
class Segment:
    """
    One scripted hold.

    Parameters
    ----------
    position : Tuple[float, float, float]
        Torso reference position (x, y, z).
    duration : float
        Hold time in seconds.
    pose : str
        One of POSES.
    hand_offset : Tuple[float, float]
        Extra (dx, dz) applied to the dominant hand, used to move the paint
        cursor without moving the body.
    """

    position: Tuple[float, float, float]
    duration: float
    pose: str = "idle"
    hand_offset: Tuple[float, float] = (0.0, 0.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", validate_coordinates(self.position, 3, "position"))
        object.__setattr__(
            self, "hand_offset", validate_coordinates(self.hand_offset, 2, "hand_offset")
        )
        validate_positive(self.duration, "duration")
        if self.pose not in POSES:
            raise ValidationError(f"pose must be one of {POSES}, got {self.pose!r}")


def _offset(base: Tuple[float, float, float], delta: Tuple[float, float, float]) -> SensorPoint:
    return SensorPoint(base[0] + delta[0], base[1] + delta[1], base[2] + delta[2])


class ScriptedSubject:
    """
    A body that follows scripted segments.

    Parameters
    ----------
    tracking_id : int
        Sensor id reported while the subject is present.
    segments : Sequence[Segment]
        Holds in order. Must not be empty.
    """

    def __init__(self, tracking_id: int, segments: Sequence[Segment]) -> None:
        if not segments:
            raise ValidationError("segments must not be empty")
        self.tracking_id = tracking_id
        self.segments: Tuple[Segment, ...] = tuple(segments)
        self._elapsed = 0.0

    @property
    def elapsed(self) -> float:
        return self._elapsed

    def step(self, dt: float) -> None:
        """Advance the script by dt seconds."""
        if dt < 0.0:
            raise ValueError(f"dt must be non-negative, got {dt}")
        self._elapsed += dt

    def current_segment(self) -> Segment:
        """Segment active at the current script time."""
        t = self._elapsed
        for segment in self.segments:
            if t < segment.duration:
                return segment
            t -= segment.duration
        return self.segments[-1]

    def skeleton(self) -> Optional[SkeletonRecord]:
        """Body as the sensor would report it now, or None if absent."""
        segment = self.current_segment()
        if segment.pose == "absent":
            return None

        p = segment.position
        if segment.pose == "paint":
            dx, dz = segment.hand_offset
            right = _offset(p, (_HAND_PAINT_RIGHT[0] + dx, _HAND_PAINT_RIGHT[1],
                                _HAND_PAINT_RIGHT[2] + dz))
        else:
            right = _offset(p, _HAND_DOWN_RIGHT)
        left = _offset(p, _HAND_RAISED_LEFT if segment.pose == "erase" else _HAND_DOWN_LEFT)

        joints: Dict[JointType, Joint] = {
            JointType.SPINE: Joint(JointType.SPINE, SensorPoint(*p)),
            JointType.HEAD: Joint(JointType.HEAD, _offset(p, _HEAD_OFFSET)),
            JointType.HAND_RIGHT: Joint(JointType.HAND_RIGHT, right),
            JointType.HAND_LEFT: Joint(JointType.HAND_LEFT, left),
        }
        return SkeletonRecord(
            tracking_id=self.tracking_id,
            position=SensorPoint(*p),
            joints=joints,
        )
