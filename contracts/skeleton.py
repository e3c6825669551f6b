"""
contracts/skeleton.py

Body-tracking data contracts.

Defines the per-frame records delivered by the depth-sensor driver:
- JointType: Joints the engine consumes
- JointTrackingState, SkeletonTrackingState: Per-joint / per-body confidence flags
- Joint: Single joint position with its tracking flag
- SkeletonRecord: One tracked body with its reference position and joints
- SkeletonFrame: All bodies reported by the sensor at one instant

Invariants
----------
- Timestamps must be finite
- Tracking ids must be non-negative ints
- Joint mappings are keyed by JointType and frozen after construction
- Frame skeleton order is preserved (it decides slot assignment for new subjects)
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Dict, Any, Tuple, Mapping, Optional

from contracts.points import SensorPoint
from contracts.validation import (
    validate_finite_scalar,
    validate_non_negative_int,
)


class JointType(Enum):
    """
    Joints consumed by calibration and gesture classification.

    HAND_RIGHT is the dominant (painting) hand and HAND_LEFT the off-hand
    (erasing) in the default configuration.
    """

    HEAD = auto()
    SPINE = auto()
    HAND_LEFT = auto()
    HAND_RIGHT = auto()


class JointTrackingState(Enum):
    """
    Confidence flag attached to a single joint.

    States
    ------
    TRACKED : Joint observed directly.
    INFERRED : Joint position estimated from neighbouring joints.
    NOT_TRACKED : No position available.
    """

    TRACKED = auto()
    INFERRED = auto()
    NOT_TRACKED = auto()


class SkeletonTrackingState(Enum):
    """
    Whole-body tracking flag.

    Only TRACKED bodies carry joint data; POSITION_ONLY bodies report a
    reference position without joints.
    """

    TRACKED = auto()
    POSITION_ONLY = auto()
    NOT_TRACKED = auto()


@dataclass(frozen=True)
class Joint:
    """
    Single joint position.

    Parameters
    ----------
    joint_type : JointType
        Which joint this is.
    position : SensorPoint
        Position in sensor space (meters).
    tracking_state : JointTrackingState
        Confidence flag for this joint in this frame.
    """

    joint_type: JointType
    position: SensorPoint
    tracking_state: JointTrackingState = JointTrackingState.TRACKED

    def __post_init__(self) -> None:
        if not isinstance(self.joint_type, JointType):
            raise TypeError(
                f"joint_type must be JointType, got {type(self.joint_type).__name__}"
            )
        if not isinstance(self.position, SensorPoint):
            raise TypeError(
                f"position must be SensorPoint, got {type(self.position).__name__}"
            )
        if not isinstance(self.tracking_state, JointTrackingState):
            raise TypeError(
                "tracking_state must be JointTrackingState, "
                f"got {type(self.tracking_state).__name__}"
            )

    @property
    def is_tracked(self) -> bool:
        """True only for directly observed joints."""
        return self.tracking_state == JointTrackingState.TRACKED


@dataclass(frozen=True)
class SkeletonRecord:
    """
    One body reported by the sensor in a frame.

    Parameters
    ----------
    tracking_id : int
        Sensor-assigned id, stable while the body stays tracked.
    position : SensorPoint
        Body reference position (torso center). Used as the calibration
        capture point and as the torso reference for gesture thresholds.
    tracking_state : SkeletonTrackingState
        Whole-body tracking flag.
    joints : Mapping[JointType, Joint]
        Joint records keyed by type. Missing joints count as not tracked.

    Examples
    --------
    >>> rec = SkeletonRecord(
    ...     tracking_id=1,
    ...     position=SensorPoint(0.0, 0.2, 2.5),
    ... )
    >>> rec.is_tracked
    True
    >>> rec.joint(JointType.HAND_RIGHT) is None
    True
    """

    tracking_id: int
    position: SensorPoint
    tracking_state: SkeletonTrackingState = SkeletonTrackingState.TRACKED
    joints: Mapping[JointType, Joint] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate and freeze the joint mapping."""
        validate_non_negative_int(self.tracking_id, "tracking_id")

        if not isinstance(self.position, SensorPoint):
            raise TypeError(
                f"position must be SensorPoint, got {type(self.position).__name__}"
            )
        if not isinstance(self.tracking_state, SkeletonTrackingState):
            raise TypeError(
                "tracking_state must be SkeletonTrackingState, "
                f"got {type(self.tracking_state).__name__}"
            )

        joints: Dict[JointType, Joint] = {}
        for key, joint in dict(self.joints).items():
            if not isinstance(joint, Joint):
                raise TypeError(f"joints[{key}] must be Joint, got {type(joint).__name__}")
            if key != joint.joint_type:
                raise ValueError(f"joints key {key} does not match {joint.joint_type}")
            joints[key] = joint
        object.__setattr__(self, "joints", MappingProxyType(joints))

    @property
    def is_tracked(self) -> bool:
        """True when the body is fully tracked (joints available)."""
        return self.tracking_state == SkeletonTrackingState.TRACKED

    def joint(self, joint_type: JointType) -> Optional[Joint]:
        """Joint record, or None if the sensor did not report it."""
        return self.joints.get(joint_type)

    def tracked_joint(self, joint_type: JointType) -> Optional[Joint]:
        """Joint record only if it is directly tracked this frame."""
        joint = self.joints.get(joint_type)
        if joint is None or not joint.is_tracked:
            return None
        return joint

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "tracking_id": self.tracking_id,
            "tracking_state": self.tracking_state.name,
            "position": self.position.to_dict(),
            "joints": {
                jt.name: {
                    "position": j.position.to_dict(),
                    "tracking_state": j.tracking_state.name,
                }
                for jt, j in self.joints.items()
            },
        }


@dataclass(frozen=True)
class SkeletonFrame:
    """
    All bodies reported by the sensor at one instant.

    Parameters
    ----------
    timestamp : float
        Frame time in seconds.
    skeletons : Tuple[SkeletonRecord, ...]
        Body records in sensor order.
    """

    timestamp: float
    skeletons: Tuple[SkeletonRecord, ...] = ()

    def __post_init__(self) -> None:
        validate_finite_scalar(self.timestamp, "timestamp")
        skeletons = tuple(self.skeletons)
        for i, rec in enumerate(skeletons):
            if not isinstance(rec, SkeletonRecord):
                raise TypeError(
                    f"skeletons[{i}] must be SkeletonRecord, got {type(rec).__name__}"
                )
        object.__setattr__(self, "skeletons", skeletons)

    def tracked(self) -> Tuple[SkeletonRecord, ...]:
        """Fully tracked bodies, in sensor order."""
        return tuple(s for s in self.skeletons if s.is_tracked)

    def first_tracked(self) -> Optional[SkeletonRecord]:
        """First fully tracked body, or None."""
        for s in self.skeletons:
            if s.is_tracked:
                return s
        return None

    def __len__(self) -> int:
        return len(self.skeletons)
