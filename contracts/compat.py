"""
contracts/compat.py

Conversion layer between contracts and plain data.

Provides adapters for:
- Driver-shaped dictionaries (joint names, state names) -> SkeletonRecord / SkeletonFrame
- Point sequences -> numpy arrays consumed by the solver

Usage
-----
>>> from contracts.compat import frame_from_dict
>>> frame = frame_from_dict({
...     "timestamp": 0.1,
...     "skeletons": [{"tracking_id": 1, "position": [0.0, 0.1, 2.5]}],
... })
>>> len(frame)
1
"""

from typing import Any, Dict, Mapping, Sequence

import numpy as np

from contracts.points import SensorPoint, ScreenPoint
from contracts.skeleton import (
    Joint,
    JointType,
    JointTrackingState,
    SkeletonFrame,
    SkeletonRecord,
    SkeletonTrackingState,
)
from contracts.validation import ValidationError


def _enum_member(enum_cls, value: Any, name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls[str(value).upper()]
    except KeyError as e:
        allowed = ", ".join(m.name for m in enum_cls)
        raise ValidationError(f"{name} must be one of ({allowed}), got {value!r}") from e


def skeleton_from_dict(data: Mapping[str, Any]) -> SkeletonRecord:
    """
    Build a SkeletonRecord from a driver-shaped dictionary.

    Expected keys: ``tracking_id``, ``position`` ([x, y, z]), optional
    ``tracking_state`` (name, default "TRACKED") and ``joints`` mapping joint
    names to either ``[x, y, z]`` or ``{"position": [...], "tracking_state": name}``.

    Raises
    ------
    ValidationError
        On unknown joint/state names or malformed coordinates.
    """
    joints: Dict[JointType, Joint] = {}
    for joint_name, joint_data in dict(data.get("joints", {})).items():
        joint_type = _enum_member(JointType, joint_name, "joint")
        if isinstance(joint_data, Mapping):
            position = joint_data["position"]
            state = _enum_member(
                JointTrackingState,
                joint_data.get("tracking_state", "TRACKED"),
                f"{joint_type.name}.tracking_state",
            )
        else:
            position = joint_data
            state = JointTrackingState.TRACKED
        joints[joint_type] = Joint(
            joint_type=joint_type,
            position=SensorPoint.from_sequence(position),
            tracking_state=state,
        )

    return SkeletonRecord(
        tracking_id=data["tracking_id"],
        position=SensorPoint.from_sequence(data["position"]),
        tracking_state=_enum_member(
            SkeletonTrackingState,
            data.get("tracking_state", "TRACKED"),
            "tracking_state",
        ),
        joints=joints,
    )


def frame_from_dict(data: Mapping[str, Any]) -> SkeletonFrame:
    """Build a SkeletonFrame from ``{"timestamp": t, "skeletons": [...]}``."""
    return SkeletonFrame(
        timestamp=data["timestamp"],
        skeletons=tuple(skeleton_from_dict(s) for s in data.get("skeletons", ())),
    )


def sensor_points_to_xz(points: Sequence[SensorPoint]) -> np.ndarray:
    """
    Stack the calibration-plane coordinates of sensor points.

    Returns
    -------
    np.ndarray
        Shape (N, 2), columns (x, z). Height is dropped.
    """
    if len(points) == 0:
        return np.zeros((0, 2), dtype=np.float64)
    return np.array([p.floor_xz for p in points], dtype=np.float64)


def screen_points_to_array(points: Sequence[ScreenPoint]) -> np.ndarray:
    """Stack screen points into an (N, 2) float64 array."""
    if len(points) == 0:
        return np.zeros((0, 2), dtype=np.float64)
    return np.array([(p.x, p.y) for p in points], dtype=np.float64)
