"""Shared pytest setup: headless matplotlib and skeleton builders."""

from typing import Optional, Tuple

import matplotlib

matplotlib.use("Agg")

import pytest

from contracts import (
    Joint,
    JointTrackingState,
    JointType,
    SensorPoint,
    SkeletonFrame,
    SkeletonRecord,
    SkeletonTrackingState,
)

Vec3 = Tuple[float, float, float]


def make_skeleton(
    tracking_id: int = 1,
    torso: Vec3 = (0.0, 0.0, 2.0),
    right: Optional[Vec3] = None,
    left: Optional[Vec3] = None,
    right_state: JointTrackingState = JointTrackingState.TRACKED,
    left_state: JointTrackingState = JointTrackingState.TRACKED,
    tracking_state: SkeletonTrackingState = SkeletonTrackingState.TRACKED,
) -> SkeletonRecord:
    """Body with hands lowered at the sides unless positions are given."""
    tx, ty, tz = torso
    right = right if right is not None else (tx + 0.25, ty - 0.3, tz)
    left = left if left is not None else (tx - 0.25, ty - 0.3, tz)
    joints = {
        JointType.HAND_RIGHT: Joint(JointType.HAND_RIGHT, SensorPoint(*right), right_state),
        JointType.HAND_LEFT: Joint(JointType.HAND_LEFT, SensorPoint(*left), left_state),
    }
    return SkeletonRecord(
        tracking_id=tracking_id,
        position=SensorPoint(*torso),
        tracking_state=tracking_state,
        joints=joints,
    )


def make_frame(timestamp: float, *skeletons: SkeletonRecord) -> SkeletonFrame:
    return SkeletonFrame(timestamp=timestamp, skeletons=tuple(skeletons))


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, dt: float) -> None:
        self.now += dt


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
