"""
synthetic_skeleton.py

Simulates depth-sensor body tracking from the world model.

This module stands in for the sensor driver: it advances the world by a
fixed frame interval and reports the visible bodies as SkeletonFrames,
optionally perturbed with Gaussian joint jitter to mimic sensor noise.

All spatial units are meters.
All time units are seconds.
"""

from typing import Optional

import numpy as np

from contracts.points import SensorPoint
from contracts.skeleton import Joint, SkeletonFrame, SkeletonRecord
from contracts.validation import validate_positive
from world.world import World


class SyntheticSkeletonSource:
    """
    Generates SkeletonFrames from a World.

    Parameters
    ----------
    world : World
        Simulated space providing the bodies.
    dt : float, optional
        Frame interval in seconds. Defaults to 1/30 s.
    jitter_std : float, optional
        Standard deviation of per-coordinate Gaussian noise in meters.
        Defaults to 0.0 (exact positions).
    random_seed : Optional[int], optional
        Seed for reproducible noise. If None, uses system entropy.

    Attributes
    ----------
    frame_count : int
        Frames produced so far.
    """

    def __init__(
        self,
        world: World,
        dt: float = 1.0 / 30.0,
        jitter_std: float = 0.0,
        random_seed: Optional[int] = None,
    ) -> None:
        validate_positive(dt, "dt")
        validate_positive(jitter_std, "jitter_std", allow_zero=True)
        self._world = world
        self._dt = float(dt)
        self._jitter_std = float(jitter_std)
        self._rng = np.random.default_rng(random_seed)
        self._frame_count = 0

    @property
    def world(self) -> World:
        return self._world

    @property
    def dt(self) -> float:
        return self._dt

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def _jitter(self, point: SensorPoint) -> SensorPoint:
        if self._jitter_std == 0.0:
            return point
        noise = self._rng.normal(0.0, self._jitter_std, size=3)
        return SensorPoint.from_sequence(point.as_array() + noise)

    def _observe(self, skeleton: SkeletonRecord) -> SkeletonRecord:
        joints = {
            jt: Joint(jt, self._jitter(j.position), j.tracking_state)
            for jt, j in skeleton.joints.items()
        }
        return SkeletonRecord(
            tracking_id=skeleton.tracking_id,
            position=self._jitter(skeleton.position),
            tracking_state=skeleton.tracking_state,
            joints=joints,
        )

    def next_frame(self) -> SkeletonFrame:
        """
        Advance the world by one frame interval and observe it.

        Returns
        -------
        SkeletonFrame
            Bodies visible at the new world time.
        """
        self._world.step(self._dt)
        skeletons = tuple(self._observe(s) for s in self._world.visible_skeletons())
        self._frame_count += 1
        return SkeletonFrame(timestamp=self._world.time, skeletons=skeletons)
