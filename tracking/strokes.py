"""
strokes.py

Per-Subject Stroke Tracker.

Keeps one SubjectTrack per subject slot (a fixed-size list indexed by slot)
and turns each frame's gesture classification into stroke events:

- Paint(position, slot) every frame the paint pose holds, at the rounded
  projected position of the dominant hand; a held pose draws a continuous
  stroke.
- Erase(slot) every frame the erase pose holds.

Slots never share state. A subject keeps its slot while its tracking id
persists; newly tracked subjects take the lowest free slot; subjects beyond
``max_subjects`` are ignored. A slot whose subject is absent from a frame is
cleared.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from calibration.errors import ProjectionError
from contracts.events import EraseEvent, Gesture, PaintEvent, StrokeEvent
from contracts.points import ScreenPoint, SensorPoint
from contracts.skeleton import JointType, SkeletonRecord
from contracts.validation import ValidationError
from space.projection import Projector
from tracking.gestures import GestureThresholds, classify_gesture

logger = logging.getLogger(__name__)

DEFAULT_SLOT_COLORS: Tuple[str, ...] = ("black", "red")


@dataclass(frozen=True)
class TrackerConfig:
    """
    Subject slot configuration.

    Parameters
    ----------
    max_subjects : int
        Number of subject slots.
    slot_colors : Tuple[str, ...]
        Display color per slot; must cover every slot.
    """

    max_subjects: int = 2
    slot_colors: Tuple[str, ...] = DEFAULT_SLOT_COLORS

    def __post_init__(self) -> None:
        if isinstance(self.max_subjects, bool) or not isinstance(self.max_subjects, int):
            raise ValidationError(f"max_subjects must be int, got {self.max_subjects!r}")
        if self.max_subjects < 1:
            raise ValidationError(f"max_subjects must be >= 1, got {self.max_subjects}")
        colors = tuple(str(c) for c in self.slot_colors)
        if len(colors) < self.max_subjects:
            raise ValidationError(
                f"{self.max_subjects} slots need {self.max_subjects} colors, got {len(colors)}"
            )
        object.__setattr__(self, "slot_colors", colors)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TrackerConfig":
        kwargs = dict(data)
        if "slot_colors" in kwargs:
            kwargs["slot_colors"] = tuple(kwargs["slot_colors"])
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {"max_subjects": self.max_subjects, "slot_colors": list(self.slot_colors)}


@dataclass
class SubjectTrack:
    """
    Mutable per-slot state of one tracked subject.

    Attributes
    ----------
    slot : int
        Subject slot index.
    color : str
        Display color of the slot.
    tracking_id : int
        Sensor id of the subject occupying the slot.
    reference : SensorPoint, optional
        Last torso reference position.
    joints : Dict[JointType, SensorPoint]
        Last tracked position of each joint of interest.
    screen_point : ScreenPoint, optional
        Last projected (rounded) dominant-hand position.
    gesture : Gesture
        Classification of the latest frame.
    frames_tracked : int
        Frames seen since the slot was assigned to this subject.
    """

    slot: int
    color: str
    tracking_id: int
    reference: Optional[SensorPoint] = None
    joints: Dict[JointType, SensorPoint] = field(default_factory=dict)
    screen_point: Optional[ScreenPoint] = None
    gesture: Gesture = Gesture.IDLE
    frames_tracked: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slot": self.slot,
            "color": self.color,
            "tracking_id": self.tracking_id,
            "screen_point": None if self.screen_point is None else self.screen_point.to_dict(),
            "gesture": self.gesture.name,
            "frames_tracked": self.frames_tracked,
        }


class StrokeTracker:
    """
    Classifies gestures per subject slot and emits stroke events.

    Parameters
    ----------
    config : TrackerConfig, optional
        Slot count and colors.
    thresholds : GestureThresholds, optional
        Gesture heuristics.
    """

    def __init__(
        self,
        config: Optional[TrackerConfig] = None,
        thresholds: Optional[GestureThresholds] = None,
    ) -> None:
        self._config = config if config is not None else TrackerConfig()
        self._thresholds = thresholds if thresholds is not None else GestureThresholds()
        self._tracks: List[Optional[SubjectTrack]] = [None] * self._config.max_subjects

    @property
    def config(self) -> TrackerConfig:
        return self._config

    @property
    def thresholds(self) -> GestureThresholds:
        return self._thresholds

    @property
    def tracks(self) -> Tuple[Optional[SubjectTrack], ...]:
        """Track per slot; None for empty slots."""
        return tuple(self._tracks)

    def track(self, slot: int) -> Optional[SubjectTrack]:
        return self._tracks[slot]

    @property
    def active_count(self) -> int:
        return sum(1 for t in self._tracks if t is not None)

    def _interesting_joints(self) -> Tuple[JointType, ...]:
        return (self._thresholds.dominant_hand, self._thresholds.off_hand)

    def _assign_slots(self, tracked: Sequence[SkeletonRecord]) -> Dict[int, SkeletonRecord]:
        id_to_slot = {t.tracking_id: t.slot for t in self._tracks if t is not None}
        assignment: Dict[int, SkeletonRecord] = {}
        pending: List[SkeletonRecord] = []

        for skeleton in tracked:
            slot = id_to_slot.get(skeleton.tracking_id)
            if slot is not None and slot not in assignment:
                assignment[slot] = skeleton
            else:
                pending.append(skeleton)

        free = [s for s in range(self._config.max_subjects) if s not in assignment]
        for skeleton, slot in zip(pending, free):
            assignment[slot] = skeleton

        if len(pending) > len(free):
            logger.debug("Ignoring %d subjects beyond %d slots", len(pending) - len(free),
                         self._config.max_subjects)
        return assignment

    def update(
        self,
        skeletons: Sequence[SkeletonRecord],
        projector: Projector,
        timestamp: float = 0.0,
    ) -> List[StrokeEvent]:
        """
        Process one frame of bodies.

        Parameters
        ----------
        skeletons : Sequence[SkeletonRecord]
            Bodies in sensor order; only fully tracked ones are used.
        projector : Projector
            Projection bound to the calibrated transform.
        timestamp : float
            Frame time, copied onto emitted events.

        Returns
        -------
        List[StrokeEvent]
            Events in slot order; within a slot Paint precedes Erase.
        """
        tracked = [s for s in skeletons if s.is_tracked]
        assignment = self._assign_slots(tracked)

        events: List[StrokeEvent] = []
        for slot in range(self._config.max_subjects):
            skeleton = assignment.get(slot)
            current = self._tracks[slot]

            if skeleton is None:
                if current is not None:
                    logger.debug("Slot %d lost subject %d", slot, current.tracking_id)
                self._tracks[slot] = None
                continue

            if current is None or current.tracking_id != skeleton.tracking_id:
                current = SubjectTrack(
                    slot=slot,
                    color=self._config.slot_colors[slot],
                    tracking_id=skeleton.tracking_id,
                )
                self._tracks[slot] = current
                logger.debug("Slot %d assigned to subject %d", slot, skeleton.tracking_id)

            events.extend(self._update_track(current, skeleton, projector, timestamp))

        return events

    def _update_track(
        self,
        track: SubjectTrack,
        skeleton: SkeletonRecord,
        projector: Projector,
        timestamp: float,
    ) -> List[StrokeEvent]:
        track.frames_tracked += 1
        track.reference = skeleton.position
        for joint_type in self._interesting_joints():
            joint = skeleton.tracked_joint(joint_type)
            if joint is not None:
                track.joints[joint_type] = joint.position

        reading = classify_gesture(skeleton, self._thresholds)
        track.gesture = reading.gesture

        track.screen_point = None
        hand = skeleton.tracked_joint(self._thresholds.dominant_hand)
        if hand is not None:
            try:
                track.screen_point = projector.project_rounded(hand.position)
            except ProjectionError as exc:
                logger.debug("Slot %d: %s", track.slot, exc)

        events: List[StrokeEvent] = []
        if reading.paint and track.screen_point is not None:
            events.append(
                PaintEvent(
                    position=track.screen_point,
                    slot=track.slot,
                    color=track.color,
                    timestamp=timestamp,
                )
            )
        if reading.erase:
            events.append(EraseEvent(slot=track.slot, color=track.color, timestamp=timestamp))
        return events

    def reset(self) -> None:
        """Drop all subject tracks."""
        self._tracks = [None] * self._config.max_subjects
