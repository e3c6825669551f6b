"""
tests/test_strokes.py

Tests for gesture classification and the per-subject stroke tracker.

A scaling projector maps sensor (x, z) to screen (100 x, 100 z) so expected
pixels can be read straight from the joint positions.
"""

import numpy as np
import pytest

from calibration import Homography
from contracts import (
    EraseEvent,
    Gesture,
    JointTrackingState,
    JointType,
    PaintEvent,
    ScreenPoint,
    SkeletonTrackingState,
)
from contracts.validation import ValidationError
from space import Projector
from tracking import (
    GestureThresholds,
    StrokeTracker,
    TrackerConfig,
    classify_gesture,
)

from conftest import make_skeleton

PROJECTOR = Projector(Homography(np.diag([100.0, 100.0, 1.0])))

# Torso at (0, 0, 2): paint hand below and in front, erase hand raised.
PAINT_HAND = (0.3, -0.2, 1.6)
ERASE_HAND = (-0.2, 0.7, 2.0)


def painter(tracking_id=1, torso=(0.0, 0.0, 2.0), hand=None):
    tx, ty, tz = torso
    hand = hand if hand is not None else (tx + 0.3, ty - 0.2, tz - 0.4)
    return make_skeleton(tracking_id=tracking_id, torso=torso, right=hand)


def eraser(tracking_id=1, torso=(0.0, 0.0, 2.0)):
    tx, ty, tz = torso
    return make_skeleton(tracking_id=tracking_id, torso=torso, left=(tx - 0.2, ty + 0.7, tz))


class TestGestureClassification:
    """Tests for the per-frame pose heuristics."""

    def test_idle_by_default(self):
        assert classify_gesture(make_skeleton()).gesture == Gesture.IDLE

    def test_paint(self):
        reading = classify_gesture(make_skeleton(right=PAINT_HAND))
        assert reading.paint and not reading.erase
        assert reading.gesture == Gesture.PAINT

    def test_paint_needs_hand_in_front(self):
        """Test a low hand level with or behind the torso does not paint."""
        assert not classify_gesture(make_skeleton(right=(0.3, -0.2, 2.0))).paint
        assert not classify_gesture(make_skeleton(right=(0.3, -0.2, 2.4))).paint

    def test_paint_needs_hand_low(self):
        assert not classify_gesture(make_skeleton(right=(0.3, 0.1, 1.6))).paint

    def test_erase(self):
        reading = classify_gesture(make_skeleton(left=ERASE_HAND))
        assert reading.erase and not reading.paint
        assert reading.gesture == Gesture.ERASE

    def test_erase_at_threshold(self):
        """Test a hand exactly half a meter above the torso erases."""
        assert classify_gesture(make_skeleton(left=(0.0, 0.5, 2.0))).erase
        assert not classify_gesture(make_skeleton(left=(0.0, 0.49, 2.0))).erase

    def test_paint_and_erase_together(self):
        reading = classify_gesture(make_skeleton(right=PAINT_HAND, left=ERASE_HAND))
        assert reading.paint and reading.erase
        assert reading.gesture == Gesture.ERASE

    def test_untracked_hand_is_idle(self):
        skeleton = make_skeleton(
            right=PAINT_HAND,
            left=ERASE_HAND,
            right_state=JointTrackingState.INFERRED,
            left_state=JointTrackingState.NOT_TRACKED,
        )
        assert classify_gesture(skeleton).gesture == Gesture.IDLE

    def test_untracked_body_is_idle(self):
        skeleton = make_skeleton(
            right=PAINT_HAND, tracking_state=SkeletonTrackingState.POSITION_ONLY
        )
        assert classify_gesture(skeleton).gesture == Gesture.IDLE

    def test_custom_thresholds(self):
        thresholds = GestureThresholds(erase_height_margin=0.8)
        assert not classify_gesture(make_skeleton(left=ERASE_HAND), thresholds).erase

    def test_swapped_hands(self):
        thresholds = GestureThresholds(dominant_hand="hand_left", off_hand="HAND_RIGHT")
        assert thresholds.dominant_hand == JointType.HAND_LEFT
        left_painter = make_skeleton(left=(-0.3, -0.2, 1.6))
        assert classify_gesture(left_painter, thresholds).paint

    def test_threshold_validation(self):
        with pytest.raises(ValidationError):
            GestureThresholds(dominant_hand=JointType.HAND_LEFT)
        with pytest.raises(ValidationError):
            GestureThresholds(off_hand="TAIL")


class TestStrokeTracker:
    """Tests for slot assignment and event emission."""

    def test_paint_event_position(self):
        tracker = StrokeTracker()
        events = tracker.update([painter()], PROJECTOR, timestamp=1.5)
        assert len(events) == 1
        event = events[0]
        assert isinstance(event, PaintEvent)
        assert event.position == ScreenPoint(30, 160)
        assert event.slot == 0
        assert event.color == "black"
        assert event.timestamp == 1.5

    def test_continuous_paint(self):
        """Test a held pose emits one paint event per frame."""
        tracker = StrokeTracker()
        positions = []
        for dx in (0.0, 0.1, 0.2):
            (event,) = tracker.update([painter(hand=(dx, -0.2, 1.6))], PROJECTOR)
            positions.append(event.position.pixel)
        assert positions == [(0, 160), (10, 160), (20, 160)]
        assert tracker.track(0).frames_tracked == 3

    def test_idle_emits_nothing(self):
        tracker = StrokeTracker()
        assert tracker.update([make_skeleton()], PROJECTOR) == []
        assert tracker.track(0).gesture == Gesture.IDLE

    def test_erase_event(self):
        tracker = StrokeTracker()
        (event,) = tracker.update([eraser()], PROJECTOR)
        assert isinstance(event, EraseEvent)
        assert event.slot == 0

    def test_paint_before_erase(self):
        tracker = StrokeTracker()
        skeleton = make_skeleton(right=PAINT_HAND, left=ERASE_HAND)
        events = tracker.update([skeleton], PROJECTOR)
        assert [type(e) for e in events] == [PaintEvent, EraseEvent]
        assert tracker.track(0).gesture == Gesture.ERASE

    def test_slots_are_independent(self):
        """Test one subject erasing does not affect the other's events."""
        tracker = StrokeTracker()
        events = tracker.update(
            [painter(tracking_id=10), eraser(tracking_id=20, torso=(1.0, 0.0, 2.5))],
            PROJECTOR,
        )
        assert [(type(e), e.slot) for e in events] == [(PaintEvent, 0), (EraseEvent, 1)]
        assert events[1].color == "red"
        assert tracker.track(0).gesture == Gesture.PAINT
        assert tracker.track(1).gesture == Gesture.ERASE

    def test_slot_stable_across_order_changes(self):
        tracker = StrokeTracker()
        tracker.update([painter(tracking_id=10), painter(tracking_id=20)], PROJECTOR)
        events = tracker.update([painter(tracking_id=20), painter(tracking_id=10)], PROJECTOR)
        assert tracker.track(0).tracking_id == 10
        assert tracker.track(1).tracking_id == 20
        assert [e.slot for e in events] == [0, 1]

    def test_third_subject_ignored(self):
        tracker = StrokeTracker()
        events = tracker.update(
            [painter(tracking_id=i) for i in (1, 2, 3)],
            PROJECTOR,
        )
        assert len(events) == 2
        assert tracker.active_count == 2
        assert {t.tracking_id for t in tracker.tracks} == {1, 2}

    def test_lost_subject_frees_slot(self):
        tracker = StrokeTracker()
        tracker.update([painter(tracking_id=1), painter(tracking_id=2)], PROJECTOR)
        tracker.update([painter(tracking_id=2)], PROJECTOR)
        assert tracker.track(0) is None
        assert tracker.track(1).tracking_id == 2

        # A new subject takes the lowest free slot with fresh state
        tracker.update([painter(tracking_id=2), painter(tracking_id=3)], PROJECTOR)
        assert tracker.track(0).tracking_id == 3
        assert tracker.track(0).frames_tracked == 1

    def test_untracked_bodies_skipped(self):
        tracker = StrokeTracker()
        ghost = make_skeleton(
            tracking_id=5,
            right=PAINT_HAND,
            tracking_state=SkeletonTrackingState.POSITION_ONLY,
        )
        assert tracker.update([ghost], PROJECTOR) == []
        assert tracker.active_count == 0

    def test_vanishing_line_skips_paint(self):
        """Test a hand that cannot be projected paints nothing."""
        degenerate = Projector(
            Homography(np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 0.0, 0.0]]))
        )
        tracker = StrokeTracker()
        events = tracker.update([painter(hand=(0.0, -0.2, 1.6))], degenerate)
        assert events == []
        assert tracker.track(0).screen_point is None
        assert tracker.track(0).gesture == Gesture.PAINT

    def test_reset(self):
        tracker = StrokeTracker()
        tracker.update([painter()], PROJECTOR)
        tracker.reset()
        assert tracker.active_count == 0

    def test_tracker_config(self):
        tracker = StrokeTracker(TrackerConfig(max_subjects=3, slot_colors=("a", "b", "c")))
        events = tracker.update([painter(tracking_id=i) for i in (1, 2, 3)], PROJECTOR)
        assert [e.color for e in events] == ["a", "b", "c"]
        with pytest.raises(ValidationError):
            TrackerConfig(max_subjects=3)
        with pytest.raises(ValidationError):
            TrackerConfig(max_subjects=0)
