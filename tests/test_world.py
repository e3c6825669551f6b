"""
tests/test_world.py

Tests for the simulated world, scripted subjects and synthetic sensor.
"""

import pytest

from contracts import Gesture, JointType
from contracts.validation import ValidationError
from sensor import SyntheticSkeletonSource
from tracking import classify_gesture
from world import ScriptedSubject, Segment, World
from world.scenarios import calibration_segments, paint_sweep


def test_segments_advance_with_time() -> None:
    subject = ScriptedSubject(
        1,
        [
            Segment(position=(0.0, 0.0, 2.0), duration=1.0),
            Segment(position=(1.0, 0.0, 2.0), duration=1.0, pose="paint"),
        ],
    )
    assert subject.skeleton().position.x == 0.0
    subject.step(1.0)
    assert subject.skeleton().position.x == 1.0
    subject.step(10.0)
    # Last segment holds forever
    assert subject.current_segment().pose == "paint"


def test_poses_classify_as_scripted() -> None:
    expected = {"idle": Gesture.IDLE, "paint": Gesture.PAINT, "erase": Gesture.ERASE}
    for pose, gesture in expected.items():
        subject = ScriptedSubject(1, [Segment(position=(0.0, 0.0, 2.0), duration=1.0, pose=pose)])
        assert classify_gesture(subject.skeleton()).gesture == gesture


def test_absent_subject_not_visible() -> None:
    world = World()
    world.add_subject(
        ScriptedSubject(
            1,
            [
                Segment(position=(0.0, 0.0, 2.0), duration=1.0, pose="absent"),
                Segment(position=(0.0, 0.0, 2.0), duration=1.0),
            ],
        )
    )
    assert world.visible_skeletons() == ()
    world.step(1.5)
    assert len(world.visible_skeletons()) == 1
    assert world.time == pytest.approx(1.5)


def test_paint_offset_moves_hand_only() -> None:
    (segment,) = paint_sweep((0.0, 0.0, 2.0), dx_range=(0.3, 0.3), steps=1)
    skeleton = ScriptedSubject(1, [segment]).skeleton()
    assert skeleton.position.x == 0.0
    assert skeleton.joint(JointType.HAND_RIGHT).position.x == pytest.approx(0.5)


def test_calibration_segments_timing() -> None:
    segments = calibration_segments(settle_seconds=5.0)
    assert [s.duration for s in segments] == [7.5, 5.0, 5.0, 5.0]


def test_calibration_segments_hold_at_least_one_frame() -> None:
    segments = calibration_segments(settle_seconds=0.0, frame_interval=0.1)
    assert [s.duration for s in segments] == pytest.approx([0.15, 0.1, 0.1, 0.1])


def test_invalid_segments() -> None:
    with pytest.raises(ValidationError):
        Segment(position=(0.0, 0.0, 2.0), duration=1.0, pose="dance")
    with pytest.raises(ValidationError):
        Segment(position=(0.0, 0.0), duration=1.0)
    with pytest.raises(ValidationError):
        ScriptedSubject(1, [])


def test_world_rejects_non_subjects() -> None:
    with pytest.raises(TypeError):
        World().add_subject(object())


def test_synthetic_source_jitter_is_seeded() -> None:
    def frames(seed):
        world = World()
        world.add_subject(ScriptedSubject(1, [Segment(position=(0.0, 0.0, 2.0), duration=1.0)]))
        source = SyntheticSkeletonSource(world, dt=0.1, jitter_std=0.01, random_seed=seed)
        return [source.next_frame() for _ in range(3)]

    a, b = frames(5), frames(5)
    assert [f.skeletons[0].position for f in a] == [f.skeletons[0].position for f in b]
    assert a[0].skeletons[0].position != a[1].skeletons[0].position
    assert a[-1].timestamp == pytest.approx(0.3)


def test_synthetic_source_without_jitter_is_exact() -> None:
    world = World()
    world.add_subject(ScriptedSubject(1, [Segment(position=(0.5, 0.0, 2.0), duration=1.0)]))
    frame = SyntheticSkeletonSource(world).next_frame()
    assert frame.skeletons[0].position.floor_xz == (0.5, 2.0)
