"""
tests/test_frame_loop.py

Integration tests: simulated sensor -> frame loop -> stroke canvas.

Tests cover:
- Full scripted session through the demo entry point
- Frame loop gating between calibration and stroke tracking
- Application configuration loading
- Logging setup
"""

import json
import logging

import pytest

from calibration import CalibrationConfig
from contracts import PaintEvent, SensorPoint, SessionState
from contracts.validation import ValidationError
from pipeline import AppConfig, FrameLoop, FrameOutput, RenderSink, configure_logging
from sensor import SyntheticSkeletonSource
from visualization import StrokeCanvas
from visualization.demo import run_demo
from world import ScriptedSubject, Segment, World
from world.scenarios import DEFAULT_FLOOR_CORNERS, two_subject_session

from conftest import make_frame, make_skeleton


# =============================================================================
# Full Session
# =============================================================================


class RecordingSink:
    """Keeps every FrameOutput it receives."""

    def __init__(self):
        self.outputs = []

    def consume(self, output):
        self.outputs.append(output)


@pytest.fixture(scope="module")
def demo_run():
    return run_demo(fps=30, jitter_std=0.0)


class TestScriptedSession:
    """Two-subject scripted session without sensor noise."""

    def test_calibrated(self, demo_run):
        loop, canvas = demo_run
        assert loop.is_calibrated
        assert loop.session.state == SessionState.COMPLETE
        assert canvas.progress.complete

    def test_corners_map_to_targets(self, demo_run):
        loop, _ = demo_run
        for corner, target in zip(DEFAULT_FLOOR_CORNERS, loop.config.calibration.targets):
            assert loop.projector.project_pixel(SensorPoint(*corner)) == target.pixel

    def test_first_subject_stroke(self, demo_run):
        """Test a 2 s paint sweep at 30 fps leaves one continuous stroke."""
        _, canvas = demo_run
        strokes = canvas.strokes(0)
        assert len(strokes) == 1
        assert strokes[0].color == "black"
        assert 57 <= len(strokes[0].points) <= 63

    def test_second_subject_erased(self, demo_run):
        _, canvas = demo_run
        assert canvas.strokes(1) == ()

    def test_sink_saw_every_frame(self, demo_run):
        loop, canvas = demo_run
        assert canvas.frames_consumed == loop.frame_count == 825


class TestFrameLoop:
    """Frame loop behavior with hand-built frames."""

    def _calibrate(self, loop):
        t = 0.0
        while not loop.is_calibrated:
            index = max(min(int(t // 5.0) - 1, 3), 0) if t >= 5.0 else 0
            loop.process(make_frame(t, make_skeleton(torso=DEFAULT_FLOOR_CORNERS[index])), now=t)
            t = round(t + 0.5, 6)
            assert t < 60.0
        return t

    def test_no_events_before_calibration(self):
        sink = RecordingSink()
        loop = FrameLoop(sink=sink)
        painter = make_skeleton(torso=(0.0, 0.0, 2.0), right=(0.2, -0.2, 1.6))
        output = loop.process(make_frame(0.0, painter), now=0.0)
        assert output.events == ()
        assert output.progress.state == SessionState.AWAITING_SETTLE
        assert sink.outputs == [output]

    def test_events_after_calibration(self):
        sink = RecordingSink()
        loop = FrameLoop(sink=sink)
        t = self._calibrate(loop)

        # The completing frame carries no stroke events
        assert sink.outputs[-1].progress.complete
        assert sink.outputs[-1].events == ()

        painter = make_skeleton(torso=(0.0, 0.0, 2.25), right=(0.2, -0.2, 1.85))
        output = loop.process(make_frame(t, painter), now=t)
        assert len(output.events) == 1
        assert isinstance(output.events[0], PaintEvent)
        assert output.progress.complete
        assert len(sink.outputs) == loop.frame_count

    def test_frame_timestamps_drive_timer(self):
        loop = FrameLoop(
            AppConfig(calibration=CalibrationConfig(settle_seconds=1.0)),
            clock=lambda: 0.0,
            use_frame_timestamps=True,
        )
        loop.process(make_frame(0.0, make_skeleton()))
        output = loop.process(make_frame(1.0, make_skeleton()))
        assert output.progress.captured == 1

    def test_step_requires_source(self):
        with pytest.raises(RuntimeError):
            FrameLoop().step()

    def test_run_negative(self):
        world, _ = two_subject_session()
        loop = FrameLoop(source=SyntheticSkeletonSource(world))
        with pytest.raises(ValueError):
            loop.run(-1)

    def test_run_with_source(self):
        world = World()
        world.add_subject(ScriptedSubject(1, [Segment(position=(0.0, 0.0, 2.0), duration=1.0)]))
        loop = FrameLoop(
            source=SyntheticSkeletonSource(world, dt=0.1), use_frame_timestamps=True
        )
        outputs = loop.run(5)
        assert len(outputs) == 5
        assert all(isinstance(o, FrameOutput) for o in outputs)
        assert outputs[-1].timestamp == pytest.approx(0.5)

    def test_canvas_is_render_sink(self):
        assert isinstance(StrokeCanvas(), RenderSink)

    def test_output_to_dict(self):
        loop = FrameLoop()
        data = loop.process(make_frame(0.0), now=0.0).to_dict()
        assert data["events"] == []
        assert data["progress"]["message"] == "Stand in position 1."


# =============================================================================
# Configuration and Logging
# =============================================================================


class TestAppConfig:
    """Tests for application configuration loading."""

    def test_defaults(self):
        config = AppConfig()
        assert config.calibration.required_count == 4
        assert config.tracker.max_subjects == 2
        assert config.log_level == "INFO"

    def test_from_dict(self):
        config = AppConfig.from_dict(
            {
                "calibration": {
                    "targets": [[0, 0], [100, 0], [100, 100], [0, 100], [50, 50]],
                    "settle_seconds": 2.0,
                },
                "gestures": {"erase_height_margin": 0.4},
                "tracker": {"slot_colors": ["blue", "green"]},
                "log_level": "debug",
            }
        )
        assert config.calibration.required_count == 5
        assert config.calibration.settle_seconds == 2.0
        assert config.gestures.erase_height_margin == 0.4
        assert config.tracker.slot_colors == ("blue", "green")
        assert config.log_level == "DEBUG"

    def test_round_trip_through_json(self, tmp_path):
        path = tmp_path / "config.json"
        original = AppConfig(calibration=CalibrationConfig(settle_seconds=3.0))
        path.write_text(json.dumps(original.to_dict()), encoding="utf-8")
        assert AppConfig.from_json(path) == original

    def test_unknown_section(self):
        with pytest.raises(ValidationError):
            AppConfig.from_dict({"renderer": {}})

    def test_unknown_key(self):
        with pytest.raises(ValidationError):
            AppConfig.from_dict({"calibration": {"settle": 5}})

    def test_invalid_values(self):
        with pytest.raises(ValidationError):
            AppConfig.from_dict({"calibration": {"targets": [[0, 0], [1, 1]]}})
        with pytest.raises(ValidationError):
            AppConfig(log_level="LOUD")

    def test_degenerate_targets(self):
        with pytest.raises(ValidationError):
            CalibrationConfig(targets=[(0, 0), (100, 0), (200, 0), (0, 100)])
        with pytest.raises(ValidationError):
            CalibrationConfig(targets=[(0, 0), (100, 0), (100, 0), (0, 100)])
        with pytest.raises(ValidationError):
            AppConfig.from_dict(
                {"calibration": {"targets": [[0, 0], [100, 0], [200, 0], [0, 100]]}}
            )

    def test_demo_with_zero_settle(self):
        """Test an immediate-capture session still calibrates and paints."""
        config = AppConfig(calibration=CalibrationConfig(settle_seconds=0.0))
        loop, canvas = run_demo(config, fps=30, jitter_std=0.0)
        assert loop.is_calibrated
        assert len(canvas.strokes(0)) == 1


def test_configure_logging_is_idempotent() -> None:
    first = configure_logging("debug")
    second = configure_logging(logging.WARNING)
    assert first is second
    assert logging.getLogger("calibration").level == logging.WARNING
    handlers = [h for h in logging.getLogger("tracking").handlers if h is first]
    assert len(handlers) == 1
    for name in ("calibration", "space", "tracking", "pipeline", "sensor", "visualization"):
        logging.getLogger(name).removeHandler(first)
        logging.getLogger(name).setLevel(logging.NOTSET)
