"""
tests/test_session.py

Tests for the settle timer and the calibration session state machine.
"""

import pytest

from calibration import (
    CalibrationConfig,
    CalibrationSequenceError,
    CalibrationSession,
    SettleTimer,
)
from contracts import ScreenPoint, SessionState, SkeletonTrackingState
from contracts.validation import ValidationError

from conftest import make_frame, make_skeleton

CORNERS = [(-1.0, 0.0, 3.0), (1.0, 0.0, 3.0), (1.0, 0.0, 1.5), (-1.0, 0.0, 1.5)]


class TestSettleTimer:
    """Tests for the clock-driven settle timer."""

    def test_elapses_at_duration(self, clock):
        timer = SettleTimer(5.0, clock=clock)
        timer.start()
        clock.advance(4.99)
        assert not timer.poll()
        assert timer.remaining() == pytest.approx(0.01)
        clock.advance(0.02)
        assert timer.poll()
        assert not timer.running

    def test_explicit_now(self):
        timer = SettleTimer(2.0)
        timer.start(now=10.0)
        assert not timer.poll(11.0)
        assert timer.poll(12.0)

    def test_restart_clears_elapsed(self):
        timer = SettleTimer(1.0)
        timer.start(now=0.0)
        assert timer.poll(1.0)
        timer.start(now=1.0)
        assert not timer.elapsed
        assert timer.running

    def test_zero_duration(self):
        timer = SettleTimer(0.0)
        timer.start(now=3.0)
        assert timer.poll(3.0)

    def test_stop(self):
        timer = SettleTimer(1.0)
        timer.start(now=0.0)
        timer.stop()
        assert not timer.poll(5.0)
        assert timer.remaining(5.0) == 0.0

    def test_negative_duration(self):
        with pytest.raises(ValidationError):
            SettleTimer(-1.0)


def _run(session, schedule, dt=0.5, until=25.0):
    """Feed frames every dt seconds; schedule(t) returns the skeletons."""
    t = 0.0
    progress = None
    while t <= until + 1e-9:
        progress = session.process_frame(make_frame(t, *schedule(t)), now=t)
        t = round(t + dt, 6)
    return progress


def _corner_walker(t):
    index = min(int(t // 5.0) - 1, 3) if t >= 5.0 else 0
    return [make_skeleton(tracking_id=1, torso=CORNERS[max(index, 0)])]


class TestCalibrationSession:
    """Tests for the settle-gated capture sequence."""

    def test_no_capture_during_settle(self):
        """Test tracked frames during the settle interval are ignored."""
        session = CalibrationSession()
        session.start(now=0.0)
        for t in (0.0, 1.0, 2.5, 4.9):
            progress = session.process_frame(make_frame(t, make_skeleton()), now=t)
            assert progress.state == SessionState.AWAITING_SETTLE
            assert progress.captured == 0

    def test_captures_after_each_settle(self):
        """Test one capture per target at 5, 10, 15 and 20 seconds."""
        session = CalibrationSession()
        session.start(now=0.0)
        captured_at = []
        t = 0.0
        while t <= 21.0:
            before = len(session.store)
            session.process_frame(make_frame(t, *_corner_walker(t)), now=t)
            if len(session.store) > before:
                captured_at.append(t)
            t = round(t + 0.5, 6)

        assert captured_at == [5.0, 10.0, 15.0, 20.0]
        assert session.state == SessionState.COMPLETE
        assert session.is_complete
        assert session.current_target is None

    def test_corners_map_to_targets(self):
        session = CalibrationSession()
        session.start(now=0.0)
        progress = _run(session, _corner_walker)
        assert progress.complete
        for corner, target in zip(CORNERS, session.config.targets):
            projected = session.transform.apply(make_skeleton(torso=corner).position)
            assert projected.pixel == target.pixel
        assert session.report.rms < 1e-6

    def test_waits_without_subject(self):
        """Test READY_TO_CAPTURE persists until a tracked body appears."""
        session = CalibrationSession()
        session.start(now=0.0)
        progress = session.process_frame(make_frame(6.0), now=6.0)
        assert progress.state == SessionState.READY_TO_CAPTURE

        untracked = make_skeleton(tracking_state=SkeletonTrackingState.POSITION_ONLY)
        progress = session.process_frame(make_frame(100.0, untracked), now=100.0)
        assert progress.state == SessionState.READY_TO_CAPTURE
        assert progress.captured == 0

        progress = session.process_frame(make_frame(101.0, make_skeleton()), now=101.0)
        assert progress.captured == 1
        assert progress.state == SessionState.AWAITING_SETTLE
        assert progress.target == ScreenPoint(600, 25)

    def test_stall_warning_logged_once(self, caplog):
        config = CalibrationConfig(stall_warning_seconds=10.0)
        session = CalibrationSession(config)
        session.start(now=0.0)
        with caplog.at_level("WARNING", logger="calibration.session"):
            for t in (5.0, 10.0, 15.0, 20.0, 30.0):
                session.process_frame(make_frame(t), now=t)
        warnings = [r for r in caplog.records if r.levelname == "WARNING"]
        assert len(warnings) == 1
        assert "target 1" in warnings[0].getMessage()

    def test_degenerate_geometry_fails_then_restarts(self):
        """Test a subject who never moves leads to FAILED, then restart."""
        session = CalibrationSession()
        session.start(now=0.0)
        progress = _run(session, lambda t: [make_skeleton(torso=(0.0, 0.0, 2.0))])
        assert progress.state == SessionState.FAILED
        assert progress.error is not None
        assert session.transform is None

        # Failed sessions ignore further frames
        assert session.process_frame(make_frame(30.0, make_skeleton()), now=30.0).captured == 4

        progress = session.restart(now=40.0)
        assert progress.state == SessionState.AWAITING_SETTLE
        assert progress.captured == 0
        assert progress.target_index == 0
        assert progress.error is None

    def test_restart_requires_failure(self):
        session = CalibrationSession()
        session.start(now=0.0)
        with pytest.raises(CalibrationSequenceError):
            session.restart(now=1.0)

    def test_process_before_start(self):
        session = CalibrationSession()
        with pytest.raises(CalibrationSequenceError):
            session.process_frame(make_frame(0.0, make_skeleton()), now=0.0)

    def test_double_start(self):
        session = CalibrationSession()
        session.start(now=0.0)
        with pytest.raises(CalibrationSequenceError):
            session.start(now=1.0)

    def test_uses_injected_clock(self, clock):
        session = CalibrationSession(CalibrationConfig(settle_seconds=2.0), clock=clock)
        session.start()
        clock.advance(1.0)
        assert session.process_frame(make_frame(0.0, make_skeleton())).captured == 0
        clock.advance(1.0)
        assert session.process_frame(make_frame(0.0, make_skeleton())).captured == 1

    def test_complete_is_terminal(self):
        session = CalibrationSession()
        session.start(now=0.0)
        _run(session, _corner_walker)
        matrix = session.transform.matrix.copy()
        session.process_frame(make_frame(60.0, make_skeleton()), now=60.0)
        assert session.state == SessionState.COMPLETE
        assert (session.transform.matrix == matrix).all()
