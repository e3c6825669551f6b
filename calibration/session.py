"""
calibration/session.py

Calibration Session Controller.

Drives the interactive collection phase as a state machine:

    AWAITING_SETTLE --timer--> READY_TO_CAPTURE --tracked frame--> capture
        capture, more targets left  -> AWAITING_SETTLE (next target)
        capture, store complete     -> solve -> COMPLETE | FAILED

Nothing is captured while the settle timer runs, whatever the frames carry.
In READY_TO_CAPTURE without a tracked subject the session waits
indefinitely; a warning is logged once per target after
``stall_warning_seconds``. COMPLETE is terminal. FAILED (degenerate
geometry) is terminal until restart().
"""

import logging
import time
from typing import Optional

from calibration.config import CalibrationConfig
from calibration.correspondence import CorrespondenceStore
from calibration.errors import CalibrationSequenceError, DegenerateCalibrationError
from calibration.solver import CalibrationReport, CalibrationSolver, Homography
from calibration.timer import Clock, SettleTimer
from contracts.events import CalibrationProgress, SessionState
from contracts.points import ScreenPoint
from contracts.skeleton import SkeletonFrame, SkeletonRecord

logger = logging.getLogger(__name__)


class CalibrationSession:
    """
    Frame-driven calibration state machine.

    Parameters
    ----------
    config : CalibrationConfig, optional
        Targets, settle time and solver tolerances. Defaults to the
        reference four-corner setup.
    clock : Callable[[], float]
        Time source used when process_frame() is called without ``now``.

    Examples
    --------
    >>> session = CalibrationSession(CalibrationConfig(settle_seconds=0.0))
    >>> session.start(now=0.0).state
    <SessionState.AWAITING_SETTLE: 1>
    """

    def __init__(
        self,
        config: Optional[CalibrationConfig] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self._config = config if config is not None else CalibrationConfig()
        self._clock = clock
        self._solver = CalibrationSolver(
            collinearity_tolerance=self._config.collinearity_tolerance,
            refine_iterations=self._config.refine_iterations,
        )
        self._timer = SettleTimer(self._config.settle_seconds, clock=clock)
        self._store = self._new_store()
        self._state = SessionState.AWAITING_SETTLE
        self._target_index = 0
        self._started = False
        self._transform: Optional[Homography] = None
        self._error: Optional[str] = None
        self._ready_since: Optional[float] = None
        self._stall_warned = False

    def _new_store(self) -> CorrespondenceStore:
        return CorrespondenceStore(
            required_count=self._config.required_count,
            solver=self._solver,
        )

    @property
    def config(self) -> CalibrationConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def target_index(self) -> int:
        return self._target_index

    @property
    def current_target(self) -> Optional[ScreenPoint]:
        """Target being collected; None once COMPLETE."""
        if self._state == SessionState.COMPLETE:
            return None
        return self._config.targets[self._target_index]

    @property
    def store(self) -> CorrespondenceStore:
        return self._store

    @property
    def transform(self) -> Optional[Homography]:
        """Solved transform; None until COMPLETE."""
        return self._transform

    @property
    def report(self) -> Optional[CalibrationReport]:
        """Reprojection accuracy of the solved transform."""
        if self._transform is None:
            return None
        return self._solver.last_report

    @property
    def is_complete(self) -> bool:
        return self._state == SessionState.COMPLETE

    @property
    def error(self) -> Optional[str]:
        return self._error

    def _enter_settle(self, now: float) -> None:
        self._state = SessionState.AWAITING_SETTLE
        self._timer.start(now)
        self._ready_since = None
        self._stall_warned = False

    def start(self, now: Optional[float] = None) -> CalibrationProgress:
        """
        Begin collection at the first target.

        Raises
        ------
        CalibrationSequenceError
            If the session was already started.
        """
        if self._started:
            raise CalibrationSequenceError("calibration session already started")
        now = self._clock() if now is None else float(now)
        self._started = True
        self._enter_settle(now)
        logger.info(
            "Calibration started: %d targets, %.1f s settle",
            self._config.required_count,
            self._config.settle_seconds,
        )
        return self.progress()

    def restart(self, now: Optional[float] = None) -> CalibrationProgress:
        """
        Start over with an empty correspondence store after a failure.

        Raises
        ------
        CalibrationSequenceError
            If the session is not FAILED.
        """
        if self._state != SessionState.FAILED:
            raise CalibrationSequenceError(
                f"restart is only allowed after a failed calibration, state is {self._state.name}"
            )
        now = self._clock() if now is None else float(now)
        self._store = self._new_store()
        self._target_index = 0
        self._error = None
        self._enter_settle(now)
        logger.info("Calibration restarted")
        return self.progress()

    def process_frame(
        self,
        frame: SkeletonFrame,
        now: Optional[float] = None,
    ) -> CalibrationProgress:
        """
        Advance the state machine by one sensor frame.

        Parameters
        ----------
        frame : SkeletonFrame
            Current sensor frame; the first fully tracked body is the
            calibration subject.
        now : float, optional
            Current time in seconds; read from the clock when omitted.

        Returns
        -------
        CalibrationProgress
            State after this frame.

        Raises
        ------
        CalibrationSequenceError
            If start() has not been called.
        """
        if not self._started:
            raise CalibrationSequenceError("process_frame() called before start()")
        if self._state in (SessionState.COMPLETE, SessionState.FAILED):
            return self.progress()

        now = self._clock() if now is None else float(now)

        if self._state == SessionState.AWAITING_SETTLE and self._timer.poll(now):
            self._state = SessionState.READY_TO_CAPTURE
            self._ready_since = now
            logger.debug("Ready to capture target %d", self._target_index + 1)

        if self._state == SessionState.READY_TO_CAPTURE:
            subject = frame.first_tracked()
            if subject is None:
                self._check_stall(now)
            else:
                self._capture(subject, now)

        return self.progress()

    def _check_stall(self, now: float) -> None:
        if self._stall_warned or self._ready_since is None:
            return
        waited = now - self._ready_since
        if waited >= self._config.stall_warning_seconds:
            self._stall_warned = True
            logger.warning(
                "No tracked subject for %.1f s at calibration target %d; still waiting",
                waited,
                self._target_index + 1,
            )

    def _capture(self, subject: SkeletonRecord, now: float) -> None:
        target = self._config.targets[self._target_index]
        self._store.add_sensor_point(subject.position)
        self._store.add_screen_point(target)
        logger.info(
            "Captured calibration point %d/%d: %r -> %r",
            len(self._store),
            self._store.required_count,
            subject.position,
            target,
        )

        if not self._store.is_complete():
            self._target_index += 1
            self._enter_settle(now)
            return

        self._timer.stop()
        try:
            self._transform = self._store.calibrate()
        except DegenerateCalibrationError as exc:
            self._state = SessionState.FAILED
            self._error = str(exc)
            logger.warning("Calibration failed: %s", exc)
            return

        self._state = SessionState.COMPLETE
        logger.info(
            "Calibration complete; subject now projects to %r",
            self._transform.apply(subject.position),
        )

    def progress(self) -> CalibrationProgress:
        """Snapshot for instructional display."""
        return CalibrationProgress(
            state=self._state,
            target_index=self._target_index,
            target=self.current_target,
            captured=len(self._store),
            required=self._store.required_count,
            error=self._error,
        )
