"""
frame_loop.py

Frame-driven execution loop coordinating calibration, projection and stroke
tracking.

This module does not read sensors or draw anything. Each incoming frame
triggers one synchronous pass:

1. The calibration session decides whether the frame collects a point
2. Once calibrated, the stroke tracker projects and classifies each subject
3. The frame's progress and events are pushed once to the rendering sink

No frame processing overlaps another.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from calibration.session import CalibrationSession
from calibration.timer import Clock
from contracts.events import CalibrationProgress, StrokeEvent
from contracts.skeleton import SkeletonFrame
from pipeline.config import AppConfig
from space.projection import Projector
from tracking.strokes import StrokeTracker

logger = logging.getLogger(__name__)


@runtime_checkable
class FrameSource(Protocol):
    """
    Protocol for a sensor frame provider.

    A source yields one SkeletonFrame per call, in time order.
    """

    def next_frame(self) -> SkeletonFrame:
        """
        Produce the next sensor frame.

        Returns
        -------
        SkeletonFrame
            Bodies reported by the sensor at the next instant.
        """
        ...


@runtime_checkable
class RenderSink(Protocol):
    """
    Protocol for the passive rendering collaborator.

    Receives exactly one FrameOutput per processed frame.
    """

    def consume(self, output: "FrameOutput") -> None:
        ...


@dataclass(frozen=True)
class FrameOutput:
    """
    Result of processing one frame.

    Parameters
    ----------
    timestamp : float
        Frame time in seconds.
    progress : CalibrationProgress
        Calibration state after the frame.
    events : Tuple[StrokeEvent, ...]
        Stroke events in emission order; empty until calibrated.
    """

    timestamp: float
    progress: CalibrationProgress
    events: Tuple[StrokeEvent, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "progress": self.progress.to_dict(),
            "events": [e.to_dict() for e in self.events],
        }


class FrameLoop:
    """
    Per-frame orchestration of the calibration and stroke engine.

    Parameters
    ----------
    config : AppConfig, optional
        Calibration, gesture and tracker settings.
    clock : Callable[[], float]
        Time source for the settle timer.
    sink : RenderSink, optional
        Receives every FrameOutput.
    source : FrameSource, optional
        Frame provider used by step() and run().
    use_frame_timestamps : bool
        If True, frame timestamps drive the settle timer instead of the
        clock (deterministic replay and simulation).

    Attributes
    ----------
    frame_count : int
        Frames processed since initialization.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        clock: Clock = time.monotonic,
        sink: Optional[RenderSink] = None,
        source: Optional[FrameSource] = None,
        use_frame_timestamps: bool = False,
    ) -> None:
        self._config = config if config is not None else AppConfig()
        self._clock = clock
        self._sink = sink
        self._source = source
        self._use_frame_timestamps = use_frame_timestamps

        self._session = CalibrationSession(self._config.calibration, clock=clock)
        self._tracker = StrokeTracker(self._config.tracker, self._config.gestures)
        self._projector: Optional[Projector] = None
        self._started = False
        self._frame_count = 0

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def session(self) -> CalibrationSession:
        return self._session

    @property
    def tracker(self) -> StrokeTracker:
        return self._tracker

    @property
    def projector(self) -> Optional[Projector]:
        """Projection bound to the solved transform; None until calibrated."""
        return self._projector

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def is_calibrated(self) -> bool:
        return self._projector is not None

    def set_sink(self, sink: Optional[RenderSink]) -> None:
        """Attach or detach the rendering sink."""
        self._sink = sink

    def start(self, now: Optional[float] = None) -> CalibrationProgress:
        """Start calibration at the first target."""
        self._started = True
        return self._session.start(now)

    def restart_calibration(self, now: Optional[float] = None) -> CalibrationProgress:
        """Restart after a failed calibration (see CalibrationSession.restart)."""
        return self._session.restart(now)

    def process(self, frame: SkeletonFrame, now: Optional[float] = None) -> FrameOutput:
        """
        Run one synchronous pass for a frame.

        The frame that completes calibration emits no stroke events; stroke
        tracking starts with the next frame.
        """
        if now is None and self._use_frame_timestamps:
            now = frame.timestamp
        if not self._started:
            self.start(now)

        events: List[StrokeEvent] = []
        if self._projector is not None:
            events = self._tracker.update(frame.skeletons, self._projector, frame.timestamp)
            progress = self._session.progress()
        else:
            progress = self._session.process_frame(frame, now)
            if self._session.is_complete:
                self._projector = Projector(self._session.transform)
                logger.info("Projection enabled after %d frames", self._frame_count + 1)

        output = FrameOutput(timestamp=frame.timestamp, progress=progress, events=tuple(events))
        if self._sink is not None:
            self._sink.consume(output)

        self._frame_count += 1
        return output

    def step(self) -> FrameOutput:
        """
        Pull one frame from the source and process it.

        Raises
        ------
        RuntimeError
            If no source is attached.
        """
        if self._source is None:
            raise RuntimeError("FrameLoop has no frame source attached")
        return self.process(self._source.next_frame())

    def run(self, n_steps: int) -> List[FrameOutput]:
        """
        Process n_steps frames from the source.

        Raises
        ------
        ValueError
            If n_steps is negative.
        """
        if n_steps < 0:
            raise ValueError(
                f"n_steps must be non-negative. Got {n_steps}."
            )

        outputs: List[FrameOutput] = []

        for _ in range(n_steps):
            outputs.append(self.step())

        return outputs
