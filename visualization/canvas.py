"""
canvas.py

Reference rendering sink: per-slot stroke storage.

Applies the engine's stroke events the way a drawing surface would:
- Paint appends a point to the slot's open stroke; a slot that was not
  painted in the previous frame starts a new stroke
- Erase removes every stroke of the slot

Stroke lists live in a fixed-size list indexed by subject slot.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from contracts.events import CalibrationProgress, EraseEvent, PaintEvent
from contracts.validation import ValidationError


@dataclass
class Stroke:
    """A continuous polyline painted by one slot."""

    color: str
    points: List[Tuple[int, int]] = field(default_factory=list)


class StrokeCanvas:
    """
    Stroke storage implementing the RenderSink protocol.

    Parameters
    ----------
    slot_count : int
        Number of subject slots.
    """

    def __init__(self, slot_count: int = 2) -> None:
        if slot_count < 1:
            raise ValidationError(f"slot_count must be >= 1, got {slot_count}")
        self._strokes: List[List[Stroke]] = [[] for _ in range(slot_count)]
        self._open: List[bool] = [False] * slot_count
        self._progress: Optional[CalibrationProgress] = None
        self._frames = 0

    @property
    def slot_count(self) -> int:
        return len(self._strokes)

    @property
    def progress(self) -> Optional[CalibrationProgress]:
        """Latest calibration progress received."""
        return self._progress

    @property
    def frames_consumed(self) -> int:
        return self._frames

    def strokes(self, slot: int) -> Tuple[Stroke, ...]:
        return tuple(self._strokes[self._check_slot(slot)])

    def all_strokes(self) -> List[Stroke]:
        """Every stroke, slot by slot."""
        return [s for slot_strokes in self._strokes for s in slot_strokes]

    def point_count(self, slot: int) -> int:
        return sum(len(s.points) for s in self._strokes[self._check_slot(slot)])

    def _check_slot(self, slot: int) -> int:
        if not 0 <= slot < len(self._strokes):
            raise ValidationError(f"slot {slot} out of range for {len(self._strokes)} slots")
        return slot

    def paint(self, event: PaintEvent) -> None:
        slot = self._check_slot(event.slot)
        if not self._open[slot] or not self._strokes[slot]:
            self._strokes[slot].append(Stroke(color=event.color))
            self._open[slot] = True
        self._strokes[slot][-1].points.append(event.position.pixel)

    def erase(self, event: EraseEvent) -> None:
        slot = self._check_slot(event.slot)
        self._strokes[slot].clear()
        self._open[slot] = False

    def consume(self, output) -> None:
        """Apply one frame's output (FrameOutput) in event order."""
        self._progress = output.progress
        painted = [False] * len(self._strokes)
        for event in output.events:
            if isinstance(event, PaintEvent):
                self.paint(event)
                painted[event.slot] = True
            elif isinstance(event, EraseEvent):
                self.erase(event)
                painted[event.slot] = False
        self._open = [o and p for o, p in zip(self._open, painted)]
        self._frames += 1

    def clear(self) -> None:
        """Remove all strokes of all slots."""
        for slot_strokes in self._strokes:
            slot_strokes.clear()
        self._open = [False] * len(self._strokes)
