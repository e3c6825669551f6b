"""
contracts/events.py

State enumerations and output events of the calibration and stroke engine.

Defines:
- CalibrationState: Store-level calibration lifecycle
- SessionState: Calibration session controller states
- Gesture: Per-subject gesture classification
- PaintEvent, EraseEvent: Stroke events consumed by the rendering sink
- CalibrationProgress: Progress notification for instructional display

Invariants
----------
- Subject slots are non-negative ints
- Events are immutable
- CalibrationProgress.complete is True iff state is COMPLETE
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Any, Optional, Union

from contracts.points import ScreenPoint
from contracts.validation import (
    ValidationError,
    validate_non_negative_int,
    validate_positive,
)


class CalibrationState(Enum):
    """
    Lifecycle of a correspondence set.

    Transitions only COLLECTING -> COMPLETE; never reverts.
    """

    COLLECTING = auto()
    COMPLETE = auto()


class SessionState(Enum):
    """
    Calibration session controller state.

    States
    ------
    AWAITING_SETTLE : Settle timer running; nothing is captured.
    READY_TO_CAPTURE : Next tracked frame captures a correspondence.
    COMPLETE : Transform solved; terminal.
    FAILED : Solver rejected the geometry; terminal until restart.
    """

    AWAITING_SETTLE = auto()
    READY_TO_CAPTURE = auto()
    COMPLETE = auto()
    FAILED = auto()


class Gesture(Enum):
    """Per-frame gesture classification of a subject."""

    IDLE = auto()
    PAINT = auto()
    ERASE = auto()


@dataclass(frozen=True)
class PaintEvent:
    """
    Paint one stroke point for a subject slot.

    Parameters
    ----------
    position : ScreenPoint
        Rounded screen position of the dominant hand.
    slot : int
        Subject slot index.
    color : str
        Display color of the slot.
    timestamp : float
        Frame time in seconds.
    """

    position: ScreenPoint
    slot: int
    color: str
    timestamp: float = 0.0

    def __post_init__(self) -> None:
        if not isinstance(self.position, ScreenPoint):
            raise TypeError(
                f"position must be ScreenPoint, got {type(self.position).__name__}"
            )
        validate_non_negative_int(self.slot, "slot")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "paint",
            "position": self.position.to_dict(),
            "slot": self.slot,
            "color": self.color,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class EraseEvent:
    """
    Clear all strokes of a subject slot.

    Parameters
    ----------
    slot : int
        Subject slot index.
    color : str
        Display color of the slot.
    timestamp : float
        Frame time in seconds.
    """

    slot: int
    color: str
    timestamp: float = 0.0

    def __post_init__(self) -> None:
        validate_non_negative_int(self.slot, "slot")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "erase",
            "slot": self.slot,
            "color": self.color,
            "timestamp": self.timestamp,
        }


StrokeEvent = Union[PaintEvent, EraseEvent]


@dataclass(frozen=True)
class CalibrationProgress:
    """
    Calibration progress snapshot for instructional display.

    Parameters
    ----------
    state : SessionState
        Current session state.
    target_index : int
        Index of the current calibration target (last index once complete).
    target : ScreenPoint, optional
        Current calibration target; None once the session is COMPLETE.
    captured : int
        Correspondences captured so far.
    required : int
        Correspondences required to solve.
    error : str, optional
        Failure description when state is FAILED.
    """

    state: SessionState
    target_index: int
    target: Optional[ScreenPoint]
    captured: int
    required: int
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.state, SessionState):
            raise TypeError(f"state must be SessionState, got {type(self.state).__name__}")
        validate_non_negative_int(self.target_index, "target_index")
        validate_non_negative_int(self.captured, "captured")
        validate_positive(self.required, "required")
        if self.captured > self.required:
            raise ValidationError(
                f"captured ({self.captured}) exceeds required ({self.required})"
            )

    @property
    def complete(self) -> bool:
        """True once the transform has been solved."""
        return self.state == SessionState.COMPLETE

    @property
    def message(self) -> str:
        """Instruction text for the display layer."""
        if self.state == SessionState.COMPLETE:
            return "Calibration complete."
        if self.state == SessionState.FAILED:
            return f"Calibration failed: {self.error}. Restart calibration."
        return f"Stand in position {self.target_index + 1}."

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "state": self.state.name,
            "target_index": self.target_index,
            "target": None if self.target is None else self.target.to_dict(),
            "captured": self.captured,
            "required": self.required,
            "complete": self.complete,
            "message": self.message,
            "error": self.error,
        }
