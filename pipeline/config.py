"""
config.py

Application configuration.

Groups the calibration, gesture and tracker settings so they can be supplied
from a plain dictionary or a JSON file instead of inline constants.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from calibration.config import CalibrationConfig
from contracts.validation import ValidationError
from tracking.gestures import GestureThresholds
from tracking.strokes import TrackerConfig

_KNOWN_SECTIONS = ("calibration", "gestures", "tracker", "log_level")


@dataclass(frozen=True)
class AppConfig:
    """Top-level configuration for the frame loop."""

    calibration: CalibrationConfig = field(default_factory=CalibrationConfig)
    gestures: GestureThresholds = field(default_factory=GestureThresholds)
    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        level = str(self.log_level).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValidationError(f"unknown log_level {self.log_level!r}")
        object.__setattr__(self, "log_level", level)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AppConfig":
        """
        Build from nested dictionaries; missing sections use defaults.

        Raises
        ------
        ValidationError
            On unknown sections or invalid values.
        """
        unknown = set(data) - set(_KNOWN_SECTIONS)
        if unknown:
            raise ValidationError(f"unknown config sections: {sorted(unknown)}")
        try:
            return cls(
                calibration=CalibrationConfig.from_dict(data.get("calibration", {})),
                gestures=GestureThresholds.from_dict(data.get("gestures", {})),
                tracker=TrackerConfig.from_dict(data.get("tracker", {})),
                log_level=data.get("log_level", "INFO"),
            )
        except TypeError as e:
            raise ValidationError(f"invalid configuration: {e}") from e

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "AppConfig":
        """Load from a JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "calibration": self.calibration.to_dict(),
            "gestures": self.gestures.to_dict(),
            "tracker": self.tracker.to_dict(),
            "log_level": self.log_level,
        }
