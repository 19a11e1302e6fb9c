"""Tuning parameters for every detector.

Angles are in degrees, hip drops and vertical travel in normalized image
units (fraction of frame height), times in milliseconds.
"""
import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, TypeVar

T = TypeVar("T")


def with_overrides(defaults: T, thresholds: Optional[T] = None, **overrides) -> T:
    base = thresholds if thresholds is not None else defaults
    if not overrides:
        return base
    # replace() re-runs __post_init__, so overrides are validated too.
    return dataclasses.replace(base, **overrides)


def _check_positive(**values) -> None:
    for name, value in values.items():
        if value <= 0:
            raise ValueError(f"{name} must be positive, got {value}")


@dataclass(frozen=True)
class PushupThresholds:
    elbow_angle_top: float = 155.0
    elbow_angle_bottom: float = 120.0
    hysteresis: float = 10.0
    body_alignment_good: float = 160.0
    body_alignment_warning: float = 140.0
    max_shoulder_hip_y_diff: float = 0.25
    min_wrist_visibility: float = 0.4
    min_arm_visibility: float = 0.5
    min_knee_angle: float = 150.0
    min_shoulder_vertical_movement: float = 0.015
    max_elbow_angle_diff: float = 50.0
    max_position_failures: int = 3
    setup_grace_ms: int = 5000
    cooldown_ms: int = 600
    smoothing_window: int = 3
    inactivity_warning_ms: int = 10000

    def __post_init__(self):
        _check_positive(smoothing_window=self.smoothing_window, max_position_failures=self.max_position_failures)
        if self.elbow_angle_bottom + self.hysteresis > self.elbow_angle_top - self.hysteresis:
            raise ValueError("pushup bottom/top elbow bands overlap")
        if self.body_alignment_warning > self.body_alignment_good:
            raise ValueError("body_alignment_warning must not exceed body_alignment_good")


@dataclass(frozen=True)
class CurlThresholds:
    elbow_angle_extended: float = 140.0
    elbow_angle_curled: float = 80.0
    hysteresis: float = 10.0
    max_sync_diff: float = 20.0
    max_asymmetry: float = 50.0
    min_arm_visibility: float = 0.5
    side_view_visibility_diff: float = 0.15
    cooldown_ms: int = 600
    smoothing_window: int = 3
    inactivity_warning_ms: int = 10000

    def __post_init__(self):
        _check_positive(smoothing_window=self.smoothing_window)
        if self.elbow_angle_curled + self.hysteresis > self.elbow_angle_extended - self.hysteresis:
            raise ValueError("curl extended/curled bands overlap")


class SquatDifficulty(str, Enum):
    EASY = "easy"
    NINETY_DEGREE = "ninety-degree"
    ATG = "atg"


@dataclass(frozen=True)
class SquatDepth:
    knee_angle_down: float
    knee_angle_down_exit: float
    min_hip_drop: float
    hip_drop_exit: float

    def __post_init__(self):
        if self.knee_angle_down_exit <= self.knee_angle_down:
            raise ValueError("knee_angle_down_exit must be above knee_angle_down")
        if self.hip_drop_exit >= self.min_hip_drop:
            raise ValueError("hip_drop_exit must be below min_hip_drop")


def default_squat_depths() -> Dict[SquatDifficulty, SquatDepth]:
    return {
        SquatDifficulty.EASY: SquatDepth(
            knee_angle_down=115.0, knee_angle_down_exit=125.0, min_hip_drop=0.06, hip_drop_exit=0.045
        ),
        SquatDifficulty.NINETY_DEGREE: SquatDepth(
            knee_angle_down=82.0, knee_angle_down_exit=92.0, min_hip_drop=0.10, hip_drop_exit=0.07
        ),
        SquatDifficulty.ATG: SquatDepth(
            knee_angle_down=78.0, knee_angle_down_exit=88.0, min_hip_drop=0.16, hip_drop_exit=0.12
        ),
    }


@dataclass(frozen=True)
class SquatThresholds:
    knee_angle_standing: float = 160.0
    knee_angle_standing_exit: float = 150.0
    standing_hip_drop: float = 0.02
    standing_hip_drop_exit: float = 0.04
    min_hip_width_front: float = 0.05
    max_knee_angle_diff: float = 45.0
    min_knee_visibility: float = 0.4
    symmetry_min_visibility: float = 0.3
    max_torso_lean: float = 100.0
    # Knee angles this far above the active depth still count as deep enough.
    depth_tolerance: float = 8.0
    calibration_frames: int = 30
    cooldown_ms: int = 600
    smoothing_window: int = 3
    inactivity_warning_ms: int = 10000
    depths: Dict[SquatDifficulty, SquatDepth] = field(default_factory=default_squat_depths)

    def __post_init__(self):
        _check_positive(smoothing_window=self.smoothing_window, calibration_frames=self.calibration_frames)
        if self.depth_tolerance < 0:
            raise ValueError("depth_tolerance must not be negative")
        if self.knee_angle_standing_exit >= self.knee_angle_standing:
            raise ValueError("knee_angle_standing_exit must be below knee_angle_standing")
        if self.standing_hip_drop_exit <= self.standing_hip_drop:
            raise ValueError("standing_hip_drop_exit must be above standing_hip_drop")
        for difficulty in SquatDifficulty:
            if difficulty not in self.depths:
                raise ValueError(f"missing squat depth for {difficulty.value}")
            depth = self.depths[difficulty]
            if depth.knee_angle_down_exit >= self.knee_angle_standing_exit:
                raise ValueError(f"{difficulty.value}: squat band overlaps standing band")
            if depth.hip_drop_exit <= self.standing_hip_drop_exit:
                raise ValueError(f"{difficulty.value}: hip drop band overlaps standing band")

    def depth_for(self, difficulty: SquatDifficulty) -> SquatDepth:
        return self.depths[SquatDifficulty(difficulty)]
