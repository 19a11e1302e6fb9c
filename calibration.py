from dataclasses import dataclass
from typing import List, Optional

import numpy as np


@dataclass
class CalibrationResult:
    hip_y_standing: float
    knee_angle_standing: float
    frames: int


class StandingCalibrator:
    """Learns a subject's standing posture from the first frames of a set.

    The highest hip position seen (smallest image y) is taken as standing,
    together with the knee angle measured on that frame. A partial baseline is
    available from the first frame onwards, so callers never wait on it.
    """

    def __init__(self, calibration_frames: int = 30):
        self.calibration_frames = calibration_frames
        self._hip_ys: List[float] = []
        self._knee_angles: List[float] = []
        self._forced_complete = False

    def reset(self) -> None:
        self._hip_ys.clear()
        self._knee_angles.clear()
        self._forced_complete = False

    @property
    def complete(self) -> bool:
        return self._forced_complete or len(self._hip_ys) >= self.calibration_frames

    def mark_complete(self) -> None:
        self._forced_complete = True

    def update(self, hip_y: float, knee_angle: float) -> Optional[CalibrationResult]:
        if not self.complete or not self._hip_ys:
            self._hip_ys.append(hip_y)
            self._knee_angles.append(knee_angle)
        return self.result()

    def result(self) -> Optional[CalibrationResult]:
        if not self._hip_ys:
            return None
        idx = int(np.argmin(self._hip_ys))
        return CalibrationResult(
            hip_y_standing=float(self._hip_ys[idx]),
            knee_angle_standing=float(self._knee_angles[idx]),
            frames=len(self._hip_ys),
        )
