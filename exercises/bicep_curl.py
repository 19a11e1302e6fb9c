import logging
from typing import Optional, Tuple

from exercises.base import Cooldown, Detector, FormCheck
from geometry import angle_degrees
from history import SignalWindow
from landmarks import mean_visibility, side_landmarks
from pose_types import PoseFrame, RepCountResult, RepPhase
from thresholds import CurlThresholds, with_overrides

logger = logging.getLogger(__name__)


def arm_angle(pose: PoseFrame, side: str) -> float:
    return angle_degrees(*side_landmarks(pose, side, "SHOULDER", "ELBOW", "WRIST"))


def arm_visibility(pose: PoseFrame, side: str, joints=("SHOULDER", "ELBOW", "WRIST")) -> float:
    return mean_visibility(side_landmarks(pose, side, *joints))


def is_side_view(pose: PoseFrame, limit: float) -> bool:
    left = arm_visibility(pose, "left", ("SHOULDER", "ELBOW"))
    right = arm_visibility(pose, "right", ("SHOULDER", "ELBOW"))
    return abs(left - right) > limit


class BicepCurlDetector(Detector):
    """Both-arms curl: a rep needs both arms curled, then both extended."""

    name = "bicep-curl"
    key_landmarks = [
        "LEFT_SHOULDER",
        "RIGHT_SHOULDER",
        "LEFT_ELBOW",
        "RIGHT_ELBOW",
        "LEFT_WRIST",
        "RIGHT_WRIST",
    ]

    def __init__(self, thresholds: Optional[CurlThresholds] = None, clock=None, **overrides):
        super().__init__(clock=clock)
        self.thresholds = with_overrides(CurlThresholds(), thresholds, **overrides)
        self._left_angles = SignalWindow(self.thresholds.smoothing_window)
        self._right_angles = SignalWindow(self.thresholds.smoothing_window)
        self._cooldown = Cooldown(self.thresholds.cooldown_ms)
        self._reset_tracking()

    def _reset_tracking(self) -> None:
        self._left_stage: Optional[str] = None
        self._right_stage: Optional[str] = None
        self._left_angle = 0.0
        self._right_angle = 0.0

    def reset(self) -> None:
        super().reset()
        self._left_angles.clear()
        self._right_angles.clear()
        self._cooldown.reset()
        self._reset_tracking()

    def primary_angle(self) -> float:
        return (self._left_angle + self._right_angle) / 2.0

    @property
    def arm_angles(self) -> Tuple[float, float]:
        return self._left_angle, self._right_angle

    def _detect(self, pose: PoseFrame, now: int) -> RepCountResult:
        t = self.thresholds
        state = self.state

        form = self.validate_form(pose)

        # Untracked arms never reach the smoothing windows.
        left_visibility = arm_visibility(pose, "left")
        right_visibility = arm_visibility(pose, "right")
        if left_visibility < t.min_arm_visibility or right_visibility < t.min_arm_visibility:
            return self._result(form, form.feedback + ["Both arms must be visible"])

        left = self._left_angles.push(arm_angle(pose, "left"))
        right = self._right_angles.push(arm_angle(pose, "right"))
        self._left_angle, self._right_angle = left, right
        self._trace_inactivity(now, t.inactivity_warning_ms, self.primary_angle())

        extended = left > t.elbow_angle_extended and right > t.elbow_angle_extended
        curled = left < t.elbow_angle_curled and right < t.elbow_angle_curled
        in_sync = abs(left - right) < t.max_sync_diff
        was_curled = self._left_stage == "up" and self._right_stage == "up"

        if extended and in_sync and self._cooldown.ready(now):
            if was_curled:
                state.rep_count += 1
                self._cooldown.mark(now)
                self._record_rep(pose, now, form)
                logger.info("bicep-curl: rep %d (avg %.1f)", state.rep_count, self.primary_angle())
            self._left_stage = self._right_stage = "down"
            state.phase = RepPhase.BOTTOM
        elif curled and in_sync:
            if not was_curled:
                logger.debug("bicep-curl: both arms curled (avg %.1f)", self.primary_angle())
            self._left_stage = self._right_stage = "up"
            state.phase = RepPhase.TOP
        elif was_curled and max(left, right) > t.elbow_angle_curled + t.hysteresis:
            state.phase = RepPhase.ECCENTRIC
        elif self._left_stage == "down" and min(left, right) < t.elbow_angle_extended - t.hysteresis:
            state.phase = RepPhase.CONCENTRIC

        return self._result(form)

    def validate_form(self, pose: PoseFrame) -> FormCheck:
        t = self.thresholds
        form = FormCheck()
        # Asymmetry is only meaningful when both arms face the camera.
        if not is_side_view(pose, t.side_view_visibility_diff):
            if abs(arm_angle(pose, "left") - arm_angle(pose, "right")) >= t.max_asymmetry:
                form.penalize(40, "Curl both arms together")
        return form.finalize()
